"""Argument checks run before any database interaction."""

from typing import Any, TypeVar

from sectionstore.core.exceptions import ContractViolationError
from sectionstore.models.enums import SectionPermission
from sectionstore.schemas.section import ADDRESS_MASK, Address

T = TypeVar("T")


def check_not_none(value: T | None, message: str) -> T:
    """Return value unchanged, or raise ContractViolationError if it is None."""
    if value is None:
        raise ContractViolationError(message)
    return value


def check_argument(condition: Any, message: str) -> None:
    if not condition:
        raise ContractViolationError(message)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_module_id(module_id: int) -> None:
    """Module ids are assigned by the database and always positive."""
    check_argument(
        _is_int(module_id) and module_id > 0,
        "Error: module id must be greater than zero",
    )


def check_section_id(section_id: int) -> None:
    check_argument(
        _is_int(section_id) and section_id >= 0,
        "Error: section id must be greater or equal than zero",
    )


def check_address(address: Address | int, name: str) -> int:
    """Return the address as an unsigned 64-bit integer.

    Raises:
        ContractViolationError: If the address is missing or outside 0..2**64-1
    """
    check_not_none(address, f"Error: {name} argument can not be null")
    if isinstance(address, Address):
        return address.value
    check_argument(
        _is_int(address) and 0 <= address <= ADDRESS_MASK,
        f"Error: {name} must be an unsigned 64-bit integer",
    )
    return address


def check_permission(permission: SectionPermission | str) -> SectionPermission:
    check_not_none(permission, "Error: permission argument can not be null")
    try:
        return SectionPermission(permission)
    except ValueError:
        raise ContractViolationError(
            f"Error: {permission!r} is not a section permission"
        ) from None
