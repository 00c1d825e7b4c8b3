"""Section and address value types."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sectionstore.models.enums import SectionPermission

ADDRESS_MASK = (1 << 64) - 1


class Address(BaseModel):
    """Unsigned 64-bit address inside a module's memory image."""

    model_config = ConfigDict(frozen=True)

    value: int = Field(..., ge=0, le=ADDRESS_MASK)

    def __init__(self, value: int, **data) -> None:
        super().__init__(value=value, **data)

    @classmethod
    def from_database(cls, raw) -> "Address":
        """Build an address from a column value.

        Numeric columns arrive as Decimal; a signed bigint column can hold the
        upper half of the address space as negative numbers, which map back to
        their unsigned value. Anything outside the signed or unsigned 64-bit
        range is rejected.

        Raises:
            ValueError: If the value is not a 64-bit address
        """
        value = int(raw)
        if -(1 << 63) <= value < 0:
            value &= ADDRESS_MASK
        if not 0 <= value <= ADDRESS_MASK:
            raise ValueError(f"{value} is not a 64-bit address")
        return cls(value)

    def to_hex_string(self) -> str:
        return f"{self.value:08X}"

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.to_hex_string()


class Section(BaseModel):
    """Named, permission-tagged memory region of a module.

    Immutable and hashable, so loaded sections can key a mapping to their
    comment ids. The comment id is kept out of the value because comments are
    edited independently of the section.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    module_id: int
    name: str
    start_address: Address
    end_address: Address
    permission: SectionPermission
    data: bytes = b""

    @field_validator("start_address", "end_address", mode="before")
    @classmethod
    def _coerce_address(cls, v):
        if isinstance(v, int):
            return Address(v)
        return v

    def __repr__(self) -> str:
        return (
            f"<Section(id={self.id}, name={self.name!r}, "
            f"start={self.start_address}, end={self.end_address}, "
            f"permission={self.permission.value})>"
        )
