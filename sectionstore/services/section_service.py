"""Service for persisting module sections through the database's section functions.

Every operation validates its arguments, then issues exactly one call to a
stored function with bound parameters. The result of that call is closed on
every exit path, and database errors are re-raised as SaveError, LoadError or
DeleteError with the original exception chained as the cause.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

from sqlalchemy import Integer, LargeBinary, Numeric, bindparam, text
from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sectionstore.core.exceptions import DeleteError, LoadError, SaveError, SectionStoreError
from sectionstore.core.preconditions import (
    check_address,
    check_module_id,
    check_not_none,
    check_permission,
    check_section_id,
)
from sectionstore.core.structured_logging import log_json
from sectionstore.models.enums import SectionPermission
from sectionstore.schemas.section import Address, Section
from sectionstore.services.comment_service import CommentEditor, CommentService

logger = logging.getLogger(__name__)

_CREATE_SECTION = text(
    "SELECT create_section(:module_id, :name, :comment_id, :start_address, "
    ":end_address, CAST(:permission AS permission_type), :data)"
).bindparams(
    bindparam("comment_id", type_=Integer),
    bindparam("start_address", type_=Numeric(20, 0)),
    bindparam("end_address", type_=Numeric(20, 0)),
    bindparam("data", type_=LargeBinary),
)
_DELETE_SECTION = text("SELECT delete_section(:module_id, :section_id)")
_GET_SECTIONS = text(
    "SELECT id, name, comment_id, start_address, end_address, permission, data "
    "FROM get_sections(:module_id)"
)
_SET_SECTION_NAME = text("SELECT set_section_name(:module_id, :section_id, :name)")
_APPEND_SECTION_COMMENT = text(
    "SELECT append_section_comment(:module_id, :section_id, :user_id, :comment_text)"
)
_DELETE_SECTION_COMMENT = text(
    "SELECT delete_section_comment(:module_id, :section_id, :comment_id, :user_id)"
)


class SectionService:
    """Creates, loads, renames and deletes sections, and manages their comments."""

    def __init__(self, db: AsyncSession, comment_service: CommentEditor | None = None):
        self.db = db
        self.comment_service = comment_service or CommentService(db)

    @asynccontextmanager
    async def _call(
        self,
        procedure: str,
        statement,
        params: dict[str, Any],
        error: type[SectionStoreError],
    ) -> AsyncIterator[Result]:
        """Execute one function call and close its result when the block exits."""
        context = {"procedure": procedure}
        context.update({k: params[k] for k in ("module_id", "section_id") if k in params})

        try:
            result = await self.db.execute(statement, params)
        except SQLAlchemyError as exc:
            self._log_failure(context, exc)
            raise error(f"Error: call to {procedure} failed", context=context) from exc

        try:
            yield result
        except SQLAlchemyError as exc:
            self._log_failure(context, exc)
            raise error(f"Error: reading the result of {procedure} failed", context=context) from exc
        finally:
            result.close()

    @staticmethod
    def _log_failure(context: dict[str, Any], exc: Exception) -> None:
        log_json(logger, logging.WARNING, "section_procedure_failed", error=str(exc), **context)

    async def create_section(
        self,
        module_id: int,
        name: str,
        comment_id: int | None,
        start_address: Address | int,
        end_address: Address | int,
        permission: SectionPermission,
        data: bytes,
    ) -> int:
        """Create a new section in the database.

        Args:
            module_id: ID of the module the section belongs to
            name: Name of the section
            comment_id: ID of the comment associated with the section, or None
            start_address: First address of the section
            end_address: Last address of the section
            permission: Access rights of the section
            data: Raw section bytes, may be empty

        Returns:
            ID of the section generated by the database

        Raises:
            ContractViolationError: If an argument is missing or invalid
            SaveError: If the section could not be created
        """
        check_module_id(module_id)
        check_not_none(name, "Error: name argument can not be null")
        start = check_address(start_address, "start address")
        end = check_address(end_address, "end address")
        permission = check_permission(permission)
        check_not_none(data, "Error: data argument can not be null")

        params = {
            "module_id": module_id,
            "name": name,
            "comment_id": comment_id,
            "start_address": Decimal(start),
            "end_address": Decimal(end),
            "permission": permission.name,
            "data": bytes(data),
        }
        async with self._call("create_section", _CREATE_SECTION, params, SaveError) as result:
            section_id = result.scalar()

        if section_id is None:
            raise SaveError(
                "Error: Got a section id of null from the database",
                context={"module_id": module_id},
            )

        log_json(logger, logging.DEBUG, "section_created", module_id=module_id, section_id=section_id)
        return int(section_id)

    async def delete_section(self, section: Section) -> None:
        """Delete a section and its dependent rows.

        Raises:
            ContractViolationError: If the section is missing or has invalid ids
            DeleteError: If the section could not be deleted
        """
        check_not_none(section, "Error: section argument can not be null")
        check_module_id(section.module_id)
        check_section_id(section.id)

        params = {"module_id": section.module_id, "section_id": section.id}
        async with self._call("delete_section", _DELETE_SECTION, params, DeleteError):
            pass

        log_json(
            logger,
            logging.DEBUG,
            "section_deleted",
            module_id=section.module_id,
            section_id=section.id,
        )

    async def load_sections(self, module_id: int) -> dict[Section, int | None]:
        """Load all sections of a module.

        Returns:
            Mapping of each section to the id of its comment, or None if the
            section has no comment yet

        Raises:
            ContractViolationError: If the module id is invalid
            LoadError: If the sections could not be loaded or a row is malformed
        """
        check_module_id(module_id)

        sections: dict[Section, int | None] = {}
        params = {"module_id": module_id}
        async with self._call("get_sections", _GET_SECTIONS, params, LoadError) as result:
            for row in result:
                section, comment_id = self._decode_row(module_id, row)
                sections[section] = comment_id

        log_json(logger, logging.DEBUG, "sections_loaded", module_id=module_id, count=len(sections))
        return sections

    @staticmethod
    def _decode_row(module_id: int, row) -> tuple[Section, int | None]:
        raw_comment_id = row.comment_id
        comment_id = None if raw_comment_id is None else int(raw_comment_id)

        try:
            permission = SectionPermission.from_symbol(row.permission)
        except KeyError as exc:
            raise LoadError(
                f"Error: unknown section permission {row.permission!r}",
                context={"module_id": module_id, "section_id": row.id},
            ) from exc

        try:
            section = Section(
                id=row.id,
                module_id=module_id,
                name=row.name,
                start_address=Address.from_database(row.start_address),
                end_address=Address.from_database(row.end_address),
                permission=permission,
                data=bytes(row.data) if row.data is not None else b"",
            )
        except (TypeError, ValueError) as exc:
            raise LoadError(
                "Error: section row could not be decoded",
                context={"module_id": module_id, "section_id": row.id},
            ) from exc

        return section, comment_id

    async def set_section_name(self, module_id: int, section_id: int, name: str) -> None:
        """Rename a section.

        Raises:
            ContractViolationError: If an argument is missing or invalid
            SaveError: If the name could not be written
        """
        check_module_id(module_id)
        check_section_id(section_id)
        check_not_none(name, "Error: name argument can not be null")

        params = {"module_id": module_id, "section_id": section_id, "name": name}
        async with self._call("set_section_name", _SET_SECTION_NAME, params, SaveError):
            pass

        log_json(logger, logging.DEBUG, "section_renamed", module_id=module_id, section_id=section_id)

    async def append_section_comment(
        self,
        module_id: int,
        section_id: int,
        comment_text: str,
        user_id: int,
    ) -> int:
        """Append a comment to the comment list of a section.

        Args:
            module_id: ID of the module the section belongs to
            section_id: ID of the section to comment on
            comment_text: Text of the comment
            user_id: ID of the user writing the comment

        Returns:
            ID of the comment generated by the database

        Raises:
            ContractViolationError: If an argument is missing or invalid
            SaveError: If the comment could not be saved
        """
        check_module_id(module_id)
        check_section_id(section_id)
        check_not_none(comment_text, "Error: comment text argument can not be null")
        check_not_none(user_id, "Error: user id argument can not be null")

        params = {
            "module_id": module_id,
            "section_id": section_id,
            "user_id": user_id,
            "comment_text": comment_text,
        }
        async with self._call(
            "append_section_comment", _APPEND_SECTION_COMMENT, params, SaveError
        ) as result:
            comment_id = result.scalar()

        if comment_id is None:
            raise SaveError(
                "Error: Got a comment id of null from the database",
                context={"module_id": module_id, "section_id": section_id},
            )

        return int(comment_id)

    async def delete_section_comment(
        self,
        module_id: int,
        section_id: int,
        comment_id: int,
        user_id: int,
    ) -> None:
        """Delete a comment of a section.

        Raises:
            ContractViolationError: If an argument is missing or invalid
            DeleteError: If the comment could not be deleted, or the database
                did not acknowledge the deletion
        """
        check_module_id(module_id)
        check_section_id(section_id)
        check_not_none(comment_id, "Error: comment id argument can not be null")
        check_not_none(user_id, "Error: user id argument can not be null")

        params = {
            "module_id": module_id,
            "section_id": section_id,
            "comment_id": comment_id,
            "user_id": user_id,
        }
        async with self._call(
            "delete_section_comment", _DELETE_SECTION_COMMENT, params, DeleteError
        ) as result:
            acknowledgement = result.scalar()

        if acknowledgement is None:
            raise DeleteError(
                "Error: The comment id returned from the database was null",
                context={"module_id": module_id, "section_id": section_id, "comment_id": comment_id},
            )

    async def edit_section_comment(
        self,
        module_id: int,
        comment_id: int,
        user_id: int,
        comment_text: str,
    ) -> None:
        """Edit a section comment through the comment service.

        Raises:
            ContractViolationError: If an argument is missing or invalid
            SaveError: If the comment could not be edited
        """
        check_module_id(module_id)
        check_not_none(comment_id, "Error: comment id argument can not be null")
        check_not_none(user_id, "Error: user id argument can not be null")
        check_not_none(comment_text, "Error: comment text argument can not be null")

        await self.comment_service.edit_comment(comment_id, user_id, comment_text)
