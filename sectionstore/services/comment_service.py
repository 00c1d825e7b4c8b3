"""Comment editing collaborator used by the section store."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sectionstore.core.exceptions import SaveError
from sectionstore.core.preconditions import check_not_none
from sectionstore.core.structured_logging import log_json

logger = logging.getLogger(__name__)

_EDIT_COMMENT = text("SELECT edit_comment(:comment_id, :user_id, :comment_text)")


@runtime_checkable
class CommentEditor(Protocol):
    """Edits the text of an existing comment."""

    async def edit_comment(self, comment_id: int, user_id: int, comment_text: str) -> None:
        """Replace the comment text.

        Raises:
            SaveError: If the comment could not be written
        """
        ...


class CommentService:
    """Edits comments through the database's ``edit_comment`` function."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def edit_comment(self, comment_id: int, user_id: int, comment_text: str) -> None:
        check_not_none(comment_id, "Error: comment id argument can not be null")
        check_not_none(user_id, "Error: user id argument can not be null")
        check_not_none(comment_text, "Error: comment text argument can not be null")

        try:
            result = await self.db.execute(
                _EDIT_COMMENT,
                {"comment_id": comment_id, "user_id": user_id, "comment_text": comment_text},
            )
            result.close()
        except SQLAlchemyError as exc:
            log_json(
                logger,
                logging.WARNING,
                "comment_edit_failed",
                comment_id=comment_id,
                error=str(exc),
            )
            raise SaveError(
                "Error: comment could not be edited",
                context={"comment_id": comment_id},
            ) from exc

        log_json(logger, logging.DEBUG, "comment_edited", comment_id=comment_id, user_id=user_id)
