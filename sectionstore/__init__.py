"""Persistence adapter for disassembled-binary sections backed by PostgreSQL."""

from sectionstore.core.exceptions import (
    ContractViolationError,
    DeleteError,
    LoadError,
    SaveError,
    SectionStoreError,
)
from sectionstore.models.enums import SectionPermission
from sectionstore.schemas.section import Address, Section
from sectionstore.services.comment_service import CommentEditor, CommentService
from sectionstore.services.section_service import SectionService

__all__ = [
    "Address",
    "CommentEditor",
    "CommentService",
    "ContractViolationError",
    "DeleteError",
    "LoadError",
    "SaveError",
    "Section",
    "SectionPermission",
    "SectionService",
    "SectionStoreError",
]
