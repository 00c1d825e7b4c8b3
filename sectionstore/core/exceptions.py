"""Exception hierarchy for the section store.

Operational failures inherit from SectionStoreError. Bad calls raise
ContractViolationError instead, which is deliberately outside that hierarchy
so callers can tell a programming error from a backend problem.
"""

from typing import Optional


class ContractViolationError(ValueError):
    """Raised when a required argument is missing or out of its valid domain."""

    pass


class SectionStoreError(Exception):
    """Base exception for backend failures of the section store."""

    def __init__(self, message: str, context: Optional[dict] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | Context: {self.context}"
        return self.message


class SaveError(SectionStoreError):
    """Data could not be written to the database."""

    pass


class LoadError(SectionStoreError):
    """Data could not be read from the database or decoded."""

    pass


class DeleteError(SectionStoreError):
    """Data could not be removed from the database."""

    pass
