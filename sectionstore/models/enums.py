"""Enumerations for section access rights."""

from enum import Enum


class SectionPermission(str, Enum):
    """Access rights of a memory section.

    Values equal the symbolic names stored in the database's
    ``permission_type`` enum, so a member round-trips by name.
    """

    READ = "READ"
    WRITE = "WRITE"
    EXECUTE = "EXECUTE"
    READ_WRITE = "READ_WRITE"
    READ_EXECUTE = "READ_EXECUTE"
    WRITE_EXECUTE = "WRITE_EXECUTE"
    READ_WRITE_EXECUTE = "READ_WRITE_EXECUTE"

    @classmethod
    def from_symbol(cls, symbol: str) -> "SectionPermission":
        """Look up a permission by exact symbolic name.

        Args:
            symbol: Name as stored in the database, e.g. ``READ_EXECUTE``

        Returns:
            The matching permission

        Raises:
            KeyError: If the symbol names no permission
        """
        return cls[symbol]

    @property
    def readable(self) -> bool:
        return "READ" in self.value

    @property
    def writable(self) -> bool:
        return "WRITE" in self.value

    @property
    def executable(self) -> bool:
        return "EXECUTE" in self.value
