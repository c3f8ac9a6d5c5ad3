"""Audit provider interface."""

from abc import abstractmethod

from ..types import AuditAction, AuditLogEntry
from .base import BaseProvider


class AuditProvider(BaseProvider):
    """Abstract base class for append-only audit storage.

    There is deliberately no update or delete operation.
    """

    @abstractmethod
    async def append(self, entry: AuditLogEntry) -> None:
        """Append an audit entry.

        Args:
            entry: Entry to store
        """
        pass

    @abstractmethod
    async def list_entries(
        self,
        identity_id: str | None = None,
        session_id: str | None = None,
        action_type: AuditAction | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditLogEntry]:
        """Get audit entries in the order they were written.

        Args:
            identity_id: Identity ID to filter by
            session_id: Session ID to filter by
            action_type: Action to filter by
            limit: Maximum number of entries to return
            offset: Number of entries to skip

        Returns:
            List of matching entries
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Get the total number of stored entries."""
        pass
