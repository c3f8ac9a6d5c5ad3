"""Revocation ledger provider interface."""

from abc import abstractmethod
from datetime import datetime

from ..types import LedgerEntry, RevocationReason
from .base import BaseProvider


class RevocationProvider(BaseProvider):
    """Abstract base class for the revocation ledger.

    The ledger remembers token digests that must never be honored again:
    refresh tokens rotated away and tokens of revoked sessions.
    """

    @abstractmethod
    async def record(
        self,
        token_hash: str,
        session_id: str,
        reason: RevocationReason,
        now: datetime,
    ) -> LedgerEntry:
        """Add a token digest to the ledger.

        Recording a digest that is already present keeps the first entry.

        Returns:
            The ledger entry for the digest
        """
        pass

    @abstractmethod
    async def lookup(self, token_hash: str) -> LedgerEntry | None:
        """Get the ledger entry for a digest, if any."""
        pass

    async def is_revoked(self, token_hash: str) -> bool:
        return await self.lookup(token_hash) is not None

    @abstractmethod
    async def list_for_session(self, session_id: str) -> list[LedgerEntry]:
        """Get all ledger entries of one session lineage, oldest first."""
        pass
