"""Memory-based revocation ledger implementation."""

from datetime import datetime
from typing import Any

from bevy import Container

from tessera.auth.providers.revocation import RevocationProvider
from tessera.auth.types import LedgerEntry, RevocationReason

from .store import MemoryStore


class MemoryRevocationProvider(RevocationProvider):
    """Memory-based revocation ledger.

    Entries are kept forever unless ``entry_ttl`` (seconds) is configured.
    A TTL should be at least the refresh token lifetime, after which the
    token is rejected on its own expiry anyway.
    """

    def __init__(self, config: dict[str, Any], container: Container | None = None):
        super().__init__(config, container)
        self.store = MemoryStore()
        self.entry_ttl = config.get("entry_ttl")

    async def record(
        self,
        token_hash: str,
        session_id: str,
        reason: RevocationReason,
        now: datetime,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            token_hash=token_hash,
            session_id=session_id,
            reason=reason,
            recorded_at=now,
        )
        with self.store.atomic():
            if not self.store.set_if_absent(
                "ledger", token_hash, entry, ttl_seconds=self.entry_ttl
            ):
                return self.store.get("ledger", token_hash)
        return entry

    async def lookup(self, token_hash: str) -> LedgerEntry | None:
        return self.store.get("ledger", token_hash)

    async def list_for_session(self, session_id: str) -> list[LedgerEntry]:
        return [
            entry for entry in self.store.values("ledger") if entry.session_id == session_id
        ]
