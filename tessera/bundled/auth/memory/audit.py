"""Memory-based audit provider implementation."""

from typing import Any

from bevy import Container

from tessera.auth.providers.audit import AuditProvider
from tessera.auth.types import AuditAction, AuditLogEntry

from .store import MemoryStore


class MemoryAuditProvider(AuditProvider):
    """Memory-based audit provider.

    Entries are append-only. ``max_entries`` bounds the number of retained
    entries; the oldest are dropped first.
    """

    def __init__(self, config: dict[str, Any], container: Container | None = None):
        """Initialize memory audit provider.

        Args:
            config: Provider configuration
            container: Dependency injection container
        """
        super().__init__(config, container)
        self.store = MemoryStore()
        self.max_entries = config.get("max_entries", 100_000)

    async def append(self, entry: AuditLogEntry) -> None:
        with self.store.atomic():
            self.store.set("audit_events", entry.id, entry)
            order = self.store.get("audit_meta", "order") or []
            order.append(entry.id)
            while len(order) > self.max_entries:
                self.store.delete("audit_events", order.pop(0))
            self.store.set("audit_meta", "order", order)

    async def list_entries(
        self,
        identity_id: str | None = None,
        session_id: str | None = None,
        action_type: AuditAction | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditLogEntry]:
        entries = self.store.values("audit_events")

        if identity_id is not None:
            entries = [e for e in entries if e.identity_id == identity_id]
        if session_id is not None:
            entries = [e for e in entries if e.session_id == session_id]
        if action_type is not None:
            entries = [e for e in entries if e.action_type is action_type]

        return entries[offset : offset + limit]

    async def count(self) -> int:
        return self.store.size("audit_events")
