"""
JSON-lines file audit provider.

Each audit entry is written as one JSON object per line to an
append-only file. Existing lines are never rewritten.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any

from bevy import Container

from tessera.auth.exceptions import ConfigurationError
from tessera.auth.providers.audit import AuditProvider
from tessera.auth.types import AuditAction, AuditLogEntry, AuditOutcome

logger = logging.getLogger(__name__)


class JsonLinesAuditProvider(AuditProvider):
    """Append-only audit provider writing to a JSON-lines file.

    Config:
        path: File to append to (required). Parent directories are created.
    """

    def __init__(self, config: dict[str, Any], container: Container | None = None):
        super().__init__(config, container)
        path = config.get("path")
        if not path:
            raise ConfigurationError("JSON-lines audit provider requires 'path'")

        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()

        logger.info(f"Audit entries will be appended to {self.path}")

    async def append(self, entry: AuditLogEntry) -> None:
        line = json.dumps(entry.to_dict(), default=str, sort_keys=True)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")

    def _read_entries(self) -> list[AuditLogEntry]:
        if not self.path.exists():
            return []

        entries = []
        with self._lock:
            with self.path.open("r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(self._from_dict(json.loads(line)))
                    except (ValueError, KeyError) as e:
                        logger.warning(
                            f"Skipping unreadable audit line {line_number} in {self.path}: {e}"
                        )
        return entries

    @staticmethod
    def _from_dict(data: dict[str, Any]) -> AuditLogEntry:
        created_at = data["created_at"].replace("Z", "+00:00")
        return AuditLogEntry(
            id=data["id"],
            action_type=AuditAction(data["action_type"]),
            outcome=AuditOutcome(data["outcome"]),
            session_id=data.get("session_id"),
            identity_id=data.get("identity_id"),
            context=data.get("context") or {},
            created_at=datetime.fromisoformat(created_at),
        )

    async def list_entries(
        self,
        identity_id: str | None = None,
        session_id: str | None = None,
        action_type: AuditAction | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditLogEntry]:
        entries = self._read_entries()

        if identity_id is not None:
            entries = [e for e in entries if e.identity_id == identity_id]
        if session_id is not None:
            entries = [e for e in entries if e.session_id == session_id]
        if action_type is not None:
            entries = [e for e in entries if e.action_type is action_type]

        return entries[offset : offset + limit]

    async def count(self) -> int:
        return len(self._read_entries())
