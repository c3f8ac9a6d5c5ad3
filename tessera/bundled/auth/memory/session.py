"""Memory-based session provider implementation."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any

from bevy import Container

from tessera.auth.exceptions import ProviderError
from tessera.auth.providers.session import SessionProvider
from tessera.auth.types import Session
from tessera.auth.utils import secure_compare

from .store import MemoryStore

logger = logging.getLogger(__name__)


class MemorySessionProvider(SessionProvider):
    """Memory-based session provider.

    This provider supports:
    - Lookup by session ID and by the digest of the current refresh token
    - Compare-and-swap rotation of a session's token digests
    - Idempotent revocation of single sessions and of all sessions of an identity

    ``refresh_index`` only ever holds the digest of a session's current
    refresh token; rotation moves the entry inside the store lock.
    """

    def __init__(self, config: dict[str, Any], container: Container | None = None):
        """Initialize memory session provider.

        Args:
            config: Provider configuration
            container: Dependency injection container
        """
        super().__init__(config, container)
        self.store = MemoryStore()

    async def create_session(self, session: Session) -> Session:
        with self.store.atomic():
            if self.store.exists("sessions", session.id):
                raise ProviderError(f"Session {session.id} already exists")
            if not self.store.set_if_absent(
                "refresh_index", session.refresh_token_hash, session.id
            ):
                raise ProviderError("Refresh token digest is already bound to a session")
            self.store.set("sessions", session.id, replace(session))
            self._index_identity(session)

        logger.debug(f"Created session {session.id} for identity {session.identity_id}")
        return replace(session)

    async def get_session(self, session_id: str) -> Session | None:
        session = self.store.get("sessions", session_id)
        return replace(session) if session else None

    async def find_by_refresh_hash(self, refresh_token_hash: str) -> Session | None:
        with self.store.atomic():
            session_id = self.store.get("refresh_index", refresh_token_hash)
            if session_id is None:
                return None
            session = self.store.get("sessions", session_id)
            if session is None or session.refresh_token_hash != refresh_token_hash:
                return None
            return replace(session)

    async def rotate(
        self,
        session_id: str,
        expected_refresh_hash: str,
        new_refresh_hash: str,
        new_session_token_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> Session | None:
        with self.store.atomic():
            session = self.store.get("sessions", session_id)
            if session is None:
                return None
            if session.is_revoked():
                return None
            if not secure_compare(session.refresh_token_hash, expected_refresh_hash):
                return None
            if self.store.exists("refresh_index", new_refresh_hash):
                raise ProviderError("Refresh token digest is already bound to a session")

            rotated = replace(
                session,
                refresh_token_hash=new_refresh_hash,
                session_token_hash=new_session_token_hash,
                expires_at=expires_at,
                refreshed_at=now,
            )
            self.store.delete("refresh_index", expected_refresh_hash)
            self.store.set("refresh_index", new_refresh_hash, session_id)
            self.store.set("sessions", session_id, rotated)

        logger.debug(f"Rotated session {session_id}")
        return replace(rotated)

    async def revoke(self, session_id: str, now: datetime) -> tuple[Session | None, bool]:
        with self.store.atomic():
            session, changed = self._revoke_locked(session_id, now)

        if changed:
            logger.debug(f"Revoked session {session_id}")
        return (replace(session) if session else None), changed

    async def revoke_identity_sessions(self, identity_id: str, now: datetime) -> list[Session]:
        revoked_sessions = []
        with self.store.atomic():
            for session_id in self._identity_session_ids(identity_id):
                session, changed = self._revoke_locked(session_id, now)
                if changed:
                    revoked_sessions.append(replace(session))

        logger.debug(f"Revoked {len(revoked_sessions)} session(s) of identity {identity_id}")
        return revoked_sessions

    async def list_sessions(
        self, identity_id: str, live_only: bool = False, now: datetime | None = None
    ) -> list[Session]:
        sessions = []
        with self.store.atomic():
            for session_id in self._identity_session_ids(identity_id):
                session = self.store.get("sessions", session_id)
                if session is None:
                    continue
                if live_only and not session.is_live(now):
                    continue
                sessions.append(replace(session))
        return sessions

    async def remove_session(self, session_id: str) -> bool:
        with self.store.atomic():
            session = self.store.get("sessions", session_id)
            if session is None:
                return False
            if self.store.get("refresh_index", session.refresh_token_hash) == session_id:
                self.store.delete("refresh_index", session.refresh_token_hash)
            ids = self.store.get("identity_sessions", session.identity_id) or []
            self.store.set(
                "identity_sessions",
                session.identity_id,
                [sid for sid in ids if sid != session_id],
            )
            return self.store.delete("sessions", session_id)

    def _index_identity(self, session: Session) -> None:
        ids = self.store.get("identity_sessions", session.identity_id) or []
        self.store.set("identity_sessions", session.identity_id, [*ids, session.id])

    def _identity_session_ids(self, identity_id: str) -> list[str]:
        return list(self.store.get("identity_sessions", identity_id) or [])

    def _revoke_locked(
        self, session_id: str, now: datetime
    ) -> tuple[Session | None, bool]:
        """Mark a session revoked. The caller holds ``store.atomic()``."""
        session = self.store.get("sessions", session_id)
        if session is None:
            return None, False
        if session.is_revoked():
            return session, False

        revoked = replace(session, revoked_at=now)
        self.store.set("sessions", session_id, revoked)
        self.store.delete("refresh_index", session.refresh_token_hash)
        return revoked, True
