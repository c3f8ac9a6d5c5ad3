"""Session provider interface."""

from abc import abstractmethod
from datetime import datetime

from ..types import Session
from .base import BaseProvider


class SessionProvider(BaseProvider):
    """Abstract base class for session storage.

    The only shared mutable resource of the engine is a session row. It is
    guarded by a compare-and-swap on ``refresh_token_hash`` so that unrelated
    sessions never contend.
    """

    @abstractmethod
    async def create_session(self, session: Session) -> Session:
        """Persist a newly issued session.

        Args:
            session: Session holding the digests of its first token pair

        Returns:
            Stored session
        """
        pass

    @abstractmethod
    async def get_session(self, session_id: str) -> Session | None:
        """Retrieve a session by ID.

        Args:
            session_id: ID of the session

        Returns:
            Session if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_refresh_hash(self, refresh_token_hash: str) -> Session | None:
        """Locate the session whose current refresh token has this digest.

        Returns:
            Session if found, None otherwise. A rotated-away digest never
            resolves.
        """
        pass

    @abstractmethod
    async def rotate(
        self,
        session_id: str,
        expected_refresh_hash: str,
        new_refresh_hash: str,
        new_session_token_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> Session | None:
        """Atomically replace the token digests of a session.

        The swap only happens if the stored refresh digest still equals
        ``expected_refresh_hash`` and the session is not revoked.

        Returns:
            The rotated session, or None if the compare failed
        """
        pass

    @abstractmethod
    async def revoke(self, session_id: str, now: datetime) -> tuple[Session | None, bool]:
        """Revoke a session. Revoking an already revoked session is a no-op.

        Returns:
            ``(session, changed)``; session is None if it does not exist
        """
        pass

    @abstractmethod
    async def revoke_identity_sessions(self, identity_id: str, now: datetime) -> list[Session]:
        """Revoke every unrevoked session of an identity.

        Returns:
            Sessions that were revoked by this call
        """
        pass

    @abstractmethod
    async def list_sessions(
        self, identity_id: str, live_only: bool = False, now: datetime | None = None
    ) -> list[Session]:
        """Get sessions of an identity, oldest first.

        Args:
            identity_id: ID of the identity
            live_only: Only return unrevoked, unexpired sessions
            now: Instant used for the expiry check
        """
        pass

    @abstractmethod
    async def remove_session(self, session_id: str) -> bool:
        """Physically remove a session. Only used to undo a failed registration."""
        pass
