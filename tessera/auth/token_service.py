"""
TokenService interface for the tessera authentication engine.

This module defines the abstract base class for the token codec: the
stateless component that signs and verifies bearer tokens carrying
``{identity_id, role, purpose}`` claims.

Security considerations:
- Tokens must be cryptographically signed and non-predictable
- Verification never touches storage; it only proves "issued by us and
  not structurally expired"
- Session validity is decided by the session registry, never here
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from .types import Token, TokenPurpose


def utc_now() -> datetime:
    return datetime.now(UTC)


class TokenService(ABC):
    """
    Abstract base class for token services.

    Implementations produce an access token and a refresh token per
    issuance and verify presented tokens purely algorithmically.

    Security requirements:
    - Tokens MUST be cryptographically signed
    - Verification MUST check the signature, the declared purpose and
      the expiry
    - Verification MUST NOT consult storage

    Args:
        config: Token service configuration
        clock: Callable returning the current aware UTC datetime
    """

    def __init__(self, config: dict[str, Any], clock: Callable[[], datetime] | None = None):
        self.config = config.copy()
        self._validate_config(config)
        self.clock = clock or utc_now

    @abstractmethod
    def _validate_config(self, config: dict[str, Any]) -> None:
        """
        Validate token service configuration.

        Raises:
            ValueError: If configuration is invalid or insecure
        """
        pass

    @abstractmethod
    def issue(
        self,
        identity_id: str,
        role: str,
        purpose: TokenPurpose,
        session_id: str | None = None,
        now: datetime | None = None,
    ) -> Token:
        """
        Sign a new token.

        Args:
            identity_id: Subject of the token
            role: Role namespace of the subject
            purpose: Whether the token grants access or refresh
            session_id: Session lineage the token belongs to (required for
                refresh tokens)
            now: Issuance instant, defaults to the service clock

        Returns:
            The signed token and its decoded claims
        """
        pass

    @abstractmethod
    def verify(
        self,
        token_value: str,
        expected_purpose: TokenPurpose,
        allow_expired: bool = False,
    ) -> Token:
        """
        Verify a presented token.

        Args:
            token_value: Raw token string
            expected_purpose: Purpose the caller intends to use it for
            allow_expired: Accept tokens past their expiry (used when
                revoking by token)

        Returns:
            Decoded token

        Raises:
            TokenMalformedError: Signature, shape, issuer or purpose failure
            TokenExpiredError: The token is valid but past its expiry
        """
        pass

    def issue_pair(
        self,
        identity_id: str,
        role: str,
        session_id: str,
        now: datetime | None = None,
    ) -> tuple[Token, Token]:
        """Issue an access token and a refresh token for one session lineage."""
        now = now or self.clock()
        access = self.issue(identity_id, role, TokenPurpose.ACCESS, session_id, now)
        refresh = self.issue(identity_id, role, TokenPurpose.REFRESH, session_id, now)
        return access, refresh
