"""
JWT-based token service implementation.

Provides signed bearer tokens using HMAC JSON Web Tokens with
configurable algorithms and expiration times.
"""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from tessera.auth.exceptions import TokenExpiredError, TokenMalformedError
from tessera.auth.token_service import TokenService
from tessera.auth.types import Token, TokenPurpose

SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")
MIN_SECRET_LENGTH = 32
REQUIRED_CLAIMS = ["sub", "role", "purpose", "jti", "iat", "exp", "iss"]


class JwtTokenService(TokenService):
    """JWT-based token service implementation.

    Expiry is checked against the service clock rather than by PyJWT so
    that callers (and tests) control what "now" means.
    """

    def _validate_config(self, config: dict[str, Any]) -> None:
        """Validate configuration for JWT token service."""
        secret_key = config.get("secret_key")
        if not secret_key:
            raise ValueError("JWT token service requires 'secret_key' in configuration")
        if len(secret_key) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"JWT secret key must be at least {MIN_SECRET_LENGTH} characters long"
            )

        algorithm = config.get("algorithm", "HS256")
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported JWT algorithm: {algorithm}")

        for name in ("access_token_expiry", "refresh_token_expiry"):
            if name in config and int(config[name]) <= 0:
                raise ValueError(f"'{name}' must be a positive number of seconds")

    def __init__(self, config: dict[str, Any], clock: Callable[[], datetime] | None = None):
        """
        Initialize JWT token service.

        Args:
            config: Configuration dictionary containing:
                - secret_key: Secret key for JWT signing (required, 32+ chars)
                - algorithm: JWT algorithm (default: HS256)
                - access_token_expiry: Access token expiry in seconds (default: 3600)
                - refresh_token_expiry: Refresh token expiry in seconds (default: 604800)
                - issuer: Token issuer (default: tessera)
            clock: Callable returning the current aware UTC datetime
        """
        super().__init__(config, clock)

        self.secret_key = config["secret_key"]
        self.algorithm = config.get("algorithm", "HS256")
        self.access_token_expiry = int(config.get("access_token_expiry", 3600))  # 1 hour
        self.refresh_token_expiry = int(config.get("refresh_token_expiry", 604800))  # 7 days
        self.issuer = config.get("issuer") or "tessera"

    def _lifetime(self, purpose: TokenPurpose) -> timedelta:
        if purpose is TokenPurpose.REFRESH:
            return timedelta(seconds=self.refresh_token_expiry)
        return timedelta(seconds=self.access_token_expiry)

    def issue(
        self,
        identity_id: str,
        role: str,
        purpose: TokenPurpose,
        session_id: str | None = None,
        now: datetime | None = None,
    ) -> Token:
        if purpose is TokenPurpose.REFRESH and not session_id:
            raise ValueError("Refresh tokens must belong to a session")

        # JWT timestamps have second precision
        issued_at = (now or self.clock()).replace(microsecond=0)
        expires_at = issued_at + self._lifetime(purpose)
        token_id = str(uuid.uuid4())

        claims = {
            "sub": identity_id,
            "identity_id": identity_id,
            "role": role,
            "purpose": purpose.value,
            "jti": token_id,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "iss": self.issuer,
        }
        if session_id:
            claims["session_id"] = session_id

        try:
            token_value = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        except Exception as e:
            raise RuntimeError(f"Failed to generate JWT token: {e}") from e

        return Token(
            value=token_value,
            token_id=token_id,
            purpose=purpose,
            identity_id=identity_id,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
            session_id=session_id,
            issuer=self.issuer,
        )

    def verify(
        self,
        token_value: str,
        expected_purpose: TokenPurpose,
        allow_expired: bool = False,
    ) -> Token:
        if not token_value or not isinstance(token_value, str):
            raise TokenMalformedError("Token is empty")
        if not token_value.isascii():
            raise TokenMalformedError("Token contains non-ASCII characters")

        try:
            payload = jwt.decode(
                token_value,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidTokenError as e:
            raise TokenMalformedError(f"Invalid token: {e}") from e

        try:
            purpose = TokenPurpose(payload["purpose"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
        except (TypeError, ValueError, OverflowError) as e:
            raise TokenMalformedError(f"Invalid token claims: {e}") from e

        if purpose is not expected_purpose:
            raise TokenMalformedError(
                f"Expected a {expected_purpose.value} token, got {purpose.value}"
            )

        identity_id = payload["sub"]
        role = payload["role"]
        session_id = payload.get("session_id")
        if not isinstance(identity_id, str) or not identity_id:
            raise TokenMalformedError("Token subject is missing")
        if not isinstance(role, str) or not role:
            raise TokenMalformedError("Token role is missing")
        if payload.get("identity_id", identity_id) != identity_id:
            raise TokenMalformedError("Token subject claims disagree")
        if purpose is TokenPurpose.REFRESH and not session_id:
            raise TokenMalformedError("Refresh token has no session")

        if not allow_expired and self.clock() >= expires_at:
            raise TokenExpiredError("Token has expired")

        return Token(
            value=token_value,
            token_id=payload["jti"],
            purpose=purpose,
            identity_id=identity_id,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
            session_id=session_id,
            issuer=payload["iss"],
        )
