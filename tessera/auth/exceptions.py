"""Exception classes for the authentication system.

Every error the engine can produce carries the ``AuthStatus`` it maps to,
so the facade can turn any of them into an ``AuthResult`` without a
lookup table.
"""

from .types import AuthStatus


class AuthError(Exception):
    """Base exception for all authentication-related errors."""

    status: AuthStatus = AuthStatus.INTERNAL_ERROR

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def public_code(self) -> str:
        return self.status.public_code

    @property
    def public_message(self) -> str:
        return self.status.public_message


class AuthValidationError(AuthError):
    """Raised when caller input is malformed."""

    status = AuthStatus.VALIDATION_ERROR


class DuplicateIdentityError(AuthError):
    """Raised when a business key or credential key is already bound in a role."""

    status = AuthStatus.DUPLICATE_IDENTITY


class InvalidCredentialsError(AuthError):
    """Raised when provided credentials are invalid.

    The same message is used whether the actor does not exist or the
    secret was wrong.
    """

    status = AuthStatus.INVALID_CREDENTIAL

    def __init__(self, message: str = "Invalid credentials", details: dict | None = None):
        super().__init__(message, details)


class ActorInactiveError(AuthError):
    """Raised when the actor is disabled or soft-deleted."""

    status = AuthStatus.ACTOR_INACTIVE


class TokenMalformedError(AuthError):
    """Raised when a bearer token fails signature, shape or purpose checks."""

    status = AuthStatus.TOKEN_MALFORMED


class TokenExpiredError(AuthError):
    """Raised when a structurally valid token is past its expiry."""

    status = AuthStatus.SESSION_EXPIRED


class SessionNotFoundError(AuthError):
    """Raised when no session matches the presented refresh token."""

    status = AuthStatus.SESSION_NOT_FOUND


class SessionExpiredError(AuthError):
    """Raised when a session has expired."""

    status = AuthStatus.SESSION_EXPIRED


class SessionRevokedError(AuthError):
    """Raised when a session was revoked or its refresh token was replayed."""

    status = AuthStatus.SESSION_REVOKED


class StorageError(AuthError):
    """Raised when a provider fails. Never retried by the engine."""

    status = AuthStatus.INTERNAL_ERROR


class ConfigurationError(AuthError):
    """Raised when auth configuration is invalid."""

    status = AuthStatus.INTERNAL_ERROR


class ProviderError(AuthError):
    """Raised when auth provider operations fail."""

    status = AuthStatus.INTERNAL_ERROR


class ProviderNotFoundError(ProviderError):
    """Raised when a required auth provider is not found."""

    pass


class ProviderInitializationError(ProviderError):
    """Raised when auth provider initialization fails."""

    pass
