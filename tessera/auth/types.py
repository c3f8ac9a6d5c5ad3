"""Core data types for the authentication system."""

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from .exceptions import AuthError

T = TypeVar("T")

LOCAL_PROVIDER = "local"

_ROLE_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_.-]{0,63}$")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def to_iso8601(value: datetime | None) -> str | None:
    """Render a datetime as an ISO-8601 UTC string with a ``Z`` suffix."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


class AuthStatus(Enum):
    """Outcome kinds for every public auth operation."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    DUPLICATE_IDENTITY = "duplicate_identity"
    INVALID_CREDENTIAL = "invalid_credential"
    ACTOR_INACTIVE = "actor_inactive"
    TOKEN_MALFORMED = "token_malformed"
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_EXPIRED = "session_expired"
    SESSION_REVOKED = "session_revoked"
    INTERNAL_ERROR = "internal_error"

    @property
    def public_code(self) -> str:
        """Code safe to hand to an external caller.

        Kinds that would let a caller tell a forged token from a revoked
        one, or a wrong secret from an unknown actor, share one code.
        """
        return _PUBLIC_SIGNALS[self][0]

    @property
    def public_message(self) -> str:
        return _PUBLIC_SIGNALS[self][1]


_PUBLIC_SIGNALS: dict[AuthStatus, tuple[str, str]] = {
    AuthStatus.SUCCESS: ("ok", "OK"),
    AuthStatus.VALIDATION_ERROR: ("invalid_request", "The request is invalid"),
    AuthStatus.DUPLICATE_IDENTITY: ("already_registered", "The account already exists"),
    AuthStatus.INVALID_CREDENTIAL: ("invalid_credentials", "Invalid credentials"),
    AuthStatus.ACTOR_INACTIVE: ("account_inactive", "The account is not active"),
    AuthStatus.TOKEN_MALFORMED: ("invalid_token", "Invalid or expired token"),
    AuthStatus.SESSION_NOT_FOUND: ("invalid_token", "Invalid or expired token"),
    AuthStatus.SESSION_EXPIRED: ("invalid_token", "Invalid or expired token"),
    AuthStatus.SESSION_REVOKED: ("invalid_token", "Invalid or expired token"),
    AuthStatus.INTERNAL_ERROR: ("server_error", "Authentication service error"),
}


class IdentityStatus(Enum):
    """Lifecycle status of an identity."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"


class TokenPurpose(Enum):
    """What a bearer token may be used for."""

    ACCESS = "access"
    REFRESH = "refresh"


class SessionState(Enum):
    """Derived state of a session at a given instant."""

    ACTIVE = "active"
    REFRESHED = "refreshed"
    REVOKED = "revoked"
    EXPIRED = "expired"


class AuditAction(Enum):
    """Types of auth events written to the audit log."""

    REGISTER = "register"
    LOGIN = "login"
    REFRESH = "refresh"
    REFRESH_FAILED = "refresh_failed"
    REVOKE = "revoke"


class AuditOutcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class RevocationReason(Enum):
    """Why a token hash entered the revocation ledger."""

    ROTATED = "rotated"
    REVOKED = "revoked"


@dataclass(frozen=True)
class Role:
    """A tag naming an actor kind. Each role is an isolated identity namespace."""

    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not _ROLE_NAME_PATTERN.match(self.name):
            from .exceptions import AuthValidationError

            raise AuthValidationError(f"Invalid role name: {self.name!r}")

    @classmethod
    def coerce(cls, value: "Role | str") -> "Role":
        if isinstance(value, Role):
            return value
        return cls(value)

    def __str__(self) -> str:
        return self.name


@dataclass
class Identity:
    """Represents one registered actor in one role namespace."""

    id: str
    role: str
    business_key: str
    display_name: str
    status: IdentityStatus = IdentityStatus.ACTIVE
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
    deleted_at: datetime | None = None

    def __post_init__(self):
        """Validate identity after creation."""
        if not self.id or not self.id.strip():
            from .exceptions import AuthValidationError

            raise AuthValidationError("Identity ID cannot be empty")
        if not self.business_key or not self.business_key.strip():
            from .exceptions import AuthValidationError

            raise AuthValidationError("Business key cannot be empty")

    def is_active(self) -> bool:
        return self.status is IdentityStatus.ACTIVE and self.deleted_at is None

    def is_deleted(self) -> bool:
        return self.deleted_at is not None or self.status is IdentityStatus.DELETED

    def projection(self) -> "IdentityProjection":
        return IdentityProjection(
            id=self.id,
            role=self.role,
            business_key=self.business_key,
            display_name=self.display_name,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass(frozen=True)
class IdentityProjection:
    """The public view of an identity handed back to role adapters."""

    id: str
    role: str
    business_key: str
    display_name: str
    status: IdentityStatus
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "business_key": self.business_key,
            "display_name": self.display_name,
            "status": self.status.value,
            "created_at": to_iso8601(self.created_at),
            "updated_at": to_iso8601(self.updated_at),
        }


@dataclass
class Credential:
    """One authentication method bound to an identity."""

    id: str
    identity_id: str
    role: str
    provider: str
    provider_key: str
    secret_hash: str | None = None
    created_at: datetime = field(default_factory=_utc_now)
    last_authenticated_at: datetime | None = None

    def __post_init__(self):
        """Validate credential after creation."""
        from .exceptions import AuthValidationError

        if not self.identity_id or not self.identity_id.strip():
            raise AuthValidationError("Identity ID cannot be empty")
        if not self.provider or not self.provider_key:
            raise AuthValidationError("Credential provider and key are required")
        if self.is_local and not self.secret_hash:
            raise AuthValidationError("Local credentials require a secret hash")
        if not self.is_local and self.secret_hash is not None:
            raise AuthValidationError("External credentials cannot carry a secret")

    @property
    def is_local(self) -> bool:
        return self.provider == LOCAL_PROVIDER


@dataclass
class Session:
    """One issued refresh-token lineage."""

    id: str
    identity_id: str
    role: str
    session_token_hash: str
    refresh_token_hash: str
    issued_at: datetime
    expires_at: datetime
    refreshed_at: datetime | None = None
    revoked_at: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    def __post_init__(self):
        """Validate session after creation."""
        if not self.id or not self.id.strip():
            from .exceptions import AuthValidationError

            raise AuthValidationError("Session ID cannot be empty")
        if not self.identity_id or not self.identity_id.strip():
            from .exceptions import AuthValidationError

            raise AuthValidationError("Identity ID cannot be empty")

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the session has expired."""
        return (now or _utc_now()) > self.expires_at

    def is_live(self, now: datetime | None = None) -> bool:
        return not self.is_revoked() and not self.is_expired(now)

    def state(self, now: datetime | None = None) -> SessionState:
        if self.is_revoked():
            return SessionState.REVOKED
        if self.is_expired(now):
            return SessionState.EXPIRED
        if self.refreshed_at is not None:
            return SessionState.REFRESHED
        return SessionState.ACTIVE


@dataclass(frozen=True)
class LedgerEntry:
    """A token hash recorded in the revocation ledger."""

    token_hash: str
    session_id: str
    reason: RevocationReason
    recorded_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable record of an authentication event."""

    id: str
    action_type: AuditAction
    outcome: AuditOutcome
    session_id: str | None = None
    identity_id: str | None = None
    context: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self):
        """Validate audit entry after creation."""
        if not self.id or not self.id.strip():
            from .exceptions import AuthValidationError

            raise AuthValidationError("Audit entry ID cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "identity_id": self.identity_id,
            "action_type": self.action_type.value,
            "outcome": self.outcome.value,
            "context": self.context,
            "created_at": to_iso8601(self.created_at),
        }


@dataclass(frozen=True)
class Token:
    """A signed bearer token and the claims it carries."""

    value: str
    token_id: str
    purpose: TokenPurpose
    identity_id: str
    role: str
    issued_at: datetime
    expires_at: datetime
    session_id: str | None = None
    issuer: str | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _utc_now()) >= self.expires_at


@dataclass(frozen=True)
class TokenPair:
    """An access token issued together with its refresh token."""

    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime

    @classmethod
    def from_tokens(cls, access: Token, refresh: Token) -> "TokenPair":
        return cls(
            access_token=access.value,
            refresh_token=refresh.value,
            access_expires_at=access.expires_at,
            refresh_expires_at=refresh.expires_at,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "access_expires_at": to_iso8601(self.access_expires_at),
            "refresh_expires_at": to_iso8601(self.refresh_expires_at),
        }


@dataclass(frozen=True)
class Principal:
    """The only state handed from a verified access token to domain services."""

    identity_id: str
    role: str


@dataclass(frozen=True)
class AuthGrant:
    """Result payload of a successful register or login."""

    identity: IdentityProjection
    tokens: TokenPair
    session_id: str


@dataclass(frozen=True)
class RevocationOutcome:
    """Result payload of a revoke call.

    ``revoked`` is False when the call was a no-op (already revoked or
    no matching session).
    """

    session_ids: tuple[str, ...]
    revoked: bool


@dataclass(frozen=True)
class AuthResult(Generic[T]):
    """Tagged result of a public auth operation."""

    status: AuthStatus
    value: T | None = None
    error: "AuthError | None" = None
    error_message: str | None = None

    @classmethod
    def success(cls, value: T) -> "AuthResult[T]":
        return cls(status=AuthStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, error: "AuthError") -> "AuthResult[T]":
        return cls(status=error.status, error=error, error_message=error.message)

    @property
    def ok(self) -> bool:
        return self.status is AuthStatus.SUCCESS

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.ok:
            return self.value
        raise self.error
