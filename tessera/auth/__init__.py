"""
tessera authentication engine

A single, role-parameterized engine for actor registration, credential
verification, bearer-session issuance, refresh-token rotation, revocation
and audit logging.

Security Notice:
This module handles sensitive security operations. All implementations
should follow these security rules:
- Slow, salted secret hashing (argon2 or bcrypt)
- Timing attack protection
- Single-use refresh tokens stored only as digests
- Input validation and sanitization
"""

from .adapters import AdapterResponse, RoleAdapter
from .audit_logger import AuditLogger
from .config import AuthConfig, AuthConfigLoader
from .exceptions import (
    ActorInactiveError,
    AuthError,
    AuthValidationError,
    ConfigurationError,
    DuplicateIdentityError,
    InvalidCredentialsError,
    ProviderError,
    ProviderInitializationError,
    ProviderNotFoundError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionRevokedError,
    StorageError,
    TokenExpiredError,
    TokenMalformedError,
)
from .facade import AuthFacade
from .factory import AuthSystemBootstrap, ProviderRegistry, create_auth_system
from .secret_hasher import SecretHasher
from .token_service import TokenService
from .types import (
    AuditAction,
    AuditLogEntry,
    AuditOutcome,
    AuthGrant,
    AuthResult,
    AuthStatus,
    Credential,
    Identity,
    IdentityProjection,
    IdentityStatus,
    LedgerEntry,
    Principal,
    RevocationOutcome,
    RevocationReason,
    Role,
    Session,
    SessionState,
    Token,
    TokenPair,
    TokenPurpose,
)

__all__ = [
    # Engine
    "AuthFacade",
    "RoleAdapter",
    "AdapterResponse",
    "AuditLogger",
    "TokenService",
    "SecretHasher",
    # Configuration and bootstrap
    "AuthConfig",
    "AuthConfigLoader",
    "AuthSystemBootstrap",
    "ProviderRegistry",
    "create_auth_system",
    # Types
    "AuditAction",
    "AuditLogEntry",
    "AuditOutcome",
    "AuthGrant",
    "AuthResult",
    "AuthStatus",
    "Credential",
    "Identity",
    "IdentityProjection",
    "IdentityStatus",
    "LedgerEntry",
    "Principal",
    "RevocationOutcome",
    "RevocationReason",
    "Role",
    "Session",
    "SessionState",
    "Token",
    "TokenPair",
    "TokenPurpose",
    # Exceptions
    "AuthError",
    "AuthValidationError",
    "ActorInactiveError",
    "ConfigurationError",
    "DuplicateIdentityError",
    "InvalidCredentialsError",
    "ProviderError",
    "ProviderInitializationError",
    "ProviderNotFoundError",
    "SessionExpiredError",
    "SessionNotFoundError",
    "SessionRevokedError",
    "StorageError",
    "TokenExpiredError",
    "TokenMalformedError",
]
