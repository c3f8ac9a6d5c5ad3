"""
Bundled authentication implementations for tessera.

- JWT token codec (PyJWT) with HMAC algorithms
- argon2 and bcrypt secret hashers
- In-memory identity, credential, session, revocation and audit providers
- JSON-lines file audit provider

All implementations follow the interface-based design allowing easy
swapping via the ``auth`` configuration section.
"""

from .file import JsonLinesAuditProvider
from .hashers import Argon2SecretHasher, BcryptSecretHasher
from .memory import (
    MemoryAuditProvider,
    MemoryCredentialProvider,
    MemoryIdentityProvider,
    MemoryRevocationProvider,
    MemorySessionProvider,
    MemoryStore,
)
from .tokens import JwtTokenService

__all__ = [
    # Token services
    "JwtTokenService",
    # Secret hashers
    "Argon2SecretHasher",
    "BcryptSecretHasher",
    # Memory providers
    "MemoryStore",
    "MemoryIdentityProvider",
    "MemoryCredentialProvider",
    "MemorySessionProvider",
    "MemoryRevocationProvider",
    "MemoryAuditProvider",
    # File providers
    "JsonLinesAuditProvider",
]
