"""Memory-based auth providers for development and testing."""

from .audit import MemoryAuditProvider
from .credential import MemoryCredentialProvider
from .identity import MemoryIdentityProvider
from .revocation import MemoryRevocationProvider
from .session import MemorySessionProvider
from .store import MemoryStore

__all__ = [
    "MemoryStore",
    "MemoryIdentityProvider",
    "MemoryCredentialProvider",
    "MemorySessionProvider",
    "MemoryRevocationProvider",
    "MemoryAuditProvider",
]
