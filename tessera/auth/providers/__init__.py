"""Authentication provider interfaces."""

from .audit import AuditProvider
from .base import BaseProvider
from .credential import CredentialProvider
from .identity import IdentityProvider
from .revocation import RevocationProvider
from .session import SessionProvider

__all__ = [
    "BaseProvider",
    "IdentityProvider",
    "CredentialProvider",
    "SessionProvider",
    "RevocationProvider",
    "AuditProvider",
]
