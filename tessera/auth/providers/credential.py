"""Credential provider interface."""

from abc import abstractmethod
from datetime import datetime

from ..types import Credential
from .base import BaseProvider


class CredentialProvider(BaseProvider):
    """Abstract base class for credential management."""

    @abstractmethod
    async def add_credential(self, credential: Credential) -> Credential:
        """Bind a new credential to an identity.

        Args:
            credential: Credential to store, secret already hashed

        Returns:
            The stored credential

        Raises:
            DuplicateIdentityError: If ``(provider, provider_key)`` is already
                bound in the credential's role namespace
        """
        pass

    @abstractmethod
    async def find_credential(
        self, role: str, provider: str, provider_key: str
    ) -> Credential | None:
        """Look up a credential by its authentication key.

        Args:
            role: Role namespace
            provider: ``local`` or an external SSO tag
            provider_key: Username/email for ``local``, external subject otherwise

        Returns:
            Credential if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_credentials(self, identity_id: str) -> list[Credential]:
        """Get all credentials bound to an identity."""
        pass

    @abstractmethod
    async def retire_credential(self, credential_id: str) -> bool:
        """Remove a credential from lookup.

        Used to undo a failed registration and to supersede a credential
        whose identity was soft-deleted.

        Returns:
            True if a credential was retired
        """
        pass

    @abstractmethod
    async def mark_authenticated(self, credential_id: str, now: datetime) -> None:
        """Record a successful authentication with this credential."""
        pass
