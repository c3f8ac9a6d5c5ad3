"""Identity provider interface."""

from abc import abstractmethod
from datetime import datetime

from ..types import Identity, IdentityStatus
from .base import BaseProvider


class IdentityProvider(BaseProvider):
    """Abstract base class for identity records, one namespace per role."""

    @abstractmethod
    async def create_identity(self, identity: Identity) -> Identity:
        """Store a new identity.

        The uniqueness check and the insert must be a single atomic step.

        Args:
            identity: Identity to store

        Returns:
            The stored identity

        Raises:
            DuplicateIdentityError: If the business key is already bound to
                a non-deleted identity in the same role
        """
        pass

    @abstractmethod
    async def get_identity(self, identity_id: str) -> Identity | None:
        """Get identity by ID, including soft-deleted ones.

        Args:
            identity_id: ID of the identity

        Returns:
            Identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_business_key(self, role: str, business_key: str) -> Identity | None:
        """Get the non-deleted identity bound to a business key in a role.

        Args:
            role: Role namespace
            business_key: Normalized business key

        Returns:
            Identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_status(
        self, identity_id: str, status: IdentityStatus, now: datetime
    ) -> Identity:
        """Change the status of an identity.

        Raises:
            ProviderError: If the identity does not exist
        """
        pass

    @abstractmethod
    async def soft_delete(self, identity_id: str, now: datetime) -> Identity:
        """Mark an identity deleted. Its business key becomes free for reuse.

        Raises:
            ProviderError: If the identity does not exist
        """
        pass

    @abstractmethod
    async def remove_identity(self, identity_id: str) -> bool:
        """Physically remove an identity.

        Only used to undo a registration that failed half-way.

        Returns:
            True if an identity was removed
        """
        pass
