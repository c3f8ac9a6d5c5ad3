"""Memory-based identity provider implementation."""

from dataclasses import replace
from datetime import datetime
from typing import Any

from bevy import Container

from tessera.auth.exceptions import DuplicateIdentityError, ProviderError
from tessera.auth.providers.identity import IdentityProvider
from tessera.auth.types import Identity, IdentityStatus

from .store import MemoryStore


class MemoryIdentityProvider(IdentityProvider):
    """Memory-based identity provider.

    Identities live in the ``identities`` namespace; ``business_keys`` maps
    ``role:business_key`` of every non-deleted identity to its ID.
    Stored records are copied on the way in and out so callers never hold
    a reference to shared state.
    """

    def __init__(self, config: dict[str, Any], container: Container | None = None):
        """Initialize memory identity provider.

        Args:
            config: Provider configuration
            container: Dependency injection container
        """
        super().__init__(config, container)
        self.store = MemoryStore()

    @staticmethod
    def _key(role: str, business_key: str) -> str:
        return f"{role}:{business_key}"

    async def create_identity(self, identity: Identity) -> Identity:
        key = self._key(identity.role, identity.business_key)
        with self.store.atomic():
            if self.store.exists("identities", identity.id):
                raise ProviderError(f"Identity {identity.id} already exists")
            if not self.store.set_if_absent("business_keys", key, identity.id):
                raise DuplicateIdentityError(
                    f"Business key already registered for role '{identity.role}'",
                    details={"role": identity.role},
                )
            self.store.set("identities", identity.id, replace(identity))
        return replace(identity)

    async def get_identity(self, identity_id: str) -> Identity | None:
        identity = self.store.get("identities", identity_id)
        return replace(identity) if identity else None

    async def find_by_business_key(self, role: str, business_key: str) -> Identity | None:
        with self.store.atomic():
            identity_id = self.store.get("business_keys", self._key(role, business_key))
            if identity_id is None:
                return None
            return await self.get_identity(identity_id)

    async def update_status(
        self, identity_id: str, status: IdentityStatus, now: datetime
    ) -> Identity:
        if status is IdentityStatus.DELETED:
            return await self.soft_delete(identity_id, now)

        with self.store.atomic():
            identity = self.store.get("identities", identity_id)
            if identity is None:
                raise ProviderError(f"Identity {identity_id} not found")
            if identity.is_deleted():
                raise ProviderError(f"Identity {identity_id} is deleted")
            updated = replace(identity, status=status, updated_at=now)
            self.store.set("identities", identity_id, updated)
        return replace(updated)

    async def soft_delete(self, identity_id: str, now: datetime) -> Identity:
        with self.store.atomic():
            identity = self.store.get("identities", identity_id)
            if identity is None:
                raise ProviderError(f"Identity {identity_id} not found")
            if identity.deleted_at is not None:
                return replace(identity)

            updated = replace(
                identity, status=IdentityStatus.DELETED, updated_at=now, deleted_at=now
            )
            self.store.set("identities", identity_id, updated)

            key = self._key(identity.role, identity.business_key)
            if self.store.get("business_keys", key) == identity_id:
                self.store.delete("business_keys", key)
        return replace(updated)

    async def remove_identity(self, identity_id: str) -> bool:
        with self.store.atomic():
            identity = self.store.get("identities", identity_id)
            if identity is None:
                return False
            key = self._key(identity.role, identity.business_key)
            if self.store.get("business_keys", key) == identity_id:
                self.store.delete("business_keys", key)
            return self.store.delete("identities", identity_id)
