"""Memory-based credential provider implementation."""

from dataclasses import replace
from datetime import datetime
from typing import Any

from bevy import Container

from tessera.auth.exceptions import DuplicateIdentityError, ProviderError
from tessera.auth.providers.credential import CredentialProvider
from tessera.auth.types import Credential

from .store import MemoryStore


class MemoryCredentialProvider(CredentialProvider):
    """Memory-based credential provider.

    Credentials are indexed by ``role:provider:provider_key`` so a lookup
    never crosses role namespaces.
    """

    def __init__(self, config: dict[str, Any], container: Container | None = None):
        super().__init__(config, container)
        self.store = MemoryStore()

    @staticmethod
    def _key(role: str, provider: str, provider_key: str) -> str:
        return f"{role}:{provider}:{provider_key}"

    async def add_credential(self, credential: Credential) -> Credential:
        key = self._key(credential.role, credential.provider, credential.provider_key)
        with self.store.atomic():
            if self.store.exists("credentials", credential.id):
                raise ProviderError(f"Credential {credential.id} already exists")
            if not self.store.set_if_absent("credential_keys", key, credential.id):
                raise DuplicateIdentityError(
                    f"Credential already registered for provider '{credential.provider}'",
                    details={"role": credential.role, "provider": credential.provider},
                )
            self.store.set("credentials", credential.id, replace(credential))
        return replace(credential)

    async def find_credential(
        self, role: str, provider: str, provider_key: str
    ) -> Credential | None:
        with self.store.atomic():
            credential_id = self.store.get(
                "credential_keys", self._key(role, provider, provider_key)
            )
            if credential_id is None:
                return None
            credential = self.store.get("credentials", credential_id)
            return replace(credential) if credential else None

    async def list_credentials(self, identity_id: str) -> list[Credential]:
        return [
            replace(credential)
            for credential in self.store.values("credentials")
            if credential.identity_id == identity_id
        ]

    async def retire_credential(self, credential_id: str) -> bool:
        with self.store.atomic():
            credential = self.store.get("credentials", credential_id)
            if credential is None:
                return False
            key = self._key(credential.role, credential.provider, credential.provider_key)
            if self.store.get("credential_keys", key) == credential_id:
                self.store.delete("credential_keys", key)
            return self.store.delete("credentials", credential_id)

    async def mark_authenticated(self, credential_id: str, now: datetime) -> None:
        with self.store.atomic():
            credential = self.store.get("credentials", credential_id)
            if credential is None:
                raise ProviderError(f"Credential {credential_id} not found")
            self.store.set(
                "credentials",
                credential_id,
                replace(credential, last_authenticated_at=now),
            )
