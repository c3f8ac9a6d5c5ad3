"""Provider registry for managing bundled and external implementations."""

from typing import Dict

COMPONENT_TYPES = (
    "identity",
    "credential",
    "session",
    "revocation",
    "audit",
    "token",
    "hasher",
)


class ProviderRegistry:
    """Registry mapping component names to ``module.path:Class`` import strings.

    Each bootstrap owns its own registry, so registering an external
    implementation never leaks into another auth system.
    """

    def __init__(self):
        """Initialize the provider registry."""
        self._bundled_implementations: Dict[str, Dict[str, str]] = {}
        self._external_implementations: Dict[str, Dict[str, str]] = {}
        self._initialize_bundled_providers()

    def _initialize_bundled_providers(self) -> None:
        """Initialize the registry with bundled implementations."""

        self._bundled_implementations["identity"] = {
            "memory": "tessera.bundled.auth.memory.identity:MemoryIdentityProvider",
        }

        self._bundled_implementations["credential"] = {
            "memory": "tessera.bundled.auth.memory.credential:MemoryCredentialProvider",
        }

        self._bundled_implementations["session"] = {
            "memory": "tessera.bundled.auth.memory.session:MemorySessionProvider",
        }

        self._bundled_implementations["revocation"] = {
            "memory": "tessera.bundled.auth.memory.revocation:MemoryRevocationProvider",
        }

        self._bundled_implementations["audit"] = {
            "memory": "tessera.bundled.auth.memory.audit:MemoryAuditProvider",
            "jsonl": "tessera.bundled.auth.file.jsonl_audit:JsonLinesAuditProvider",
        }

        self._bundled_implementations["token"] = {
            "jwt": "tessera.bundled.auth.tokens.jwt_token_service:JwtTokenService",
        }

        self._bundled_implementations["hasher"] = {
            "argon2": "tessera.bundled.auth.hashers.argon2_hasher:Argon2SecretHasher",
            "bcrypt": "tessera.bundled.auth.hashers.bcrypt_hasher:BcryptSecretHasher",
        }

    def get_bundled_implementations(self, component_type: str) -> Dict[str, str]:
        """Get bundled implementations for a component type.

        Returns:
            Dictionary mapping implementation names to import strings
        """
        return self._bundled_implementations.get(component_type, {}).copy()

    def register_external_provider(
        self, component_type: str, name: str, import_string: str
    ) -> None:
        """Register an external implementation under a short name.

        Args:
            component_type: One of ``COMPONENT_TYPES``
            name: Name used in configuration
            import_string: Import path in format 'module.path:Class'
        """
        if component_type not in COMPONENT_TYPES:
            raise ValueError(f"Unknown component type: {component_type}")
        if ":" not in import_string:
            raise ValueError(
                f"Invalid import string: {import_string}. Expected 'module.path:Class'"
            )

        self._external_implementations.setdefault(component_type, {})[name] = import_string

    def unregister_external_provider(self, component_type: str, name: str) -> bool:
        """Unregister an external implementation.

        Returns:
            True if the implementation was found and removed
        """
        if component_type in self._external_implementations:
            return self._external_implementations[component_type].pop(name, None) is not None
        return False

    def resolve_provider_import(self, component_type: str, spec: str) -> str | None:
        """Resolve a configured name or import string to an import string.

        Returns:
            Import string if found, None otherwise
        """
        # Already an import string
        if ":" in spec:
            return spec

        bundled = self._bundled_implementations.get(component_type, {})
        if spec in bundled:
            return bundled[spec]

        external = self._external_implementations.get(component_type, {})
        if spec in external:
            return external[spec]

        return None

    def list_available_providers(self, component_type: str) -> Dict[str, str]:
        """List every known implementation name with its origin (bundled/external)."""
        result = {}
        for name in self._bundled_implementations.get(component_type, {}):
            result[name] = "bundled"
        for name in self._external_implementations.get(component_type, {}):
            result[name] = "external"
        return result
