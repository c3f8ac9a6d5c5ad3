"""Auth system bootstrap for setting up the engine from configuration."""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from bevy import Container, get_registry

from ..audit_logger import AuditLogger
from ..config.loader import AuthConfigLoader
from ..config.schema import AuthConfig, ProviderConfig
from ..exceptions import ConfigurationError, ProviderInitializationError
from ..facade import AuthFacade
from ..providers import (
    AuditProvider,
    BaseProvider,
    CredentialProvider,
    IdentityProvider,
    RevocationProvider,
    SessionProvider,
)
from ..secret_hasher import SecretHasher
from ..token_service import TokenService
from .loader import BackendLoader
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

PROVIDER_TYPES: dict[str, type[BaseProvider]] = {
    "identity": IdentityProvider,
    "credential": CredentialProvider,
    "session": SessionProvider,
    "revocation": RevocationProvider,
    "audit": AuditProvider,
}


class AuthSystemBootstrap:
    """Bootstraps the authentication engine from configuration.

    Providers are created in dependency order, registered in a bevy
    container under their interface types, and composed into an
    ``AuthFacade`` which is registered as well.

    Args:
        config: Validated authentication configuration
        registry: Provider registry (default: a fresh registry of the
            bundled implementations)
        clock: Callable returning the current aware UTC datetime, shared by
            the token codec, the audit logger and the facade
    """

    def __init__(
        self,
        config: AuthConfig,
        registry: ProviderRegistry | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self.registry = registry or ProviderRegistry()
        self.loader = BackendLoader()
        self.clock = clock

    def setup(self, container: Container) -> AuthFacade:
        """Set up the whole auth engine in the container.

        Raises:
            ConfigurationError: If configuration is invalid
            ProviderInitializationError: If a component fails to initialize
        """
        try:
            providers = {
                name: self._create_provider(name, getattr(self.config.providers, name), container)
                for name in PROVIDER_TYPES
            }
            token_service = self._create_token_service()
            hasher = self._create_hasher()
            audit_logger = AuditLogger(
                providers["audit"],
                self.config.audit.model_dump(),
                clock=token_service.clock,
            )
            facade = AuthFacade(
                identities=providers["identity"],
                credentials=providers["credential"],
                sessions=providers["session"],
                ledger=providers["revocation"],
                tokens=token_service,
                hasher=hasher,
                audit=audit_logger,
                config=self.config.engine_settings(),
            )

        except (ConfigurationError, ProviderInitializationError):
            raise
        except Exception as e:
            raise ProviderInitializationError(f"Failed to set up auth system: {e}") from e

        for name, provider_type in PROVIDER_TYPES.items():
            container.add(provider_type, providers[name])
        container.add(TokenService, token_service)
        container.add(SecretHasher, hasher)
        container.add(AuditLogger, audit_logger)
        container.add(AuthFacade, facade)

        logger.info(
            "Auth system ready: "
            + ", ".join(f"{name}={spec}" for name, spec in self.get_provider_info().items())
        )
        return facade

    def _resolve(self, component_type: str, spec: str, expected_type: type) -> type:
        import_string = self.registry.resolve_provider_import(component_type, spec)
        if not import_string:
            available = self.registry.list_available_providers(component_type)
            raise ConfigurationError(
                f"Unknown {component_type} provider: {spec}. "
                f"Available providers: {', '.join(available.keys())}"
            )
        return self.loader.load_class(import_string, expected_type)

    def _create_provider(
        self, name: str, provider_config: ProviderConfig, container: Container
    ) -> BaseProvider:
        provider_class = self._resolve(name, provider_config.provider, PROVIDER_TYPES[name])
        try:
            return provider_class(dict(provider_config.config), container)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ProviderInitializationError(
                f"Failed to initialize {name} provider '{provider_config.provider}': {e}"
            ) from e

    def _create_token_service(self) -> TokenService:
        tokens = self.config.tokens
        service_class = self._resolve("token", tokens.provider, TokenService)
        try:
            return service_class(tokens.service_config(), clock=self.clock)
        except ValueError as e:
            raise ConfigurationError(f"Invalid token configuration: {e}") from e

    def _create_hasher(self) -> SecretHasher:
        secrets = self.config.secrets
        hasher_class = self._resolve("hasher", secrets.hasher, SecretHasher)
        try:
            return hasher_class(dict(secrets.config))
        except ValueError as e:
            raise ConfigurationError(f"Invalid secret hasher configuration: {e}") from e

    def get_provider_info(self) -> dict[str, str]:
        """Get the configured implementation name of every component."""
        info = {
            name: getattr(self.config.providers, name).provider for name in PROVIDER_TYPES
        }
        info["token"] = self.config.tokens.provider
        info["hasher"] = self.config.secrets.hasher
        return info


def load_config(config: AuthConfig | dict[str, Any] | str | Path) -> AuthConfig:
    """Turn any accepted configuration form into a validated ``AuthConfig``.

    A dict is treated as the contents of the ``auth`` section; a string or
    path names a YAML file.
    """
    if isinstance(config, AuthConfig):
        return config
    if isinstance(config, dict):
        return AuthConfigLoader.parse_auth_config(config)
    if isinstance(config, (str, Path)):
        return AuthConfigLoader.load_auth_config(config)
    raise ConfigurationError(f"Unsupported configuration type: {type(config).__name__}")


def create_auth_system(
    config: AuthConfig | dict[str, Any] | str | Path,
    container: Container | None = None,
    registry: ProviderRegistry | None = None,
    clock: Callable[[], datetime] | None = None,
) -> AuthFacade:
    """
    Create a complete auth engine from configuration.

    Args:
        config: ``AuthConfig``, an ``auth`` section dict, or a YAML file path
        container: Container to register components in (default: a new one)
        registry: Provider registry with extra external implementations
        clock: Callable returning the current aware UTC datetime

    Returns:
        The configured ``AuthFacade``; every component is also available
        from the container under its interface type
    """
    auth_config = load_config(config)
    if container is None:
        container = get_registry().create_container()
    return AuthSystemBootstrap(auth_config, registry=registry, clock=clock).setup(container)
