"""Configuration system for authentication."""

from .loader import AuthConfigLoader
from .schema import (
    AuditConfig,
    AuthConfig,
    ProviderConfig,
    ProvidersConfig,
    SecretConfig,
    SessionConfig,
    TokenConfig,
)

__all__ = [
    # Schema models
    "AuthConfig",
    "TokenConfig",
    "SecretConfig",
    "SessionConfig",
    "AuditConfig",
    "ProvidersConfig",
    "ProviderConfig",
    # Loading
    "AuthConfigLoader",
]
