"""Factory system for creating the auth engine from configuration."""

from .bootstrap import AuthSystemBootstrap, create_auth_system, load_config
from .loader import BackendLoader
from .registry import ProviderRegistry

__all__ = [
    "AuthSystemBootstrap",
    "BackendLoader",
    "ProviderRegistry",
    "create_auth_system",
    "load_config",
]
