"""Base provider class for all auth providers."""

from abc import ABC
from typing import Any

from bevy import Container


class BaseProvider(ABC):
    """Base class for all authentication storage providers.

    Args:
        config: Provider-specific configuration dictionary
        container: Dependency injection container the provider was built in
    """

    def __init__(self, config: dict[str, Any], container: Container | None = None):
        self.config = config
        self.container = container
