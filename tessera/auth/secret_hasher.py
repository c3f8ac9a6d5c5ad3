"""
SecretHasher interface for the tessera authentication engine.

Secrets are irreversibly hashed before storage; the raw secret is never
persisted or logged.

Security considerations:
- Hashes must use a slow, salted algorithm
- Verification must not raise on a mismatch or a corrupt stored hash
- Lookups for unknown actors must cost as much as real verifications
"""

from abc import ABC, abstractmethod
from typing import Any


class SecretHasher(ABC):
    """
    Abstract base class for secret hashing.

    Args:
        config: Hasher configuration
    """

    algorithm: str = ""

    def __init__(self, config: dict[str, Any] | None = None):
        self.config = dict(config or {})
        self._validate_config(self.config)
        self._dummy_hash: str | None = None

    @abstractmethod
    def _validate_config(self, config: dict[str, Any]) -> None:
        """
        Raises:
            ValueError: If configuration is invalid or insecure
        """
        pass

    @abstractmethod
    def hash(self, secret: str) -> str:
        """Return a salted one-way hash of ``secret``."""
        pass

    @abstractmethod
    def verify(self, secret: str, hashed: str) -> bool:
        """Return True if ``secret`` matches ``hashed``. Never raises on mismatch."""
        pass

    def dummy_verify(self, secret: str) -> bool:
        """Spend the time of a real verification against a throwaway hash.

        Used when no credential exists so that response time does not
        reveal whether the actor exists. Always returns False.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("tessera-timing-equalization")
        self.verify(secret, self._dummy_hash)
        return False
