"""
Bcrypt-based secret hasher implementation.

Security features:
- bcrypt hashing with configurable rounds
- Automatic salt generation for each secret
"""

import logging
from typing import Any

import bcrypt

from tessera.auth.secret_hasher import SecretHasher

logger = logging.getLogger(__name__)


class BcryptSecretHasher(SecretHasher):
    """Secret hasher using bcrypt.

    bcrypt only considers the first 72 bytes of a secret; longer secrets
    are truncated before hashing and verification.
    """

    algorithm = "bcrypt"

    def __init__(self, config: dict[str, Any] | None = None):
        super().__init__(config)
        self.bcrypt_rounds = self.config.get("bcrypt_rounds", 12)

        logger.info(f"Bcrypt secret hasher initialized with {self.bcrypt_rounds} rounds")

    def _validate_config(self, config: dict[str, Any]) -> None:
        rounds = config.get("bcrypt_rounds", 12)
        if rounds < 4 or rounds > 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")

    @staticmethod
    def _encode(secret: str) -> bytes:
        return secret.encode("utf-8")[:72]

    def hash(self, secret: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(self._encode(secret), salt).decode("utf-8")

    def verify(self, secret: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(secret), hashed.encode("utf-8"))
        except ValueError as e:
            logger.warning(f"Stored bcrypt hash could not be verified: {e}")
            return False
