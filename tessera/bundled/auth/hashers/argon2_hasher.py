"""Argon2-based secret hasher implementation."""

import logging
from typing import Any

import argon2
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from tessera.auth.secret_hasher import SecretHasher

logger = logging.getLogger(__name__)


class Argon2SecretHasher(SecretHasher):
    """Secret hasher using argon2id.

    Config keys mirror ``argon2.PasswordHasher`` arguments with an
    ``argon2_`` prefix.
    """

    algorithm = "argon2"

    def __init__(self, config: dict[str, Any] | None = None):
        super().__init__(config)
        self.hasher = argon2.PasswordHasher(
            time_cost=self.config.get("argon2_time_cost", 3),  # Number of iterations
            memory_cost=self.config.get("argon2_memory_cost", 65536),  # Memory usage in KiB
            parallelism=self.config.get("argon2_parallelism", 1),  # Number of parallel threads
            hash_len=self.config.get("argon2_hash_len", 32),  # Hash length in bytes
            salt_len=self.config.get("argon2_salt_len", 16),  # Salt length in bytes
        )

    def _validate_config(self, config: dict[str, Any]) -> None:
        if config.get("argon2_time_cost", 3) < 1:
            raise ValueError("argon2 time cost must be positive")
        if config.get("argon2_memory_cost", 65536) < 8:
            raise ValueError("argon2 memory cost must be at least 8 KiB")
        if config.get("argon2_parallelism", 1) < 1:
            raise ValueError("argon2 parallelism must be positive")

    def hash(self, secret: str) -> str:
        return self.hasher.hash(secret)

    def verify(self, secret: str, hashed: str) -> bool:
        try:
            return self.hasher.verify(hashed, secret)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError) as e:
            logger.warning(f"Stored argon2 hash could not be verified: {e}")
            return False
