"""Secret hasher implementations."""

from .argon2_hasher import Argon2SecretHasher
from .bcrypt_hasher import BcryptSecretHasher

__all__ = ["Argon2SecretHasher", "BcryptSecretHasher"]
