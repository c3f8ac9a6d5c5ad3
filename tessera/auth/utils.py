"""
Security helpers shared by the tessera engine.

Bearer tokens are stored and looked up only by their SHA-256 digest. Login
(password and SSO) runs under a minimum wall-clock duration so that response
time does not tell an attacker whether a business key exists. Anything that
ends up in a log or an audit entry goes through ``sanitize_user_input`` or
``mask_sensitive_data`` first.
"""

import asyncio
import hashlib
import re
import secrets
import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import bleach
from cryptography.hazmat.primitives import constant_time

_EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)

BEARER_PREFIX = "Bearer "

# Substrings that mark a mapping key as holding something secret.
SENSITIVE_KEY_PARTS = frozenset(
    {"password", "passwd", "pwd", "secret", "token", "key", "credential", "authorization", "hash"}
)

_LINE_BREAKS = str.maketrans({"\r": "\\r", "\n": "\\n"})


class MinimumRuntime:
    """Pads the enclosed block so it lasts at least ``seconds``.

    The padding also applies when the block raises.
    """

    def __init__(self, seconds: float):
        if seconds <= 0:
            raise ValueError("Minimum runtime must be positive")
        self.minimum_seconds = seconds
        self._deadline: float | None = None

    async def __aenter__(self):
        self._deadline = time.perf_counter() + self.minimum_seconds
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._deadline is not None:
            await asyncio.sleep(max(0.0, self._deadline - time.perf_counter()))
        return False


@asynccontextmanager
async def timing_protection(seconds: float) -> AsyncGenerator[None, None]:
    """``MinimumRuntime`` that is a no-op for a non-positive duration.

        async with timing_protection(config.sessions.min_response_time):
            ...
    """
    if seconds > 0:
        async with MinimumRuntime(seconds):
            yield
    else:
        yield


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return str(uuid.uuid4())


def hash_token(token: str) -> str:
    """Hex SHA-256 digest of a raw bearer token, used for storage and lookup."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def secure_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time."""
    left, right = a.encode("utf-8"), b.encode("utf-8")
    width = max(len(left), len(right))
    # bytes_eq leaks on length, so compare equal-width buffers plus the lengths
    same = constant_time.bytes_eq(left.ljust(width, b"\0"), right.ljust(width, b"\0"))
    return same and len(left) == len(right)


def generate_secret_key(length: int = 48) -> str:
    """Generate a URL-safe signing key suitable for HMAC token signing."""
    return secrets.token_urlsafe(length)


def is_valid_email(value: str) -> bool:
    """Check that a value has the shape of an email address."""
    if not isinstance(value, str) or len(value) > 254:
        return False
    return bool(_EMAIL_PATTERN.match(value))


def normalize_business_key(value: str, key_format: str = "email") -> str:
    """Normalize a business key before lookup or storage.

    Email keys are case-folded; other keys are only stripped.
    """
    value = value.strip()
    if key_format == "email":
        return value.lower()
    return value


def parse_bearer_header(header: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header value.

    Returns:
        The token, or None if the header is missing, uses another scheme
        or carries an empty token
    """
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


def sanitize_user_input(value: str, max_length: int = 1000) -> str:
    """Make caller supplied text safe to log or store.

    Truncates to ``max_length``, strips all markup with bleach and renders
    CR/LF as visible escapes.
    """
    if not isinstance(value, str):
        return ""
    cleaned = bleach.clean(
        value[:max_length], tags=[], attributes={}, strip=True, strip_comments=True
    )
    return cleaned.translate(_LINE_BREAKS).strip()


def _mask_value(value: Any) -> Any:
    if isinstance(value, dict):
        return mask_sensitive_data(value)
    if isinstance(value, str) and len(value) > 4:
        return f"{value[:2]}***{value[-2:]}"
    return "***"


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def mask_sensitive_data(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` with secret-looking values masked, recursing into dicts.

    Long strings keep their first and last two characters.
    """
    masked = {}
    for key, value in data.items():
        if _is_sensitive(key):
            masked[key] = _mask_value(value)
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        else:
            masked[key] = value
    return masked
