"""
Pytest configuration and shared fixtures for auth tests.
"""

from datetime import UTC, datetime, timedelta

import pytest
from bevy import Container, get_registry

from tessera.auth.audit_logger import AuditLogger
from tessera.auth.facade import AuthFacade
from tessera.bundled.auth.hashers import Argon2SecretHasher
from tessera.bundled.auth.memory import (
    MemoryAuditProvider,
    MemoryCredentialProvider,
    MemoryIdentityProvider,
    MemoryRevocationProvider,
    MemorySessionProvider,
)
from tessera.bundled.auth.tokens import JwtTokenService

SECRET_KEY = "test-signing-key-that-is-long-enough-for-hs256"

# Cheap argon2 parameters so the suite stays fast
FAST_ARGON2 = {
    "argon2_time_cost": 1,
    "argon2_memory_cost": 8,
    "argon2_parallelism": 1,
}


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def container():
    """Create a test container."""
    return Container(get_registry())


@pytest.fixture
def token_config():
    return {
        "secret_key": SECRET_KEY,
        "algorithm": "HS256",
        "access_token_expiry": 3600,
        "refresh_token_expiry": 604800,
        "issuer": "tessera-test",
    }


@pytest.fixture
def token_service(token_config, clock):
    return JwtTokenService(token_config, clock=clock)


@pytest.fixture
def hasher():
    return Argon2SecretHasher(FAST_ARGON2)


@pytest.fixture
def identities(container):
    return MemoryIdentityProvider({}, container)


@pytest.fixture
def credentials(container):
    return MemoryCredentialProvider({}, container)


@pytest.fixture
def sessions(container):
    return MemorySessionProvider({}, container)


@pytest.fixture
def ledger(container):
    return MemoryRevocationProvider({}, container)


@pytest.fixture
def audit_provider(container):
    return MemoryAuditProvider({}, container)


@pytest.fixture
def audit_logger(audit_provider, clock):
    return AuditLogger(audit_provider, clock=clock)


@pytest.fixture
def engine_config():
    return {}


@pytest.fixture
def facade(
    identities,
    credentials,
    sessions,
    ledger,
    token_service,
    hasher,
    audit_logger,
    engine_config,
    clock,
):
    return AuthFacade(
        identities=identities,
        credentials=credentials,
        sessions=sessions,
        ledger=ledger,
        tokens=token_service,
        hasher=hasher,
        audit=audit_logger,
        config=engine_config,
        clock=clock,
    )


@pytest.fixture
def auth_section():
    """A complete ``auth`` configuration section using bundled providers."""
    return {
        "roles": ["user", "admin"],
        "tokens": {"secret_key": SECRET_KEY},
        "secrets": {"hasher": "argon2", "config": dict(FAST_ARGON2)},
    }


@pytest.fixture
def register(facade):
    """Register an actor and return the successful grant."""

    async def _register(
        role="user",
        business_key="alice@example.com",
        display_name="Alice",
        secret="correct horse battery",
        **kwargs,
    ):
        result = await facade.register(
            role, business_key, display_name, secret=secret, **kwargs
        )
        assert result.ok, result.error_message
        return result.value

    return _register
