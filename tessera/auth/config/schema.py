"""Configuration schema models using Pydantic."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

_PROVIDER_SPEC = re.compile(
    r"^([a-zA-Z_][a-zA-Z0-9_-]*|[a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z_][a-zA-Z0-9_]*)*:[a-zA-Z_][a-zA-Z0-9_]*)$"
)


def _validate_spec(value: str) -> str:
    if not value:
        raise ValueError("Provider specification cannot be empty")

    # Simple name (bundled): alphanumeric, underscores, hyphens
    # Import path (external): module.path:ClassName
    if not _PROVIDER_SPEC.match(value):
        raise ValueError(
            "Provider must be a simple name (e.g., 'memory') or import path (e.g., 'module.path:ClassName')"
        )
    return value


class ProviderConfig(BaseModel):
    """Configuration for a single provider."""

    provider: str = Field("memory", description="Provider type or import path")
    config: Dict[str, Any] = Field(
        default_factory=dict, description="Provider-specific configuration"
    )

    @field_validator("provider")
    @classmethod
    def validate_provider_spec(cls, v):
        """Validate provider specification format."""
        return _validate_spec(v)


class ProvidersConfig(BaseModel):
    """Configuration for all storage providers. Every provider defaults to memory."""

    identity: ProviderConfig = Field(default_factory=ProviderConfig)
    credential: ProviderConfig = Field(default_factory=ProviderConfig)
    session: ProviderConfig = Field(default_factory=ProviderConfig)
    revocation: ProviderConfig = Field(default_factory=ProviderConfig)
    audit: ProviderConfig = Field(default_factory=ProviderConfig)


class TokenConfig(BaseModel):
    """Token codec configuration."""

    provider: str = Field("jwt", description="Token service type or import path")
    secret_key: str = Field(..., description="HMAC signing key, at least 32 characters")
    algorithm: str = Field("HS256", description="JWT signing algorithm")
    access_token_expiry: int = Field(3600, description="Access token lifetime in seconds")
    refresh_token_expiry: int = Field(
        604800, description="Refresh token lifetime in seconds"
    )
    issuer: str = Field("tessera", description="Issuer claim of every token")

    @field_validator("provider")
    @classmethod
    def validate_provider_spec(cls, v):
        return _validate_spec(v)

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v):
        if len(v) < 32:
            raise ValueError("Token secret key must be at least 32 characters")
        return v

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v):
        if v not in ("HS256", "HS384", "HS512"):
            raise ValueError("Algorithm must be HS256, HS384 or HS512")
        return v

    @field_validator("access_token_expiry", "refresh_token_expiry")
    @classmethod
    def validate_expiry(cls, v):
        if v <= 0:
            raise ValueError("Token expiry must be a positive number of seconds")
        return v

    def service_config(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"provider"})


class SecretConfig(BaseModel):
    """Secret hashing configuration."""

    hasher: str = Field("argon2", description="Hasher type or import path")
    min_length: int = Field(8, description="Minimum length of a local secret")
    config: Dict[str, Any] = Field(
        default_factory=dict, description="Hasher-specific configuration"
    )

    @field_validator("hasher")
    @classmethod
    def validate_hasher_spec(cls, v):
        return _validate_spec(v)

    @field_validator("min_length")
    @classmethod
    def validate_min_length(cls, v):
        if v < 1:
            raise ValueError("Minimum secret length must be positive")
        return v


class SessionConfig(BaseModel):
    """Session lifecycle configuration."""

    revoke_on_replay: bool = Field(
        False, description="Revoke the whole lineage when a used refresh token is replayed"
    )
    stateful_authenticate: bool = Field(
        False, description="Require a live session when authenticating access tokens"
    )
    min_response_time: float = Field(
        0.0, description="Minimum seconds spent on every login attempt"
    )

    @field_validator("min_response_time")
    @classmethod
    def validate_min_response_time(cls, v):
        if v < 0:
            raise ValueError("Minimum response time cannot be negative")
        return v


class AuditConfig(BaseModel):
    """Audit dispatch configuration."""

    dispatch: str = Field("inline", description="inline or background")
    queue_size: int = Field(0, description="Background queue bound, 0 for unbounded")

    @field_validator("dispatch")
    @classmethod
    def validate_dispatch(cls, v):
        if v not in ("inline", "background"):
            raise ValueError("Audit dispatch must be 'inline' or 'background'")
        return v

    @field_validator("queue_size")
    @classmethod
    def validate_queue_size(cls, v):
        if v < 0:
            raise ValueError("Audit queue size cannot be negative")
        return v


class AuthConfig(BaseModel):
    """Main authentication configuration."""

    roles: Optional[List[str]] = Field(
        None, description="Closed set of role names; any well-formed role if omitted"
    )
    business_key_format: str = Field("email", description="email or any")
    tokens: TokenConfig = Field(..., description="Token codec settings")
    secrets: SecretConfig = Field(default_factory=SecretConfig)
    sessions: SessionConfig = Field(default_factory=SessionConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)

    @field_validator("roles")
    @classmethod
    def validate_roles(cls, v):
        if v is None:
            return v
        if not v:
            raise ValueError("Role list cannot be empty; omit it to allow any role")
        if len(set(v)) != len(v):
            raise ValueError("Role names must be unique")
        return v

    @field_validator("business_key_format")
    @classmethod
    def validate_business_key_format(cls, v):
        if v not in ("email", "any"):
            raise ValueError("Business key format must be 'email' or 'any'")
        return v

    def engine_settings(self) -> Dict[str, Any]:
        """Settings consumed by ``AuthFacade``."""
        return {
            "roles": self.roles,
            "business_key_format": self.business_key_format,
            "min_secret_length": self.secrets.min_length,
            "revoke_on_replay": self.sessions.revoke_on_replay,
            "stateful_authenticate": self.sessions.stateful_authenticate,
            "min_response_time": self.sessions.min_response_time,
        }
