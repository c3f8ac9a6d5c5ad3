"""Token service implementations."""

from .jwt_token_service import JwtTokenService

__all__ = ["JwtTokenService"]
