"""
Role adapters.

A role adapter is a thin mapping shim between one actor role's request
and response shapes and the role-agnostic ``AuthFacade``. It supplies the
role, reads the DTO fields, and turns results into response bodies that
only ever expose the public error signal of a failure.
"""

from dataclasses import dataclass, field
from typing import Any

from .facade import AuthFacade
from .types import AuthGrant, AuthResult, AuthStatus, Principal, Role, TokenPair, to_iso8601


@dataclass(frozen=True)
class AdapterResponse:
    """Response body produced by a role adapter."""

    ok: bool
    body: dict[str, Any] = field(default_factory=dict)
    status: AuthStatus = AuthStatus.SUCCESS


def token_body(tokens: TokenPair) -> dict[str, str]:
    """Render a token pair in the wire shape used by every role."""
    return {
        "access": tokens.access_token,
        "refresh": tokens.refresh_token,
        "expired_at": to_iso8601(tokens.access_expires_at),
        "refreshable_until": to_iso8601(tokens.refresh_expires_at),
    }


class RoleAdapter:
    """
    Maps one role's DTOs onto the auth facade.

    Request DTOs are plain dicts with the keys ``email``, ``password`` and,
    for SSO, ``provider`` and ``provider_key``. The display name is read
    from ``display_field`` (``nickname`` by default) with ``name`` as a
    fallback.

    Args:
        facade: Shared auth engine
        role: Role this adapter serves
        key_field: DTO key holding the business key
        display_field: DTO key holding the display name
    """

    def __init__(
        self,
        facade: AuthFacade,
        role: Role | str,
        key_field: str = "email",
        display_field: str = "nickname",
    ):
        self.facade = facade
        self.role = Role.coerce(role)
        self.key_field = key_field
        self.display_field = display_field

    async def join(
        self,
        body: dict[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AdapterResponse:
        result = await self.facade.register(
            self.role,
            business_key=body.get(self.key_field),
            display_name=body.get(self.display_field) or body.get("name"),
            secret=body.get("password"),
            sso_provider=body.get("provider"),
            sso_provider_key=body.get("provider_key"),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return self._grant_response(result)

    async def login(
        self,
        body: dict[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AdapterResponse:
        if body.get("provider") is not None and body.get("password") is None:
            result = await self.facade.login_sso(
                self.role,
                business_key=body.get(self.key_field),
                sso_provider=body.get("provider"),
                sso_provider_key=body.get("provider_key"),
                ip_address=ip_address,
                user_agent=user_agent,
            )
        else:
            result = await self.facade.login(
                self.role,
                business_key=body.get(self.key_field),
                secret=body.get("password"),
                ip_address=ip_address,
                user_agent=user_agent,
            )
        return self._grant_response(result)

    async def refresh(self, body: dict[str, Any]) -> AdapterResponse:
        result = await self.facade.refresh(self._refresh_token(body), role=self.role)
        if not result.ok:
            return self._error_response(result)
        return AdapterResponse(ok=True, body={"token": token_body(result.value)})

    async def logout(self, body: dict[str, Any]) -> AdapterResponse:
        result = await self.facade.revoke(refresh_token=self._refresh_token(body))
        if not result.ok:
            return self._error_response(result)
        return AdapterResponse(ok=True, body={"revoked": result.value.revoked})

    async def authorize(self, authorization: str | None) -> Principal | None:
        """Resolve an ``Authorization`` header to a principal of this role."""
        if not authorization:
            return None
        result = await self.facade.authenticate(authorization, role=self.role)
        return result.value if result.ok else None

    @staticmethod
    def _refresh_token(body: dict[str, Any]) -> str | None:
        return body.get("refresh_token") or body.get("refreshToken") or body.get("refresh")

    def _grant_response(self, result: AuthResult[AuthGrant]) -> AdapterResponse:
        if not result.ok:
            return self._error_response(result)

        grant = result.value
        identity = grant.identity
        return AdapterResponse(
            ok=True,
            body={
                "id": identity.id,
                self.key_field: identity.business_key,
                self.display_field: identity.display_name,
                "role": identity.role,
                "status": identity.status.value,
                "created_at": to_iso8601(identity.created_at),
                "updated_at": to_iso8601(identity.updated_at),
                "token": token_body(grant.tokens),
            },
        )

    @staticmethod
    def _error_response(result: AuthResult) -> AdapterResponse:
        return AdapterResponse(
            ok=False,
            body={
                "error": {
                    "code": result.status.public_code,
                    "message": result.status.public_message,
                }
            },
            status=result.status,
        )
