"""Tests for AuthFacade access-token verification."""

import pytest

from tessera.auth.types import AuthStatus, IdentityStatus, Principal


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_raw_token(self, facade, register):
        grant = await register()
        result = await facade.authenticate(grant.tokens.access_token)
        assert result.value == Principal(identity_id=grant.identity.id, role="user")

    @pytest.mark.asyncio
    async def test_bearer_header(self, facade, register):
        grant = await register()
        result = await facade.authenticate(f"Bearer {grant.tokens.access_token}")
        assert result.ok
        assert result.value.identity_id == grant.identity.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "header",
        ["", "Bearer ", "Basic dXNlcjpwYXNz", "garbage", "abc\udcff.def.ghi", "Bearer abc\udcff.d.e"],
    )
    async def test_malformed(self, facade, header):
        result = await facade.authenticate(header)
        assert result.status is AuthStatus.TOKEN_MALFORMED

    @pytest.mark.asyncio
    async def test_role_must_match(self, facade, register):
        grant = await register(role="user")
        assert (await facade.authenticate(grant.tokens.access_token, role="user")).ok
        result = await facade.authenticate(grant.tokens.access_token, role="admin")
        assert result.status is AuthStatus.TOKEN_MALFORMED

    @pytest.mark.asyncio
    async def test_refresh_token_is_not_an_access_token(self, facade, register):
        grant = await register()
        result = await facade.authenticate(grant.tokens.refresh_token)
        assert result.status is AuthStatus.TOKEN_MALFORMED

    @pytest.mark.asyncio
    async def test_expired_access_token(self, facade, register, clock):
        grant = await register()
        clock.advance(hours=1)
        result = await facade.authenticate(grant.tokens.access_token)
        assert result.status is AuthStatus.SESSION_EXPIRED

    @pytest.mark.asyncio
    async def test_writes_no_audit_entry(self, facade, register, audit_provider):
        grant = await register()
        await facade.authenticate(grant.tokens.access_token)
        await facade.authenticate("garbage")
        assert await audit_provider.count() == 1


class TestStatefulAuthenticate:
    @pytest.mark.asyncio
    async def test_stateless_by_default(self, facade, register):
        grant = await register()
        await facade.revoke(session_id=grant.session_id)
        assert (await facade.authenticate(grant.tokens.access_token)).ok

    @pytest.mark.asyncio
    async def test_revoked_session(self, facade, register):
        grant = await register()
        await facade.revoke(session_id=grant.session_id)
        result = await facade.authenticate(grant.tokens.access_token, stateful=True)
        assert result.status is AuthStatus.SESSION_REVOKED

    @pytest.mark.asyncio
    async def test_inactive_actor(self, facade, register, identities, clock):
        grant = await register()
        await identities.update_status(grant.identity.id, IdentityStatus.INACTIVE, clock())
        result = await facade.authenticate(grant.tokens.access_token, stateful=True)
        assert result.status is AuthStatus.ACTOR_INACTIVE

    @pytest.mark.asyncio
    async def test_removed_session(self, facade, register, sessions):
        grant = await register()
        await sessions.remove_session(grant.session_id)
        result = await facade.authenticate(grant.tokens.access_token, stateful=True)
        assert result.status is AuthStatus.SESSION_NOT_FOUND

    @pytest.mark.asyncio
    async def test_live_session(self, facade, register):
        grant = await register()
        assert (await facade.authenticate(grant.tokens.access_token, stateful=True)).ok

    @pytest.mark.asyncio
    async def test_access_token_superseded_by_refresh(self, facade, register):
        grant = await register()
        refreshed = await facade.refresh(grant.tokens.refresh_token)
        assert refreshed.ok

        stale = await facade.authenticate(grant.tokens.access_token, stateful=True)
        assert stale.status is AuthStatus.SESSION_REVOKED
        current = await facade.authenticate(refreshed.value.access_token, stateful=True)
        assert current.ok

    @pytest.mark.asyncio
    async def test_stateless_mode_still_accepts_superseded_access_token(self, facade, register):
        grant = await register()
        await facade.refresh(grant.tokens.refresh_token)
        assert (await facade.authenticate(grant.tokens.access_token)).ok
