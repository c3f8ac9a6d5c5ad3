"""Tests for AuthFacade revocation."""

import pytest

from tessera.auth.types import AuditAction, AuditOutcome, AuthStatus, RevocationReason
from tessera.auth.utils import hash_token


class TestRevoke:
    @pytest.mark.asyncio
    async def test_revoke_by_session_id(self, facade, register, sessions, ledger, clock):
        grant = await register()

        result = await facade.revoke(session_id=grant.session_id)

        assert result.ok
        assert result.value.revoked
        assert result.value.session_ids == (grant.session_id,)
        session = await sessions.get_session(grant.session_id)
        assert session.revoked_at == clock()
        for token in (grant.tokens.refresh_token, grant.tokens.access_token):
            entry = await ledger.lookup(hash_token(token))
            assert entry.reason is RevocationReason.REVOKED

    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, facade, register):
        grant = await register()
        await facade.revoke(session_id=grant.session_id)

        again = await facade.revoke(session_id=grant.session_id)

        assert again.ok
        assert not again.value.revoked

    @pytest.mark.asyncio
    async def test_unknown_session_is_a_no_op(self, facade):
        result = await facade.revoke(session_id="no-such-session")
        assert result.ok
        assert result.value.session_ids == ()
        assert not result.value.revoked

    @pytest.mark.asyncio
    async def test_revoke_by_refresh_token(self, facade, register, sessions):
        grant = await register()

        result = await facade.revoke(refresh_token=grant.tokens.refresh_token)

        assert result.value.revoked
        assert (await sessions.get_session(grant.session_id)).is_revoked()

    @pytest.mark.asyncio
    async def test_revoke_accepts_expired_refresh_token(self, facade, register, clock):
        grant = await register()
        clock.advance(days=8)

        result = await facade.revoke(refresh_token=grant.tokens.refresh_token)
        assert result.ok
        assert result.value.revoked

    @pytest.mark.asyncio
    async def test_revoke_with_rotated_away_token_ends_the_session(
        self, facade, register, sessions
    ):
        grant = await register()
        await facade.refresh(grant.tokens.refresh_token)

        result = await facade.revoke(refresh_token=grant.tokens.refresh_token)
        assert result.value.revoked
        assert (await sessions.get_session(grant.session_id)).is_revoked()

    @pytest.mark.asyncio
    async def test_revoke_with_forged_token(self, facade):
        result = await facade.revoke(refresh_token="forged.token.value")
        assert result.status is AuthStatus.TOKEN_MALFORMED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs", [{}, {"session_id": "s", "refresh_token": "t"}, {"session_id": "  "}]
    )
    async def test_argument_validation(self, facade, kwargs):
        result = await facade.revoke(**kwargs)
        assert result.status is AuthStatus.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_other_sessions_survive(self, facade, register):
        grant = await register()
        other = await facade.login("user", "alice@example.com", "correct horse battery")

        await facade.revoke(session_id=grant.session_id)

        assert (await facade.refresh(other.value.tokens.refresh_token)).ok


class TestRevokeAll:
    @pytest.mark.asyncio
    async def test_revokes_every_live_session(self, facade, register, audit_provider):
        grant = await register()
        await facade.login("user", "alice@example.com", "correct horse battery")
        third = await facade.login("user", "alice@example.com", "correct horse battery")
        await facade.revoke(session_id=third.value.session_id)

        result = await facade.revoke_all(grant.identity.id)

        assert result.ok
        assert len(result.value.session_ids) == 2
        assert result.value.revoked
        refreshed = await facade.refresh(grant.tokens.refresh_token)
        assert refreshed.status is AuthStatus.SESSION_REVOKED

        entry = (await audit_provider.list_entries(action_type=AuditAction.REVOKE))[-1]
        assert entry.identity_id == grant.identity.id
        assert entry.context["count"] == 2

    @pytest.mark.asyncio
    async def test_no_sessions(self, facade):
        result = await facade.revoke_all("unknown-identity")
        assert result.ok
        assert not result.value.revoked

    @pytest.mark.asyncio
    async def test_requires_identity(self, facade):
        result = await facade.revoke_all("")
        assert result.status is AuthStatus.VALIDATION_ERROR


class TestRevokeAudit:
    @pytest.mark.asyncio
    async def test_one_entry_per_call(self, facade, register, audit_provider):
        grant = await register()
        await facade.revoke(session_id=grant.session_id)
        await facade.revoke(session_id=grant.session_id)

        entries = await audit_provider.list_entries(action_type=AuditAction.REVOKE)
        assert len(entries) == 2
        assert all(e.outcome is AuditOutcome.SUCCESS for e in entries)
        assert all(e.session_id == grant.session_id for e in entries)
        assert entries[0].identity_id == grant.identity.id
