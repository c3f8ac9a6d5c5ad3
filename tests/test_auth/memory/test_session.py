"""Tests for MemorySessionProvider."""

import asyncio
from datetime import timedelta

import pytest

from tessera.auth.exceptions import ProviderError
from tessera.auth.types import Session, SessionState
from tessera.bundled.auth.memory.session import MemorySessionProvider


@pytest.fixture
def provider(container):
    return MemorySessionProvider({}, container)


@pytest.fixture
def make_session(clock):
    def factory(session_id="s1", identity_id="i1", refresh_hash="r1", access_hash="a1"):
        return Session(
            id=session_id,
            identity_id=identity_id,
            role="user",
            session_token_hash=access_hash,
            refresh_token_hash=refresh_hash,
            issued_at=clock(),
            expires_at=clock() + timedelta(days=7),
        )

    return factory


class TestCreateAndLookup:
    @pytest.mark.asyncio
    async def test_create_and_get(self, provider, make_session):
        created = await provider.create_session(make_session())
        assert await provider.get_session("s1") == created
        assert await provider.get_session("missing") is None

    @pytest.mark.asyncio
    async def test_find_by_refresh_hash(self, provider, make_session):
        await provider.create_session(make_session())
        assert (await provider.find_by_refresh_hash("r1")).id == "s1"
        assert await provider.find_by_refresh_hash("unknown") is None

    @pytest.mark.asyncio
    async def test_duplicate_session_id_rejected(self, provider, make_session):
        await provider.create_session(make_session())
        with pytest.raises(ProviderError):
            await provider.create_session(make_session(refresh_hash="r2"))

    @pytest.mark.asyncio
    async def test_refresh_hash_bound_once(self, provider, make_session):
        await provider.create_session(make_session("s1"))
        with pytest.raises(ProviderError):
            await provider.create_session(make_session("s2"))


class TestRotate:
    @pytest.mark.asyncio
    async def test_rotate_replaces_digests_in_place(self, provider, make_session, clock):
        await provider.create_session(make_session())
        clock.advance(minutes=5)
        new_expiry = clock() + timedelta(days=7)

        rotated = await provider.rotate("s1", "r1", "r2", "a2", new_expiry, clock())

        assert rotated.id == "s1"
        assert rotated.refresh_token_hash == "r2"
        assert rotated.session_token_hash == "a2"
        assert rotated.expires_at == new_expiry
        assert rotated.refreshed_at == clock()
        assert rotated.state(clock()) is SessionState.REFRESHED
        assert await provider.find_by_refresh_hash("r1") is None
        assert (await provider.find_by_refresh_hash("r2")).id == "s1"

    @pytest.mark.asyncio
    async def test_stale_expected_hash_loses(self, provider, make_session, clock):
        await provider.create_session(make_session())
        expiry = clock() + timedelta(days=7)
        assert await provider.rotate("s1", "r1", "r2", "a2", expiry, clock()) is not None
        assert await provider.rotate("s1", "r1", "r3", "a3", expiry, clock()) is None
        assert (await provider.get_session("s1")).refresh_token_hash == "r2"

    @pytest.mark.asyncio
    async def test_concurrent_rotations_have_one_winner(self, provider, make_session, clock):
        await provider.create_session(make_session())
        expiry = clock() + timedelta(days=7)

        results = await asyncio.gather(
            *(
                provider.rotate("s1", "r1", f"new-{n}", f"acc-{n}", expiry, clock())
                for n in range(5)
            )
        )

        winners = [r for r in results if r is not None]
        assert len(winners) == 1
        assert (await provider.get_session("s1")).refresh_token_hash == winners[0].refresh_token_hash

    @pytest.mark.asyncio
    async def test_rotate_revoked_or_missing(self, provider, make_session, clock):
        await provider.create_session(make_session())
        await provider.revoke("s1", clock())
        expiry = clock() + timedelta(days=7)
        assert await provider.rotate("s1", "r1", "r2", "a2", expiry, clock()) is None
        assert await provider.rotate("missing", "r1", "r2", "a2", expiry, clock()) is None


class TestRevoke:
    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, provider, make_session, clock):
        await provider.create_session(make_session())

        session, changed = await provider.revoke("s1", clock())
        assert changed
        assert session.revoked_at == clock()

        clock.advance(minutes=1)
        again, changed = await provider.revoke("s1", clock())
        assert not changed
        assert again.revoked_at == session.revoked_at

    @pytest.mark.asyncio
    async def test_revoke_unknown(self, provider, clock):
        assert await provider.revoke("missing", clock()) == (None, False)

    @pytest.mark.asyncio
    async def test_revoked_session_not_found_by_refresh_hash(self, provider, make_session, clock):
        await provider.create_session(make_session())
        await provider.revoke("s1", clock())
        assert await provider.find_by_refresh_hash("r1") is None
        assert (await provider.get_session("s1")).is_revoked()

    @pytest.mark.asyncio
    async def test_revoke_identity_sessions(self, provider, make_session, clock):
        await provider.create_session(make_session("s1", "i1", "r1"))
        await provider.create_session(make_session("s2", "i1", "r2"))
        await provider.create_session(make_session("s3", "i2", "r3"))
        await provider.revoke("s2", clock())

        revoked = await provider.revoke_identity_sessions("i1", clock())

        assert [s.id for s in revoked] == ["s1"]
        assert (await provider.get_session("s3")).revoked_at is None

    @pytest.mark.asyncio
    async def test_revoke_identity_sessions_revokes_inline(
        self, provider, make_session, clock, monkeypatch
    ):
        await provider.create_session(make_session("s1", "i1", "r1"))
        await provider.create_session(make_session("s2", "i1", "r2"))

        async def suspending_revoke(*args, **kwargs):
            raise AssertionError("revoke must not be awaited while the store is locked")

        monkeypatch.setattr(provider, "revoke", suspending_revoke)
        revoked = await provider.revoke_identity_sessions("i1", clock())

        assert sorted(s.id for s in revoked) == ["s1", "s2"]
        assert await provider.find_by_refresh_hash("r1") is None
        assert all(s.revoked_at == clock() for s in revoked)


class TestListAndRemove:
    @pytest.mark.asyncio
    async def test_list_sessions(self, provider, make_session, clock):
        await provider.create_session(make_session("s1", "i1", "r1"))
        await provider.create_session(make_session("s2", "i1", "r2"))
        await provider.revoke("s1", clock())

        assert [s.id for s in await provider.list_sessions("i1")] == ["s1", "s2"]
        assert [s.id for s in await provider.list_sessions("i1", live_only=True, now=clock())] == [
            "s2"
        ]

    @pytest.mark.asyncio
    async def test_remove_session(self, provider, make_session):
        await provider.create_session(make_session())
        assert await provider.remove_session("s1")
        assert await provider.get_session("s1") is None
        assert await provider.find_by_refresh_hash("r1") is None
        assert await provider.list_sessions("i1") == []
        assert not await provider.remove_session("s1")
