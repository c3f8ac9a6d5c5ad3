"""Tests for MemoryIdentityProvider."""

import asyncio
from datetime import UTC, datetime

import pytest

from tessera.auth.exceptions import DuplicateIdentityError, ProviderError
from tessera.auth.types import Identity, IdentityStatus
from tessera.bundled.auth.memory.identity import MemoryIdentityProvider

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def make_identity(identity_id="i1", role="user", business_key="a@x.com") -> Identity:
    return Identity(
        id=identity_id,
        role=role,
        business_key=business_key,
        display_name="Alice",
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def provider(container):
    return MemoryIdentityProvider({}, container)


class TestMemoryIdentityProvider:
    @pytest.mark.asyncio
    async def test_create_and_get(self, provider):
        created = await provider.create_identity(make_identity())
        fetched = await provider.get_identity("i1")
        assert fetched == created
        assert await provider.get_identity("missing") is None

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, provider):
        await provider.create_identity(make_identity())
        fetched = await provider.get_identity("i1")
        fetched.display_name = "Mallory"
        assert (await provider.get_identity("i1")).display_name == "Alice"

    @pytest.mark.asyncio
    async def test_business_key_unique_per_role(self, provider):
        await provider.create_identity(make_identity("i1", "user"))
        with pytest.raises(DuplicateIdentityError):
            await provider.create_identity(make_identity("i2", "user"))

    @pytest.mark.asyncio
    async def test_roles_are_isolated_namespaces(self, provider):
        await provider.create_identity(make_identity("i1", "user"))
        await provider.create_identity(make_identity("i2", "admin"))
        assert (await provider.find_by_business_key("user", "a@x.com")).id == "i1"
        assert (await provider.find_by_business_key("admin", "a@x.com")).id == "i2"

    @pytest.mark.asyncio
    async def test_concurrent_creates_produce_one_identity(self, provider):
        results = await asyncio.gather(
            *(provider.create_identity(make_identity(f"i{n}")) for n in range(5)),
            return_exceptions=True,
        )
        created = [r for r in results if isinstance(r, Identity)]
        assert len(created) == 1
        assert all(isinstance(r, DuplicateIdentityError) for r in results if r not in created)

    @pytest.mark.asyncio
    async def test_update_status(self, provider, clock):
        await provider.create_identity(make_identity())
        updated = await provider.update_status("i1", IdentityStatus.INACTIVE, clock())
        assert updated.status is IdentityStatus.INACTIVE
        assert updated.updated_at == clock()
        assert not (await provider.get_identity("i1")).is_active()

    @pytest.mark.asyncio
    async def test_update_status_unknown_identity(self, provider, clock):
        with pytest.raises(ProviderError):
            await provider.update_status("missing", IdentityStatus.ACTIVE, clock())

    @pytest.mark.asyncio
    async def test_soft_delete_frees_business_key(self, provider, clock):
        await provider.create_identity(make_identity("i1"))
        deleted = await provider.soft_delete("i1", clock())

        assert deleted.deleted_at == clock()
        assert deleted.status is IdentityStatus.DELETED
        assert await provider.find_by_business_key("user", "a@x.com") is None
        assert (await provider.get_identity("i1")).is_deleted()

        replacement = await provider.create_identity(make_identity("i2"))
        assert (await provider.find_by_business_key("user", "a@x.com")).id == replacement.id

    @pytest.mark.asyncio
    async def test_soft_delete_is_idempotent(self, provider, clock):
        await provider.create_identity(make_identity())
        first = await provider.soft_delete("i1", clock())
        clock.advance(hours=1)
        second = await provider.soft_delete("i1", clock())
        assert second.deleted_at == first.deleted_at

    @pytest.mark.asyncio
    async def test_deleted_identity_cannot_be_reactivated(self, provider, clock):
        await provider.create_identity(make_identity())
        await provider.update_status("i1", IdentityStatus.DELETED, clock())
        with pytest.raises(ProviderError):
            await provider.update_status("i1", IdentityStatus.ACTIVE, clock())

    @pytest.mark.asyncio
    async def test_remove_identity(self, provider):
        await provider.create_identity(make_identity())
        assert await provider.remove_identity("i1")
        assert await provider.get_identity("i1") is None
        assert await provider.find_by_business_key("user", "a@x.com") is None
        assert not await provider.remove_identity("i1")
