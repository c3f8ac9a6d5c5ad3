"""Tests for JsonLinesAuditProvider."""

import json
from datetime import UTC, datetime

import pytest

from tessera.auth.exceptions import ConfigurationError
from tessera.auth.types import AuditAction, AuditLogEntry, AuditOutcome
from tessera.bundled.auth.file import JsonLinesAuditProvider


def make_entry(entry_id, action=AuditAction.LOGIN, identity_id="i1"):
    return AuditLogEntry(
        id=entry_id,
        action_type=action,
        outcome=AuditOutcome.SUCCESS,
        identity_id=identity_id,
        session_id="s1",
        context={"ip_address": "10.0.0.1"},
        created_at=datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC),
    )


class TestJsonLinesAuditProvider:
    def test_requires_path(self, container):
        with pytest.raises(ConfigurationError):
            JsonLinesAuditProvider({}, container)

    @pytest.mark.asyncio
    async def test_appends_one_line_per_entry(self, tmp_path, container):
        path = tmp_path / "audit" / "auth.jsonl"
        provider = JsonLinesAuditProvider({"path": str(path)}, container)

        await provider.append(make_entry("e1"))
        await provider.append(make_entry("e2", AuditAction.REFRESH))

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["id"] == "e1"
        assert first["action_type"] == "login"
        assert first["created_at"] == "2026-03-01T12:00:00Z"

    @pytest.mark.asyncio
    async def test_reads_entries_back(self, tmp_path, container):
        provider = JsonLinesAuditProvider({"path": str(tmp_path / "a.jsonl")}, container)
        await provider.append(make_entry("e1", AuditAction.REGISTER, "i1"))
        await provider.append(make_entry("e2", AuditAction.LOGIN, "i2"))

        entries = await provider.list_entries()
        assert [e.id for e in entries] == ["e1", "e2"]
        assert entries[0].action_type is AuditAction.REGISTER
        assert entries[0].created_at == datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)
        assert entries[0].context == {"ip_address": "10.0.0.1"}
        assert [e.id for e in await provider.list_entries(identity_id="i2")] == ["e2"]
        assert await provider.count() == 2

    @pytest.mark.asyncio
    async def test_skips_unreadable_lines(self, tmp_path, container):
        path = tmp_path / "a.jsonl"
        provider = JsonLinesAuditProvider({"path": str(path)}, container)
        await provider.append(make_entry("e1"))
        with path.open("a", encoding="utf-8") as f:
            f.write("{not json}\n")
        await provider.append(make_entry("e2"))

        assert [e.id for e in await provider.list_entries()] == ["e1", "e2"]

    @pytest.mark.asyncio
    async def test_missing_file_reads_empty(self, tmp_path, container):
        provider = JsonLinesAuditProvider({"path": str(tmp_path / "none.jsonl")}, container)
        assert await provider.list_entries() == []
