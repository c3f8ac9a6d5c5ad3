"""Tests for auth security utilities."""

import time

import pytest

from tessera.auth.utils import (
    MinimumRuntime,
    generate_secret_key,
    hash_token,
    is_valid_email,
    mask_sensitive_data,
    new_id,
    normalize_business_key,
    parse_bearer_header,
    sanitize_user_input,
    secure_compare,
    timing_protection,
)


class TestTokenDigest:
    def test_digest_is_deterministic_sha256(self):
        digest = hash_token("token")
        assert digest == hash_token("token")
        assert len(digest) == 64
        assert digest != "token"

    def test_different_tokens_differ(self):
        assert hash_token("a") != hash_token("b")


class TestIdentifiers:
    def test_new_id_is_unique(self):
        assert len({new_id() for _ in range(100)}) == 100

    def test_generate_secret_key_is_long_enough_for_signing(self):
        assert len(generate_secret_key()) >= 32
        assert generate_secret_key() != generate_secret_key()


class TestSecureCompare:
    def test_equal(self):
        assert secure_compare("abc", "abc")

    def test_different_length(self):
        assert not secure_compare("abc", "abcd")

    def test_different_content(self):
        assert not secure_compare("abc", "abd")


class TestBusinessKeys:
    @pytest.mark.parametrize("value", ["a@x.com", "first.last+tag@example.co.uk"])
    def test_valid_emails(self, value):
        assert is_valid_email(value)

    @pytest.mark.parametrize("value", ["", "no-at-sign", "a@", "@x.com", "a@x", "a b@x.com", None])
    def test_invalid_emails(self, value):
        assert not is_valid_email(value)

    def test_email_keys_are_case_folded(self):
        assert normalize_business_key("  A@X.Com ") == "a@x.com"

    def test_other_keys_are_only_stripped(self):
        assert normalize_business_key(" Emp-001 ", "any") == "Emp-001"


class TestBearerHeader:
    def test_parse(self):
        assert parse_bearer_header("Bearer abc.def") == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "bearer abc"])
    def test_rejects_other_shapes(self, header):
        assert parse_bearer_header(header) is None


class TestSanitization:
    def test_strips_markup(self):
        assert sanitize_user_input("<b>Alice</b>") == "Alice"

    def test_escapes_line_breaks(self):
        assert sanitize_user_input("a\nb") == "a\\nb"

    def test_truncates(self):
        assert len(sanitize_user_input("x" * 50, max_length=10)) == 10

    def test_non_string(self):
        assert sanitize_user_input(None) == ""


class TestMasking:
    def test_masks_sensitive_keys(self):
        masked = mask_sensitive_data(
            {
                "password": "hunter2-long",
                "refresh_token": "abcdefgh",
                "pwd": "abc",
                "role": "user",
            }
        )
        assert masked["password"] == "hu***ng"
        assert masked["refresh_token"] == "ab***gh"
        assert masked["pwd"] == "***"
        assert masked["role"] == "user"

    def test_masks_nested(self):
        masked = mask_sensitive_data({"outer": {"secret": "topsecret"}})
        assert masked["outer"]["secret"] == "to***et"


class TestTimingProtection:
    def test_minimum_runtime_requires_positive_duration(self):
        with pytest.raises(ValueError):
            MinimumRuntime(0)

    @pytest.mark.asyncio
    async def test_enforces_minimum_duration(self):
        start = time.perf_counter()
        async with timing_protection(0.05):
            pass
        assert time.perf_counter() - start >= 0.045

    @pytest.mark.asyncio
    async def test_enforced_even_when_body_raises(self):
        start = time.perf_counter()
        with pytest.raises(RuntimeError):
            async with timing_protection(0.05):
                raise RuntimeError("boom")
        assert time.perf_counter() - start >= 0.045

    @pytest.mark.asyncio
    async def test_disabled_for_non_positive_duration(self):
        start = time.perf_counter()
        async with timing_protection(0):
            pass
        assert time.perf_counter() - start < 0.05
