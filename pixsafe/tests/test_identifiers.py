"""Tests for identifier fingerprinting and validation."""

import uuid

import pytest

from pixsafe.utils.identifiers import (
    fingerprint,
    identifier_kind,
    is_fingerprint,
    is_valid_identifier,
    normalize_identifier,
)


class TestFingerprint:
    """Tests for the normalized SHA-256 fingerprint."""

    def test_known_digest(self):
        """Fingerprint of 'abc' is the standard SHA-256 test vector."""
        assert fingerprint("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_empty_input_hashes_empty_string(self):
        assert fingerprint("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert fingerprint(" -().") == fingerprint("")

    def test_formatting_variations_collapse(self):
        """Phone numbers with or without formatting share a fingerprint."""
        assert fingerprint("(11) 99999-9999") == fingerprint("11999999999")
        assert fingerprint("+55 11 99999.9999") == fingerprint("5511999999999")

    def test_case_insensitive(self):
        assert fingerprint("User@Example.COM") == fingerprint("user@example.com")

    def test_email_punctuation_is_stripped(self):
        """'@' and '.' are dropped, matching the stored fingerprints."""
        assert fingerprint("user@example.com") == fingerprint("userexamplecom")

    def test_fixed_length_lowercase_hex(self):
        for raw in ["abc", "(11) 99999-9999", "user@example.com", str(uuid.uuid4())]:
            fp = fingerprint(raw)
            assert len(fp) == 64
            assert is_fingerprint(fp)
            assert fp == fp.lower()

    def test_deterministic(self):
        assert fingerprint("123.456.789-09") == fingerprint("123.456.789-09")

    def test_different_identifiers_differ(self):
        assert fingerprint("11999999999") != fingerprint("11999999998")

    def test_non_ascii_letters_are_stripped(self):
        assert normalize_identifier("joão@mail.com") == "joomailcom"


class TestIsFingerprint:
    """Tests for fingerprint shape checks."""

    def test_rejects_uppercase(self):
        assert is_fingerprint(fingerprint("abc").upper()) is False

    def test_rejects_wrong_length(self):
        assert is_fingerprint("abc") is False
        assert is_fingerprint("") is False


class TestIsValidIdentifier:
    """Tests for identifier validation."""

    @pytest.mark.parametrize("raw", [
        "user@example.com",
        "(11) 99999-9999",
        "123.456.789-09",
        "12.345.678/0001-95",
        "123e4567-e89b-42d3-a456-426614174000",
        "123E4567E89B42D3A456426614174000",
    ])
    def test_accepts_valid(self, raw):
        assert is_valid_identifier(raw) is True

    @pytest.mark.parametrize("raw", [
        "",
        "   ",
        "abc",
        "123456789",
        "123456789012345",
        "user@example",
        "user @example.com",
        "123e4567-e89b-72d3-a456-426614174000",
    ])
    def test_rejects_invalid(self, raw):
        assert is_valid_identifier(raw) is False

    def test_generated_uuid_accepted(self):
        assert is_valid_identifier(str(uuid.uuid4())) is True

    def test_surrounding_whitespace_ignored(self):
        assert is_valid_identifier("  user@example.com  ") is True

    def test_digit_count_bounds(self):
        assert is_valid_identifier("1" * 10) is True
        assert is_valid_identifier("1" * 14) is True
        assert is_valid_identifier("1" * 9) is False
        assert is_valid_identifier("1" * 15) is False


class TestIdentifierKind:
    """Tests for reporting which rule matched."""

    def test_kinds(self):
        assert identifier_kind("user@example.com") == "email"
        assert identifier_kind("(11) 99999-9999") == "numeric"
        assert identifier_kind("123e4567-e89b-42d3-a456-426614174000") == "random_key"
        assert identifier_kind("abc") is None
