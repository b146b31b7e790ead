"""
Identifier fingerprinting and validation.

The fingerprint is the only join key between clients and the report
stores, so normalize_identifier() and fingerprint() must never change:
doing so would orphan every report already stored.
"""

import re
import hashlib
from typing import Optional


_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_DIGIT = re.compile(r"\D")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.I,
)
UUID_SIMPLE_PATTERN = re.compile(r"^[0-9a-f]{32}$", re.I)
FINGERPRINT_PATTERN = re.compile(r"^[0-9a-f]{64}$")

MIN_DIGITS = 10
MAX_DIGITS = 14


def normalize_identifier(raw: str) -> str:
    """Lowercase and drop everything that is not an ASCII letter or digit."""
    return _NON_ALNUM.sub("", raw.lower())


def fingerprint(raw: str) -> str:
    """
    SHA-256 of the normalized identifier, as 64 lowercase hex characters.

    "(11) 99999-9999" and "11999999999" produce the same fingerprint.
    """
    return hashlib.sha256(normalize_identifier(raw).encode("utf-8")).hexdigest()


def is_fingerprint(value: str) -> bool:
    return bool(FINGERPRINT_PATTERN.match(value or ""))


def identifier_kind(raw: str) -> Optional[str]:
    """
    Return which rule accepts the identifier.

    Returns:
        "email", "numeric" (phone or tax id), "random_key", or None
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        return None

    if EMAIL_PATTERN.match(trimmed):
        return "email"

    digits = _NON_DIGIT.sub("", trimmed)
    if MIN_DIGITS <= len(digits) <= MAX_DIGITS:
        return "numeric"

    if UUID_PATTERN.match(trimmed) or UUID_SIMPLE_PATTERN.match(trimmed):
        return "random_key"

    return None


def is_valid_identifier(raw: str) -> bool:
    """
    Advisory input gate for lookups and reports.

    Not a security boundary: anything reaching the stores is a fingerprint
    regardless of what passed here.
    """
    return identifier_kind(raw) is not None
