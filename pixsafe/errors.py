"""
Error taxonomy for PixSafe.

Only ValidationError and ServiceUnavailable ever reach an end user as a
distinct condition. StoreUnavailable is always recovered by the fallback
chain in pixsafe.services.report_store.
"""


class PixSafeError(Exception):
    """Base class for all PixSafe errors."""


class ValidationError(PixSafeError):
    """Input rejected before any store is touched (identifier, category, fingerprint)."""


class StoreUnavailable(PixSafeError):
    """A single report store failed (network, auth, schema or database error)."""

    def __init__(self, store: str, message: str):
        super().__init__(f"{store} store unavailable: {message}")
        self.store = store


class ServiceUnavailable(PixSafeError):
    """Every report store failed; the service cannot be reached at all."""


class UnknownFailure(PixSafeError):
    """Unexpected failure during report submission."""
