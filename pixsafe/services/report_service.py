"""
Report submission service.
"""

import time
from datetime import datetime, timezone
from typing import Union

from pixsafe.errors import PixSafeError, UnknownFailure, ValidationError
from pixsafe.schemas.report_schemas import Report, ScamCategory
from pixsafe.services.report_store import ReportStore
from pixsafe.utils.identifiers import is_fingerprint
from pixsafe.utils.logging_config import StructuredLogger, metrics


logger = StructuredLogger(__name__)


def parse_category(category: Union[str, ScamCategory]) -> ScamCategory:
    """Accept a ScamCategory, its value, or its display label."""
    if isinstance(category, ScamCategory):
        return category
    try:
        return ScamCategory(category)
    except ValueError:
        allowed = ", ".join(c.value for c in ScamCategory)
        raise ValidationError(f"Unknown category '{category}'. Must be one of: {allowed}") from None


class ReportService:
    """Stores new reports through the remote-with-local-fallback chain."""

    def __init__(self, store: ReportStore):
        self.store = store

    def submit_report(
        self,
        fingerprint: str,
        category: Union[str, ScamCategory],
        has_police_filing: bool,
    ) -> bool:
        """
        Store a new report for a fingerprint.

        Returns True whether the report landed remotely or locally; the
        destination is only logged.

        Raises:
            ValidationError: malformed fingerprint, unknown category or non-bool flag
            ServiceUnavailable: no store accepted the report
            UnknownFailure: anything unexpected
        """
        if not is_fingerprint(fingerprint):
            raise ValidationError("Fingerprint must be 64 lowercase hex characters")
        if not isinstance(has_police_filing, bool):
            raise ValidationError("has_police_filing must be a boolean")

        report = Report(
            fingerprint=fingerprint,
            category=parse_category(category),
            has_police_filing=has_police_filing,
            created_at=datetime.now(timezone.utc),
        )

        start = time.time()
        try:
            destination = self.store.append_report(report)
        except PixSafeError:
            raise
        except Exception as e:
            logger.error("Report submission failed", error=str(e), exc_info=True)
            raise UnknownFailure(str(e)) from e
        metrics.timing("report.latency", time.time() - start)

        logger.info(
            "Report stored",
            destination=destination or self.store.name,
            fingerprint=fingerprint[:12],
            category=report.category.value,
            has_police_filing=has_police_filing,
        )
        return True
