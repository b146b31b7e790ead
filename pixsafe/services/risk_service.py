import time
from typing import List, Optional

from pixsafe.errors import ValidationError
from pixsafe.schemas.report_schemas import OverrideSeverity, Report, RiskAssessment
from pixsafe.services.overrides_service import OverrideTable
from pixsafe.services.report_store import ReportStore
from pixsafe.utils.identifiers import is_fingerprint
from pixsafe.utils.logging_config import StructuredLogger, metrics
from pixsafe.utils.risk_levels import RiskLevel, calculate_risk

logger = StructuredLogger(__name__)

# Fixed verdicts for override fixtures: (level, score, report floor, filing floor)
OVERRIDE_VERDICTS = {
    OverrideSeverity.CRITICAL: (RiskLevel.CRITICAL, 100, 5, 5),
    OverrideSeverity.WARNING: (RiskLevel.MEDIUM, 40, 2, 0),
}


class RiskDecisionService:
    """
    Turns the reports stored for a fingerprint into a RiskAssessment.

    Read-only. An override fixture for the fingerprint always wins over the
    organic formula, but only ever raises the reported counts.
    """

    def __init__(self, store: ReportStore, overrides: Optional[OverrideTable] = None):
        self.store = store
        self.overrides = overrides if overrides is not None else OverrideTable()

    def assess(self, fingerprint: str) -> RiskAssessment:
        if not is_fingerprint(fingerprint):
            raise ValidationError("Fingerprint must be 64 lowercase hex characters")

        start = time.time()
        reports = self.store.find_reports_by_fingerprint(fingerprint)
        assessment = self.assess_reports(fingerprint, reports)
        metrics.timing("lookup.latency", time.time() - start)

        metrics.increment(f"lookups.level.{assessment.level.value.lower()}")
        logger.info(
            "Risk assessed",
            fingerprint=fingerprint[:12],
            risk_level=assessment.level.value,
            score=assessment.score,
            report_count=assessment.report_count,
        )
        return assessment

    def assess_reports(self, fingerprint: str, reports: List[Report]) -> RiskAssessment:
        """Pure part of assess(): same reports and overrides, same result."""
        report_count = len(reports)
        police_filing_count = sum(1 for r in reports if r.has_police_filing)

        override = self.overrides.get(fingerprint)
        if override is not None:
            level, score, report_floor, filing_floor = OVERRIDE_VERDICTS[override.severity]
            return RiskAssessment(
                fingerprint=fingerprint,
                score=score,
                report_count=max(report_floor, report_count),
                police_filing_count=max(filing_floor, police_filing_count),
                level=level,
                reason=override.reason,
            )

        if report_count > 0:
            level, score = calculate_risk(report_count, police_filing_count)
            return RiskAssessment(
                fingerprint=fingerprint,
                score=score,
                report_count=report_count,
                police_filing_count=police_filing_count,
                level=level,
            )

        return RiskAssessment(
            fingerprint=fingerprint,
            score=0,
            report_count=0,
            police_filing_count=0,
            level=RiskLevel.SAFE,
        )
