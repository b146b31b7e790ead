"""
Risk level utilities.
Linear score from organic report counts, stepped into five levels.
Weights are configurable via environment variables.
"""

from enum import Enum
from typing import Optional, Tuple

from pixsafe.config import settings


class RiskLevel(str, Enum):
    SAFE = "SAFE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# (minimum score, level), checked from the top down
LEVEL_THRESHOLDS = (
    (100, RiskLevel.CRITICAL),
    (50, RiskLevel.HIGH),
    (20, RiskLevel.MEDIUM),
    (1, RiskLevel.LOW),
)


def calculate_score(
    report_count: int,
    police_filing_count: int,
    report_weight: Optional[int] = None,
    police_filing_weight: Optional[int] = None,
) -> int:
    """
    Score = report_weight * reports + police_filing_weight * police filings.

    A report with a police filing counts in both terms.
    """
    if report_count < 0 or police_filing_count < 0:
        raise ValueError("report counts must be non-negative")

    per_report = report_weight if report_weight is not None else settings.report_weight
    per_filing = (
        police_filing_weight if police_filing_weight is not None else settings.police_filing_weight
    )
    return per_report * report_count + per_filing * police_filing_count


def derive_risk_from_score(score: int) -> RiskLevel:
    """
    Map a non-negative score onto a level.

    0 = SAFE, 1-19 = LOW, 20-49 = MEDIUM, 50-99 = HIGH, 100+ = CRITICAL
    """
    if score < 0:
        raise ValueError("score must be non-negative")

    for minimum, level in LEVEL_THRESHOLDS:
        if score >= minimum:
            return level
    return RiskLevel.SAFE


def calculate_risk(report_count: int, police_filing_count: int) -> Tuple[RiskLevel, int]:
    score = calculate_score(report_count, police_filing_count)
    return derive_risk_from_score(score), score
