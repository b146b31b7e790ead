from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pixsafe.utils.risk_levels import RiskLevel


class ScamCategory(str, Enum):
    PHISHING = "phishing"
    SOCIAL_ENGINEERING = "social_engineering"
    PRODUCT_NOT_DELIVERED = "product_not_delivered"
    INVESTMENT_FRAUD = "investment_fraud"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @classmethod
    def _missing_(cls, value):
        # Rows written by the original web form store the display label
        if isinstance(value, str):
            for member, label in CATEGORY_LABELS.items():
                if value.strip().lower() == label.lower():
                    return member
        return None


CATEGORY_LABELS = {
    ScamCategory.PHISHING: "Falso Link / Phishing",
    ScamCategory.SOCIAL_ENGINEERING: "Engenharia Social (Falso Parente)",
    ScamCategory.PRODUCT_NOT_DELIVERED: "Produto não Entregue",
    ScamCategory.INVESTMENT_FRAUD: "Fraude de Investimento / Urubu do Pix",
    ScamCategory.OTHER: "Outro",
}


class OverrideSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


# ============== DOMAIN ==============


class Report(BaseModel):
    """A single organic fraud report. Immutable once stored."""
    model_config = ConfigDict(frozen=True)

    fingerprint: str
    category: ScamCategory
    has_police_filing: bool
    created_at: Optional[datetime] = None  # Older remote rows may lack it


class OverrideRecord(BaseModel):
    """Hand-seeded verdict for a fingerprint, bypassing the organic formula."""
    model_config = ConfigDict(frozen=True)

    severity: OverrideSeverity
    reason: str


class RiskAssessment(BaseModel):
    """Derived on every lookup, never stored."""
    model_config = ConfigDict(frozen=True)

    fingerprint: str
    score: int = Field(ge=0)
    report_count: int = Field(ge=0)
    police_filing_count: int = Field(ge=0)
    level: RiskLevel
    reason: Optional[str] = None


# ============== API ==============


class LookupRequest(BaseModel):
    identifier: str


class ValidateResponse(BaseModel):
    valid: bool
    kind: Optional[str] = None  # email, numeric, random_key


class ReportRequest(BaseModel):
    """Request to report an identifier used in a scam."""
    identifier: str
    category: str  # ScamCategory value or display label
    has_police_filing: bool = False


class ReportResponse(BaseModel):
    success: bool
    fingerprint: str
    message: str


class OverrideEntry(BaseModel):
    fingerprint: str
    severity: OverrideSeverity
    reason: str


class AddOverrideRequest(BaseModel):
    identifier: Optional[str] = None  # Hashed server-side
    fingerprint: Optional[str] = None  # Already hashed
    severity: OverrideSeverity
    reason: str


class StatusResponse(BaseModel):
    status: str
    version: str
    environment: str
    remote_enabled: bool
    auth_enabled: bool
    rate_limit_requests: int  # 0 = disabled
    rate_limit_window: int  # Seconds
    categories: List[str]
