"""
Service wiring shared by the public and admin routers.

Tests swap these out through app.dependency_overrides.
"""

from pixsafe.config import settings
from pixsafe.database import SessionLocal
from pixsafe.services.overrides_service import OverrideTable, build_override_table
from pixsafe.services.report_service import ReportService
from pixsafe.services.report_store import build_report_store
from pixsafe.services.risk_service import RiskDecisionService

report_store = build_report_store(settings, SessionLocal)
override_table = build_override_table(settings)
risk_service = RiskDecisionService(report_store, override_table)
report_service = ReportService(report_store)


def get_risk_service() -> RiskDecisionService:
    return risk_service


def get_report_service() -> ReportService:
    return report_service


def get_override_table() -> OverrideTable:
    return override_table
