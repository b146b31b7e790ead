import os

# Keep the suite off the network and off ./pixsafe.db
os.environ["PIXSAFE_SUPABASE_URL"] = ""
os.environ["PIXSAFE_API_TOKEN"] = ""
os.environ["PIXSAFE_DATABASE_URL"] = "sqlite://"
os.environ["PIXSAFE_RATE_LIMIT_REQUESTS"] = "0"

from datetime import datetime, timezone
from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pixsafe.api.dependencies import get_override_table, get_report_service, get_risk_service
from pixsafe.api.server import app
from pixsafe.database import Base
from pixsafe.errors import StoreUnavailable
from pixsafe.schemas.report_schemas import Report, ScamCategory
from pixsafe.services.overrides_service import OverrideTable
from pixsafe.services.report_service import ReportService
from pixsafe.services.report_store import FallbackReportStore, LocalReportStore, ReportStore
from pixsafe.services.risk_service import RiskDecisionService
from pixsafe.utils.identifiers import fingerprint


class MemoryStore(ReportStore):
    """Stand-in for a healthy remote store."""

    name = "remote"

    def __init__(self, reports: List[Report] = None):
        self.reports: List[Report] = list(reports or [])

    def find_reports_by_fingerprint(self, fp):
        return [r for r in self.reports if r.fingerprint == fp]

    def append_report(self, report):
        self.reports.append(report)


class FailingStore(ReportStore):
    """Stand-in for an unreachable store."""

    def __init__(self, name: str = "remote"):
        self.name = name
        self.calls = 0

    def find_reports_by_fingerprint(self, fp):
        self.calls += 1
        raise StoreUnavailable(self.name, "connection refused")

    def append_report(self, report):
        self.calls += 1
        raise StoreUnavailable(self.name, "connection refused")


def make_report(fp: str, police: bool = False, category=ScamCategory.PHISHING) -> Report:
    return Report(
        fingerprint=fp,
        category=category,
        has_police_filing=police,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def session_factory():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def local_store(session_factory):
    return LocalReportStore(session_factory)


@pytest.fixture
def remote_store():
    return MemoryStore()


@pytest.fixture
def failing_remote():
    return FailingStore("remote")


@pytest.fixture
def offline_store(failing_remote, local_store):
    """Fallback chain whose remote is always down."""
    return FallbackReportStore(failing_remote, local_store)


@pytest.fixture
def phone_fingerprint():
    return fingerprint("(11) 99999-9999")


@pytest.fixture
def client(offline_store):
    """FastAPI test client over an offline remote and in-memory local store."""
    overrides = OverrideTable.with_seed_fixtures()
    risk_service = RiskDecisionService(offline_store, overrides)
    report_service = ReportService(offline_store)

    app.dependency_overrides[get_risk_service] = lambda: risk_service
    app.dependency_overrides[get_report_service] = lambda: report_service
    app.dependency_overrides[get_override_table] = lambda: overrides
    yield TestClient(app)
    app.dependency_overrides.clear()
