"""Tests for report submission."""

import pytest

from pixsafe.errors import ServiceUnavailable, UnknownFailure, ValidationError
from pixsafe.schemas.report_schemas import ScamCategory
from pixsafe.services.report_service import ReportService, parse_category
from pixsafe.services.report_store import FallbackReportStore
from pixsafe.services.risk_service import RiskDecisionService
from pixsafe.utils.risk_levels import RiskLevel

from conftest import FailingStore, MemoryStore


class ExplodingStore(MemoryStore):
    def append_report(self, report):
        raise RuntimeError("unexpected column 'has_bo'")


class TestParseCategory:
    """Tests for category parsing."""

    def test_enum_value(self):
        assert parse_category("investment_fraud") == ScamCategory.INVESTMENT_FRAUD

    def test_display_label(self):
        assert parse_category("Produto não Entregue") == ScamCategory.PRODUCT_NOT_DELIVERED

    def test_enum_member(self):
        assert parse_category(ScamCategory.OTHER) is ScamCategory.OTHER

    def test_unknown_rejected(self):
        with pytest.raises(ValidationError):
            parse_category("lottery")


class TestSubmitReport:
    """Tests for ReportService.submit_report."""

    def test_stores_in_remote_when_available(self, remote_store, local_store, phone_fingerprint):
        service = ReportService(FallbackReportStore(remote_store, local_store))

        assert service.submit_report(phone_fingerprint, "phishing", True) is True
        assert len(remote_store.reports) == 1
        assert remote_store.reports[0].has_police_filing is True
        assert local_store.count() == 0

    def test_falls_back_to_local(self, offline_store, local_store, phone_fingerprint):
        service = ReportService(offline_store)

        assert service.submit_report(phone_fingerprint, ScamCategory.OTHER, False) is True
        assert local_store.count() == 1

    def test_fallback_report_is_visible_to_lookups(self, offline_store, phone_fingerprint):
        ReportService(offline_store).submit_report(phone_fingerprint, "social_engineering", True)

        reports = offline_store.find_reports_by_fingerprint(phone_fingerprint)
        assert len(reports) == 1
        assert reports[0].category == ScamCategory.SOCIAL_ENGINEERING

        result = RiskDecisionService(offline_store).assess(phone_fingerprint)
        assert result.score == 35
        assert result.level == RiskLevel.MEDIUM

    def test_created_at_is_set(self, remote_store, phone_fingerprint):
        ReportService(remote_store).submit_report(phone_fingerprint, "phishing", False)
        assert remote_store.reports[0].created_at.tzinfo is not None

    def test_invalid_category_touches_no_store(self, remote_store, phone_fingerprint):
        with pytest.raises(ValidationError):
            ReportService(remote_store).submit_report(phone_fingerprint, "lottery", False)
        assert remote_store.reports == []

    def test_non_bool_filing_rejected(self, remote_store, phone_fingerprint):
        with pytest.raises(ValidationError):
            ReportService(remote_store).submit_report(phone_fingerprint, "phishing", "yes")

    def test_raw_identifier_rejected(self, remote_store):
        with pytest.raises(ValidationError):
            ReportService(remote_store).submit_report("(11) 99999-9999", "phishing", False)

    def test_all_stores_down(self, phone_fingerprint):
        store = FallbackReportStore(FailingStore("remote"), FailingStore("local"))
        with pytest.raises(ServiceUnavailable):
            ReportService(store).submit_report(phone_fingerprint, "phishing", False)

    def test_unexpected_error_wrapped(self, phone_fingerprint):
        with pytest.raises(UnknownFailure, match="has_bo"):
            ReportService(ExplodingStore()).submit_report(phone_fingerprint, "phishing", False)
