"""
Report stores.

RemoteReportStore talks to a Supabase/PostgREST table, LocalReportStore keeps
reports in the local database, and FallbackReportStore chains the two so
callers never see which one answered.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pixsafe.config import Settings
from pixsafe.errors import ServiceUnavailable, StoreUnavailable
from pixsafe.models.report import LocalReport
from pixsafe.schemas.report_schemas import Report, ScamCategory
from pixsafe.utils.logging_config import StructuredLogger, metrics


logger = StructuredLogger(__name__)


def convert_rows(store: str, rows: Iterable[Any], convert: Callable[[Any], Report]) -> List[Report]:
    """
    Convert stored rows one at a time.

    A row that cannot be read is skipped and counted; it never hides the
    other reports for the same fingerprint.
    """
    reports = []
    for row in rows:
        try:
            reports.append(convert(row))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            metrics.increment(f"store.{store}.skipped_rows")
            logger.warning("Skipping unreadable report row", store=store, error=str(e))
    return reports


class ReportStore:
    """Interface shared by every store."""

    name = "store"

    def find_reports_by_fingerprint(self, fingerprint: str) -> List[Report]:
        raise NotImplementedError

    def append_report(self, report: Report) -> None:
        raise NotImplementedError


# ============== REMOTE ==============


class RemoteReportStore(ReportStore):
    """Reports table behind the Supabase REST API."""

    name = "remote"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "denuncias",
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def find_reports_by_fingerprint(self, fingerprint: str) -> List[Report]:
        try:
            response = self._session.get(
                self.endpoint,
                params={"select": "*", "key_hash": f"eq.{fingerprint}"},
                headers=self._headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()
        except (requests.RequestException, ValueError) as e:
            raise StoreUnavailable(self.name, str(e)) from e

        if not isinstance(rows, list):
            raise StoreUnavailable(self.name, "expected a list of rows")

        return convert_rows(self.name, rows, self._row_to_report)

    def append_report(self, report: Report) -> None:
        try:
            response = self._session.post(
                self.endpoint,
                json=[self._report_to_row(report)],
                headers={**self._headers, "Prefer": "return=minimal"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise StoreUnavailable(self.name, str(e)) from e

    @staticmethod
    def _row_to_report(row: dict) -> Report:
        return Report(
            fingerprint=row["key_hash"],
            category=ScamCategory(row["category"]),
            has_police_filing=bool(row.get("has_bo", False)),
            created_at=row.get("created_at"),
        )

    @staticmethod
    def _report_to_row(report: Report) -> dict:
        return {
            "key_hash": report.fingerprint,
            "category": report.category.value,
            "has_bo": report.has_police_filing,
            "created_at": report.created_at.isoformat() if report.created_at else None,
        }


class DisabledReportStore(ReportStore):
    """Stands in for the remote store when no URL is configured."""

    name = "remote"

    def find_reports_by_fingerprint(self, fingerprint: str) -> List[Report]:
        raise StoreUnavailable(self.name, "not configured")

    def append_report(self, report: Report) -> None:
        raise StoreUnavailable(self.name, "not configured")


# ============== LOCAL ==============


class LocalReportStore(ReportStore):
    """
    Reports persisted in the local database.

    Every append is one INSERT in its own transaction, so two writers
    cannot overwrite each other's reports.
    """

    name = "local"

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def find_reports_by_fingerprint(self, fingerprint: str) -> List[Report]:
        try:
            with self._session_factory() as db:
                rows = (
                    db.query(LocalReport)
                    .filter(LocalReport.key_hash == fingerprint)
                    .order_by(LocalReport.id)
                    .all()
                )
                return convert_rows(self.name, rows, self._row_to_report)
        except SQLAlchemyError as e:
            raise StoreUnavailable(self.name, str(e)) from e

    @staticmethod
    def _row_to_report(row: LocalReport) -> Report:
        return Report(
            fingerprint=row.key_hash,
            category=ScamCategory(row.category),
            has_police_filing=row.has_bo,
            created_at=row.created_at,
        )

    def append_report(self, report: Report) -> None:
        try:
            with self._session_factory() as db:
                db.add(
                    LocalReport(
                        key_hash=report.fingerprint,
                        category=report.category.value,
                        has_bo=report.has_police_filing,
                        created_at=report.created_at or datetime.now(timezone.utc),
                    )
                )
                db.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailable(self.name, str(e)) from e

    def count(self) -> int:
        try:
            with self._session_factory() as db:
                return db.query(LocalReport).count()
        except SQLAlchemyError as e:
            raise StoreUnavailable(self.name, str(e)) from e


# ============== FALLBACK CHAIN ==============


class FallbackReportStore(ReportStore):
    """
    Primary store with a fallback behind it.

    Reads return primary results followed by fallback results, without
    deduplication. Writes go to the primary, or to the fallback when the
    primary fails; never to both.
    """

    name = "fallback"

    def __init__(self, primary: ReportStore, fallback: ReportStore):
        self.primary = primary
        self.fallback = fallback

    def find_reports_by_fingerprint(self, fingerprint: str) -> List[Report]:
        primary_reports: List[Report] = []
        primary_error: Optional[StoreUnavailable] = None

        try:
            primary_reports = self.primary.find_reports_by_fingerprint(fingerprint)
        except StoreUnavailable as e:
            primary_error = e
            metrics.increment(f"store.{self.primary.name}.read_failures")
            logger.warning(
                "Primary store unavailable, reading fallback only",
                store=self.primary.name,
                error=str(e),
            )

        try:
            fallback_reports = self.fallback.find_reports_by_fingerprint(fingerprint)
        except StoreUnavailable as e:
            metrics.increment(f"store.{self.fallback.name}.read_failures")
            if primary_error is not None:
                raise ServiceUnavailable("No report store could be reached") from e
            logger.warning(
                "Fallback store unavailable, using primary results only",
                store=self.fallback.name,
                error=str(e),
            )
            fallback_reports = []

        return primary_reports + fallback_reports

    def append_report(self, report: Report) -> str:
        """Store the report and return the name of the store that took it."""
        try:
            self.primary.append_report(report)
            destination = self.primary.name
        except StoreUnavailable as e:
            metrics.increment(f"store.{self.primary.name}.write_failures")
            logger.warning(
                "Primary store rejected report, writing to fallback",
                store=self.primary.name,
                error=str(e),
            )
            try:
                self.fallback.append_report(report)
            except StoreUnavailable as fallback_error:
                metrics.increment(f"store.{self.fallback.name}.write_failures")
                raise ServiceUnavailable("No report store could be reached") from fallback_error
            destination = self.fallback.name

        metrics.increment(f"reports.stored.{destination}")
        return destination


def build_report_store(settings: Settings, session_factory: Callable[[], Session]) -> FallbackReportStore:
    """Remote store (when configured) backed by the local database."""
    if settings.remote_enabled:
        primary: ReportStore = RemoteReportStore(
            base_url=settings.supabase_url,
            api_key=settings.supabase_key,
            table=settings.supabase_table,
            timeout=settings.remote_timeout,
        )
    else:
        primary = DisabledReportStore()

    return FallbackReportStore(primary, LocalReportStore(session_factory))


