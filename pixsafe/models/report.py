"""
Local fallback copy of reports that could not reach the remote store.
"""

from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, DateTime, Integer, String

from pixsafe.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocalReport(Base):
    __tablename__ = "local_reports"

    id = Column(Integer, primary_key=True, index=True)

    # Same column names as the remote table
    key_hash = Column(String(64), nullable=False, index=True)
    category = Column(String(40), nullable=False)  # ScamCategory value
    has_bo = Column(Boolean, nullable=False, default=False)  # Police filing attached

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
