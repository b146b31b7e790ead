"""
Override fixtures.
Known-bad and known-suspicious fingerprints with a precomputed verdict,
kept apart from organic reports and from the scoring formula.
"""

import json
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from pixsafe.errors import ValidationError
from pixsafe.schemas.report_schemas import OverrideRecord, OverrideSeverity
from pixsafe.utils.identifiers import is_fingerprint
from pixsafe.utils.logging_config import StructuredLogger


logger = StructuredLogger(__name__)

# Status labels used by the original fixture table
_STATUS_ALIASES = {
    "perigo": OverrideSeverity.CRITICAL,
    "aviso": OverrideSeverity.WARNING,
}

SEED_FIXTURES = [
    {
        "hash": "a665a45920422f9d417e4867efdc4fb8a04a1f3fff1fa07e998e86f7f7a27ae3",
        "status": "perigo",
        "motivo": "5 denúncias com B.O. confirmado",
    },
    {
        "hash": "ef710810793740e2b96874e4479e000490f23078a666e84d4da55d3780517812",
        "status": "aviso",
        "motivo": "2 denúncias recentes",
    },
]


def _parse_severity(value: str) -> OverrideSeverity:
    key = (value or "").strip().lower()
    if key in _STATUS_ALIASES:
        return _STATUS_ALIASES[key]
    try:
        return OverrideSeverity(key)
    except ValueError:
        raise ValidationError(f"Unknown override severity '{value}'") from None


class OverrideTable:
    """
    Fingerprint -> OverrideRecord mapping.

    Starts empty; seed it explicitly with with_seed_fixtures() or
    from_file() so production scoring carries no embedded fixtures.
    """

    def __init__(self, records: Optional[Dict[str, OverrideRecord]] = None):
        self._records: Dict[str, OverrideRecord] = {}
        for fp, record in (records or {}).items():
            self.add(fp, record.severity, record.reason)

    @classmethod
    def from_entries(cls, entries: List[dict]) -> "OverrideTable":
        """
        Build from raw entries.

        Accepts {"hash"|"fingerprint", "status"|"severity", "motivo"|"reason"}.
        """
        table = cls()
        for entry in entries:
            fp = entry.get("fingerprint") or entry.get("hash")
            severity = entry.get("severity") or entry.get("status")
            reason = entry.get("reason") or entry.get("motivo") or ""
            table.add(fp, severity, reason)
        return table

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "OverrideTable":
        with open(path, "r", encoding="utf-8") as f:
            entries = json.load(f)
        if not isinstance(entries, list):
            raise ValidationError(f"Override file {path} must hold a JSON list")
        table = cls.from_entries(entries)
        logger.info("Loaded override fixtures", path=str(path), count=len(table))
        return table

    @classmethod
    def with_seed_fixtures(cls) -> "OverrideTable":
        return cls.from_entries(SEED_FIXTURES)

    def add(self, fingerprint: str, severity: Union[str, OverrideSeverity], reason: str) -> OverrideRecord:
        if not is_fingerprint(fingerprint or ""):
            raise ValidationError("Override key must be a 64-character lowercase hex fingerprint")
        if isinstance(severity, OverrideSeverity):
            parsed = severity
        else:
            parsed = _parse_severity(severity)
        record = OverrideRecord(severity=parsed, reason=reason)
        self._records[fingerprint] = record
        return record

    def remove(self, fingerprint: str) -> bool:
        return self._records.pop(fingerprint, None) is not None

    def get(self, fingerprint: str) -> Optional[OverrideRecord]:
        return self._records.get(fingerprint)

    def merge(self, other: "OverrideTable") -> None:
        for fp, record in other:
            self._records[fp] = record

    def __iter__(self) -> Iterator[Tuple[str, OverrideRecord]]:
        return iter(sorted(self._records.items()))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._records


def build_override_table(settings) -> OverrideTable:
    """Seed fixtures and/or fixtures file, as configured."""
    table = OverrideTable.with_seed_fixtures() if settings.seed_fixtures else OverrideTable()
    if settings.overrides_file:
        table.merge(OverrideTable.from_file(settings.overrides_file))
    return table
