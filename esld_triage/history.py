# esld_triage/history.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from esld_triage.models import TriageRecord


class TriageHistory:
    """Append-only, in-memory list of triage records. Records are never edited or removed."""

    def __init__(self) -> None:
        self._records: List[TriageRecord] = []

    def append(self, record: TriageRecord) -> TriageRecord:
        if any(r.id == record.id for r in self._records):
            raise ValueError(f"Triage record '{record.id}' is already in the history.")
        self._records.append(record)
        return record

    @property
    def records(self) -> Tuple[TriageRecord, ...]:
        return tuple(self._records)

    def latest(self) -> Optional[TriageRecord]:
        return self._records[-1] if self._records else None

    def for_check_in(self, check_in_id: str) -> List[TriageRecord]:
        return [r for r in self._records if r.check_in_id == check_in_id]

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self._records]

    def __len__(self) -> int:
        return len(self._records)
