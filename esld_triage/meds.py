# esld_triage/meds.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List

from esld_triage.models import AdherenceStatus, MedAdherenceItem


@dataclass(frozen=True)
class MedConfigItem:
    id: str
    name: str
    dose: str = ""
    critical: bool = False     # e.g. lactulose, rifaximin


@dataclass(frozen=True)
class DoseLogEntry:
    med_id: str
    day: date
    taken: bool
    reason: str = ""


def adherence_snapshot(
    meds: Iterable[MedConfigItem],
    dose_log: Iterable[DoseLogEntry],
    day: date,
) -> List[MedAdherenceItem]:
    """
    Today's status per configured medication. A med with no log entry for
    ``day`` is UNKNOWN; any missed entry on ``day`` wins over a taken one.
    """
    status: Dict[str, AdherenceStatus] = {}
    for entry in dose_log:
        if entry.day != day:
            continue
        if not entry.taken:
            status[entry.med_id] = AdherenceStatus.MISSED
        elif entry.med_id not in status:
            status[entry.med_id] = AdherenceStatus.TAKEN

    return [
        MedAdherenceItem(
            med_id=med.id,
            name=med.name,
            dose=med.dose,
            status=status.get(med.id, AdherenceStatus.UNKNOWN),
            is_critical=med.critical,
        )
        for med in meds
    ]


def summarize_adherence(items: Iterable[MedAdherenceItem]) -> Dict[str, int]:
    counts = {s.value: 0 for s in AdherenceStatus}
    for item in items:
        counts[item.status.value] += 1
    return counts
