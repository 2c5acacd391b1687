# esld_triage/pipeline.py
"""
One check-in submission end to end:

journal entries (last 24 h) + free-text notes -> red flags
answers + adherence + red flags -> normalize -> evaluate -> TriageRecord
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from esld_triage.engine import evaluate
from esld_triage.history import TriageHistory
from esld_triage.journal import JournalEntry, recent_red_flags
from esld_triage.models import CheckInSnapshot, MedAdherenceItem, TriageDecision, TriageRecord
from esld_triage.normalize import normalize
from esld_triage.red_flags import scan_for_red_flags
from esld_triage.rules import ESLD_CATALOG, RuleCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckInResult:
    snapshot: CheckInSnapshot
    decision: TriageDecision
    record: TriageRecord


def collect_red_flags(
    journal_entries: Iterable[JournalEntry],
    notes: Any = None,
    now: Optional[datetime] = None,
) -> List[str]:
    """Recent journal flags followed by any flags in today's notes, without repeats."""
    flags = recent_red_flags(journal_entries, now=now)
    for flag in scan_for_red_flags(notes):
        if flag not in flags:
            flags.append(flag)
    return flags


def run_check_in(
    answers: Mapping[str, Any],
    check_in_id: Optional[str] = None,
    med_adherence: Optional[Iterable[MedAdherenceItem]] = None,
    journal_entries: Iterable[JournalEntry] = (),
    now: Optional[datetime] = None,
    catalog: RuleCatalog = ESLD_CATALOG,
    history: Optional[TriageHistory] = None,
) -> CheckInResult:
    now = now or datetime.now(timezone.utc)
    check_in_id = check_in_id or uuid.uuid4().hex

    notes = answers.get("notes") if isinstance(answers, Mapping) else None
    flags = collect_red_flags(journal_entries, notes=notes, now=now)

    snapshot = normalize(answers, med_adherence=med_adherence, journal_red_flags=flags)
    decision = evaluate(snapshot, journal_red_flags=flags, catalog=catalog)
    record = TriageRecord.from_decision(decision, check_in_id=check_in_id, created_at=now)

    if history is not None:
        history.append(record)

    logger.info(
        "check-in %s triaged as %s (rules: %s)",
        check_in_id,
        decision.level.value,
        ", ".join(decision.rule_ids) or "none",
    )
    return CheckInResult(snapshot=snapshot, decision=decision, record=record)
