# esld_triage/journal.py
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from esld_triage.config import RED_FLAG_WINDOW
from esld_triage.red_flags import scan_for_red_flags

AUTHORS = ("patient", "caregiver")


def _as_utc(moment: datetime) -> datetime:
    # naive timestamps are taken to be UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class JournalEntry:
    id: str
    created_at: datetime
    author: str               # "patient" | "caregiver"
    text: str
    caregiver_notes: str = ""
    red_flags: Tuple[str, ...] = ()


def create_journal_entry(
    text: str,
    author: str = "patient",
    caregiver_notes: str = "",
    created_at: Optional[datetime] = None,
    entry_id: Optional[str] = None,
) -> JournalEntry:
    """New entry with red flags scanned from the text and caregiver notes together."""
    combined = " ".join(part for part in (text, caregiver_notes) if part)
    return JournalEntry(
        id=entry_id or uuid.uuid4().hex,
        created_at=_as_utc(created_at) if created_at else datetime.now(timezone.utc),
        author=author if author in AUTHORS else "patient",
        text=text,
        caregiver_notes=caregiver_notes,
        red_flags=tuple(scan_for_red_flags(combined)),
    )


def recent_red_flags(
    entries: Iterable[JournalEntry],
    now: Optional[datetime] = None,
    window: timedelta = RED_FLAG_WINDOW,
) -> List[str]:
    """
    Red flags from entries written within ``window`` of ``now``, de-duplicated
    in first-seen order. Entries stamped after ``now`` still count.
    """
    now = _as_utc(now) if now else datetime.now(timezone.utc)
    cutoff = now - window
    flags: List[str] = []
    for entry in entries:
        if _as_utc(entry.created_at) < cutoff:
            continue
        for flag in entry.red_flags:
            if flag not in flags:
                flags.append(flag)
    return flags
