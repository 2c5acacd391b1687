# tests/test_pipeline.py
from datetime import date, datetime, timedelta, timezone

import pytest

from esld_triage.history import TriageHistory
from esld_triage.journal import create_journal_entry
from esld_triage.meds import DoseLogEntry, MedConfigItem, adherence_snapshot
from esld_triage.models import TriageLevel, TriageRecord
from esld_triage.pipeline import run_check_in

NOW = datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)
MEDS = [MedConfigItem(id="lactulose", name="Lactulose", critical=True)]


def test_quiet_check_in_is_self_monitor_and_recorded():
    history = TriageHistory()
    res = run_check_in({"confusion_level": "none"}, check_in_id="c-1", now=NOW, history=history)
    assert res.decision.level == TriageLevel.SELF_MONITOR
    assert history.latest() == res.record
    assert res.record.to_dict() == {
        "id": res.record.id,
        "checkInId": "c-1",
        "createdAt": "2024-01-02T10:00:00+00:00",
        "level": "self-monitor",
        "rationale": ["No concerning ESLD symptoms reported today."],
        "ruleIds": [],
        "recommendedAction": "Continue monitoring and complete your next check-in as scheduled.",
    }


def test_recent_journal_entry_forces_emergency():
    entries = [create_journal_entry("He vomited blood after dinner", created_at=NOW - timedelta(hours=3))]
    res = run_check_in({"vomiting_blood": False}, journal_entries=entries, now=NOW)
    assert res.decision.level == TriageLevel.EMERGENCY
    assert "Journal red flag: vomited blood" in res.decision.reasons
    assert res.snapshot.symptoms.vomiting_blood


def test_stale_journal_entry_is_ignored():
    entries = [create_journal_entry("vomited blood", created_at=NOW - timedelta(days=2))]
    res = run_check_in({}, journal_entries=entries, now=NOW)
    assert res.decision.level == TriageLevel.SELF_MONITOR


def test_notes_are_scanned():
    res = run_check_in({"notes": "Denies confusion but had high fever overnight"}, now=NOW)
    assert res.decision.level == TriageLevel.EMERGENCY
    assert res.decision.reasons[1:] == ("Journal red flag: high fever",)


def test_missed_critical_med_from_adherence_with_confusion_is_urgent():
    adherence = adherence_snapshot(
        MEDS,
        [DoseLogEntry(med_id="lactulose", day=date(2024, 1, 2), taken=False)],
        date(2024, 1, 2),
    )
    res = run_check_in({"confusion_level": "mild"}, med_adherence=adherence, now=NOW)
    assert res.decision.level == TriageLevel.URGENT
    assert res.decision.rule_ids == ("missed-critical-med-confusion",)


def test_history_is_append_only():
    history = TriageHistory()
    first = run_check_in({}, check_in_id="c-1", now=NOW, history=history)
    run_check_in({"edema_worsening": True}, check_in_id="c-2", now=NOW, history=history)
    assert [r.level for r in history.records] == [TriageLevel.SELF_MONITOR, TriageLevel.ROUTINE]
    assert history.for_check_in("c-1") == [first.record]
    with pytest.raises(ValueError):
        history.append(first.record)
    assert len(history) == 2


def test_record_is_immutable():
    record = run_check_in({}, now=NOW).record
    assert isinstance(record, TriageRecord)
    with pytest.raises(AttributeError):
        record.level = TriageLevel.EMERGENCY
