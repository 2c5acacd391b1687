# tests/test_journal.py
from datetime import datetime, timedelta, timezone

from esld_triage.journal import JournalEntry, create_journal_entry, recent_red_flags

NOW = datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)


def test_entry_scans_text_and_caregiver_notes():
    entry = create_journal_entry(
        "Slept badly.",
        author="caregiver",
        caregiver_notes="Noticed confusion at lunch.",
        created_at=NOW,
    )
    assert entry.red_flags == ("confusion",)
    assert entry.author == "caregiver"
    assert entry.id


def test_unknown_author_defaults_to_patient():
    assert create_journal_entry("ok", author="nurse", created_at=NOW).author == "patient"


def test_recent_red_flags_window():
    old = create_journal_entry("vomited blood", created_at=NOW - timedelta(hours=25))
    edge = create_journal_entry("high fever", created_at=NOW - timedelta(hours=24))
    fresh = create_journal_entry("passing out and high fever", created_at=NOW - timedelta(hours=1))
    assert recent_red_flags([old, edge, fresh], now=NOW) == ["high fever", "passing out"]


def test_entries_without_flags_contribute_nothing():
    calm = create_journal_entry("Good appetite, walked 20 minutes.", created_at=NOW)
    assert recent_red_flags([calm], now=NOW) == []


def test_naive_timestamps_are_read_as_utc():
    naive = datetime(2024, 1, 2, 9, 0)
    entry = create_journal_entry("passing out in the kitchen", created_at=naive)
    assert entry.created_at.tzinfo == timezone.utc
    built = JournalEntry(id="j-1", created_at=naive, author="patient", text="", red_flags=("confusion",))
    assert recent_red_flags([entry, built], now=NOW) == ["passing out", "confusion"]
    assert recent_red_flags([entry], now=datetime(2024, 1, 2, 10, 0)) == ["passing out"]
