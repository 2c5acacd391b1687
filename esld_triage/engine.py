# esld_triage/engine.py
"""
Triage evaluator.

Deterministic, severity-ordered, first-matching-tier classification:

1. Any journal red flag from the last 24 hours -> EMERGENCY, no tier walk.
2. Emergency, urgent, routine tiers in that order. The first tier with a
   match wins and reports every matching rule in that tier.
3. Nothing matched -> SELF_MONITOR.

Pure: no clock, no I/O, no shared state. Safe to call concurrently.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from esld_triage.config import RECOMMENDED_ACTIONS, SELF_MONITOR_REASON
from esld_triage.models import CheckInSnapshot, TriageDecision, TriageLevel
from esld_triage.rules import ESLD_CATALOG, RuleCatalog

logger = logging.getLogger(__name__)

JOURNAL_OVERRIDE_RULE_ID = "journal-red-flag"


def _decision(level: TriageLevel, reasons: List[str], rule_ids: List[str]) -> TriageDecision:
    return TriageDecision(
        level=level,
        reasons=tuple(reasons),
        rule_ids=tuple(rule_ids),
        recommended_action=RECOMMENDED_ACTIONS[level.value],
    )


def _reported_flags(journal_red_flags: Optional[Iterable[str]]) -> List[str]:
    if not journal_red_flags or isinstance(journal_red_flags, str):
        return []
    flags: List[str] = []
    for flag in journal_red_flags:
        if isinstance(flag, str) and flag.strip() and flag not in flags:
            flags.append(flag)
    return flags


def _journal_override(flags: List[str]) -> TriageDecision:
    reasons = ["Journal red flags reported in the last 24 hours."]
    reasons.extend(f"Journal red flag: {flag}" for flag in flags)
    return _decision(TriageLevel.EMERGENCY, reasons, [JOURNAL_OVERRIDE_RULE_ID])


def evaluate(
    snapshot: CheckInSnapshot,
    journal_red_flags: Optional[Iterable[str]] = None,
    catalog: RuleCatalog = ESLD_CATALOG,
) -> TriageDecision:
    """
    Classify one snapshot.

    ``journal_red_flags`` must already be limited to the last 24 hours; any
    non-empty value forces EMERGENCY with each flag quoted in the rationale.
    """
    flags = _reported_flags(journal_red_flags)
    if flags:
        logger.info("triage: journal red-flag override (%d flag(s))", len(flags))
        return _journal_override(flags)

    for level, rules in catalog.tiers():
        matched = [rule for rule in rules if rule.matches(snapshot)]
        if not matched:
            logger.debug("triage [%s]: no match", level.value)
            continue
        rule_ids = [rule.id for rule in matched]
        logger.info("triage [%s]: %s", level.value, ", ".join(rule_ids))
        return _decision(level, [rule.reason for rule in matched], rule_ids)

    logger.debug("triage: no tier matched, self-monitor")
    return _decision(TriageLevel.SELF_MONITOR, [SELF_MONITOR_REASON], [])
