# esld_triage/models.py
"""
Value types shared by the normalizer, the rule catalog and the evaluator.

Everything here is frozen: a snapshot is built once per check-in and a
decision is never edited after the evaluator returns it.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class TriageLevel(str, Enum):
    """
    Outcome of one check-in, most to least severe.

    EMERGENCY    – call emergency services / go to the ER now
    URGENT       – contact the liver clinic within 24 h
    ROUTINE      – raise at the next appointment
    SELF_MONITOR – nothing concerning today
    """
    EMERGENCY = "emergency"
    URGENT = "urgent"
    ROUTINE = "routine"
    SELF_MONITOR = "self-monitor"

    @property
    def severity(self) -> int:
        """Higher is more severe. Use this, never the string value, to compare."""
        return _SEVERITY[self]


_SEVERITY = {
    TriageLevel.EMERGENCY: 3,
    TriageLevel.URGENT: 2,
    TriageLevel.ROUTINE: 1,
    TriageLevel.SELF_MONITOR: 0,
}


def most_severe(levels: Iterable[TriageLevel]) -> TriageLevel:
    """Most severe of ``levels``; SELF_MONITOR when empty."""
    return max(levels, key=lambda level: level.severity, default=TriageLevel.SELF_MONITOR)


class ConfusionLevel(str, Enum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class AbdominalPainLevel(str, Enum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


@dataclass(frozen=True)
class Vitals:
    # None means "not measured"; never substitute a number for it.
    temperature_c: Optional[float] = None
    heart_rate: Optional[float] = None
    systolic_bp: Optional[float] = None
    diastolic_bp: Optional[float] = None
    oxygen_saturation: Optional[float] = None


@dataclass(frozen=True)
class Symptoms:
    vomiting_blood: bool = False
    black_tarry_stools: bool = False
    severe_abdominal_pain: bool = False
    abdominal_pain_present: bool = False
    abdominal_pain_level: AbdominalPainLevel = AbdominalPainLevel.NONE
    confusion_level: ConfusionLevel = ConfusionLevel.NONE
    shortness_of_breath: bool = False
    jaundice_worsening: bool = False
    edema_worsening: bool = False
    ascites_worsening: bool = False
    fever: bool = False
    missed_critical_medication: bool = False
    rapid_abdominal_distension: bool = False
    no_urine_output: bool = False
    fainting_or_collapse: bool = False


@dataclass(frozen=True)
class CheckInSnapshot:
    symptoms: Symptoms = field(default_factory=Symptoms)
    vitals: Vitals = field(default_factory=Vitals)
    weight_gain_kg_24h: Optional[float] = None
    red_flags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TriageDecision:
    level: TriageLevel
    reasons: Tuple[str, ...]
    rule_ids: Tuple[str, ...]
    recommended_action: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "reasons": list(self.reasons),
            "rule_ids": list(self.rule_ids),
            "recommended_action": self.recommended_action,
        }


@dataclass(frozen=True)
class TriageRecord:
    """
    Persisted form of a decision. Field names on the wire are the ones the
    export and history screens read: id, checkInId, createdAt, level,
    rationale, ruleIds, recommendedAction.
    """
    id: str
    check_in_id: str
    created_at: datetime
    level: TriageLevel
    rationale: Tuple[str, ...]
    rule_ids: Tuple[str, ...]
    recommended_action: str

    @classmethod
    def from_decision(
        cls,
        decision: TriageDecision,
        check_in_id: str,
        created_at: Optional[datetime] = None,
        record_id: Optional[str] = None,
    ) -> "TriageRecord":
        return cls(
            id=record_id or uuid.uuid4().hex,
            check_in_id=check_in_id,
            created_at=created_at or datetime.now(timezone.utc),
            level=decision.level,
            rationale=decision.reasons,
            rule_ids=decision.rule_ids,
            recommended_action=decision.recommended_action,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "checkInId": self.check_in_id,
            "createdAt": self.created_at.isoformat(),
            "level": self.level.value,
            "rationale": list(self.rationale),
            "ruleIds": list(self.rule_ids),
            "recommendedAction": self.recommended_action,
        }


class AdherenceStatus(str, Enum):
    TAKEN = "taken"
    MISSED = "missed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class MedAdherenceItem:
    med_id: str
    name: str
    dose: str = ""
    status: AdherenceStatus = AdherenceStatus.UNKNOWN
    is_critical: bool = False
