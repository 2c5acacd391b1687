# esld_triage/rules.py
"""
ESLD rule catalog.

Three tiers of independent predicates over a CheckInSnapshot. A rule never
looks at whether another rule fired. Every vital threshold goes through
``_known`` first: an unmeasured vital must never satisfy a threshold.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from esld_triage.config import (
    FAST_HEART_RATE,
    FEVER_TEMP_C,
    FLUID_OVERLOAD_GAIN_KG,
    HIGH_FEVER_TEMP_C,
    LOW_SPO2_EMERGENCY,
    LOW_SPO2_URGENT,
    LOW_SYSTOLIC_BP,
)
from esld_triage.models import CheckInSnapshot, ConfusionLevel, TriageLevel
from esld_triage.red_flags import red_flag_tier

Predicate = Callable[[CheckInSnapshot], bool]


class RuleCatalogError(ValueError):
    """Raised when a rule catalog is assembled inconsistently."""


@dataclass(frozen=True)
class Rule:
    id: str
    tier: TriageLevel
    reason: str
    predicate: Predicate

    def matches(self, snapshot: CheckInSnapshot) -> bool:
        return bool(self.predicate(snapshot))


@dataclass(frozen=True)
class RuleCatalog:
    """Ordered tiers handed to the evaluator. Build one per configuration."""
    emergency: Tuple[Rule, ...]
    urgent: Tuple[Rule, ...]
    routine: Tuple[Rule, ...]

    def __post_init__(self) -> None:
        seen = set()
        for level, rules in self._pairs():
            for rule in rules:
                if rule.tier != level:
                    raise RuleCatalogError(
                        f"Rule '{rule.id}' is a {rule.tier.value} rule listed under {level.value}."
                    )
                if rule.id in seen:
                    raise RuleCatalogError(f"Duplicate rule id '{rule.id}'.")
                seen.add(rule.id)

    def _pairs(self) -> List[Tuple[TriageLevel, Tuple[Rule, ...]]]:
        return [
            (TriageLevel.EMERGENCY, self.emergency),
            (TriageLevel.URGENT, self.urgent),
            (TriageLevel.ROUTINE, self.routine),
        ]

    def tiers(self) -> List[Tuple[TriageLevel, Tuple[Rule, ...]]]:
        """Tiers in evaluation order, most severe first."""
        return self._pairs()

    def rule_ids(self) -> List[str]:
        return [rule.id for _, rules in self._pairs() for rule in rules]

    def get(self, rule_id: str) -> Optional[Rule]:
        for _, rules in self._pairs():
            for rule in rules:
                if rule.id == rule_id:
                    return rule
        return None

    @classmethod
    def from_rules(cls, rules: Iterable[Rule]) -> "RuleCatalog":
        """Group a flat rule list by tier, keeping the given order inside each tier."""
        by_tier = {TriageLevel.EMERGENCY: [], TriageLevel.URGENT: [], TriageLevel.ROUTINE: []}
        for rule in rules:
            if rule.tier not in by_tier:
                raise RuleCatalogError(f"Rule '{rule.id}' has no evaluable tier ({rule.tier.value}).")
            by_tier[rule.tier].append(rule)
        return cls(
            emergency=tuple(by_tier[TriageLevel.EMERGENCY]),
            urgent=tuple(by_tier[TriageLevel.URGENT]),
            routine=tuple(by_tier[TriageLevel.ROUTINE]),
        )


# -----------------------------
# Helpers
# -----------------------------
def _known(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has_fever(s: CheckInSnapshot) -> bool:
    if s.symptoms.fever:
        return True
    temp = s.vitals.temperature_c
    return _known(temp) and temp >= FEVER_TEMP_C


def _has_red_flag_of_tier(s: CheckInSnapshot, tier: TriageLevel) -> bool:
    return any(red_flag_tier(flag) == tier for flag in s.red_flags)


def _low_spo2(s: CheckInSnapshot) -> bool:
    spo2 = s.vitals.oxygen_saturation
    return _known(spo2) and spo2 < LOW_SPO2_EMERGENCY


def _borderline_spo2(s: CheckInSnapshot) -> bool:
    spo2 = s.vitals.oxygen_saturation
    return _known(spo2) and LOW_SPO2_EMERGENCY <= spo2 < LOW_SPO2_URGENT


def _low_systolic(s: CheckInSnapshot) -> bool:
    sbp = s.vitals.systolic_bp
    return _known(sbp) and sbp < LOW_SYSTOLIC_BP


def _high_fever(s: CheckInSnapshot) -> bool:
    temp = s.vitals.temperature_c
    return _known(temp) and temp >= HIGH_FEVER_TEMP_C


def _fast_heart_rate(s: CheckInSnapshot) -> bool:
    hr = s.vitals.heart_rate
    return _known(hr) and hr >= FAST_HEART_RATE


def _fluid_overload(s: CheckInSnapshot) -> bool:
    gain = s.weight_gain_kg_24h
    return s.symptoms.ascites_worsening and _known(gain) and gain >= FLUID_OVERLOAD_GAIN_KG


# -----------------------------
# ESLD tiers
# -----------------------------
EMERGENCY = TriageLevel.EMERGENCY
URGENT = TriageLevel.URGENT
ROUTINE = TriageLevel.ROUTINE

EMERGENCY_RULES = (
    Rule(
        "vomiting-blood", EMERGENCY,
        "Vomiting blood can signal gastrointestinal bleeding.",
        lambda s: s.symptoms.vomiting_blood,
    ),
    Rule(
        "black-tarry-stools", EMERGENCY,
        "Black, tarry stools can indicate internal bleeding.",
        lambda s: s.symptoms.black_tarry_stools,
    ),
    Rule(
        "severe-confusion", EMERGENCY,
        "Severe confusion or unresponsiveness is a medical emergency for ESLD patients.",
        lambda s: s.symptoms.confusion_level == ConfusionLevel.SEVERE,
    ),
    Rule(
        "severe-abdominal-pain-fever", EMERGENCY,
        "Severe abdominal pain with fever may indicate spontaneous bacterial peritonitis.",
        lambda s: s.symptoms.severe_abdominal_pain and _has_fever(s),
    ),
    Rule(
        "very-low-oxygen", EMERGENCY,
        "Very low oxygen levels require emergency care.",
        _low_spo2,
    ),
    Rule(
        "low-blood-pressure", EMERGENCY,
        "Very low blood pressure can signal shock.",
        _low_systolic,
    ),
    Rule(
        "rapid-distension-breathing-difficulty", EMERGENCY,
        "Rapid abdominal distension with breathing difficulty needs immediate evaluation.",
        lambda s: s.symptoms.rapid_abdominal_distension and s.symptoms.shortness_of_breath,
    ),
    Rule(
        "no-urine-output", EMERGENCY,
        "No urine output can indicate kidney failure.",
        lambda s: s.symptoms.no_urine_output,
    ),
    Rule(
        "fainting-or-collapse", EMERGENCY,
        "Fainting or collapse requires immediate evaluation.",
        lambda s: s.symptoms.fainting_or_collapse,
    ),
    Rule(
        "emergency-red-flag-text", EMERGENCY,
        "Emergency warning signs were described in a recent note.",
        lambda s: _has_red_flag_of_tier(s, EMERGENCY),
    ),
)

URGENT_RULES = (
    Rule(
        "moderate-confusion", URGENT,
        "Moderate confusion needs same-day clinician review.",
        lambda s: s.symptoms.confusion_level == ConfusionLevel.MODERATE,
    ),
    Rule(
        "high-fever", URGENT,
        "Fever in ESLD can signal infection that needs quick follow-up.",
        _high_fever,
    ),
    Rule(
        "fluid-overload", URGENT,
        "Rapid ascites or weight gain suggests fluid overload.",
        _fluid_overload,
    ),
    Rule(
        "worsening-jaundice", URGENT,
        "Worsening jaundice should be reviewed within 24 hours.",
        lambda s: s.symptoms.jaundice_worsening,
    ),
    Rule(
        "missed-critical-med-confusion", URGENT,
        "A missed critical medication with confusion increases encephalopathy risk.",
        lambda s: s.symptoms.missed_critical_medication
        and s.symptoms.confusion_level in (ConfusionLevel.MILD, ConfusionLevel.MODERATE),
    ),
    Rule(
        "low-oxygen", URGENT,
        "Low oxygen saturation needs urgent evaluation.",
        _borderline_spo2,
    ),
    Rule(
        "fast-heart-rate", URGENT,
        "Fast heart rate can signal decompensation.",
        _fast_heart_rate,
    ),
    Rule(
        "urgent-red-flag-text", URGENT,
        "Concerning symptoms were described in a recent note.",
        lambda s: _has_red_flag_of_tier(s, URGENT),
    ),
)

ROUTINE_RULES = (
    Rule(
        "mild-confusion", ROUTINE,
        "Mild confusion should be reviewed at the next visit.",
        lambda s: s.symptoms.confusion_level == ConfusionLevel.MILD,
    ),
    Rule(
        "worsening-ascites", ROUTINE,
        "Worsening ascites should be discussed at the next appointment.",
        lambda s: s.symptoms.ascites_worsening,
    ),
    Rule(
        "worsening-edema", ROUTINE,
        "Worsening edema should be monitored and discussed.",
        lambda s: s.symptoms.edema_worsening,
    ),
    Rule(
        "missed-critical-med", ROUTINE,
        "A missed critical medication should be addressed with your care team.",
        lambda s: s.symptoms.missed_critical_medication,
    ),
    Rule(
        "abdominal-pain", ROUTINE,
        "Persistent abdominal discomfort should be mentioned at follow-up.",
        lambda s: s.symptoms.abdominal_pain_present,
    ),
)


def default_catalog() -> RuleCatalog:
    return RuleCatalog(emergency=EMERGENCY_RULES, urgent=URGENT_RULES, routine=ROUTINE_RULES)


ESLD_CATALOG = default_catalog()
