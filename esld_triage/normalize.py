# esld_triage/normalize.py
"""
Turns a loosely typed answer map from the check-in form into a
CheckInSnapshot.

Nothing in here raises on bad data. A malformed or missing answer is treated
as "not reported": booleans resolve to False and numbers to None, so unknown
vitals never take part in threshold rules.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from esld_triage.config import LBS_TO_KG
from esld_triage.models import (
    AbdominalPainLevel,
    AdherenceStatus,
    CheckInSnapshot,
    ConfusionLevel,
    MedAdherenceItem,
    Symptoms,
    Vitals,
)
from esld_triage.red_flags import RED_FLAG_KEYWORDS

_TRUE_STRINGS = {"yes", "true", "y"}

_CONFUSION_ORDER = [
    ConfusionLevel.NONE,
    ConfusionLevel.MILD,
    ConfusionLevel.MODERATE,
    ConfusionLevel.SEVERE,
]

# Red-flag keyword -> structured fields it forces on.
_BLEEDING_UPPER = {"vomited blood", "throwing up blood"}
_BLEEDING_LOWER = {"black stool", "black stools", "black tarry stools", "bloody stool"}
_SEVERE_PAIN = {"severe abdominal pain", "severe belly pain"}
_BREATHING = {"shortness of breath", "severe shortness of breath"}


# -----------------------------
# Parsers
# -----------------------------
def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def parse_optional_float(value: Any) -> Optional[float]:
    # bool is an int subclass; True must not become 1.0
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            number = float(s)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _parse_choice(value: Any, enum_cls, default):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return default
    return default


def _parse_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip().lower()
    return ""


def _raise_confusion(current: ConfusionLevel, floor: ConfusionLevel) -> ConfusionLevel:
    if _CONFUSION_ORDER.index(floor) > _CONFUSION_ORDER.index(current):
        return floor
    return current


# -----------------------------
# Field groups
# -----------------------------
def _temperature_c(answers: Mapping[str, Any]) -> Optional[float]:
    temp_c = parse_optional_float(answers.get("temperature_c"))
    if temp_c is not None:
        return temp_c
    temp_f = parse_optional_float(answers.get("temperature_f"))
    if temp_f is not None:
        return round((temp_f - 32) * 5 / 9, 2)
    return None


def _weight_gain_kg(answers: Mapping[str, Any]) -> Optional[float]:
    # Only gain is a fluid-overload signal; loss or no change stays unknown.
    kg = parse_optional_float(answers.get("weight_change_kg"))
    if kg is None:
        lbs = parse_optional_float(answers.get("weight_change_lbs"))
        if lbs is not None:
            kg = lbs * LBS_TO_KG
    if kg is None or kg <= 0:
        return None
    return kg


def _vitals(answers: Mapping[str, Any]) -> Vitals:
    return Vitals(
        temperature_c=_temperature_c(answers),
        heart_rate=parse_optional_float(answers.get("heart_rate")),
        systolic_bp=parse_optional_float(answers.get("systolic_bp")),
        diastolic_bp=parse_optional_float(answers.get("diastolic_bp")),
        oxygen_saturation=parse_optional_float(answers.get("oxygen_saturation")),
    )


def _valid_adherence(items: Optional[Iterable[Any]]) -> List[MedAdherenceItem]:
    if not items:
        return []
    return [item for item in items if isinstance(item, MedAdherenceItem)]


def _missed_critical_medication(
    answers: Mapping[str, Any],
    med_adherence: Optional[Iterable[Any]],
) -> bool:
    adherence = _valid_adherence(med_adherence)
    critical_ids = {item.med_id for item in adherence if item.is_critical}

    if any(item.is_critical and item.status == AdherenceStatus.MISSED for item in adherence):
        return True

    if not parse_bool(answers.get("missed_meds")):
        return False
    missed_ids = answers.get("missed_med_ids")
    if not isinstance(missed_ids, (list, tuple, set, frozenset)):
        return False
    return any(isinstance(med_id, str) and med_id in critical_ids for med_id in missed_ids)


def _canonical_red_flags(journal_red_flags: Optional[Iterable[Any]]) -> List[str]:
    if not journal_red_flags or isinstance(journal_red_flags, str):
        return []
    present: Set[str] = set()
    for flag in journal_red_flags:
        if isinstance(flag, str):
            present.add(flag.strip().lower())
    return [kw for kw in RED_FLAG_KEYWORDS if kw in present]


# -----------------------------
# Public API
# -----------------------------
def normalize(
    answers: Optional[Mapping[str, Any]],
    med_adherence: Optional[Iterable[MedAdherenceItem]] = None,
    journal_red_flags: Optional[Iterable[str]] = None,
) -> CheckInSnapshot:
    """
    Build the canonical snapshot for one check-in.

    ``journal_red_flags`` is an override layer: a red-flag keyword forces its
    structured symptom on, regardless of the structured answer. It can add
    concern but never remove it.
    """
    if not isinstance(answers, Mapping):
        answers = {}

    pain = _parse_choice(answers.get("abdominal_pain"), AbdominalPainLevel, AbdominalPainLevel.NONE)
    confusion = _parse_choice(answers.get("confusion_level"), ConfusionLevel, ConfusionLevel.NONE)
    if parse_bool(answers.get("severe_confusion")):
        confusion = ConfusionLevel.SEVERE

    fields: Dict[str, Any] = {
        "vomiting_blood": parse_bool(answers.get("vomiting_blood")),
        "black_tarry_stools": parse_bool(answers.get("black_tarry_stools")),
        "shortness_of_breath": parse_bool(answers.get("shortness_of_breath")),
        "jaundice_worsening": parse_bool(answers.get("jaundice_worsening")),
        "edema_worsening": parse_bool(answers.get("edema_worsening")),
        "ascites_worsening": parse_bool(answers.get("ascites_worsening")),
        "fever": parse_bool(answers.get("fever")),
        "rapid_abdominal_distension": parse_bool(answers.get("rapid_abdominal_distension")),
        "fainting_or_collapse": parse_bool(answers.get("fainting_or_collapse")),
        "no_urine_output": _parse_text(answers.get("urine_output")) == "none",
        "missed_critical_medication": _missed_critical_medication(answers, med_adherence),
    }

    red_flags = _canonical_red_flags(journal_red_flags)
    for flag in red_flags:
        if flag in _BLEEDING_UPPER:
            fields["vomiting_blood"] = True
        elif flag in _BLEEDING_LOWER:
            fields["black_tarry_stools"] = True
        elif flag in _SEVERE_PAIN:
            pain = AbdominalPainLevel.SEVERE
        elif flag in _BREATHING:
            fields["shortness_of_breath"] = True
        elif flag == "high fever":
            fields["fever"] = True
        elif flag == "passing out":
            fields["fainting_or_collapse"] = True
        elif flag == "cannot wake":
            confusion = ConfusionLevel.SEVERE
        elif flag == "confusion":
            confusion = _raise_confusion(confusion, ConfusionLevel.MODERATE)

    symptoms = Symptoms(
        severe_abdominal_pain=pain == AbdominalPainLevel.SEVERE,
        abdominal_pain_present=pain != AbdominalPainLevel.NONE,
        abdominal_pain_level=pain,
        confusion_level=confusion,
        **fields,
    )

    return CheckInSnapshot(
        symptoms=symptoms,
        vitals=_vitals(answers),
        weight_gain_kg_24h=_weight_gain_kg(answers),
        red_flags=tuple(red_flags),
    )
