# tests/test_normalize.py
import pytest

from esld_triage.models import (
    AbdominalPainLevel,
    AdherenceStatus,
    ConfusionLevel,
    MedAdherenceItem,
)
from esld_triage.normalize import normalize, parse_bool, parse_optional_float

LACTULOSE = "lactulose"
DIURETIC = "furosemide"


def _adherence(lactulose_status="taken", diuretic_status="taken"):
    return [
        MedAdherenceItem(med_id=LACTULOSE, name="Lactulose", status=AdherenceStatus(lactulose_status), is_critical=True),
        MedAdherenceItem(med_id=DIURETIC, name="Furosemide", status=AdherenceStatus(diuretic_status)),
    ]


def test_absent_answers_resolve_to_false_and_unknown():
    snap = normalize({})
    s = snap.symptoms
    assert not any([
        s.vomiting_blood, s.black_tarry_stools, s.severe_abdominal_pain, s.abdominal_pain_present,
        s.shortness_of_breath, s.jaundice_worsening, s.edema_worsening, s.ascites_worsening,
        s.fever, s.missed_critical_medication, s.rapid_abdominal_distension, s.no_urine_output,
        s.fainting_or_collapse,
    ])
    assert s.confusion_level == ConfusionLevel.NONE
    assert snap.vitals.temperature_c is None
    assert snap.vitals.oxygen_saturation is None
    assert snap.weight_gain_kg_24h is None
    assert snap.red_flags == ()


def test_non_mapping_answers_do_not_raise():
    assert normalize(None) == normalize({})
    assert normalize(["vomiting_blood"]) == normalize({})


def test_malformed_values_are_not_asserted():
    snap = normalize({
        "vomiting_blood": "maybe",
        "fever": 1,
        "confusion_level": 3,
        "abdominal_pain": "excruciating",
        "heart_rate": "fast",
        "oxygen_saturation": True,
        "weight_change_lbs": [4],
    })
    assert snap.symptoms.vomiting_blood is False
    assert snap.symptoms.fever is False
    assert snap.symptoms.confusion_level == ConfusionLevel.NONE
    assert snap.symptoms.abdominal_pain_level == AbdominalPainLevel.NONE
    assert snap.vitals.heart_rate is None
    assert snap.vitals.oxygen_saturation is None
    assert snap.weight_gain_kg_24h is None


def test_yes_strings_count_as_true():
    snap = normalize({"vomiting_blood": "Yes", "jaundice_worsening": "true"})
    assert snap.symptoms.vomiting_blood
    assert snap.symptoms.jaundice_worsening


@pytest.mark.parametrize(
    "level, present, severe",
    [
        ("none", False, False),
        ("mild", True, False),
        ("Moderate", True, False),
        ("severe", True, True),
    ],
)
def test_abdominal_pain_ordinal(level, present, severe):
    s = normalize({"abdominal_pain": level}).symptoms
    assert s.abdominal_pain_present is present
    assert s.severe_abdominal_pain is severe


def test_legacy_severe_confusion_flag():
    assert normalize({"severe_confusion": True}).symptoms.confusion_level == ConfusionLevel.SEVERE


def test_weight_gain_in_pounds_converts_to_kg():
    snap = normalize({"weight_change_lbs": 5})
    assert snap.weight_gain_kg_24h == pytest.approx(5 * 0.453592)


def test_weight_loss_is_not_recorded():
    assert normalize({"weight_change_lbs": -3}).weight_gain_kg_24h is None
    assert normalize({"weight_change_kg": 0}).weight_gain_kg_24h is None


def test_kilograms_take_precedence_over_pounds():
    assert normalize({"weight_change_kg": 2.4, "weight_change_lbs": 1}).weight_gain_kg_24h == 2.4


def test_fahrenheit_temperature_converts_to_celsius():
    assert normalize({"temperature_f": 101.3}).vitals.temperature_c == pytest.approx(38.5)
    assert normalize({"temperature_c": 37.0, "temperature_f": 104}).vitals.temperature_c == 37.0


def test_numeric_strings_are_parsed():
    v = normalize({"heart_rate": " 112 ", "systolic_bp": "95", "diastolic_bp": "60"}).vitals
    assert v.heart_rate == 112.0
    assert v.systolic_bp == 95.0
    assert v.diastolic_bp == 60.0


def test_urine_output_none():
    assert normalize({"urine_output": "None"}).symptoms.no_urine_output
    assert not normalize({"urine_output": "reduced"}).symptoms.no_urine_output


def test_self_reported_missed_critical_dose():
    snap = normalize({"missed_meds": True, "missed_med_ids": [LACTULOSE]}, med_adherence=_adherence())
    assert snap.symptoms.missed_critical_medication


def test_self_reported_missed_non_critical_dose():
    snap = normalize({"missed_meds": True, "missed_med_ids": [DIURETIC]}, med_adherence=_adherence())
    assert not snap.symptoms.missed_critical_medication


def test_missed_meds_without_ids_is_not_asserted():
    snap = normalize({"missed_meds": True}, med_adherence=_adherence())
    assert not snap.symptoms.missed_critical_medication


def test_adherence_snapshot_alone_shows_missed_critical():
    snap = normalize({"missed_meds": False}, med_adherence=_adherence(lactulose_status="missed"))
    assert snap.symptoms.missed_critical_medication


def test_unknown_adherence_is_not_missed():
    snap = normalize({}, med_adherence=_adherence(lactulose_status="unknown"))
    assert not snap.symptoms.missed_critical_medication


def test_malformed_adherence_entries_are_ignored():
    snap = normalize({}, med_adherence=[{"med_id": LACTULOSE, "status": "missed"}, None])
    assert not snap.symptoms.missed_critical_medication


def test_red_flags_override_structured_answers():
    snap = normalize(
        {"vomiting_blood": False, "black_tarry_stools": False, "fever": False, "abdominal_pain": "mild"},
        journal_red_flags=["Vomited blood", "black stools", "severe belly pain", "high fever"],
    )
    s = snap.symptoms
    assert s.vomiting_blood
    assert s.black_tarry_stools
    assert s.severe_abdominal_pain
    assert s.abdominal_pain_level == AbdominalPainLevel.SEVERE
    assert s.fever
    assert snap.red_flags == ("vomited blood", "black stools", "severe belly pain", "high fever")


def test_red_flags_only_raise_confusion():
    assert normalize({}, journal_red_flags=["confusion"]).symptoms.confusion_level == ConfusionLevel.MODERATE
    assert (
        normalize({"confusion_level": "severe"}, journal_red_flags=["confusion"]).symptoms.confusion_level
        == ConfusionLevel.SEVERE
    )
    assert normalize({}, journal_red_flags=["cannot wake"]).symptoms.confusion_level == ConfusionLevel.SEVERE


def test_unknown_red_flag_phrases_do_not_change_snapshot():
    assert normalize({}, journal_red_flags=["felt tired", 42]) == normalize({})


def test_parsers():
    assert parse_bool(True) is True
    assert parse_bool("no") is False
    assert parse_bool(None) is False
    assert parse_optional_float("3.5") == 3.5
    assert parse_optional_float("inf") is None
    assert parse_optional_float(False) is None
