# app.py
# ESLD Daily Check-In

# Run:
#   pip install -e .
#   streamlit run app.py

# Notes:
# - This app does NOT provide medical advice. It demonstrates check-in triage for people with ESLD.
# - Triage is deterministic and auditable. Nothing typed into the journal can lower a triage level.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List

import streamlit as st

from esld_triage.history import TriageHistory
from esld_triage.journal import JournalEntry, create_journal_entry
from esld_triage.logging_utils import configure_logging
from esld_triage.meds import DoseLogEntry, MedConfigItem, adherence_snapshot
from esld_triage.models import TriageLevel
from esld_triage.normalize import parse_optional_float
from esld_triage.pipeline import run_check_in

configure_logging()


# -----------------------------
# Constants / Options
# -----------------------------
CONFUSION_OPTIONS = {
    "No": "none",
    "Mild (a bit foggy)": "mild",
    "Moderate (trouble following conversation)": "moderate",
    "Severe (very hard to wake or not making sense)": "severe",
}

ABDOMINAL_PAIN_OPTIONS = ["none", "mild", "moderate", "severe"]

URINE_OPTIONS = {
    "Normal": "normal",
    "Less than usual": "reduced",
    "None at all today": "none",
}

YES_NO_SYMPTOMS = {
    "vomiting_blood": "Vomited blood or material that looks like coffee grounds",
    "black_tarry_stools": "Black, tarry stools",
    "shortness_of_breath": "Shortness of breath",
    "rapid_abdominal_distension": "Belly swelling quickly (over hours)",
    "fainting_or_collapse": "Fainted or collapsed",
    "fever": "Feel feverish / chills",
    "jaundice_worsening": "Yellow skin or eyes getting worse",
    "ascites_worsening": "Belly fluid (ascites) getting worse",
    "edema_worsening": "Leg or ankle swelling getting worse",
}

MEDICATIONS = [
    MedConfigItem(id="lactulose", name="Lactulose", dose="20 g", critical=True),
    MedConfigItem(id="rifaximin", name="Rifaximin", dose="550 mg", critical=True),
    MedConfigItem(id="spironolactone", name="Spironolactone", dose="100 mg"),
    MedConfigItem(id="furosemide", name="Furosemide", dose="40 mg"),
]

DOSE_OPTIONS = ["Not logged yet", "Taken", "Missed"]


# -----------------------------
# Session state
# -----------------------------
def _journal() -> List[JournalEntry]:
    return st.session_state.setdefault("journal_entries", [])


def _history() -> TriageHistory:
    return st.session_state.setdefault("triage_history", TriageHistory())


# -----------------------------
# Streamlit UI
# -----------------------------
st.set_page_config(page_title="ESLD Daily Check-In", page_icon="🩺", layout="centered")
st.title("🩺 ESLD Daily Check-In")
st.caption("Rules-based triage for liver disease check-ins. Free-text notes can only raise concern, never lower it.")

with st.expander("Safety & Scope (read)", expanded=True):
    st.markdown(
        """
- This app is a **demo** and **not medical advice**.
- Triage is **deterministic** and based solely on your answers and notes.
- If you believe you are experiencing an emergency, **call local emergency services**.
"""
    )

st.subheader("Step 1 — Symptoms")
answers: Dict[str, object] = {}
for key, label in YES_NO_SYMPTOMS.items():
    answers[key] = st.checkbox(label, value=False, key=key)

confusion_label = st.selectbox("More confused or sleepy than usual?", list(CONFUSION_OPTIONS), index=0)
answers["confusion_level"] = CONFUSION_OPTIONS[confusion_label]
answers["abdominal_pain"] = st.select_slider("Abdominal pain today", options=ABDOMINAL_PAIN_OPTIONS, value="none")
urine_label = st.selectbox("Urine output today", list(URINE_OPTIONS), index=0)
answers["urine_output"] = URINE_OPTIONS[urine_label]

st.subheader("Step 2 — Vitals (optional)")
col1, col2, col3 = st.columns(3)
with col1:
    answers["temperature_f"] = parse_optional_float(st.text_input("Temperature (°F)", value=""))
    answers["heart_rate"] = parse_optional_float(st.text_input("Heart rate (bpm)", value=""))
with col2:
    answers["systolic_bp"] = parse_optional_float(st.text_input("Systolic BP", value=""))
    answers["diastolic_bp"] = parse_optional_float(st.text_input("Diastolic BP", value=""))
with col3:
    answers["oxygen_saturation"] = parse_optional_float(st.text_input("Oxygen saturation SpO₂ (%)", value=""))
    answers["weight_change_lbs"] = parse_optional_float(st.text_input("Weight change since yesterday (lbs)", value=""))

st.subheader("Step 3 — Medications today")
today = datetime.now(timezone.utc).date()
dose_log: List[DoseLogEntry] = []
for med in MEDICATIONS:
    label = f"{med.name} {med.dose}" + (" (critical)" if med.critical else "")
    choice = st.selectbox(label, DOSE_OPTIONS, index=0, key=f"dose_{med.id}")
    if choice != "Not logged yet":
        dose_log.append(DoseLogEntry(med_id=med.id, day=today, taken=choice == "Taken"))
adherence = adherence_snapshot(MEDICATIONS, dose_log, today)
answers["missed_meds"] = any(not e.taken for e in dose_log)
answers["missed_med_ids"] = [e.med_id for e in dose_log if not e.taken]

st.subheader("Step 4 — Notes (optional)")
author = st.radio("Who is writing?", ["patient", "caregiver"], horizontal=True)
note = st.text_area("Anything else you want to share?", value="")
save_to_journal = st.checkbox("Save this note to the journal", value=True)

st.divider()

submitted = st.button("Submit Check-In", type="primary")

if submitted:
    now = datetime.now(timezone.utc)
    if note.strip() and save_to_journal:
        _journal().append(create_journal_entry(note, author=author, created_at=now))
    else:
        answers["notes"] = note

    result = run_check_in(
        answers,
        med_adherence=adherence,
        journal_entries=_journal(),
        now=now,
        history=_history(),
    )
    decision = result.decision

    st.subheader("Triage Result")
    message = f"Triage level: **{decision.level.value}** — {decision.recommended_action}"
    if decision.level == TriageLevel.EMERGENCY:
        st.error(message)
    elif decision.level == TriageLevel.URGENT:
        st.warning(message)
    elif decision.level == TriageLevel.ROUTINE:
        st.info(message)
    else:
        st.success(message)

    with st.expander("Why (rules-based)", expanded=True):
        for r in decision.reasons:
            st.markdown(f"- {r}")

    with st.expander("Debug: decision record JSON"):
        st.json(result.record.to_dict())

if len(_history()):
    with st.expander(f"Check-in history ({len(_history())})"):
        for record in reversed(_history().records):
            st.markdown(f"- {record.created_at:%Y-%m-%d %H:%M} UTC — **{record.level.value}**")

st.caption("Share the decision record with your care team; the rationale lists every rule that fired.")
