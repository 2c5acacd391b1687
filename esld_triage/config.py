# esld_triage/config.py
from __future__ import annotations

from datetime import timedelta

# -----------------------------
# Clinical thresholds
# -----------------------------
FEVER_TEMP_C = 38.0             # fever present (100.4°F)
HIGH_FEVER_TEMP_C = 38.3        # urgent infection threshold
LOW_SPO2_EMERGENCY = 90         # SpO₂ below this is an emergency
LOW_SPO2_URGENT = 92            # SpO₂ in [90, 92) is urgent
LOW_SYSTOLIC_BP = 90            # systolic below this can signal shock
FAST_HEART_RATE = 110           # bpm
FLUID_OVERLOAD_GAIN_KG = 2.0    # kg gained in 24 h with worsening ascites

# -----------------------------
# Units
# -----------------------------
LBS_TO_KG = 0.453592

# -----------------------------
# Free text
# -----------------------------
RED_FLAG_WINDOW = timedelta(hours=24)
NEGATION_WINDOW_WORDS = 4

# -----------------------------
# Actions shown with each level
# -----------------------------
RECOMMENDED_ACTIONS = {
    "emergency": "Call emergency services or go to the nearest ER now.",
    "urgent": "Contact your transplant or liver clinic within 24 hours.",
    "routine": "Discuss these findings at your next appointment.",
    "self-monitor": "Continue monitoring and complete your next check-in as scheduled.",
}

SELF_MONITOR_REASON = "No concerning ESLD symptoms reported today."
