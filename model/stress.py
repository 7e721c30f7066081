"""
model/stress.py — Stress index
================================

⚠️  DISCLAIMER: This is a heuristic WELLNESS INDICATOR, not a validated
    clinical stress measure.  True psychological stress is multi-factorial
    and cannot be reliably inferred from a short rPPG recording alone.

────────────────────────────────────────────────────────────────────────
Rationale
────────────────────────────────────────────────────────────────────────
Under acute stress the sympathetic branch of the autonomic nervous system
dominates: resting heart rate and breathing rate rise, heart-rate
variability and vagal (parasympathetic) tone fall.  The index blends four
deviation terms with equal weight:

    hr_stress  = |HR − 65| / 1.5
    br_stress  = |BR − 16| / 0.8
    hrv_stress = (100 − HRV) / 2
    ps_stress  = 100 − parasympathetic

    stress = Σ wᵢ · termᵢ,  clamped to [0, 100]

The category thresholds (35 / 60) are population-level guesses and will
not fit every individual.
────────────────────────────────────────────────────────────────────────
"""

from config import (
    IDEAL_BREATHING_RATE,
    IDEAL_HR,
    STRESS_LEVEL_HIGH,
    STRESS_LEVEL_MODERATE,
    STRESS_WEIGHTS,
)


def calculate_stress_index(
    heart_rate: float,
    breathing_rate: float,
    hrv: float,
    parasympathetic: float,
) -> float:
    """Blend the four deviation-from-ideal terms into a 0–100 stress index."""
    terms = {
        "heart_rate": abs(heart_rate - IDEAL_HR) / 1.5,
        "breathing_rate": abs(breathing_rate - IDEAL_BREATHING_RATE) / 0.8,
        "hrv": (100.0 - hrv) / 2.0,
        "parasympathetic": 100.0 - parasympathetic,
    }
    index = sum(STRESS_WEIGHTS[name] * value for name, value in terms.items())
    return round(max(0.0, min(100.0, index)), 1)


_DESCRIPTIONS = {
    "Low": (
        "Heart rate, breathing and HRV are close to relaxed resting values. "
        "This is a positive indicator for overall wellness."
    ),
    "Moderate": (
        "Your readings indicate a moderate level of autonomic activation. "
        "Consider taking a short break or practising deep breathing."
    ),
    "High": (
        "Your readings suggest elevated sympathetic nervous system activity, "
        "which may indicate stress or recent physical exertion. "
        "Try relaxation techniques and ensure adequate rest."
    ),
}


def classify_stress(stress_index: float, heart_rate: float = 0.0) -> dict:
    """
    Map a stress index to a category.

    Returns
    -------
    dict with keys ``level`` ("Unknown" | "Low" | "Moderate" | "High"),
    ``score`` and ``description``.  Without a heart-rate reading the level
    is "Unknown".
    """
    if heart_rate <= 0:
        return {
            "level": "Unknown",
            "score": stress_index,
            "description": (
                "Not enough signal to estimate stress yet. "
                "Keep your face visible and still."
            ),
        }

    if stress_index >= STRESS_LEVEL_HIGH:
        level = "High"
    elif stress_index >= STRESS_LEVEL_MODERATE:
        level = "Moderate"
    else:
        level = "Low"

    return {"level": level, "score": stress_index, "description": _DESCRIPTIONS[level]}
