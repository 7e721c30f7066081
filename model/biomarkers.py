"""
model/biomarkers.py — Derived biomarker indices
=================================================

⚠️⚠️⚠️  DISCLAIMER ⚠️⚠️⚠️
Blood pressure, parasympathetic health, wellness and stress values produced
here are HEURISTIC ESTIMATES computed from heart rate, breathing rate and
HRV.  They are NOT measurements and have NOT been clinically validated.
Use them only as rough wellness indicators.
⚠️⚠️⚠️

────────────────────────────────────────────────────────────────────────
Formulas
────────────────────────────────────────────────────────────────────────
    systolic  = 90 + (HR − 60)·0.3  + amplitude·30 [+ (age − 30)·0.4]   ∈ [80, 180]
    diastolic = 60 + (HR − 60)·0.15 + amplitude·15 [+ (age − 30)·0.2]   ∈ [50, 120]

    parasympathetic = HRV/100·50 + max(0, (100 − |HR − 60|/2)·0.5)       ∈ [0, 100]

    wellness = 0.20·hr_score + 0.15·br_score + 0.25·HRV
             + 0.20·bp_score + 0.20·parasympathetic                       ∈ [0, 100]
        hr_score = max(0, 100 − |HR − 65|/1.5)
        br_score = max(0, 100 − |BR − 16|/0.8)
        bp_score = max(0, 100 − |SYS − 120|/1.5)

    stress: see model/stress.py

Every constant lives in config.py.  `derive_biomarkers` is pure: the same
arguments always produce an identical snapshot (the timestamp is an input).
────────────────────────────────────────────────────────────────────────
"""

from dataclasses import asdict, dataclass

from config import (
    BP_AGE_REFERENCE,
    BP_DIASTOLIC_AGE_GAIN,
    BP_DIASTOLIC_AMPLITUDE_GAIN,
    BP_DIASTOLIC_BASE,
    BP_DIASTOLIC_HR_SLOPE,
    BP_DIASTOLIC_RANGE,
    BP_SYSTOLIC_AGE_GAIN,
    BP_SYSTOLIC_AMPLITUDE_GAIN,
    BP_SYSTOLIC_BASE,
    BP_SYSTOLIC_HR_SLOPE,
    BP_SYSTOLIC_RANGE,
    IDEAL_BREATHING_RATE,
    IDEAL_HR,
    IDEAL_PARASYMPATHETIC_HR,
    IDEAL_SYSTOLIC,
    WELLNESS_WEIGHTS,
)
from model.stress import calculate_stress_index


@dataclass(frozen=True)
class BiomarkerSnapshot:
    """One derivation result.  Zero heart/breathing/HRV values mean "unavailable"."""
    heart_rate: float
    breathing_rate: float
    hrv: float
    systolic_bp: float
    diastolic_bp: float
    parasympathetic_health: float
    wellness_value: float
    stress_index: float
    signal_quality: float
    timestamp: float

    def to_dict(self) -> dict:
        return asdict(self)


def _clip(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def estimate_blood_pressure(
    heart_rate: float,
    amplitude: float = 0.0,
    age: float | None = None,
) -> tuple[float, float]:
    """
    Heuristic (systolic, diastolic) in mmHg.

    Parameters
    ----------
    heart_rate : float         BPM.
    amplitude  : float         Peak-to-trough range of the raw pulse signal.
    age        : float | None  Optional externally supplied age estimate.
    """
    systolic = BP_SYSTOLIC_BASE + (heart_rate - 60.0) * BP_SYSTOLIC_HR_SLOPE + amplitude * BP_SYSTOLIC_AMPLITUDE_GAIN
    diastolic = BP_DIASTOLIC_BASE + (heart_rate - 60.0) * BP_DIASTOLIC_HR_SLOPE + amplitude * BP_DIASTOLIC_AMPLITUDE_GAIN

    if age is not None:
        systolic += (age - BP_AGE_REFERENCE) * BP_SYSTOLIC_AGE_GAIN
        diastolic += (age - BP_AGE_REFERENCE) * BP_DIASTOLIC_AGE_GAIN

    systolic = _clip(systolic, *BP_SYSTOLIC_RANGE)
    diastolic = _clip(diastolic, *BP_DIASTOLIC_RANGE)
    return round(systolic, 1), round(diastolic, 1)


def calculate_parasympathetic_health(hrv: float, heart_rate: float) -> float:
    """Up to 50 points from HRV plus up to 50 points for a resting HR near 60 BPM."""
    hrv_points = hrv / 100.0 * 50.0
    hr_points = max(0.0, (100.0 - abs(heart_rate - IDEAL_PARASYMPATHETIC_HR) / 2.0) * 0.5)
    return round(_clip(hrv_points + hr_points, 0.0, 100.0), 1)


def calculate_wellness(
    heart_rate: float,
    breathing_rate: float,
    hrv: float,
    systolic_bp: float,
    parasympathetic: float,
) -> float:
    scores = {
        "heart_rate": max(0.0, 100.0 - abs(heart_rate - IDEAL_HR) / 1.5),
        "breathing_rate": max(0.0, 100.0 - abs(breathing_rate - IDEAL_BREATHING_RATE) / 0.8),
        "hrv": hrv,
        "blood_pressure": max(0.0, 100.0 - abs(systolic_bp - IDEAL_SYSTOLIC) / 1.5),
        "parasympathetic": parasympathetic,
    }
    wellness = sum(WELLNESS_WEIGHTS[name] * value for name, value in scores.items())
    return round(_clip(wellness, 0.0, 100.0), 1)


def derive_biomarkers(
    heart_rate: float,
    breathing_rate: float,
    hrv: float,
    signal_quality: float,
    amplitude: float = 0.0,
    age: float | None = None,
    timestamp: float = 0.0,
) -> BiomarkerSnapshot:
    """
    Combine the smoothed metrics into a full `BiomarkerSnapshot`.

    Parameters
    ----------
    heart_rate     : float         Smoothed HR (BPM), 0 if unavailable.
    breathing_rate : float         Smoothed breaths/min, 0 if unavailable.
    hrv            : float         HRV score 0–100.
    signal_quality : float         Quality score 0–100 (carried into the snapshot).
    amplitude      : float         Raw signal peak-to-trough range (BP term).
    age            : float | None  Optional age estimate (BP term).
    timestamp      : float         Epoch seconds stamped on the snapshot.
    """
    systolic, diastolic = estimate_blood_pressure(heart_rate, amplitude, age)
    parasympathetic = calculate_parasympathetic_health(hrv, heart_rate)
    wellness = calculate_wellness(heart_rate, breathing_rate, hrv, systolic, parasympathetic)
    stress = calculate_stress_index(heart_rate, breathing_rate, hrv, parasympathetic)

    return BiomarkerSnapshot(
        heart_rate=float(heart_rate),
        breathing_rate=float(breathing_rate),
        hrv=float(hrv),
        systolic_bp=systolic,
        diastolic_bp=diastolic,
        parasympathetic_health=parasympathetic,
        wellness_value=wellness,
        stress_index=stress,
        signal_quality=float(signal_quality),
        timestamp=float(timestamp),
    )
