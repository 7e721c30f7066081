import pytest

from model.biomarkers import (
    BiomarkerSnapshot,
    calculate_parasympathetic_health,
    calculate_wellness,
    derive_biomarkers,
    estimate_blood_pressure,
)


def test_blood_pressure_baseline():
    assert estimate_blood_pressure(60) == (90.0, 60.0)
    assert estimate_blood_pressure(100) == (102.0, 66.0)


def test_blood_pressure_age_and_amplitude_terms():
    assert estimate_blood_pressure(60, age=50) == (98.0, 64.0)
    assert estimate_blood_pressure(60, amplitude=0.1) == pytest.approx((93.0, 61.5))


def test_blood_pressure_is_clamped():
    assert estimate_blood_pressure(500) == (180.0, 120.0)
    assert estimate_blood_pressure(0) == (80.0, 51.0)


def test_parasympathetic_health():
    assert calculate_parasympathetic_health(50, 60) == 75.0
    assert calculate_parasympathetic_health(100, 60) == 100.0
    assert calculate_parasympathetic_health(0, 400) == 0.0


def test_wellness_at_ideal_values():
    assert calculate_wellness(65, 16, 100, 120, 100) == 100.0


def test_no_signal_snapshot():
    snapshot = derive_biomarkers(0, 0, 0, 0, timestamp=12.0)
    assert snapshot.heart_rate == 0.0
    assert snapshot.systolic_bp == 80.0
    assert snapshot.diastolic_bp == 51.0
    assert snapshot.parasympathetic_health == 35.0
    assert snapshot.wellness_value == 45.0
    assert snapshot.stress_index == 44.6
    assert snapshot.timestamp == 12.0


def test_derivation_is_pure():
    args = dict(heart_rate=72.0, breathing_rate=15.0, hrv=40.0, signal_quality=20.0,
                amplitude=0.02, age=40, timestamp=1.0)
    assert derive_biomarkers(**args) == derive_biomarkers(**args)


@pytest.mark.parametrize("hr,br,hrv", [(45, 8, 0), (200, 30, 100), (72, 15, 50)])
def test_indices_stay_in_range(hr, br, hrv):
    s = derive_biomarkers(hr, br, hrv, 50.0)
    assert 80 <= s.systolic_bp <= 180
    assert 50 <= s.diastolic_bp <= 120
    for value in (s.parasympathetic_health, s.wellness_value, s.stress_index):
        assert 0 <= value <= 100


def test_snapshot_dict():
    data = derive_biomarkers(72, 15, 40, 30).to_dict()
    assert set(data) == {f for f in BiomarkerSnapshot.__dataclass_fields__}
    assert data["heart_rate"] == 72.0
