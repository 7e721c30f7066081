import numpy as np
import pytest

from features.quality import signal_quality


def test_ratio_scaled():
    # std 1, mean 2
    assert signal_quality([1.0, 3.0]) == pytest.approx(25.0)


def test_clamped_to_100():
    assert signal_quality([1.0, -0.9]) == 100.0


@pytest.mark.parametrize("window", [[], [0.0, 0.0, 0.0], [0.0005, -0.0005], np.full(90, -0.08)])
def test_degenerate_windows_score_zero(window):
    assert signal_quality(window) == pytest.approx(0.0, abs=1e-9)


def test_pulsating_signal_scores_above_flat(pulse_signal):
    assert signal_quality(pulse_signal[-90:]) > signal_quality(np.full(90, pulse_signal.mean()))
