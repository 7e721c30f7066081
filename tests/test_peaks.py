import numpy as np
import pytest

from rppg.filters import cardiac_filter
from rppg.peaks import adaptive_threshold, detect_peaks, local_maxima


def test_adaptive_threshold_nearest_rank():
    assert adaptive_threshold(np.array([5.0, 1, 4, 2, 3]), 0.5) == 3.0
    assert adaptive_threshold(np.array([5.0, 1, 4, 2, 3]), 1.0) == 5.0


def test_adaptive_threshold_rejects_bad_percentile():
    with pytest.raises(ValueError):
        adaptive_threshold(np.ones(3), 1.5)


def test_plateau_is_not_a_peak():
    assert local_maxima(np.array([0.0, 1, 1, 0]), 1).size == 0
    assert local_maxima(np.array([0.0, 1, 0.5, 0]), 1).tolist() == [1]


def test_short_signal_has_no_local_maxima():
    assert local_maxima(np.array([0.0, 1, 0]), 2).size == 0


def test_first_found_wins_within_min_distance():
    x = np.zeros(12)
    x[2] = 0.8
    x[6] = 1.0
    # index 6 is higher but falls inside the exclusion zone of index 2
    assert detect_peaks(x, min_distance=5, percentile=0.6, neighbourhood=1).tolist() == [2]
    assert detect_peaks(x, min_distance=4, percentile=0.6, neighbourhood=1).tolist() == [2, 6]


def test_threshold_is_strict():
    x = np.zeros(12)
    x[3] = 1.0
    x[8] = 1.0
    # the 0.9 percentile of this window is 1.0 itself
    assert detect_peaks(x, min_distance=1, percentile=0.9, neighbourhood=1).size == 0


def test_sine_peaks_are_spaced_and_deterministic():
    t = np.arange(300) / 30.0
    filtered = cardiac_filter(np.sin(2 * np.pi * 1.2 * t))
    first = detect_peaks(filtered, min_distance=12)
    second = detect_peaks(filtered, min_distance=12)

    assert np.array_equal(first, second)
    assert first.size >= 10
    assert np.all(np.diff(first) >= 12)
    assert np.all(np.abs(np.diff(first) - 25) <= 1)


def test_empty_signal():
    assert detect_peaks([], min_distance=5).size == 0


@pytest.mark.parametrize("kwargs", [{"min_distance": 0}, {"min_distance": 3, "neighbourhood": 0}])
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        detect_peaks(np.zeros(10), **kwargs)
