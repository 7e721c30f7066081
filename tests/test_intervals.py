import numpy as np
import pytest

from features.intervals import (
    filter_outlier_ibis,
    interval_rate,
    intervals_to_ms,
    peak_intervals,
    rate_from_peaks,
)


def test_single_outlier_is_rejected():
    kept = filter_outlier_ibis([20, 21, 19, 20, 80, 20])
    assert kept.tolist() == [20, 21, 19, 20, 20]
    assert interval_rate(kept, 30.0) == pytest.approx(90.0)


def test_zero_mad_keeps_everything():
    assert filter_outlier_ibis([25, 25, 25, 50]).tolist() == [25, 25, 25, 50]


def test_empty_intervals():
    assert filter_outlier_ibis([]).size == 0
    assert interval_rate([], 30.0) == 0.0


def test_peak_intervals():
    assert peak_intervals([3, 28, 53]).tolist() == [25, 25]
    assert peak_intervals([7]).size == 0


def test_intervals_to_ms():
    assert intervals_to_ms([30, 15], 30.0).tolist() == pytest.approx([1000, 500])


def test_rate_is_clamped_into_band():
    result = rate_from_peaks([0, 100, 200, 300], 30.0, band=(45.0, 200.0))
    assert result.rate == 45.0
    assert result.total == 3


def test_no_intervals_means_unavailable(recorder):
    result = rate_from_peaks([10], 30.0, band=(45.0, 200.0), observer=recorder, metric="heart_rate")
    assert not result.available
    assert result.rate == 0.0
    assert recorder.named("ibi_filtered") == [{"metric": "heart_rate", "kept": 0, "total": 0}]


def test_rate_from_regular_peaks():
    peaks = np.arange(0, 300, 25)
    result = rate_from_peaks(peaks, 30.0, band=(45.0, 200.0))
    assert result.rate == pytest.approx(72.0)
    assert result.kept.size == peaks.size - 1
