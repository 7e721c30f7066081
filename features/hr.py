"""
features/hr.py — Heart Rate estimation
========================================
Time-domain heart-rate estimation from a window of chrominance samples:

    window  →  detrend (±2 s)  →  3-sample smoothing  →  [high-pass]
            →  min-max normalise  →  adaptive-threshold peaks
            →  MAD-filtered inter-beat intervals  →  BPM

Peaks closer than 0.4 s are never both accepted, which caps the detectable
rate at 150 BPM; the reported rate is clamped to [45, 200] BPM.  Fewer than
`HR_MIN_PEAKS` peaks means "no reading" (0), never an exception.

These functions are stateless; temporal smoothing across calls lives in
`features.smoothing`.
"""

import numpy as np

from config import (
    DETREND_HALF_WINDOW,
    HIGHPASS_WINDOW,
    HR_MAX_BPM,
    HR_MIN_BPM,
    HR_MIN_PEAK_SPACING_S,
    HR_MIN_PEAKS,
    HR_PEAK_NEIGHBOURHOOD,
    HR_THRESHOLD_PERCENTILE,
    HR_USE_HIGHPASS,
    SMOOTHING_WINDOW,
)
from features.intervals import intervals_to_ms, rate_from_peaks
from rppg.filters import cardiac_filter
from rppg.peaks import detect_peaks
from utils.diagnostics import DiagnosticsObserver, NullObserver
from utils.logger import get_logger

logger = get_logger("features.hr")


def cardiac_min_distance(fs: float) -> int:
    """Minimum peak spacing in samples for the cardiac band (at least 1)."""
    return max(1, int(np.floor(fs * HR_MIN_PEAK_SPACING_S)))


def detect_cardiac_peaks(
    window: np.ndarray,
    fs: float,
    observer: DiagnosticsObserver | None = None,
    metric: str = "heart_rate",
) -> tuple[np.ndarray, np.ndarray]:
    """
    Filter `window` for the cardiac band and locate its pulse peaks.

    Returns
    -------
    filtered : ndarray  Normalised [0, 1] pulse waveform.
    peaks    : ndarray  Peak indices into `filtered`.
    """
    observer = observer or NullObserver()
    filtered = cardiac_filter(
        window,
        half_window=DETREND_HALF_WINDOW,
        smoothing_window=SMOOTHING_WINDOW,
        highpass_window=HIGHPASS_WINDOW if HR_USE_HIGHPASS else None,
    )
    peaks = detect_peaks(
        filtered,
        min_distance=cardiac_min_distance(fs),
        percentile=HR_THRESHOLD_PERCENTILE,
        neighbourhood=HR_PEAK_NEIGHBOURHOOD,
    )
    observer.on_event("peaks_detected", metric=metric, count=int(peaks.size), samples=int(filtered.size))
    return filtered, peaks


def estimate_heart_rate(
    window,
    fs: float,
    observer: DiagnosticsObserver | None = None,
) -> dict:
    """
    Estimate heart rate from one signal window.

    Parameters
    ----------
    window   : array-like, shape (N,)  Raw chrominance samples (oldest first).
    fs       : float                   Sampling frequency (Hz).
    observer : DiagnosticsObserver     Optional diagnostics sink.

    Returns
    -------
    dict with keys:
        hr_bpm          : float        Heart rate, 0.0 if unavailable.
        num_peaks       : int
        intervals_kept  : int          Intervals surviving outlier rejection.
        intervals_total : int
        rr_intervals_ms : list[float]  Retained inter-beat intervals (ms).
    """
    x = np.asarray(window, dtype=np.float64)
    _, peaks = detect_cardiac_peaks(x, fs, observer)

    if peaks.size < HR_MIN_PEAKS:
        logger.debug("Only %d peaks in %d samples — no HR reading.", peaks.size, x.size)
        return {
            "hr_bpm": 0.0,
            "num_peaks": int(peaks.size),
            "intervals_kept": 0,
            "intervals_total": max(0, int(peaks.size) - 1),
            "rr_intervals_ms": [],
        }

    result = rate_from_peaks(
        peaks, fs, band=(HR_MIN_BPM, HR_MAX_BPM), observer=observer, metric="heart_rate",
    )

    logger.debug(
        "HR estimate: %.1f BPM from %d peaks (%d/%d intervals kept)",
        result.rate, peaks.size, result.kept.size, result.total,
    )

    return {
        "hr_bpm": round(result.rate, 1),
        "num_peaks": int(peaks.size),
        "intervals_kept": int(result.kept.size),
        "intervals_total": result.total,
        "rr_intervals_ms": [round(float(v), 2) for v in intervals_to_ms(result.kept, fs)],
    }
