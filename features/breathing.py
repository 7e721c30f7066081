"""
features/breathing.py — Breathing rate estimation
===================================================
Respiration modulates the facial colour signal at 0.13–0.5 Hz (8–30
breaths/min), well below the cardiac band.  A long detrend removes lighting
drift, a trailing 2 s mean removes the pulse, and the remaining slow wave is
run through the same peak / interval machinery as heart rate with breathing
parameters:

* minimum peak spacing 2 s (30 breaths/min ceiling),
* local-maximum neighbourhood equal to that spacing,
* median threshold,
* result clamped to [8, 30] breaths/min.
"""

import numpy as np

from config import (
    BR_DETREND_HALF_WINDOW,
    BR_LOWPASS_SECONDS,
    BR_MAX_RPM,
    BR_MIN_PEAK_SPACING_S,
    BR_MIN_PEAKS,
    BR_MIN_RPM,
    BR_THRESHOLD_PERCENTILE,
)
from features.intervals import rate_from_peaks
from rppg.filters import respiratory_filter
from rppg.peaks import detect_peaks
from utils.diagnostics import DiagnosticsObserver, NullObserver
from utils.logger import get_logger

logger = get_logger("features.breathing")


def estimate_breathing_rate(
    window,
    fs: float,
    observer: DiagnosticsObserver | None = None,
) -> dict:
    """
    Estimate breathing rate from one signal window.

    Returns
    -------
    dict with keys ``br_rpm`` (0.0 if unavailable), ``num_peaks``,
    ``intervals_kept`` and ``intervals_total``.
    """
    observer = observer or NullObserver()
    x = np.asarray(window, dtype=np.float64)

    lowpass = max(1, int(np.floor(fs * BR_LOWPASS_SECONDS)))
    min_distance = max(1, int(np.floor(fs * BR_MIN_PEAK_SPACING_S)))

    filtered = respiratory_filter(x, lowpass, half_window=BR_DETREND_HALF_WINDOW)
    peaks = detect_peaks(
        filtered,
        min_distance=min_distance,
        percentile=BR_THRESHOLD_PERCENTILE,
        neighbourhood=min_distance,
    )
    observer.on_event("peaks_detected", metric="breathing_rate", count=int(peaks.size), samples=int(x.size))

    if peaks.size < BR_MIN_PEAKS:
        return {"br_rpm": 0.0, "num_peaks": int(peaks.size), "intervals_kept": 0, "intervals_total": 0}

    result = rate_from_peaks(
        peaks, fs, band=(BR_MIN_RPM, BR_MAX_RPM), observer=observer, metric="breathing_rate",
    )
    logger.debug("Breathing estimate: %.1f breaths/min from %d peaks", result.rate, peaks.size)

    return {
        "br_rpm": round(result.rate, 1),
        "num_peaks": int(peaks.size),
        "intervals_kept": int(result.kept.size),
        "intervals_total": result.total,
    }
