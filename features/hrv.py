"""
features/hrv.py — Heart Rate Variability (HRV) time-domain features
=====================================================================
Computes the three most commonly used *time-domain* HRV metrics from a
sequence of RR intervals (the time between consecutive heartbeats):

    SDNN  — Standard Deviation of NN intervals
    RMSSD — Root Mean Square of Successive Differences
    pNN50 — Percentage of successive differences > 50 ms

The headline HRV figure reported to the user is a 0–100 score derived from
SDNN (``score = SDNN_ms × HRV_SDNN_SCALE``, clamped).

⚠️  With 10–20 s of data (≈ 10–25 beats) and a 30 Hz camera (33 ms time
    resolution per beat) these estimates have high variance compared to
    the clinical standard of 5-minute ECG recordings.  They are suitable
    for *trend* and *relative* comparisons only.
"""

import numpy as np

from config import HRV_MIN_PEAKS, HRV_SDNN_SCALE, HRV_MIN_SCORE, HRV_MAX_SCORE
from features.hr import detect_cardiac_peaks
from features.intervals import filter_outlier_ibis, intervals_to_ms, peak_intervals
from utils.diagnostics import DiagnosticsObserver, NullObserver
from utils.logger import get_logger

logger = get_logger("features.hrv")


def compute_hrv(rr_intervals_ms) -> dict:
    """
    Compute time-domain HRV features from RR intervals.

    Parameters
    ----------
    rr_intervals_ms : array-like[float]
        Successive RR intervals in **milliseconds**.

    Returns
    -------
    dict with keys:
        sdnn_ms   : float | None   SDNN (population standard deviation).
        rmssd_ms  : float | None
        pnn50     : float | None   Percentage [0, 100].
        mean_rr_ms: float | None
        num_beats : int            Number of RR intervals used.
        valid     : bool           True if at least two intervals were given.
    """
    rr_ms = np.asarray(rr_intervals_ms, dtype=np.float64)
    num_beats = int(rr_ms.size)

    if num_beats < 2:
        return {
            "sdnn_ms": None,
            "rmssd_ms": None,
            "pnn50": None,
            "mean_rr_ms": None,
            "num_beats": num_beats,
            "valid": False,
        }

    sdnn_ms = float(np.std(rr_ms))
    mean_rr_ms = float(np.mean(rr_ms))

    # ΔRR_i = RR_{i+1} − RR_i
    successive_diffs = np.diff(rr_ms)
    rmssd_ms = float(np.sqrt(np.mean(successive_diffs ** 2)))
    pnn50 = float(np.sum(np.abs(successive_diffs) > 50.0) / successive_diffs.size * 100.0)

    return {
        "sdnn_ms": round(sdnn_ms, 2),
        "rmssd_ms": round(rmssd_ms, 2),
        "pnn50": round(pnn50, 2),
        "mean_rr_ms": round(mean_rr_ms, 2),
        "num_beats": num_beats,
        "valid": True,
    }


def hrv_score(sdnn_ms: float | None) -> float:
    """Map SDNN (ms) onto the 0–100 HRV scale."""
    if sdnn_ms is None:
        return 0.0
    return float(min(HRV_MAX_SCORE, max(HRV_MIN_SCORE, sdnn_ms * HRV_SDNN_SCALE)))


def estimate_hrv(
    window,
    fs: float,
    observer: DiagnosticsObserver | None = None,
) -> dict:
    """
    Detect beats in `window` and compute HRV from their outlier-filtered
    intervals.

    Returns the `compute_hrv` dict plus ``hrv_score`` (0.0 if unavailable)
    and ``num_peaks``.
    """
    observer = observer or NullObserver()
    _, peaks = detect_cardiac_peaks(np.asarray(window, dtype=np.float64), fs, observer, metric="hrv")

    if peaks.size < HRV_MIN_PEAKS:
        result = compute_hrv([])
        result.update(hrv_score=0.0, num_peaks=int(peaks.size))
        return result

    intervals = peak_intervals(peaks)
    kept = filter_outlier_ibis(intervals)
    observer.on_event("ibi_filtered", metric="hrv", kept=int(kept.size), total=int(intervals.size))

    result = compute_hrv(intervals_to_ms(kept, fs))
    score = hrv_score(result["sdnn_ms"])
    if result["valid"]:
        logger.debug(
            "HRV — SDNN=%.1f ms, RMSSD=%.1f ms, pNN50=%.1f%%, score=%.0f (%d beats)",
            result["sdnn_ms"], result["rmssd_ms"], result["pnn50"], score, result["num_beats"],
        )
    result.update(hrv_score=round(score, 1), num_peaks=int(peaks.size))
    return result
