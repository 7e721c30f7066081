"""
rppg/peaks.py — Adaptive-threshold peak detection
===================================================
Finds pulse (or breath) maxima in a normalised [0, 1] signal window.

A candidate at index i must

1. exceed an *adaptive* threshold, the value at a given percentile of the
   window's own distribution, so the detector follows the signal amplitude
   instead of relying on a fixed level;
2. be a strict local maximum over ±`neighbourhood` samples;
3. lie at least `min_distance` samples after the previously accepted peak.

Rule 3 is greedy: scanning left to right, the first qualifying candidate
wins and later candidates inside its exclusion zone are dropped even if
they are higher.  The output is therefore a deterministic function of the
input, and consecutive peaks are always ≥ `min_distance` apart.

Unlike `scipy.signal.find_peaks`, no prominence computation is involved;
the percentile threshold plays that role.
"""

import numpy as np


def adaptive_threshold(signal: np.ndarray, percentile: float) -> float:
    """Value at `percentile` (0–1) of the sorted window, nearest-rank from below."""
    if not 0.0 <= percentile <= 1.0:
        raise ValueError(f"percentile must lie in [0, 1], got {percentile}.")
    ordered = np.sort(signal)
    idx = min(int(np.floor(ordered.size * percentile)), ordered.size - 1)
    return float(ordered[idx])


def local_maxima(signal: np.ndarray, neighbourhood: int) -> np.ndarray:
    """Indices that are strictly greater than every sample within ±`neighbourhood`."""
    x = np.asarray(signal, dtype=np.float64)
    n = x.size
    k = neighbourhood
    if n < 2 * k + 1:
        return np.empty(0, dtype=np.int64)

    centre = x[k:n - k]
    mask = np.ones(centre.size, dtype=bool)
    for d in range(1, k + 1):
        mask &= centre > x[k - d:n - k - d]
        mask &= centre > x[k + d:n - k + d]
    return np.flatnonzero(mask) + k


def detect_peaks(
    signal,
    min_distance: int,
    percentile: float = 0.6,
    neighbourhood: int = 2,
) -> np.ndarray:
    """
    Detect peaks in a normalised signal window.

    Parameters
    ----------
    signal        : array-like, shape (N,)  Normalised signal in [0, 1].
    min_distance  : int    Minimum spacing between accepted peaks (samples).
    percentile    : float  Threshold percentile of the window (0–1).
    neighbourhood : int    Half-width of the strict local-maximum test.

    Returns
    -------
    peaks : ndarray[int], strictly increasing.
    """
    if min_distance < 1:
        raise ValueError(f"min_distance must be at least 1 sample, got {min_distance}.")
    if neighbourhood < 1:
        raise ValueError(f"neighbourhood must be at least 1 sample, got {neighbourhood}.")

    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return np.empty(0, dtype=np.int64)

    threshold = adaptive_threshold(x, percentile)
    candidates = local_maxima(x, neighbourhood)
    candidates = candidates[x[candidates] > threshold]

    accepted: list[int] = []
    for idx in candidates:
        if not accepted or idx - accepted[-1] >= min_distance:
            accepted.append(int(idx))
    return np.asarray(accepted, dtype=np.int64)
