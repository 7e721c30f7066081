"""
rppg/filters.py — Time-domain filtering stage
===============================================
Cleans a window of chrominance samples before peak detection.

Why time-domain moving averages rather than an IIR/FFT band-pass?
----------------------------------------------------------------
* They behave predictably on short (5–20 s) windows where filter start-up
  transients would eat a large share of the data.
* Every output sample is a plain local mean, so edge behaviour is easy to
  reason about: windows are clipped to the signal bounds, never padded.

Stages
------
    detrend        x[i] − mean(x[i−w .. i+w])      removes illumination / motion drift
    moving_average short symmetric mean            suppresses pixel noise
    highpass       x − moving_average(x, long)     optional, removes sub-cardiac content
    trailing_mean  mean(x[i−w .. i])               isolates the respiratory component
                                                   (after a long detrend)
    normalize      min-max scale to [0, 1]

All functions accept any 1-D sequence and return a new float64 ndarray.
"""

import numpy as np

from config import (
    BR_DETREND_HALF_WINDOW,
    DETREND_HALF_WINDOW,
    HIGHPASS_WINDOW,
    SMOOTHING_WINDOW,
)

# Below this peak-to-peak range a window is treated as flat
NORMALIZE_EPSILON = 1e-4


def _windowed_mean(x: np.ndarray, left: int, right: int) -> np.ndarray:
    """Mean of x[i-left .. i+right] (inclusive) for every i, clipped to bounds."""
    n = x.size
    if n == 0:
        return x.copy()
    csum = np.concatenate(([0.0], np.cumsum(x)))
    idx = np.arange(n)
    lo = np.maximum(0, idx - left)
    hi = np.minimum(n, idx + right + 1)
    return (csum[hi] - csum[lo]) / (hi - lo)


def _as_signal(signal) -> np.ndarray:
    x = np.asarray(signal, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"Expected a 1-D signal, got shape {x.shape}.")
    return x


def detrend(signal, half_window: int = DETREND_HALF_WINDOW) -> np.ndarray:
    """
    Subtract a local-mean baseline from every sample.

    The half-window shrinks to a third of the signal length on short inputs
    so the baseline never degenerates into the global mean.
    """
    x = _as_signal(signal)
    if half_window <= 0:
        raise ValueError(f"half_window must be positive, got {half_window}.")
    w = min(half_window, x.size // 3)
    return x - _windowed_mean(x, w, w)


def moving_average(signal, window: int = SMOOTHING_WINDOW) -> np.ndarray:
    """Centred moving average of `window` samples (clipped at the edges)."""
    x = _as_signal(signal)
    if window <= 0:
        raise ValueError(f"window must be positive, got {window}.")
    left = window // 2
    right = window - left - 1
    return _windowed_mean(x, left, right)


def highpass(signal, window: int = HIGHPASS_WINDOW) -> np.ndarray:
    """Remove content slower than roughly ``sampling_rate / window`` Hz."""
    x = _as_signal(signal)
    return x - moving_average(x, window)


def trailing_mean(signal, window: int) -> np.ndarray:
    """Causal mean of the current sample and the `window` samples before it."""
    x = _as_signal(signal)
    if window <= 0:
        raise ValueError(f"window must be positive, got {window}.")
    return _windowed_mean(x, window, 0)


def normalize(signal) -> np.ndarray:
    """
    Min-max scale to [0, 1].

    A (near-)constant window returns 0.5 everywhere instead of dividing by a
    vanishing range.
    """
    x = _as_signal(signal)
    if x.size == 0:
        return x.copy()
    lo = x.min()
    span = x.max() - lo
    if span < NORMALIZE_EPSILON:
        return np.full_like(x, 0.5)
    return (x - lo) / span


def cardiac_filter(
    signal,
    half_window: int = DETREND_HALF_WINDOW,
    smoothing_window: int = SMOOTHING_WINDOW,
    highpass_window: int | None = None,
) -> np.ndarray:
    """detrend → smooth → (optional high-pass) → normalize, ready for peak detection."""
    x = detrend(signal, half_window)
    x = moving_average(x, smoothing_window)
    if highpass_window:
        x = highpass(x, highpass_window)
    return normalize(x)


def respiratory_filter(signal, lowpass_window: int, half_window: int = BR_DETREND_HALF_WINDOW) -> np.ndarray:
    """long detrend → trailing low-pass → normalize, ready for breathing-peak detection."""
    x = detrend(signal, half_window)
    return normalize(trailing_mean(x, lowpass_window))
