"""
features/intervals.py — Inter-event interval validation → rate
================================================================
Turns a sequence of peak indices into a rate (events per minute):

    peaks  →  intervals (samples)  →  MAD outlier rejection  →  mean  →  rate

Outlier rejection
-----------------
A single missed or spurious peak produces an interval roughly twice (or
half) the true one.  The median and the median absolute deviation (MAD)
are both insensitive to a few such values, so intervals further than
``multiplier × MAD`` from the median are dropped before averaging.  When
MAD is 0 (at least half the intervals identical) every interval is kept.

Rejection is silent: surviving intervals simply determine the rate; if
none survive the rate is 0 ("not available").
"""

from dataclasses import dataclass, field

import numpy as np
from scipy.stats import median_abs_deviation

from config import OUTLIER_MAD_MULTIPLIER
from utils.diagnostics import DiagnosticsObserver, NullObserver


@dataclass(frozen=True)
class IntervalResult:
    """Outcome of reducing one peak sequence to a rate."""
    rate: float                          # events / minute, 0 if unavailable
    kept: np.ndarray = field(repr=False)  # retained intervals (samples)
    total: int = 0                       # intervals before rejection

    @property
    def available(self) -> bool:
        return self.rate > 0


def peak_intervals(peaks) -> np.ndarray:
    """Differences between consecutive peak indices (samples)."""
    p = np.asarray(peaks, dtype=np.float64)
    if p.size < 2:
        return np.empty(0, dtype=np.float64)
    return np.diff(p)


def filter_outlier_ibis(intervals, multiplier: float = OUTLIER_MAD_MULTIPLIER) -> np.ndarray:
    """
    Keep intervals within ``multiplier × MAD`` of the median.

    >>> filter_outlier_ibis([20, 21, 19, 20, 80, 20]).tolist()
    [20.0, 21.0, 19.0, 20.0, 20.0]
    """
    x = np.asarray(intervals, dtype=np.float64)
    if x.size == 0:
        return x
    median = np.median(x)
    mad = median_abs_deviation(x, scale=1.0)
    if mad == 0:
        return x
    return x[np.abs(x - median) <= multiplier * mad]


def interval_rate(intervals, sampling_rate: float) -> float:
    """``60 / (mean interval in seconds)``; 0.0 for an empty interval set."""
    x = np.asarray(intervals, dtype=np.float64)
    if x.size == 0:
        return 0.0
    mean_interval = float(x.mean())
    if mean_interval <= 0:
        return 0.0
    return 60.0 / (mean_interval / sampling_rate)


def intervals_to_ms(intervals, sampling_rate: float) -> np.ndarray:
    return np.asarray(intervals, dtype=np.float64) / sampling_rate * 1000.0


def rate_from_peaks(
    peaks,
    sampling_rate: float,
    band: tuple[float, float],
    multiplier: float = OUTLIER_MAD_MULTIPLIER,
    observer: DiagnosticsObserver | None = None,
    metric: str = "",
) -> IntervalResult:
    """
    Reduce peak indices to a clamped rate.

    Parameters
    ----------
    peaks         : array-like[int]     Output of `rppg.peaks.detect_peaks`.
    sampling_rate : float               Hz.
    band          : (low, high)         Physiological clamp for a non-zero rate.
    multiplier    : float               MAD multiplier for outlier rejection.
    observer      : DiagnosticsObserver Receives an ``ibi_filtered`` event.
    metric        : str                 Label attached to the event.
    """
    observer = observer or NullObserver()
    intervals = peak_intervals(peaks)
    kept = filter_outlier_ibis(intervals, multiplier)
    observer.on_event("ibi_filtered", metric=metric, kept=int(kept.size), total=int(intervals.size))

    rate = interval_rate(kept, sampling_rate)
    if rate > 0:
        low, high = band
        rate = min(high, max(low, rate))
    return IntervalResult(rate=rate, kept=kept, total=int(intervals.size))
