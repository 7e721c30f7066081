"""
rppg/buffer.py — Rolling signal buffer
=======================================
Bounded FIFO store of chrominance samples plus the raw R, G, B means and a
capture timestamp for every stored sample.  All five sequences always have
the same length; once `capacity` is reached each append evicts the oldest
entry of every sequence.

Frames whose ROI could not be sampled are *not* stored: a placeholder 0
would read as a deep trough to the detrend and peak stages.  The buffer
counts them in `dropped_frames` instead.
"""

import time
from collections import deque

import numpy as np

from config import BUFFER_CAPACITY, SAMPLING_RATE_HZ
from rppg.algorithms import chrominance_signal
from rppg.roi import ColourSample, FaceROI, PixelBuffer, extract_roi_colour


class SignalBuffer:
    """
    Parameters
    ----------
    capacity      : int    Maximum number of samples kept.
    sampling_rate : float  Nominal sample rate (Hz), used by `duration_seconds`.
    """

    def __init__(self, capacity: int = BUFFER_CAPACITY, sampling_rate: float = SAMPLING_RATE_HZ):
        if capacity <= 0:
            raise ValueError(f"Buffer capacity must be positive, got {capacity}.")
        if sampling_rate <= 0:
            raise ValueError(f"Sampling rate must be positive, got {sampling_rate}.")

        self.capacity = capacity
        self.sampling_rate = float(sampling_rate)

        self._signal: deque[float] = deque(maxlen=capacity)
        self._r: deque[float] = deque(maxlen=capacity)
        self._g: deque[float] = deque(maxlen=capacity)
        self._b: deque[float] = deque(maxlen=capacity)
        self._timestamps: deque[float] = deque(maxlen=capacity)
        self.dropped_frames = 0

    # ── Ingestion ────────────────────────────────────────────────────────────

    def add_frame(self, frame: PixelBuffer, roi: FaceROI, timestamp: float | None = None) -> bool:
        """
        Sample `roi` in `frame` and append the result.

        Returns True if a sample was stored, False if the ROI was invalid.
        """
        colour = extract_roi_colour(frame, roi)
        return self.append_colour(colour, timestamp)

    def append_colour(self, colour: ColourSample, timestamp: float | None = None) -> bool:
        """Append an already-averaged colour sample (skipped when invalid)."""
        if not colour.valid:
            self.dropped_frames += 1
            return False

        self._signal.append(chrominance_signal(colour))
        self._r.append(colour.r)
        self._g.append(colour.g)
        self._b.append(colour.b)
        self._timestamps.append(time.time() if timestamp is None else float(timestamp))
        return True

    def reset(self) -> None:
        self._signal.clear()
        self._r.clear()
        self._g.clear()
        self._b.clear()
        self._timestamps.clear()
        self.dropped_frames = 0

    # ── Read access ──────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._signal)

    def size(self) -> int:
        return len(self._signal)

    def duration_seconds(self) -> float:
        return len(self._signal) / self.sampling_rate

    def signal(self, last: int | None = None) -> np.ndarray:
        """Copy of the chrominance samples, optionally only the most recent `last`."""
        return _tail(self._signal, last)

    def channels(self, last: int | None = None) -> np.ndarray:
        """Raw channel means as an ``(N, 3)`` array of [R, G, B] rows."""
        return np.column_stack([_tail(self._r, last), _tail(self._g, last), _tail(self._b, last)])

    def timestamps(self, last: int | None = None) -> np.ndarray:
        return _tail(self._timestamps, last)


def _tail(values: deque, last: int | None) -> np.ndarray:
    arr = np.fromiter(values, dtype=np.float64, count=len(values))
    if last is None or last >= arr.size:
        return arr
    if last <= 0:
        return arr[:0]
    return arr[-last:]
