"""
features/smoothing.py — Per-metric temporal smoothing
=======================================================
Each metric (heart rate, breathing rate, HRV) keeps a short FIFO history of
accepted readings and reports a weighted average of it, which damps the
frame-to-frame jitter of single-window estimates.

A reading is accepted only if it

* is non-zero (0 means "no reading"),
* lies inside the metric's physiological range, and
* (optionally) does not jump more than `max_jump` away from the current
  smoothed value.

A rejected reading leaves the history untouched.  If the plausibility check
rejects `capacity` readings in a row, the old level is considered stale:
the history is cleared and the new reading starts it afresh.
"""

from collections import deque

from utils.diagnostics import DiagnosticsObserver, NullObserver

WEIGHTING_LINEAR = "linear"
WEIGHTING_UNIFORM = "uniform"


class MetricHistory:
    """
    Parameters
    ----------
    name      : str           Metric label used in diagnostics.
    capacity  : int           Maximum number of remembered readings.
    valid_range : (low, high) Inclusive physiological range.
    weighting : str           "linear" (newest weighs most) or "uniform".
    max_jump  : float | None  Plausibility bound relative to the smoothed value.
    observer  : DiagnosticsObserver
    """

    def __init__(
        self,
        name: str,
        capacity: int,
        valid_range: tuple[float, float],
        weighting: str = WEIGHTING_UNIFORM,
        max_jump: float | None = None,
        observer: DiagnosticsObserver | None = None,
    ):
        if capacity <= 0:
            raise ValueError(f"History capacity must be positive, got {capacity}.")
        if weighting not in (WEIGHTING_LINEAR, WEIGHTING_UNIFORM):
            raise ValueError(f"Unknown weighting '{weighting}'.")
        low, high = valid_range
        if low > high:
            raise ValueError(f"Invalid range {valid_range}.")

        self.name = name
        self.valid_range = (float(low), float(high))
        self.weighting = weighting
        self.max_jump = max_jump
        self._observer = observer or NullObserver()
        self._values: deque[float] = deque(maxlen=capacity)
        self._rejected_jumps = 0

    @property
    def capacity(self) -> int:
        return self._values.maxlen

    def __len__(self) -> int:
        return len(self._values)

    def values(self) -> list[float]:
        return list(self._values)

    def accept(self, value: float) -> bool:
        """Push `value` if it passes the range and plausibility checks."""
        if not value or value <= 0:
            return False

        low, high = self.valid_range
        if not low <= value <= high:
            self._observer.on_event("metric_rejected", metric=self.name, value=value, reason="range")
            return False

        if self.max_jump is not None and self._values:
            current = self.value()
            if abs(value - current) > self.max_jump:
                self._rejected_jumps += 1
                if self._rejected_jumps < self.capacity:
                    self._observer.on_event(
                        "metric_rejected", metric=self.name, value=value, reason="jump", smoothed=current,
                    )
                    return False
                # The old level has been contradicted `capacity` times in a row: re-acquire
                self._observer.on_event("metric_reacquired", metric=self.name, value=value, smoothed=current)
                self._values.clear()

        self._rejected_jumps = 0
        self._values.append(float(value))
        return True

    def value(self) -> float:
        """Weighted average of the history, or 0.0 when it is empty."""
        if not self._values:
            return 0.0
        if self.weighting == WEIGHTING_LINEAR:
            weights = range(1, len(self._values) + 1)
            total = sum(w * v for w, v in zip(weights, self._values))
            return total / sum(weights)
        return sum(self._values) / len(self._values)

    def update(self, value: float) -> float:
        """`accept` then `value`, the usual per-derivation call."""
        self.accept(value)
        return self.value()

    def reset(self) -> None:
        self._values.clear()
        self._rejected_jumps = 0
