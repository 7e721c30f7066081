"""
rppg/pipeline.py — Processing session
=======================================
`PPGProcessor` owns everything one measurement session needs:

    frame + ROI  →  ROI colour  →  chrominance sample  →  SignalBuffer
                                                              │
    get_heart_rate()    ← HR window   → filters → peaks → intervals → MetricHistory
    get_breathing_rate()← BR window   → filters → peaks → intervals → MetricHistory
    get_hrv()           ← HRV window  → filters → peaks → SDNN      → MetricHistory
    get_signal_quality()← last 90 samples
    get_biomarkers()    → BiomarkerSnapshot (local, or from a remote service)

Frames are submitted in capture order by one caller (e.g. a per-frame
timer); metrics are requested periodically, not necessarily every frame.
Nothing in here spawns threads.  A re-entrant lock serialises buffer
mutation, derivation and `reset()` so a multi-threaded host (the FastAPI
server, a capture thread plus a UI thread) cannot interleave them.  The
lock is never held across a remote round trip, so frames keep flowing
while a remote backend is working.

Sessions are independent: create one `PPGProcessor` per user/stream.

`compute_biomarkers()` is the stateless counterpart used by the HTTP
endpoint: it runs the same stages once over a posted signal.
"""

import threading
import time
from typing import Protocol

import numpy as np

from config import (
    BR_HISTORY_SIZE,
    BR_MAX_RPM,
    BR_MIN_RPM,
    BR_MIN_SAMPLES,
    BR_WINDOW_SAMPLES,
    BUFFER_CAPACITY,
    HR_HISTORY_SIZE,
    HR_MAX_BPM,
    HR_MAX_JUMP_BPM,
    HR_MIN_BPM,
    HR_MIN_SAMPLES,
    HR_WINDOW_SAMPLES,
    HRV_HISTORY_SIZE,
    HRV_MAX_SCORE,
    HRV_MIN_SCORE,
    HRV_MIN_SAMPLES,
    HRV_WINDOW_SAMPLES,
    QUALITY_MIN_SAMPLES,
    QUALITY_WINDOW,
    REMOTE_MIN_BUFFER,
    REMOTE_SIGNAL_WINDOW,
    SAMPLING_RATE_HZ,
)
from features.breathing import estimate_breathing_rate
from features.hr import estimate_heart_rate
from features.hrv import estimate_hrv
from features.quality import signal_quality
from features.smoothing import WEIGHTING_LINEAR, WEIGHTING_UNIFORM, MetricHistory
from model.biomarkers import BiomarkerSnapshot, derive_biomarkers
from rppg.buffer import SignalBuffer
from rppg.roi import ColourSample, FaceROI, PixelBuffer
from utils.diagnostics import DiagnosticsObserver, NullObserver
from utils.logger import get_logger

logger = get_logger("rppg.pipeline")


class BiomarkerBackend(Protocol):
    """Anything that can turn an exported signal into a snapshot (see remote.client)."""

    def compute(self, signal: list[float], sampling_rate: float) -> BiomarkerSnapshot: ...


class PPGProcessor:
    """
    Stateful rPPG session.

    Parameters
    ----------
    sampling_rate : float                Nominal frame rate (Hz).
    capacity      : int                  Signal buffer capacity (samples).
    observer      : DiagnosticsObserver  Receives diagnostic events.
    """

    def __init__(
        self,
        sampling_rate: float = SAMPLING_RATE_HZ,
        capacity: int = BUFFER_CAPACITY,
        observer: DiagnosticsObserver | None = None,
    ):
        if sampling_rate <= 0:
            raise ValueError(f"Sampling rate must be positive, got {sampling_rate}.")
        if capacity <= 0:
            raise ValueError(f"Buffer capacity must be positive, got {capacity}.")

        self._fs = float(sampling_rate)
        self._observer = observer or NullObserver()
        self._lock = threading.RLock()

        self._buffer = SignalBuffer(capacity=capacity, sampling_rate=self._fs)
        self._hr_history = MetricHistory(
            "heart_rate", HR_HISTORY_SIZE, (HR_MIN_BPM, HR_MAX_BPM),
            weighting=WEIGHTING_LINEAR, max_jump=HR_MAX_JUMP_BPM, observer=self._observer,
        )
        self._br_history = MetricHistory(
            "breathing_rate", BR_HISTORY_SIZE, (BR_MIN_RPM, BR_MAX_RPM),
            weighting=WEIGHTING_UNIFORM, observer=self._observer,
        )
        self._hrv_history = MetricHistory(
            "hrv", HRV_HISTORY_SIZE, (HRV_MIN_SCORE, HRV_MAX_SCORE),
            weighting=WEIGHTING_UNIFORM, observer=self._observer,
        )
        logger.info("PPGProcessor created — fs=%.1f Hz, capacity=%d", self._fs, capacity)

    # ── Ingestion ────────────────────────────────────────────────────────────

    @property
    def sampling_rate(self) -> float:
        return self._fs

    def add_frame(self, frame: PixelBuffer, roi: FaceROI | None, timestamp: float | None = None) -> bool:
        """
        Sample `roi` in `frame` and append the chrominance value.

        Frames without a usable ROI (None, outside the frame, malformed
        buffer) are skipped and counted; they never raise.  Returns True if
        a sample was stored.
        """
        with self._lock:
            if roi is None:
                stored = self._buffer.append_colour(ColourSample.invalid(), timestamp)
            else:
                stored = self._buffer.add_frame(frame, roi, timestamp)
            if not stored:
                self._observer.on_event("frame_dropped", dropped=self._buffer.dropped_frames)
            return stored

    def add_colour(self, colour: ColourSample, timestamp: float | None = None) -> bool:
        """Append a colour sample averaged elsewhere (e.g. by a detector that crops)."""
        with self._lock:
            return self._buffer.append_colour(colour, timestamp)

    # ── Metrics ──────────────────────────────────────────────────────────────

    def get_heart_rate(self) -> float:
        """Smoothed heart rate in BPM, 0 until enough signal is available."""
        with self._lock:
            if self._buffer.size() < HR_MIN_SAMPLES:
                return 0.0
            window = self._buffer.signal(HR_WINDOW_SAMPLES)
            result = estimate_heart_rate(window, self._fs, self._observer)
            return round(self._hr_history.update(result["hr_bpm"]), 1)

    def get_breathing_rate(self) -> float:
        """Smoothed breathing rate in breaths/min, 0 until available."""
        with self._lock:
            if self._buffer.size() < BR_MIN_SAMPLES:
                return 0.0
            window = self._buffer.signal(BR_WINDOW_SAMPLES)
            result = estimate_breathing_rate(window, self._fs, self._observer)
            return round(self._br_history.update(result["br_rpm"]), 1)

    def get_hrv(self) -> float:
        """Smoothed HRV score (0–100), 0 until available."""
        with self._lock:
            if self._buffer.size() < HRV_MIN_SAMPLES:
                return 0.0
            window = self._buffer.signal(HRV_WINDOW_SAMPLES)
            result = estimate_hrv(window, self._fs, self._observer)
            return round(self._hrv_history.update(result["hrv_score"]), 1)

    def get_signal_quality(self) -> float:
        """0–100 quality of the most recent samples."""
        with self._lock:
            if self._buffer.size() < QUALITY_MIN_SAMPLES:
                return 0.0
            return round(signal_quality(self._buffer.signal(QUALITY_WINDOW)), 1)

    def get_signal_amplitude(self) -> float:
        """Peak-to-trough range of the raw signal over the heart-rate window."""
        with self._lock:
            window = self._buffer.signal(HR_WINDOW_SAMPLES)
            if window.size == 0:
                return 0.0
            return float(window.max() - window.min())

    def get_biomarkers(
        self,
        remote: BiomarkerBackend | None = None,
        age: float | None = None,
        timestamp: float | None = None,
    ) -> BiomarkerSnapshot:
        """
        Produce a fresh `BiomarkerSnapshot`.

        With a `remote` backend and at least `REMOTE_MIN_BUFFER` buffered
        samples the remote result is adopted; any failure there falls back
        to the local derivation.  The local metrics are always updated so the
        smoothing histories stay current either way.
        """
        signal = None
        with self._lock:
            heart_rate = self.get_heart_rate()
            breathing_rate = self.get_breathing_rate()
            hrv = self.get_hrv()
            quality = self.get_signal_quality()
            amplitude = self.get_signal_amplitude()
            stamp = time.time() if timestamp is None else timestamp
            if remote is not None and self._buffer.size() >= REMOTE_MIN_BUFFER:
                signal = self.export_signal(REMOTE_SIGNAL_WINDOW)

        # Outside the lock: ingestion must not wait on network I/O
        if signal is not None:
            snapshot = self._try_remote(remote, signal)
            if snapshot is not None:
                return snapshot

        return derive_biomarkers(
            heart_rate, breathing_rate, hrv, quality,
            amplitude=amplitude, age=age, timestamp=stamp,
        )

    def _try_remote(self, remote: BiomarkerBackend, signal: list[float]) -> BiomarkerSnapshot | None:
        # Imported here: remote.client pulls in httpx, which a purely local
        # session never needs.
        from remote.client import RemoteComputationError

        try:
            return remote.compute(signal, self._fs)
        except RemoteComputationError as e:
            logger.warning("Remote biomarker computation failed, using local derivation: %s", e)
            self._observer.on_event("remote_fallback", reason=str(e))
            return None

    # ── Buffer access ────────────────────────────────────────────────────────

    def export_signal(self, last: int | None = None) -> list[float]:
        """Snapshot of the buffered chrominance samples (oldest first)."""
        with self._lock:
            return self._buffer.signal(last).tolist()

    def get_channel_means(self, last: int | None = None) -> np.ndarray:
        """``(N, 3)`` array of the raw [R, G, B] means behind each sample."""
        with self._lock:
            return self._buffer.channels(last)

    def get_timestamps(self, last: int | None = None) -> np.ndarray:
        with self._lock:
            return self._buffer.timestamps(last)

    def get_buffer_size(self) -> int:
        with self._lock:
            return self._buffer.size()

    def get_buffer_duration(self) -> float:
        with self._lock:
            return self._buffer.duration_seconds()

    @property
    def dropped_frames(self) -> int:
        with self._lock:
            return self._buffer.dropped_frames

    def reset(self) -> None:
        """Clear the buffer and all metric histories."""
        with self._lock:
            self._buffer.reset()
            self._hr_history.reset()
            self._br_history.reset()
            self._hrv_history.reset()
        logger.info("Processor reset.")


def compute_biomarkers(
    signal,
    sampling_rate: float = SAMPLING_RATE_HZ,
    age: float | None = None,
    timestamp: float | None = None,
) -> BiomarkerSnapshot:
    """
    One-shot derivation over an externally supplied signal (no smoothing).

    Each metric uses the tail of `signal` that its session counterpart would
    use, so a posted 10 s signal gives the same HR as a live session with
    the same samples.
    """
    if sampling_rate <= 0:
        raise ValueError(f"Sampling rate must be positive, got {sampling_rate}.")

    x = np.asarray(signal, dtype=np.float64)
    hr = estimate_heart_rate(x[-HR_WINDOW_SAMPLES:], sampling_rate)["hr_bpm"]
    br = estimate_breathing_rate(x[-BR_WINDOW_SAMPLES:], sampling_rate)["br_rpm"]
    hrv = estimate_hrv(x[-HRV_WINDOW_SAMPLES:], sampling_rate)["hrv_score"]
    quality = signal_quality(x[-QUALITY_WINDOW:])
    hr_window = x[-HR_WINDOW_SAMPLES:]
    amplitude = float(hr_window.max() - hr_window.min()) if hr_window.size else 0.0

    return derive_biomarkers(
        hr, br, hrv, round(quality, 1),
        amplitude=amplitude, age=age,
        timestamp=time.time() if timestamp is None else timestamp,
    )
