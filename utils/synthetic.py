"""
utils/synthetic.py — Synthetic rPPG input
==========================================
Generates a "face" whose skin colour pulses at a chosen heart rate and
breathing rate, for demos without a camera and for tests.

Each frame is a flat skin-coloured RGBA image (skin-tone detector friendly)
whose green channel carries

    pulse_amplitude  · sin(2π · bpm/60 · t)
  + breath_amplitude · sin(2π · breaths/60 · t)
  + optional Gaussian noise

in 0–255 intensity units.  Integer quantisation would turn a 2-level pulse
into a staircase with flat tops, so a fixed per-pixel dither is added
before truncation: the spatial mean then tracks the continuous waveform.
"""

import numpy as np

from rppg.roi import PixelBuffer

SKIN_RGB = (180.0, 120.0, 100.0)


def synthetic_waveform(
    n: int,
    fs: float = 30.0,
    bpm: float = 72.0,
    breaths_per_min: float = 15.0,
    pulse_amplitude: float = 2.0,
    breath_amplitude: float = 0.5,
    noise: float = 0.0,
    seed: int = 0,
) -> np.ndarray:
    """Green-channel modulation (intensity units) for `n` samples at `fs` Hz."""
    t = np.arange(n) / fs
    wave = pulse_amplitude * np.sin(2 * np.pi * bpm / 60.0 * t)
    wave += breath_amplitude * np.sin(2 * np.pi * breaths_per_min / 60.0 * t)
    if noise > 0:
        wave += np.random.default_rng(seed).normal(0.0, noise, n)
    return wave


def synthetic_signal(n: int, fs: float = 30.0, bpm: float = 72.0, **kwargs) -> np.ndarray:
    """
    Chrominance samples (g − (r + b)/2 on 0–1 channels) of a synthetic face.

    Keyword arguments are passed to `synthetic_waveform`.
    """
    r, g, b = SKIN_RGB
    green = g + synthetic_waveform(n, fs, bpm, **kwargs)
    return green / 255.0 - (r + b) / 2 / 255.0


def synthetic_frames(
    n: int,
    fs: float = 30.0,
    bpm: float = 72.0,
    width: int = 64,
    height: int = 48,
    start_time: float = 0.0,
    **kwargs,
):
    """
    Yield ``(PixelBuffer, timestamp)`` pairs for `n` consecutive frames.

    Keyword arguments are passed to `synthetic_waveform`.
    """
    wave = synthetic_waveform(n, fs, bpm, **kwargs)
    dither = (np.arange(width * height, dtype=np.float64) * 0.6180339887) % 1.0
    dither = dither.reshape(height, width)

    base = np.empty((height, width, 4), dtype=np.float64)
    base[..., 0] = SKIN_RGB[0]
    base[..., 1] = SKIN_RGB[1]
    base[..., 2] = SKIN_RGB[2]
    base[..., 3] = 255.0
    base[..., :3] += dither[..., None]

    for i in range(n):
        frame = base.copy()
        frame[..., 1] += wave[i]
        rgba = np.clip(np.floor(frame), 0, 255).astype(np.uint8)
        yield PixelBuffer.from_array(rgba), start_time + i / fs
