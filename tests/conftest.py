"""Shared fixtures: synthetic frames, signals and a fresh processing session."""

import numpy as np
import pytest

from rppg.pipeline import PPGProcessor
from rppg.roi import ColourSample, PixelBuffer
from utils.diagnostics import RecordingObserver
from utils.synthetic import SKIN_RGB, synthetic_signal, synthetic_waveform


def solid_frame(width: int, height: int, rgba=(*SKIN_RGB, 255)) -> PixelBuffer:
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[...] = np.asarray(rgba, dtype=np.uint8)
    return PixelBuffer.from_array(pixels)


@pytest.fixture
def recorder():
    return RecordingObserver()


@pytest.fixture
def processor(recorder):
    return PPGProcessor(observer=recorder)


@pytest.fixture
def skin_frame():
    return solid_frame(64, 48)


@pytest.fixture
def pulse_signal():
    """10 s of a clean 72 BPM chrominance signal at 30 Hz."""
    return synthetic_signal(300, fs=30.0, bpm=72.0, breath_amplitude=0.0)


def feed(processor, n: int, bpm: float = 72.0, **kwargs) -> None:
    """Push `n` synthetic colour samples into `processor` at its sampling rate."""
    fs = processor.sampling_rate
    r, g, b = SKIN_RGB
    for i, value in enumerate(synthetic_waveform(n, fs, bpm, **kwargs)):
        processor.add_colour(ColourSample(r, g + value, b, True), timestamp=i / fs)
