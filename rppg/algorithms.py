"""
rppg/algorithms.py — Chrominance pulse signal
==============================================
Converts one frame's mean skin colour into a single scalar pulse sample.

Haemoglobin absorbs green light far more strongly than red or blue, so the
blood-volume pulse shows up mainly as a small oscillation of the green
channel.  Illumination changes, on the other hand, move all three channels
together.  Subtracting the average of red and blue from green therefore
keeps most of the pulse while cancelling a good part of the lighting drift:

    S = G/255 − (R/255 + B/255) / 2

S typically lies in [−1, 1] but is not clamped.
"""

from rppg.roi import ColourSample, FaceROI, PixelBuffer, extract_roi_colour


def chrominance_signal(colour: ColourSample) -> float:
    """
    Return the chrominance pulse sample for one frame.

    Returns exactly 0.0 for an invalid sample.  A 0 here means "no sample",
    not a trough; `SignalBuffer` never stores it.
    """
    if not colour.valid:
        return 0.0

    r = colour.r / 255.0
    g = colour.g / 255.0
    b = colour.b / 255.0
    return g - (r + b) / 2.0


def extract_ppg_signal(frame: PixelBuffer, roi: FaceROI) -> float:
    """Sample `roi` in `frame` and return its chrominance value (0.0 if invalid)."""
    return chrominance_signal(extract_roi_colour(frame, roi))
