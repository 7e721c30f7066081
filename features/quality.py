"""
features/quality.py — Signal quality score
============================================
Coarse 0–100 quality proxy for the recent signal:

    quality = clip(std / |mean| × scale, 0, 100)

A live pulsatile signal has a visible AC component relative to its DC
offset; a frozen or empty ROI produces a near-flat, low-scoring signal.
When |mean| is below `QUALITY_MEAN_FLOOR` the ratio is meaningless and the
score is 0.
"""

import numpy as np

from config import QUALITY_MEAN_FLOOR, QUALITY_SCALE


def signal_quality(window, mean_floor: float = QUALITY_MEAN_FLOOR, scale: float = QUALITY_SCALE) -> float:
    x = np.asarray(window, dtype=np.float64)
    if x.size == 0:
        return 0.0
    mean = float(x.mean())
    if abs(mean) <= mean_floor:
        return 0.0
    ratio = float(x.std()) / abs(mean)
    return float(min(100.0, max(0.0, ratio * scale)))
