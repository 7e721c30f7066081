"""
rppg/roi.py — ROI colour sampling
==================================
Turns one video frame plus a face rectangle into the mean R, G, B of the
skin inside that rectangle.

Frames arrive as row-major RGBA bytes (4 bytes per pixel), the layout a
browser canvas or `cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)` produces.  For
speed only every `ROI_PIXEL_STRIDE`-th pixel is read in both axes; on a
typical 150×200 face box that is still ~7 500 pixels, plenty for a stable
spatial mean.
"""

import math
from dataclasses import dataclass

import numpy as np

from config import ROI_PIXEL_STRIDE, ROI_MIN_ALPHA


@dataclass(frozen=True)
class FaceROI:
    """Axis-aligned rectangle in pixel coordinates supplied by a face detector."""
    x: float
    y: float
    width: float
    height: float
    confidence: float | None = None


@dataclass(frozen=True)
class PixelBuffer:
    """
    One RGBA frame.

    `data` may be raw bytes (length ``width * height * 4``) or an ndarray of
    shape ``(height, width, 4)``.
    """
    width: int
    height: int
    data: bytes | bytearray | memoryview | np.ndarray

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "PixelBuffer":
        """Wrap an ``(H, W, 4)`` uint8 array without copying."""
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise ValueError(f"Expected an (H, W, 4) RGBA array, got shape {rgba.shape}.")
        h, w = rgba.shape[:2]
        return cls(width=w, height=h, data=rgba)

    def as_array(self) -> np.ndarray | None:
        """Return an ``(H, W, 4)`` uint8 view, or None if the payload is malformed."""
        if self.width <= 0 or self.height <= 0:
            return None
        expected = self.width * self.height * 4
        if isinstance(self.data, np.ndarray):
            arr = self.data
            if arr.size != expected:
                return None
            return arr.reshape(self.height, self.width, 4)
        raw = np.frombuffer(self.data, dtype=np.uint8)
        if raw.size != expected:
            return None
        return raw.reshape(self.height, self.width, 4)


@dataclass(frozen=True)
class ColourSample:
    """Mean channel values in [0, 255]; `valid` is False when nothing was sampled."""
    r: float
    g: float
    b: float
    valid: bool

    @classmethod
    def invalid(cls) -> "ColourSample":
        return cls(0.0, 0.0, 0.0, False)


def _clamped_bounds(roi: FaceROI, width: int, height: int) -> tuple[int, int, int, int] | None:
    coords = (roi.x, roi.y, roi.width, roi.height)
    if not all(math.isfinite(c) for c in coords):
        return None
    x1 = max(0, math.floor(roi.x))
    y1 = max(0, math.floor(roi.y))
    x2 = min(width, math.floor(roi.x + roi.width))
    y2 = min(height, math.floor(roi.y + roi.height))
    if x2 <= x1 or y2 <= y1:
        return None
    return x1, y1, x2, y2


def extract_roi_colour(
    frame: PixelBuffer,
    roi: FaceROI,
    stride: int = ROI_PIXEL_STRIDE,
    min_alpha: int = ROI_MIN_ALPHA,
) -> ColourSample:
    """
    Spatially average the RGB channels inside `roi`.

    Parameters
    ----------
    frame     : PixelBuffer  RGBA frame.
    roi       : FaceROI      Region to sample; clamped to the frame bounds.
    stride    : int          Pixel step in both axes.
    min_alpha : int          Pixels whose alpha is below this are skipped.

    Returns
    -------
    ColourSample
        ``valid=False`` when the clamped region holds no sampled pixel (ROI
        outside the frame, zero area, malformed buffer, or every pixel
        transparent).
    """
    pixels = frame.as_array()
    if pixels is None:
        return ColourSample.invalid()

    bounds = _clamped_bounds(roi, frame.width, frame.height)
    if bounds is None:
        return ColourSample.invalid()
    x1, y1, x2, y2 = bounds

    patch = pixels[y1:y2:stride, x1:x2:stride].reshape(-1, 4)
    if min_alpha > 0:
        patch = patch[patch[:, 3] >= min_alpha]
    if patch.shape[0] == 0:
        return ColourSample.invalid()

    means = patch[:, :3].mean(axis=0, dtype=np.float64)
    return ColourSample(float(means[0]), float(means[1]), float(means[2]), True)
