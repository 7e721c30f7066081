import math

import numpy as np
import pytest

from rppg.algorithms import chrominance_signal, extract_ppg_signal
from rppg.roi import ColourSample, FaceROI, PixelBuffer, extract_roi_colour

from conftest import solid_frame


def test_uniform_region_mean():
    frame = solid_frame(20, 10, (10, 200, 30, 255))
    colour = extract_roi_colour(frame, FaceROI(0, 0, 20, 10))
    assert colour.valid
    assert (colour.r, colour.g, colour.b) == pytest.approx((10, 200, 30))


def test_roi_is_clamped_to_frame():
    pixels = np.zeros((10, 20, 4), dtype=np.uint8)
    pixels[:, :10] = (255, 0, 0, 255)
    pixels[:, 10:] = (0, 0, 255, 255)
    frame = PixelBuffer.from_array(pixels)

    colour = extract_roi_colour(frame, FaceROI(-10, -5, 20, 50))
    assert colour.valid
    assert colour.r == pytest.approx(255)
    assert colour.b == pytest.approx(0)


@pytest.mark.parametrize("roi", [
    FaceROI(100, 100, 10, 10),
    FaceROI(0, 0, 0, 10),
    FaceROI(5, 5, -3, 4),
    FaceROI(math.nan, 0, 10, 10),
    FaceROI(0, 0, math.inf, 10),
])
def test_unusable_roi_is_invalid(roi):
    assert extract_roi_colour(solid_frame(20, 10), roi) == ColourSample.invalid()


def test_transparent_pixels_ignored():
    frame = solid_frame(8, 8, (200, 100, 50, 0))
    assert not extract_roi_colour(frame, FaceROI(0, 0, 8, 8), min_alpha=1).valid
    assert extract_roi_colour(frame, FaceROI(0, 0, 8, 8), min_alpha=0).valid


def test_stride_skips_pixels():
    pixels = np.zeros((1, 4, 4), dtype=np.uint8)
    pixels[0, :, 3] = 255
    pixels[0, 1::2, 0] = 100
    frame = PixelBuffer.from_array(pixels)

    assert extract_roi_colour(frame, FaceROI(0, 0, 4, 1), stride=2).r == pytest.approx(0)
    assert extract_roi_colour(frame, FaceROI(0, 0, 4, 1), stride=1).r == pytest.approx(50)


def test_raw_bytes_buffer():
    frame = PixelBuffer(2, 1, bytes([10, 20, 30, 255, 30, 40, 50, 255]))
    colour = extract_roi_colour(frame, FaceROI(0, 0, 2, 1), stride=1)
    assert (colour.r, colour.g, colour.b) == pytest.approx((20, 30, 40))


def test_malformed_buffer_is_invalid():
    frame = PixelBuffer(4, 4, bytes(10))
    assert not extract_roi_colour(frame, FaceROI(0, 0, 4, 4)).valid


def test_from_array_rejects_rgb():
    with pytest.raises(ValueError):
        PixelBuffer.from_array(np.zeros((4, 4, 3), dtype=np.uint8))


def test_chrominance_formula():
    assert chrominance_signal(ColourSample(0, 255, 0, True)) == pytest.approx(1.0)
    assert chrominance_signal(ColourSample(255, 255, 255, True)) == pytest.approx(0.0)
    assert chrominance_signal(ColourSample(255, 0, 255, True)) == pytest.approx(-1.0)


def test_chrominance_of_invalid_sample_is_zero():
    assert chrominance_signal(ColourSample.invalid()) == 0.0
    assert extract_ppg_signal(solid_frame(4, 4), FaceROI(50, 50, 4, 4)) == 0.0


def test_empty_pixel_buffer_is_invalid():
    assert not extract_roi_colour(PixelBuffer(0, 0, b""), FaceROI(0, 0, 10, 10)).valid
