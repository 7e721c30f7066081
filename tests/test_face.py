import numpy as np
import pytest

import face.detector as detector_module
from face.detector import (
    FallbackDetector,
    FixedRegionDetector,
    SkinToneDetector,
    create_detector,
)
from face.regions import is_face_well_positioned, ppg_region, validate_face
from rppg.roi import FaceROI, PixelBuffer

from conftest import solid_frame


def test_fixed_region():
    roi = FixedRegionDetector().detect(solid_frame(100, 200))
    assert (roi.x, roi.y, roi.width, roi.height) == pytest.approx((25, 30, 50, 120))


def test_skin_detector_on_full_skin_frame(skin_frame):
    roi = SkinToneDetector().detect(skin_frame)
    assert roi.width == pytest.approx(64 * 0.3)
    assert roi.height == pytest.approx(48 * 0.4)
    assert roi.x == pytest.approx(31.5 - 64 * 0.15)
    assert roi.confidence == 1.0


def test_skin_detector_centres_on_skin_patch():
    pixels = np.zeros((100, 100, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    pixels[:20, :20, :3] = (180, 120, 100)
    roi = SkinToneDetector().detect(PixelBuffer.from_array(pixels))

    assert (roi.x, roi.y) == (0.0, 0.0)
    assert (roi.width, roi.height) == pytest.approx((30, 40))
    assert roi.confidence == pytest.approx(0.32)


def test_skin_detector_without_skin():
    assert SkinToneDetector().detect(solid_frame(32, 32, (20, 40, 200, 255))) is None


def test_create_detector_variants():
    assert isinstance(create_detector("disabled"), FixedRegionDetector)
    assert isinstance(create_detector("simple", fallback=False), SkinToneDetector)
    with pytest.raises(ValueError):
        create_detector("haar")


def test_fallback_covers_missed_frames():
    detector = create_detector("simple", fallback=True)
    assert isinstance(detector, FallbackDetector)
    roi = detector.detect(solid_frame(100, 200, (20, 40, 200, 255)))
    assert roi == FixedRegionDetector().detect(solid_frame(100, 200))


def test_missing_backend(monkeypatch):
    def unavailable():
        raise ImportError("mediapipe is not installed.")

    monkeypatch.setitem(detector_module._DETECTORS, "mediapipe", unavailable)
    assert isinstance(create_detector("mediapipe", fallback=True), FixedRegionDetector)
    with pytest.raises(ImportError):
        create_detector("mediapipe", fallback=False)


FACE = FaceROI(100, 100, 100, 130)


@pytest.mark.parametrize("region,expected", [
    ("cheek", (110, 139, 80, 52)),
    ("forehead", (110, 110, 80, 32.5)),
    ("nose", (125, 126, 50, 52)),
    ("full", (110, 110, 80, 110)),
])
def test_ppg_regions(region, expected):
    roi = ppg_region(FACE, region)
    assert (roi.x, roi.y, roi.width, roi.height) == pytest.approx(expected)


def test_unknown_region():
    with pytest.raises(ValueError):
        ppg_region(FACE, "chin")


def test_validate_face():
    assert validate_face(FaceROI(0, 0, 100, 130, confidence=0.9)) == (True, [])
    assert validate_face(None) == (False, ["No face detected"])

    ok, issues = validate_face(FaceROI(-1, 0, 100, 200, confidence=0.3))
    assert not ok
    assert issues == [
        "Invalid coordinates: negative position",
        "Unusual aspect ratio: 2.00",
        "Low confidence score",
    ]

    ok, issues = validate_face(FaceROI(0, 0, 0, 100))
    assert issues == ["Invalid face size: dimensions must be positive"]


@pytest.mark.parametrize("face,expected", [
    (FaceROI(200, 100, 240, 300), True),
    (FaceROI(0, 0, 50, 50), False),
    (FaceROI(0, 0, 640, 480), False),
    (FaceROI(500, 100, 240, 300), False),
    (FaceROI(-10, 100, 240, 300), False),
    (FaceROI(200, 300, 240, 300), False),
])
def test_face_positioning(face, expected):
    assert is_face_well_positioned(face, 640, 480) is expected


def test_face_positioning_bounds_are_tunable():
    face = FaceROI(0, 0, 50, 50)
    assert is_face_well_positioned(face, 640, 480, min_size=0.005)
    assert not is_face_well_positioned(face, 0, 480)
