"""
face/detector.py — Face detection
==================================
Supplies the `FaceROI` rectangle that `PPGProcessor.add_frame` samples.
The processor only needs *a* rectangle per frame, so detection is a
pluggable capability with three interchangeable variants:

    FixedRegionDetector  — a constant central rectangle (no analysis at all)
    SkinToneDetector     — colour-rule heuristic on the RGBA frame (numpy only)
    MediaPipeDetector    — Google's MediaPipe Face Mesh (468 landmarks)

`create_detector(name)` builds one from the `FACE_DETECTOR` setting.  With
`fallback=True` any detector that cannot be constructed, or that finds no
face in a frame, is backed by the fixed central rectangle so that the
signal keeps flowing while the subject settles.

Skin-tone rule
--------------
A pixel counts as skin when R > 95, G > 40, B > 20, R − G > 15 and
R − B > 15.  If more than `SKIN_MIN_FRACTION` of the frame is skin, a
face-sized box (min(150, 0.3·W) × min(200, 0.4·H)) is centred on the skin
centroid.  Confidence grows with the skin share and saturates at 1 once a
little over 10 % of the frame is skin.
"""

from abc import ABC, abstractmethod

import cv2
import numpy as np
# NOTE: mediapipe is imported LAZILY inside MediaPipeDetector.__init__(), not
# here.  This lets the API server and the heuristic detectors run even if
# mediapipe is not installed.
from utils.logger import get_logger
from config import (
    FACE_DETECTOR,
    FACE_DETECTOR_FALLBACK,
    FACE_MIN_CONFIDENCE,
    FIXED_ROI_FRACTIONS,
    SKIN_MIN_FRACTION,
)
from rppg.roi import FaceROI, PixelBuffer

logger = get_logger("face.detector")


class FaceDetector(ABC):
    """Finds the subject's face in one RGBA frame."""

    name = "abstract"

    @abstractmethod
    def detect(self, frame: PixelBuffer) -> FaceROI | None:
        """Return the face rectangle, or None if no face was found."""

    def close(self) -> None:
        """Release any native resources.  No-op by default."""


# ── Heuristic detectors ──────────────────────────────────────────────────────

class FixedRegionDetector(FaceDetector):
    """
    Always reports the same rectangle, given as fractions of the frame.

    Parameters
    ----------
    fractions : (x, y, width, height)  Relative to frame width / height.
    """

    name = "disabled"

    def __init__(self, fractions: tuple[float, float, float, float] = FIXED_ROI_FRACTIONS):
        fx, fy, fw, fh = fractions
        if fw <= 0 or fh <= 0:
            raise ValueError(f"Fixed region must have a positive size, got {fractions}.")
        self.fractions = fractions

    def detect(self, frame: PixelBuffer) -> FaceROI | None:
        fx, fy, fw, fh = self.fractions
        return FaceROI(
            x=frame.width * fx,
            y=frame.height * fy,
            width=frame.width * fw,
            height=frame.height * fh,
        )


class SkinToneDetector(FaceDetector):
    """Locates the skin-coloured centroid of the frame."""

    name = "simple"

    def __init__(self, min_fraction: float = SKIN_MIN_FRACTION):
        self.min_fraction = min_fraction

    @staticmethod
    def skin_mask(rgb: np.ndarray) -> np.ndarray:
        """Boolean (H, W) mask of skin-tone pixels in an (H, W, 3) uint8 image."""
        # int16 so that channel differences cannot wrap around
        r, g, b = (rgb[..., i].astype(np.int16) for i in range(3))
        return (r > 95) & (g > 40) & (b > 20) & (r - g > 15) & (r - b > 15)

    def detect(self, frame: PixelBuffer) -> FaceROI | None:
        pixels = frame.as_array()
        if pixels is None:
            return None

        mask = self.skin_mask(pixels[..., :3])
        total = mask.size
        skin = int(mask.sum())
        if skin <= total * self.min_fraction:
            return None

        ys, xs = np.nonzero(mask)
        centre_x = float(xs.mean())
        centre_y = float(ys.mean())

        face_w = min(150.0, frame.width * 0.3)
        face_h = min(200.0, frame.height * 0.4)

        return FaceROI(
            x=max(0.0, centre_x - face_w / 2),
            y=max(0.0, centre_y - face_h / 2),
            width=face_w,
            height=face_h,
            confidence=min(1.0, skin / (total * 0.1) * 0.8),
        )


# ── ML detector ──────────────────────────────────────────────────────────────

class MediaPipeDetector(FaceDetector):
    """
    Wraps MediaPipe FaceMesh; the face box is the bounding box of all
    landmarks.

    Parameters
    ----------
    min_confidence : float
        Detection / tracking confidence passed to FaceMesh.
    """

    name = "mediapipe"

    def __init__(self, min_confidence: float = FACE_MIN_CONFIDENCE):
        try:
            import mediapipe as mp
        except ImportError:
            raise ImportError(
                "mediapipe is not installed.  Run:  pip install mediapipe\n"
                "or choose another detector with  --detector simple"
            )

        self._mp_face_mesh = mp.solutions.face_mesh.FaceMesh(
            max_num_faces=1,
            refine_landmarks=False,
            min_detection_confidence=min_confidence,
            min_tracking_confidence=min_confidence,
        )
        self._min_confidence = min_confidence
        logger.info("MediaPipe FaceMesh initialised (min_confidence=%.2f).", min_confidence)

    def detect(self, frame: PixelBuffer) -> FaceROI | None:
        pixels = frame.as_array()
        if pixels is None:
            return None

        # MediaPipe expects a contiguous RGB image
        frame_rgb = cv2.cvtColor(np.ascontiguousarray(pixels), cv2.COLOR_RGBA2RGB)
        results = self._mp_face_mesh.process(frame_rgb)
        if not results.multi_face_landmarks:
            return None

        landmarks = results.multi_face_landmarks[0].landmark
        xs = np.array([lm.x for lm in landmarks]) * frame.width
        ys = np.array([lm.y for lm in landmarks]) * frame.height

        x_min = max(0.0, float(xs.min()))
        y_min = max(0.0, float(ys.min()))
        x_max = min(float(frame.width), float(xs.max()))
        y_max = min(float(frame.height), float(ys.max()))
        if x_max <= x_min or y_max <= y_min:
            return None

        return FaceROI(
            x=x_min,
            y=y_min,
            width=x_max - x_min,
            height=y_max - y_min,
            # FaceMesh does not expose a per-face score; it only returns faces
            # that passed min_detection_confidence.
            confidence=1.0,
        )

    def close(self) -> None:
        """Release MediaPipe resources."""
        self._mp_face_mesh.close()
        logger.info("FaceMesh closed.")


# ── Composition ──────────────────────────────────────────────────────────────

class FallbackDetector(FaceDetector):
    """Uses `primary`, and `fallback` for every frame where it finds nothing."""

    def __init__(self, primary: FaceDetector, fallback: FaceDetector):
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}+fallback"

    def detect(self, frame: PixelBuffer) -> FaceROI | None:
        roi = self.primary.detect(frame)
        if roi is None:
            roi = self.fallback.detect(frame)
        return roi

    def close(self) -> None:
        self.primary.close()
        self.fallback.close()


_DETECTORS = {
    "mediapipe": MediaPipeDetector,
    "simple": SkinToneDetector,
    "disabled": FixedRegionDetector,
}


def create_detector(name: str = FACE_DETECTOR, fallback: bool = FACE_DETECTOR_FALLBACK) -> FaceDetector:
    """
    Build a detector by name ("mediapipe" | "simple" | "disabled").

    Raises
    ------
    ValueError
        Unknown detector name.
    ImportError
        The detector's backend is missing and `fallback` is False.
    """
    try:
        factory = _DETECTORS[name]
    except KeyError:
        raise ValueError(f"Unknown face detector '{name}'. Choose from {sorted(_DETECTORS)}.") from None

    if name == "disabled":
        return FixedRegionDetector()

    try:
        detector = factory()
    except (ImportError, AttributeError) as e:
        # AttributeError: mediapipe builds without the legacy `solutions` API
        if not fallback:
            raise
        logger.warning("Face detector '%s' unavailable (%s); using the fixed central region.", name, e)
        return FixedRegionDetector()

    logger.info("Face detector: %s", detector.name)
    if fallback:
        return FallbackDetector(detector, FixedRegionDetector())
    return detector
