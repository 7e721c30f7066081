"""
face/regions.py — PPG sub-regions & face sanity checks
========================================================
A detector's face box includes eyes, eyebrows, hair line and mouth, all
of which move or have no blood perfusion.  `ppg_region` narrows the box to
the skin patch the pulse is sampled from.

Why cheeks by default?
----------------------
Cheeks are large, flat, well-perfused and mostly free of facial features,
so they give the strongest and steadiest rPPG signal.  The forehead is a
good second choice when the lower face is occluded.
"""

from config import FACE_MIN_CONFIDENCE, PPG_REGION, PPG_REGION_MARGIN
from rppg.roi import FaceROI

REGIONS = ("cheek", "forehead", "nose", "full")


def ppg_region(face: FaceROI, region: str = PPG_REGION, margin: float = PPG_REGION_MARGIN) -> FaceROI:
    """
    Sub-rectangle of `face` to sample for the pulse signal.

    Parameters
    ----------
    face   : FaceROI  Detected face box.
    region : str      "cheek" | "forehead" | "nose" | "full".
    margin : float    Inset as a fraction of the face width.
    """
    m = face.width * margin

    if region == "cheek":
        return FaceROI(face.x + m, face.y + face.height * 0.3, face.width * 0.8, face.height * 0.4)
    if region == "forehead":
        return FaceROI(face.x + m, face.y + m, face.width * 0.8, face.height * 0.25)
    if region == "nose":
        return FaceROI(face.x + face.width * 0.25, face.y + face.height * 0.2, face.width * 0.5, face.height * 0.4)
    if region == "full":
        return FaceROI(face.x + m, face.y + m, face.width - 2 * m, face.height - 2 * m)

    raise ValueError(f"Unknown PPG region '{region}'. Choose from {REGIONS}.")


def validate_face(face: FaceROI | None, min_confidence: float = FACE_MIN_CONFIDENCE) -> tuple[bool, list[str]]:
    """
    Plausibility check for a detected face.

    Returns
    -------
    (is_valid, issues)
        `issues` lists every problem found; empty when valid.
    """
    if face is None:
        return False, ["No face detected"]

    issues: list[str] = []

    if face.x < 0 or face.y < 0:
        issues.append("Invalid coordinates: negative position")

    if face.width <= 0 or face.height <= 0:
        issues.append("Invalid face size: dimensions must be positive")
    else:
        # Faces are roughly 1 : 1.3 (width : height)
        aspect = face.height / face.width
        if aspect < 1.0 or aspect > 1.5:
            issues.append(f"Unusual aspect ratio: {aspect:.2f}")

    if face.confidence is not None:
        if face.confidence < 0 or face.confidence > 1:
            issues.append("Invalid confidence: must be between 0-1")
        if face.confidence < min_confidence:
            issues.append("Low confidence score")

    return not issues, issues


def is_face_well_positioned(
    face: FaceROI,
    frame_width: float,
    frame_height: float,
    min_size: float = 0.15,
    max_size: float = 0.8,
) -> bool:
    """
    True when `face` lies wholly inside the frame and covers between
    `min_size` and `max_size` of its area (too small is noisy, too close
    crops the cheeks).
    """
    if frame_width <= 0 or frame_height <= 0:
        return False
    coverage = (face.width * face.height) / (frame_width * frame_height)
    return (
        min_size <= coverage <= max_size
        and face.x >= 0
        and face.y >= 0
        and face.x + face.width <= frame_width
        and face.y + face.height <= frame_height
    )
