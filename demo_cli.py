#!/usr/bin/env python3
"""
demo_cli.py — Standalone command-line demo
============================================
Runs a full rPPG session WITHOUT the FastAPI server and prints the
resulting biomarkers.  Useful for quick testing, demos, and debugging.

Usage:
    python demo_cli.py --synthetic --bpm 72 --duration 20
    python demo_cli.py --video face.mp4 --detector simple
    python demo_cli.py --camera 0 --duration 30 --age 35

⚠️  DISCLAIMER: See model/biomarkers.py for full disclaimers.
    This is a WELLNESS ESTIMATION tool — NOT a medical device.
"""

import argparse
import sys
import time

import cv2

from config import FACE_DETECTOR, PPG_REGION, SAMPLING_RATE_HZ
from face.detector import create_detector
from face.regions import REGIONS, is_face_well_positioned, ppg_region
from model.stress import classify_stress
from rppg.pipeline import PPGProcessor
from rppg.roi import PixelBuffer
from utils.logger import get_logger
from utils.synthetic import synthetic_frames

logger = get_logger("demo_cli")


def pretty_print(label: str, value, unit: str = "") -> None:
    """Colourised terminal output."""
    print(f"  \033[1;36m{label:<28}\033[0m \033[1;33m{value}\033[0m {unit}")


def _open_capture(source):
    """Open a cv2 capture source (file path or camera index) and read its frame rate."""
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        raise OSError(f"Could not open video source {source!r}.")
    fps = cap.get(cv2.CAP_PROP_FPS)
    if not fps > 0:
        # Some cameras and containers report 0 (or NaN)
        fps = SAMPLING_RATE_HZ
    logger.info("Video source %r opened @ %.1f FPS", source, fps)
    return cap, float(fps)


def _video_frames(cap, fps: float, max_frames: int, wall_clock: bool):
    """Yield ``(PixelBuffer, timestamp)`` from an opened capture, releasing it at the end."""
    start = time.time()
    try:
        for i in range(max_frames):
            ok, frame_bgr = cap.read()
            if not ok:
                break
            rgba = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGBA)
            # Files are timed by frame index, cameras by the wall clock
            stamp = time.time() if wall_clock else start + i / fps
            yield PixelBuffer.from_array(rgba), stamp
    finally:
        cap.release()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="rPPG Biomarker CLI Demo")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--video", type=str, help="Path to a video file of a face")
    source.add_argument("--camera", type=int, help="Webcam index")
    source.add_argument("--synthetic", action="store_true", help="Use a synthetic pulsating face (default)")
    parser.add_argument("--bpm", type=float, default=72.0, help="Synthetic heart rate (BPM)")
    parser.add_argument("--breaths", type=float, default=15.0, help="Synthetic breathing rate (per min)")
    parser.add_argument("--duration", type=float, default=20.0, help="Scan duration (seconds)")
    parser.add_argument("--detector", type=str, default=FACE_DETECTOR,
                        choices=["mediapipe", "simple", "disabled"])
    parser.add_argument("--region", type=str, default=PPG_REGION, choices=REGIONS)
    parser.add_argument("--age", type=float, default=None, help="Optional age estimate (BP term)")
    args = parser.parse_args(argv)

    print("\n" + "=" * 60)
    print("  rPPG BIOMARKER ESTIMATION — CLI DEMO")
    print("=" * 60)
    print("  ⚠️  This is a WELLNESS ESTIMATION tool — NOT medical grade.")
    print("=" * 60 + "\n")

    # The processor must run at the source's real frame rate
    if args.video or args.camera is not None:
        source = args.video if args.video else args.camera
        try:
            cap, fps = _open_capture(source)
        except OSError as e:
            print(f"  ERROR: {e}")
            return 1
        n_frames = int(args.duration * fps)
        frames = _video_frames(cap, fps, n_frames, wall_clock=not args.video)
    else:
        fps = SAMPLING_RATE_HZ
        n_frames = int(args.duration * fps)
        frames = synthetic_frames(n_frames, fps, args.bpm, breaths_per_min=args.breaths)

    detector = create_detector(args.detector)
    processor = PPGProcessor(sampling_rate=fps)

    print(f"  Detector     : {detector.name}")
    print(f"  Frame rate   : {fps:.1f} FPS")
    print(f"  PPG region   : {args.region}")
    print(f"  Scan duration: {args.duration:.0f} s\n")

    # ── Main capture loop ────────────────────────────────────────────────
    frame_count = 0
    face_count = 0
    positioned_count = 0
    try:
        for frame, stamp in frames:
            frame_count += 1
            face = detector.detect(frame)
            roi = None
            if face is not None:
                face_count += 1
                if is_face_well_positioned(face, frame.width, frame.height):
                    positioned_count += 1
                roi = ppg_region(face, args.region)
            processor.add_frame(frame, roi, stamp)
    finally:
        detector.close()

    print(f"  Processed {frame_count} frames, face found in {face_count} "
          f"({100 * face_count / max(frame_count, 1):.0f}%), "
          f"well positioned in {positioned_count}, "
          f"{processor.dropped_frames} dropped.\n")

    snapshot = processor.get_biomarkers(age=args.age)
    stress = classify_stress(snapshot.stress_index, snapshot.heart_rate)

    # ── Pretty-print results ─────────────────────────────────────────────
    print("=" * 60)
    print("  RESULTS")
    print("=" * 60)
    print("\n  ── Vital Signs ──")
    pretty_print("Heart Rate", snapshot.heart_rate or "—", "BPM")
    pretty_print("Breathing Rate", snapshot.breathing_rate or "—", "breaths/min")
    pretty_print("HRV score", snapshot.hrv or "—", "/ 100")
    pretty_print("Signal quality", snapshot.signal_quality, "/ 100")

    print("\n  ── Blood Pressure (ESTIMATED) ──")
    pretty_print("Systolic", snapshot.systolic_bp, "mmHg")
    pretty_print("Diastolic", snapshot.diastolic_bp, "mmHg")

    print("\n  ── Derived Indices (ESTIMATED) ──")
    pretty_print("Parasympathetic health", snapshot.parasympathetic_health, "/ 100")
    pretty_print("Wellness", snapshot.wellness_value, "/ 100")
    pretty_print("Stress index", snapshot.stress_index, "/ 100")
    pretty_print("Stress level", stress["level"])
    print(f"    {stress['description']}")

    print("\n" + "=" * 60)
    print("  ⚠️  DISCLAIMER: All values above are ESTIMATES.")
    print("      Do NOT use for medical diagnosis or treatment.")
    print("=" * 60 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
