"""
config.py — Centralised configuration & hyper-parameters
=========================================================
Every tunable constant in the project lives here so that the rest of the
codebase can import from a single source of truth.

The numeric constants below are heuristics, not physiology.  They are
grouped by the pipeline stage that consumes them.
"""

# ─── Sampling & Buffer ───────────────────────────────────────────────────────
SAMPLING_RATE_HZ: float = 30.0     # Frames (samples) per second
BUFFER_CAPACITY: int = 1800        # 60 s at 30 Hz; oldest samples evicted first

# ─── ROI Colour Sampling ─────────────────────────────────────────────────────
ROI_PIXEL_STRIDE: int = 2          # Sample every 2nd pixel in both axes
ROI_MIN_ALPHA: int = 0             # Pixels with alpha below this are ignored
                                   # (0 keeps every pixel)

# ─── Heart Rate ──────────────────────────────────────────────────────────────
HR_MIN_SAMPLES: int = 150          # 5 s before any HR is reported
HR_WINDOW_SAMPLES: int = 300       # Analyse the last 10 s
DETREND_HALF_WINDOW: int = 60      # ±2 s local-mean baseline
SMOOTHING_WINDOW: int = 3          # Short moving average against pixel noise
HIGHPASS_WINDOW: int = 40          # ≈ 1 / 0.75 Hz
HR_USE_HIGHPASS: bool = False      # Second (high-pass) pass is optional
HR_THRESHOLD_PERCENTILE: float = 0.6
HR_PEAK_NEIGHBOURHOOD: int = 2     # Strict local max over ±2 samples
HR_MIN_PEAK_SPACING_S: float = 0.4 # 150 BPM ceiling on detectable peaks
HR_MIN_PEAKS: int = 3
HR_MIN_BPM: float = 45.0
HR_MAX_BPM: float = 200.0

# ─── Breathing Rate ──────────────────────────────────────────────────────────
BR_MIN_SAMPLES: int = 180          # 6 s
BR_WINDOW_SAMPLES: int = 600       # 20 s
BR_DETREND_HALF_WINDOW: int = 150  # ±5 s baseline; keeps the 2–7.5 s breathing cycle
BR_LOWPASS_SECONDS: float = 2.0    # Trailing moving average isolates respiration
BR_MIN_PEAK_SPACING_S: float = 2.0 # 30 breaths/min ceiling
BR_THRESHOLD_PERCENTILE: float = 0.5
BR_MIN_PEAKS: int = 2
BR_MIN_RPM: float = 8.0
BR_MAX_RPM: float = 30.0

# ─── HRV ─────────────────────────────────────────────────────────────────────
HRV_MIN_SAMPLES: int = 300
HRV_WINDOW_SAMPLES: int = 600
HRV_MIN_PEAKS: int = 3
HRV_SDNN_SCALE: float = 1.0        # score = SDNN(ms) * scale, clamped [0, 100]

# ─── Interval Validation ─────────────────────────────────────────────────────
OUTLIER_MAD_MULTIPLIER: float = 2.5

# ─── Temporal Smoothing ──────────────────────────────────────────────────────
HR_HISTORY_SIZE: int = 5           # Linear recency weights
BR_HISTORY_SIZE: int = 3           # Simple mean
HRV_HISTORY_SIZE: int = 5          # Simple mean
HR_MAX_JUMP_BPM: float = 25.0      # Reject jumps larger than this from the smoothed HR
HRV_MIN_SCORE: float = 0.0
HRV_MAX_SCORE: float = 100.0

# ─── Signal Quality ──────────────────────────────────────────────────────────
QUALITY_WINDOW: int = 90
QUALITY_MIN_SAMPLES: int = 60
QUALITY_MEAN_FLOOR: float = 0.001
QUALITY_SCALE: float = 50.0

# ─── Biomarker Derivation ────────────────────────────────────────────────────
# Blood pressure:  base + (HR − 60)·slope + amplitude·gain + (age − 30)·age_gain
BP_SYSTOLIC_BASE: float = 90.0
BP_DIASTOLIC_BASE: float = 60.0
BP_SYSTOLIC_HR_SLOPE: float = 0.3
BP_DIASTOLIC_HR_SLOPE: float = 0.15
BP_SYSTOLIC_AMPLITUDE_GAIN: float = 30.0
BP_DIASTOLIC_AMPLITUDE_GAIN: float = 15.0
BP_AGE_REFERENCE: float = 30.0
BP_SYSTOLIC_AGE_GAIN: float = 0.4
BP_DIASTOLIC_AGE_GAIN: float = 0.2
BP_SYSTOLIC_RANGE: tuple[float, float] = (80.0, 180.0)
BP_DIASTOLIC_RANGE: tuple[float, float] = (50.0, 120.0)

# Ideal resting values used by the closeness / deviation terms
IDEAL_PARASYMPATHETIC_HR: float = 60.0
IDEAL_HR: float = 65.0
IDEAL_BREATHING_RATE: float = 16.0
IDEAL_SYSTOLIC: float = 120.0

# Wellness blend
WELLNESS_WEIGHTS: dict[str, float] = {
    "heart_rate": 0.20,
    "breathing_rate": 0.15,
    "hrv": 0.25,
    "blood_pressure": 0.20,
    "parasympathetic": 0.20,
}

# Stress blend (deviation-from-ideal terms, equal weights)
STRESS_WEIGHTS: dict[str, float] = {
    "heart_rate": 0.25,
    "breathing_rate": 0.25,
    "hrv": 0.25,
    "parasympathetic": 0.25,
}

# Stress index → category (index is 0–100, higher = more stressed)
STRESS_LEVEL_MODERATE: float = 35.0
STRESS_LEVEL_HIGH: float = 60.0

# ─── Face Detection ──────────────────────────────────────────────────────────
FACE_DETECTOR: str = "simple"      # "mediapipe" | "simple" | "disabled"
FACE_DETECTOR_FALLBACK: bool = True
FACE_MIN_CONFIDENCE: float = 0.5
# Fallback box when no detector is available: (x, y, width, height) as
# fractions of the frame size
FIXED_ROI_FRACTIONS: tuple[float, float, float, float] = (0.25, 0.15, 0.5, 0.6)
SKIN_MIN_FRACTION: float = 0.02    # Skin-tone pixels needed to report a face
PPG_REGION: str = "cheek"          # "cheek" | "forehead" | "nose" | "full"
PPG_REGION_MARGIN: float = 0.1

# ─── Remote Computation ──────────────────────────────────────────────────────
REMOTE_MIN_SAMPLES: int = 5        # Shortest signal the endpoint accepts
REMOTE_MIN_BUFFER: int = 60        # Buffered samples before a session tries the remote path
REMOTE_SIGNAL_WINDOW: int = 150    # Most recent samples sent per request
REMOTE_TIMEOUT_SECONDS: float = 2.0
REMOTE_ENDPOINT: str = "http://127.0.0.1:8000/api/biomarkers"

# ─── API ─────────────────────────────────────────────────────────────────────
API_TITLE = "rPPG Biomarker Estimation API"
API_VERSION = "0.2.0"
API_HOST = "0.0.0.0"
API_PORT = 8000
