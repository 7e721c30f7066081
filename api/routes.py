"""
api/routes.py — FastAPI route definitions
==========================================
All HTTP endpoints are defined here and wired into the app via
`app.include_router(router)` in `api/app.py`.

Endpoint summary
----------------
    GET  /health            — Liveness probe
    GET  /api/biomarkers    — Usage description
    POST /api/biomarkers    — Derive a biomarker snapshot from posted signal samples
    GET  /docs              — Auto-generated Swagger UI (FastAPI built-in)

The service is stateless: every POST is evaluated on its own with
`rppg.pipeline.compute_biomarkers`, so concurrent clients never share a
buffer.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.schemas import (
    BiomarkerPayload,
    BiomarkerRequest,
    BiomarkerResponse,
    CalculationMetadata,
    ErrorResponse,
)
from config import REMOTE_MIN_SAMPLES
from rppg.pipeline import compute_biomarkers
from utils.logger import get_logger

logger = get_logger("api.routes")

router = APIRouter()


# ── Health ────────────────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    """Simple liveness check."""
    return {"status": "ok", "service": "rPPG Biomarker Estimator"}


# ── Biomarkers ───────────────────────────────────────────────────────────────

@router.get("/api/biomarkers")
async def biomarkers_usage():
    return {
        "message": "Biomarker calculation API",
        "usage": "POST with { signal: number[], samplingRate?: number }",
        "endpoints": {
            "POST": "/api/biomarkers - Calculate biomarkers from PPG signal",
        },
    }


@router.post(
    "/api/biomarkers",
    response_model=BiomarkerResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def calculate_biomarkers(request: BiomarkerRequest):
    """
    Derive heart rate, breathing rate, HRV and the derived indices from a
    chrominance signal.

    Body (JSON):
        signal       : number[]   at least 5 samples, oldest first
        samplingRate : number     Hz (default 30)

    Returns 400 for signals that are too short, 500 if processing fails.
    """
    if len(request.signal) < REMOTE_MIN_SAMPLES:
        return JSONResponse(
            status_code=400,
            content={"error": f"Insufficient signal data. Need at least {REMOTE_MIN_SAMPLES} samples."},
        )

    try:
        snapshot = compute_biomarkers(request.signal, request.sampling_rate)
    except (ValueError, FloatingPointError) as e:
        logger.exception("Biomarker calculation failed:")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to calculate biomarkers", "details": str(e)},
        )

    logger.info(
        "Biomarkers computed from %d samples: HR=%.1f BPM, BR=%.1f, HRV=%.1f",
        len(request.signal), snapshot.heart_rate, snapshot.breathing_rate, snapshot.hrv,
    )

    return BiomarkerResponse(
        success=True,
        data=BiomarkerPayload.from_snapshot(snapshot),
        metadata=CalculationMetadata(
            signal_length=len(request.signal),
            sampling_rate=request.sampling_rate,
            calculated_at=datetime.now(timezone.utc).isoformat(),
        ),
    )
