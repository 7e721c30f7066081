"""
api/schemas.py — Pydantic request & response models
=====================================================
Wire format of the biomarker endpoint.  Field names on the wire are
camelCase (``heartRate``, ``sysBP``...) to match browser clients; Python
code uses the snake_case attribute names.

`BiomarkerPayload` is shared by the server (response body) and by
`remote.client` (validating what a remote server sent back).
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from config import SAMPLING_RATE_HZ
from model.biomarkers import BiomarkerSnapshot


# ── Request Models ───────────────────────────────────────────────────────────


class BiomarkerRequest(BaseModel):
    """Signal samples to evaluate (oldest first)."""
    model_config = ConfigDict(populate_by_name=True)

    signal: list[Annotated[float, Field(allow_inf_nan=False)]] = Field(
        ..., description="Chrominance signal samples (finite numbers only)."
    )
    sampling_rate: float = Field(
        SAMPLING_RATE_HZ, gt=0, le=1000, alias="samplingRate", description="Samples per second."
    )


# ── Response Models ──────────────────────────────────────────────────────────


class BiomarkerPayload(BaseModel):
    """One biomarker snapshot as exchanged over HTTP."""
    model_config = ConfigDict(populate_by_name=True)

    heart_rate: float = Field(..., ge=0, le=300, alias="heartRate")
    breathing_rate: float = Field(..., ge=0, le=100, alias="breathingRate")
    hrv: float = Field(..., ge=0, le=100)
    systolic_bp: float = Field(..., ge=0, le=300, alias="sysBP")
    diastolic_bp: float = Field(..., ge=0, le=300, alias="diaBP")
    parasympathetic_health: float = Field(..., ge=0, le=100, alias="parasympatheticHealth")
    wellness_value: float = Field(..., ge=0, le=100, alias="wellnessValue")
    stress_index: float = Field(..., ge=0, le=100, alias="stressIndex")
    signal_quality: float | None = Field(None, ge=0, le=100, alias="signalQuality")
    timestamp: float

    @classmethod
    def from_snapshot(cls, snapshot: BiomarkerSnapshot) -> "BiomarkerPayload":
        return cls(**snapshot.to_dict())

    def to_snapshot(self) -> BiomarkerSnapshot:
        data = self.model_dump()
        if data["signal_quality"] is None:
            data["signal_quality"] = 0.0
        return BiomarkerSnapshot(**data)


class CalculationMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    signal_length: int = Field(..., alias="signalLength")
    sampling_rate: float = Field(..., alias="samplingRate")
    calculated_at: str = Field(..., alias="calculatedAt")


class BiomarkerResponse(BaseModel):
    success: bool = True
    data: BiomarkerPayload
    metadata: CalculationMetadata


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
