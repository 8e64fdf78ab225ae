from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


MaskingSoundName = Literal["white-noise", "ambient-tone"]


class BinauralBeatRequest(BaseModel):
    """Request body for rendering a binaural beat."""

    carrier_frequency: float = Field(
        ..., ge=20, le=20000, description="Left-ear tone in Hz"
    )
    beat_frequency: float = Field(
        ..., ge=0.5, le=40, description="Right-ear offset from the carrier in Hz"
    )
    duration: float = Field(..., ge=1, le=120, description="Length in minutes")
    volume: float = Field(-6.0, ge=-60, le=0, description="Gain in dBFS")


class SubliminalAudioRequest(BaseModel):
    """Request body for rendering subliminal audio."""

    affirmation_text: str = Field(..., min_length=5, max_length=500)
    masking_sound: MaskingSoundName
    duration: float = Field(..., ge=1, le=120, description="Length in minutes")
    subliminal_volume: float = Field(-30.0, ge=-60, le=0)
    masking_volume: float = Field(-10.0, ge=-60, le=0)


class GenerationResponse(BaseModel):
    message: str
    audio_id: int
    audio_url: str
    file_name: str
    size: int
    duration: float
    format: Literal["wav"] = "wav"
    affirmation: Optional[str] = None
    masking_sound: Optional[MaskingSoundName] = None


class GeneratedAudioItem(BaseModel):
    id: int
    type: Literal["binaural", "subliminal"]
    file_name: str
    audio_url: str
    duration: int = Field(..., description="Length in whole minutes")
    size: int
    created_at: datetime


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: Literal["ok"]
