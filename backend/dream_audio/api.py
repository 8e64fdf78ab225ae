from __future__ import annotations

import math
from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from dream_audio import container
from dream_audio.audio import InvalidAudioArgumentError
from dream_audio.logging_utils import get_logger
from dream_audio.models import (
    BinauralBeatRequest,
    GeneratedAudio,
    GeneratedAudioItem,
    GenerationResponse,
    HealthResponse,
    MessageResponse,
    SubliminalAudioRequest,
)
from dream_audio.services import (
    AudioNotFoundError,
    AudioOwnershipError,
    StorageError,
    validate_file_name,
)


logger = get_logger(__name__)
router = APIRouter()


def _require_user(user_id: Optional[str]) -> str:
    # Authentication happens upstream; it forwards the caller's id.
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return user_id


def _enforce_rate_limit(user_id: str) -> None:
    if not container.get_rate_limiter().allow_request(user_id):
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded for this client",
        )


def _whole_minutes(seconds: float) -> int:
    # Halves round up: 2.5 minutes is listed as 3.
    return math.floor(seconds / 60 + 0.5)


def _to_generation_response(
    record: GeneratedAudio,
    message: str,
    duration_minutes: float,
    **extra,
) -> GenerationResponse:
    return GenerationResponse(
        message=message,
        audio_id=record.id,
        audio_url=record.storage_url,
        file_name=record.file_name,
        size=record.file_size,
        duration=duration_minutes,
        **extra,
    )


@router.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get("/metrics")
async def metrics() -> PlainTextResponse:
    payload = generate_latest()
    return PlainTextResponse(payload, media_type=CONTENT_TYPE_LATEST)


@router.post("/v1/audio/binaural-beat", response_model=GenerationResponse)
async def generate_binaural_beat(
    req: BinauralBeatRequest,
    x_user_id: Optional[str] = Header(None),
) -> GenerationResponse:
    user_id = _require_user(x_user_id)
    _enforce_rate_limit(user_id)

    try:
        record = await container.get_generation_service().generate_binaural_beat(
            user_id=user_id,
            carrier_frequency=req.carrier_frequency,
            beat_frequency=req.beat_frequency,
            duration_minutes=req.duration,
            volume_dbfs=req.volume,
        )
    except InvalidAudioArgumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(
            status_code=502, detail="Failed to upload audio to storage"
        ) from exc

    return _to_generation_response(
        record, "Binaural beat generated successfully", req.duration
    )


@router.post("/v1/audio/subliminal-audio", response_model=GenerationResponse)
async def generate_subliminal_audio(
    req: SubliminalAudioRequest,
    x_user_id: Optional[str] = Header(None),
) -> GenerationResponse:
    user_id = _require_user(x_user_id)
    _enforce_rate_limit(user_id)

    try:
        record = await container.get_generation_service().generate_subliminal_audio(
            user_id=user_id,
            affirmation_text=req.affirmation_text,
            masking_sound=req.masking_sound,
            duration_minutes=req.duration,
            subliminal_volume_dbfs=req.subliminal_volume,
            masking_volume_dbfs=req.masking_volume,
        )
    except InvalidAudioArgumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(
            status_code=502, detail="Failed to upload audio to storage"
        ) from exc

    return _to_generation_response(
        record,
        "Subliminal audio generated successfully",
        req.duration,
        affirmation=req.affirmation_text,
        masking_sound=req.masking_sound,
    )


@router.get("/v1/audio/generated", response_model=List[GeneratedAudioItem])
async def list_generated_audio(
    x_user_id: Optional[str] = Header(None),
) -> List[GeneratedAudioItem]:
    user_id = _require_user(x_user_id)
    records = container.get_generation_service().list_history(user_id)
    return [
        GeneratedAudioItem(
            id=r.id,
            type=r.category.value,
            file_name=r.title,
            audio_url=r.storage_url,
            duration=_whole_minutes(r.duration_seconds),
            size=r.file_size,
            created_at=r.created_at,
        )
        for r in records
    ]


@router.delete("/v1/audio/generated/{audio_id}", response_model=MessageResponse)
async def delete_generated_audio(
    audio_id: int,
    x_user_id: Optional[str] = Header(None),
) -> MessageResponse:
    user_id = _require_user(x_user_id)
    try:
        await container.get_generation_service().delete(user_id=user_id, audio_id=audio_id)
    except AudioNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Audio not found") from exc
    except AudioOwnershipError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    return MessageResponse(message="Audio deleted successfully")


@router.get("/v1/audio/files/{file_name}")
async def get_audio_file(file_name: str) -> Response:
    try:
        validate_file_name(file_name)
        data = await container.get_generation_service().read_file(file_name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid file name") from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Audio file not found") from exc

    return Response(
        content=data,
        media_type="audio/wav",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
