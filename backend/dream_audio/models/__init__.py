from .api import (
    BinauralBeatRequest,
    GeneratedAudioItem,
    GenerationResponse,
    HealthResponse,
    MessageResponse,
    SubliminalAudioRequest,
)
from .domain import AudioCategory, GeneratedAudio

__all__ = [
    "BinauralBeatRequest",
    "GeneratedAudioItem",
    "GenerationResponse",
    "HealthResponse",
    "MessageResponse",
    "SubliminalAudioRequest",
    "AudioCategory",
    "GeneratedAudio",
]
