from .generated_audio import (
    GeneratedAudioRepository,
    InMemoryGeneratedAudioRepository,
)

__all__ = [
    "GeneratedAudioRepository",
    "InMemoryGeneratedAudioRepository",
]
