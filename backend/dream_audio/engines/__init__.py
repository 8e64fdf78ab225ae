from .audio_generation import (
    AMBIENT_TONE_HZ,
    DEFAULT_SAMPLE_RATE,
    SUBLIMINAL_CARRIER_HZ,
    AudioGenerationEngine,
    MaskingSound,
)

__all__ = [
    "AMBIENT_TONE_HZ",
    "DEFAULT_SAMPLE_RATE",
    "SUBLIMINAL_CARRIER_HZ",
    "AudioGenerationEngine",
    "MaskingSound",
]
