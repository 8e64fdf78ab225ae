from __future__ import annotations

from enum import Enum
from typing import Optional

import numpy as np

from ..audio import (
    InvalidAudioArgumentError,
    encode_wav,
    interleave_stereo,
    mix,
    pad_to_length,
    sine_wave,
    white_noise,
)
from ..logging_utils import get_logger


logger = get_logger(__name__)


DEFAULT_SAMPLE_RATE = 16000
AMBIENT_TONE_HZ = 40.0
SUBLIMINAL_CARRIER_HZ = 8000.0


class MaskingSound(str, Enum):
    WHITE_NOISE = "white-noise"
    AMBIENT_TONE = "ambient-tone"


class AudioGenerationEngine:
    """Renders finished WAV files for the binaural and subliminal generators.

    The engine is stateless apart from its sample rate, so one instance can
    serve concurrent callers and tests can build engines with different rates
    side by side.
    """

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if sample_rate <= 0:
            raise InvalidAudioArgumentError(
                f"sample_rate must be positive, got {sample_rate!r}"
            )
        self._sample_rate = sample_rate
        self._rng = rng

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def generate_binaural_beat(
        self,
        carrier_frequency: float,
        beat_frequency: float,
        duration_minutes: float,
        volume_dbfs: float = -6.0,
    ) -> bytes:
        """Stereo WAV: carrier on the left, carrier + beat on the right."""
        duration_s = duration_minutes * 60
        logger.info(
            "Rendering binaural beat carrier=%.2fHz beat=%.2fHz duration=%.2fmin volume=%.1fdBFS",
            carrier_frequency,
            beat_frequency,
            duration_minutes,
            volume_dbfs,
        )

        left = sine_wave(carrier_frequency, duration_s, self._sample_rate)
        right = sine_wave(
            carrier_frequency + beat_frequency, duration_s, self._sample_rate
        )
        stereo = interleave_stereo(left, right, volume_dbfs)
        return encode_wav(stereo, self._sample_rate, num_channels=2)

    def generate_subliminal_audio(
        self,
        affirmation_text: str,
        masking_type: str,
        duration_minutes: float,
        subliminal_volume_dbfs: float = -30.0,
        masking_volume_dbfs: float = -10.0,
    ) -> bytes:
        """Mono WAV: a fixed 8 kHz carrier mixed under a masking sound.

        The affirmation text is accepted but not encoded into the signal;
        only the carrier tone stands in for it.
        """
        duration_s = duration_minutes * 60
        logger.info(
            "Rendering subliminal audio masking=%s duration=%.2fmin "
            "subliminal=%.1fdBFS masking=%.1fdBFS (affirmation_len=%d)",
            masking_type,
            duration_minutes,
            subliminal_volume_dbfs,
            masking_volume_dbfs,
            len(affirmation_text),
        )

        masking = self._masking_buffer(masking_type, duration_s)
        subliminal = sine_wave(SUBLIMINAL_CARRIER_HZ, duration_s, self._sample_rate)

        length = max(len(subliminal), len(masking))
        mixed = mix(
            pad_to_length(subliminal, length),
            pad_to_length(masking, length),
            subliminal_volume_dbfs,
            masking_volume_dbfs,
        )
        return encode_wav(mixed, self._sample_rate, num_channels=1)

    def _masking_buffer(self, masking_type: str, duration_s: float) -> bytes:
        try:
            kind = MaskingSound(masking_type)
        except ValueError:
            logger.warning(
                "Unknown masking type %r, falling back to %s",
                masking_type,
                MaskingSound.WHITE_NOISE.value,
            )
            kind = MaskingSound.WHITE_NOISE

        if kind is MaskingSound.AMBIENT_TONE:
            return sine_wave(AMBIENT_TONE_HZ, duration_s, self._sample_rate)
        return white_noise(duration_s, self._sample_rate, rng=self._rng)
