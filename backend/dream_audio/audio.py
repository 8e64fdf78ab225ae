from __future__ import annotations

import math
import struct
from typing import Optional

import numpy as np


PCM16_MIN = -32768
PCM16_MAX = 32767
FULL_SCALE = 0x7FFF
BYTES_PER_SAMPLE = 2
BITS_PER_SAMPLE = 16
WAV_HEADER_SIZE = 44

_UINT16_MAX = 0xFFFF
_UINT32_MAX = 0xFFFFFFFF

# Samples processed per step; float64 scratch stays at a few hundred KB
# whatever the render length.
_CHUNK_SAMPLES = 1 << 16


class InvalidAudioArgumentError(ValueError):
    """Raised when a generator, mixer or encoder receives unusable input."""


def _check_duration(duration_s: float) -> None:
    if not math.isfinite(duration_s):
        raise InvalidAudioArgumentError(
            f"duration must be a finite number of seconds, got {duration_s!r}"
        )
    if duration_s < 0:
        raise InvalidAudioArgumentError(
            f"duration must not be negative, got {duration_s!r}"
        )


def _check_sample_rate(sample_rate: float) -> None:
    if not math.isfinite(sample_rate) or sample_rate < 0:
        raise InvalidAudioArgumentError(
            f"sample rate must be a finite, non-negative number, got {sample_rate!r}"
        )


def sample_count(duration_s: float, sample_rate: float) -> int:
    """Number of samples for a duration; fractional samples are dropped."""
    _check_duration(duration_s)
    _check_sample_rate(sample_rate)
    return int(math.floor(duration_s * sample_rate))


def _chunks(n: int):
    for start in range(0, n, _CHUNK_SAMPLES):
        yield start, min(start + _CHUNK_SAMPLES, n)


def _saturate(values: np.ndarray) -> np.ndarray:
    """Hard-clip scaled samples in place and truncate them toward zero.

    An infinite gain times a zero sample gives NaN; those samples stay silent
    and infinities clip to the rails.
    """
    np.nan_to_num(values, copy=False, nan=0.0, posinf=PCM16_MAX, neginf=PCM16_MIN)
    np.clip(values, PCM16_MIN, PCM16_MAX, out=values)
    return np.trunc(values, out=values)


def decode_pcm16(buffer: bytes) -> np.ndarray:
    """Decode a 16-bit little-endian PCM buffer into an int16 array."""
    if len(buffer) % BYTES_PER_SAMPLE:
        raise InvalidAudioArgumentError(
            f"PCM16 buffer length must be even, got {len(buffer)} bytes"
        )
    return np.frombuffer(buffer, dtype="<i2")


def sine_wave(frequency: float, duration_s: float, sample_rate: float) -> bytes:
    """Sample an analytic sine at full scale (no band-limiting)."""
    if not math.isfinite(frequency):
        raise InvalidAudioArgumentError(
            f"frequency must be finite, got {frequency!r}"
        )
    n = sample_count(duration_s, sample_rate)
    out = np.empty(n, dtype="<i2")
    omega = 2 * np.pi * frequency
    for start, stop in _chunks(n):
        phase = np.arange(start, stop, dtype=np.float64)
        np.multiply(phase, omega, out=phase)
        np.divide(phase, sample_rate, out=phase)
        np.sin(phase, out=phase)
        np.clip(phase, -1.0, 1.0, out=phase)
        np.multiply(phase, FULL_SCALE, out=phase)
        out[start:stop] = _saturate(phase)
    return out.tobytes()


def white_noise(
    duration_s: float,
    sample_rate: float,
    *,
    rng: Optional[np.random.Generator] = None,
) -> bytes:
    """Uniform white noise in [-1, 1) scaled to full scale.

    Pass a seeded ``numpy.random.Generator`` for reproducible output; by
    default a fresh, OS-seeded generator is used.
    """
    n = sample_count(duration_s, sample_rate)
    rng = rng if rng is not None else np.random.default_rng()
    out = np.empty(n, dtype="<i2")
    scratch = np.empty(min(n, _CHUNK_SAMPLES), dtype=np.float64)
    for start, stop in _chunks(n):
        draw = scratch[: stop - start]
        rng.random(out=draw)
        np.multiply(draw, 2, out=draw)
        np.subtract(draw, 1, out=draw)
        np.multiply(draw, FULL_SCALE, out=draw)
        out[start:stop] = _saturate(draw)
    return out.tobytes()


def dbfs_to_linear(dbfs: float) -> float:
    """Convert a dBFS gain to a linear multiplier: ``10 ** (dbfs / 20)``.

    ``-inf`` maps to 0.0 and very large gains saturate to ``inf`` instead of
    raising ``OverflowError``.
    """
    with np.errstate(over="ignore"):
        return float(np.power(10.0, dbfs / 20.0))


def mix(
    buffer_a: bytes,
    buffer_b: bytes,
    gain_a_db: float = -6.0,
    gain_b_db: float = -6.0,
) -> bytes:
    """Sum two mono PCM16 buffers with independent gains.

    The shorter buffer is treated as zero-padded. Sums outside the int16
    range are hard-clipped.
    """
    a = decode_pcm16(buffer_a)
    b = decode_pcm16(buffer_b)
    gain_a = dbfs_to_linear(gain_a_db)
    gain_b = dbfs_to_linear(gain_b_db)

    n = max(len(a), len(b))
    out = np.empty(n, dtype="<i2")
    acc = np.empty(min(n, _CHUNK_SAMPLES), dtype=np.float64)
    scaled = np.empty_like(acc)
    with np.errstate(invalid="ignore"):
        for start, stop in _chunks(n):
            chunk = acc[: stop - start]
            chunk.fill(0.0)
            for src, gain in ((a[start:stop], gain_a), (b[start:stop], gain_b)):
                part = scaled[: len(src)]
                np.multiply(src, gain, out=part)
                chunk[: len(src)] += part
            out[start:stop] = _saturate(chunk)
    return out.tobytes()


def interleave_stereo(left: bytes, right: bytes, gain_db: float) -> bytes:
    """Interleave two equal-length mono buffers as L0,R0,L1,R1,...

    The same gain is applied to both channels and each scaled sample is
    floored before being written.
    """
    if len(left) != len(right):
        raise InvalidAudioArgumentError(
            f"channel buffers differ in length ({len(left)} vs {len(right)} bytes)"
        )
    l = decode_pcm16(left)
    r = decode_pcm16(right)
    gain = dbfs_to_linear(gain_db)

    out = np.empty(len(l) * 2, dtype="<i2")
    scratch = np.empty(min(len(l), _CHUNK_SAMPLES), dtype=np.float64)
    with np.errstate(invalid="ignore"):
        for start, stop in _chunks(len(l)):
            chunk = scratch[: stop - start]
            for channel, src in ((0, l), (1, r)):
                np.multiply(src[start:stop], gain, out=chunk)
                np.floor(chunk, out=chunk)
                out[2 * start + channel : 2 * stop : 2] = _saturate(chunk)
    return out.tobytes()


def pad_to_length(buffer: bytes, length: int) -> bytes:
    """Extend ``buffer`` with zero bytes up to ``length`` bytes."""
    if length < len(buffer):
        raise InvalidAudioArgumentError(
            f"cannot pad {len(buffer)} bytes down to {length}"
        )
    if length == len(buffer):
        return buffer
    return buffer + bytes(length - len(buffer))


def _as_uint(value: float, name: str, maximum: int) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidAudioArgumentError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= maximum:
        raise InvalidAudioArgumentError(
            f"{name} must be in [0, {maximum}], got {value!r}"
        )
    return int(value)


def wav_header(data_size: int, sample_rate: int, num_channels: int = 1) -> bytes:
    """Canonical 44-byte RIFF/WAVE header for 16-bit PCM."""
    sample_rate = _as_uint(sample_rate, "sample rate", _UINT32_MAX)
    num_channels = _as_uint(num_channels, "channel count", _UINT16_MAX)

    block_align = num_channels * BITS_PER_SAMPLE // 8
    byte_rate = sample_rate * block_align
    riff_size = 36 + data_size
    if byte_rate > _UINT32_MAX or block_align > _UINT16_MAX:
        raise InvalidAudioArgumentError(
            f"{num_channels} channels at {sample_rate} Hz does not fit a WAV header"
        )
    if riff_size > _UINT32_MAX:
        raise InvalidAudioArgumentError(
            f"PCM payload of {data_size} bytes is too large for a WAV file"
        )

    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        riff_size,
        b"WAVE",
        b"fmt ",
        16,  # Subchunk1Size for PCM
        1,   # AudioFormat PCM
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )


def encode_wav(pcm: bytes, sample_rate: int, num_channels: int = 1) -> bytes:
    return wav_header(len(pcm), sample_rate, num_channels) + pcm
