from __future__ import annotations

import asyncio
import time
from typing import Callable, List
from uuid import uuid4

from dream_audio import metrics as app_metrics
from dream_audio.audio import InvalidAudioArgumentError
from dream_audio.engines import AudioGenerationEngine
from dream_audio.logging_utils import get_logger
from dream_audio.models import AudioCategory, GeneratedAudio
from dream_audio.repositories import GeneratedAudioRepository
from .storage import AudioStorage, StorageError


logger = get_logger(__name__)


class AudioNotFoundError(LookupError):
    """Raised when a history record does not exist."""


class AudioOwnershipError(PermissionError):
    """Raised when a user touches a history record they do not own."""


class AudioGenerationService:
    """Renders audio, uploads it and records it in the user's history.

    Rendering and storage I/O run on worker threads so the event loop keeps
    serving other requests; a semaphore bounds how many renders run at once.
    """

    def __init__(
        self,
        *,
        engine: AudioGenerationEngine,
        storage: AudioStorage,
        history: GeneratedAudioRepository,
        max_concurrency: int = 2,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._engine = engine
        self._storage = storage
        self._history = history
        self._slots = asyncio.Semaphore(max(1, max_concurrency))
        self._clock = clock

    async def generate_binaural_beat(
        self,
        *,
        user_id: str,
        carrier_frequency: float,
        beat_frequency: float,
        duration_minutes: float,
        volume_dbfs: float = -6.0,
    ) -> GeneratedAudio:
        kind = AudioCategory.BINAURAL
        data = await self._render(
            kind,
            self._engine.generate_binaural_beat,
            carrier_frequency,
            beat_frequency,
            duration_minutes,
            volume_dbfs,
        )
        return await self._store(
            kind,
            data,
            user_id=user_id,
            title=f"Binaural Beat - {carrier_frequency:g}Hz",
            description=(
                f"Carrier: {carrier_frequency:g}Hz, Beat: {beat_frequency:g}Hz, "
                f"Volume: {volume_dbfs:g}dBFS"
            ),
            duration_minutes=duration_minutes,
        )

    async def generate_subliminal_audio(
        self,
        *,
        user_id: str,
        affirmation_text: str,
        masking_sound: str,
        duration_minutes: float,
        subliminal_volume_dbfs: float = -30.0,
        masking_volume_dbfs: float = -10.0,
    ) -> GeneratedAudio:
        kind = AudioCategory.SUBLIMINAL
        data = await self._render(
            kind,
            self._engine.generate_subliminal_audio,
            affirmation_text,
            masking_sound,
            duration_minutes,
            subliminal_volume_dbfs,
            masking_volume_dbfs,
        )
        return await self._store(
            kind,
            data,
            user_id=user_id,
            title=f"Subliminal Audio - {masking_sound}",
            description=(
                f"Affirmation: {affirmation_text}\n"
                f"Masking: {masking_sound}, Subliminal: {subliminal_volume_dbfs:g}dBFS, "
                f"Masking: {masking_volume_dbfs:g}dBFS"
            ),
            duration_minutes=duration_minutes,
        )

    async def _render(self, kind: AudioCategory, render: Callable[..., bytes], *args) -> bytes:
        async with self._slots:
            app_metrics.increment_active_generations(kind.value)
            start = time.monotonic()
            try:
                data = await asyncio.to_thread(render, *args)
            except InvalidAudioArgumentError:
                app_metrics.record_generation_failed(kind.value, reason="invalid")
                raise
            except Exception:
                logger.exception("Rendering %s audio failed", kind.value)
                app_metrics.record_generation_failed(kind.value, reason="error")
                raise
            finally:
                app_metrics.decrement_active_generations(kind.value)
            elapsed = time.monotonic() - start

        app_metrics.observe_render_seconds(kind.value, elapsed)
        logger.info("Rendered %s audio: %d bytes in %.3fs", kind.value, len(data), elapsed)
        return data

    async def _store(
        self,
        kind: AudioCategory,
        data: bytes,
        *,
        user_id: str,
        title: str,
        description: str,
        duration_minutes: float,
    ) -> GeneratedAudio:
        stamp = int(self._clock() * 1000)
        file_name = f"{kind.value}_{stamp}_{uuid4().hex[:8]}.wav"

        try:
            stored = await asyncio.to_thread(
                self._storage.upload, data, file_name, "audio/wav"
            )
        except StorageError:
            app_metrics.record_storage_failure("upload")
            app_metrics.record_generation_failed(kind.value, reason="storage_error")
            raise

        record = GeneratedAudio.new(
            id=self._history.next_id(),
            user_id=user_id,
            title=title,
            description=description,
            category=kind,
            file_path=stored.path,
            storage_url=stored.public_url,
            file_size=len(data),
            duration_seconds=duration_minutes * 60,
        )
        self._history.add(record)
        app_metrics.record_generation_succeeded(kind.value, len(data))
        logger.info(
            "Stored %s audio id=%d for user=%s at %s",
            kind.value,
            record.id,
            user_id,
            stored.path,
        )
        return record

    def list_history(self, user_id: str) -> List[GeneratedAudio]:
        return self._history.list_for_user(
            user_id, {AudioCategory.BINAURAL, AudioCategory.SUBLIMINAL}
        )

    async def delete(self, *, user_id: str, audio_id: int) -> None:
        """Remove a record and its stored file; only the owner may delete."""
        record = self._history.get(audio_id)
        if record is None:
            raise AudioNotFoundError(f"Audio {audio_id} not found")
        if record.user_id != user_id:
            raise AudioOwnershipError("Not authorized to delete this audio")

        if record.file_path and not await asyncio.to_thread(
            self._storage.delete, record.file_path
        ):
            # Record is removed even when the stored object is already gone.
            app_metrics.record_storage_failure("delete")
        self._history.delete(audio_id)
        logger.info("Deleted audio id=%d for user=%s", audio_id, user_id)

    async def read_file(self, file_name: str) -> bytes:
        return await asyncio.to_thread(self._storage.read, file_name)
