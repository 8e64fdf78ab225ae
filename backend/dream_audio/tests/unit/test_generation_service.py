from __future__ import annotations

import io
import threading
import wave
from pathlib import Path

import numpy as np
import pytest

from dream_audio.audio import InvalidAudioArgumentError
from dream_audio.engines import AudioGenerationEngine
from dream_audio.models import AudioCategory
from dream_audio.repositories import InMemoryGeneratedAudioRepository
from dream_audio.services import (
    AudioGenerationService,
    AudioNotFoundError,
    AudioOwnershipError,
    LocalObjectStorage,
    StorageError,
    StoredObject,
)


class _FailingStorage:
    def upload(self, data: bytes, file_name: str, content_type: str = "audio/wav") -> StoredObject:
        raise StorageError("bucket unavailable")

    def delete(self, path: str) -> bool:
        return False

    def read(self, file_name: str) -> bytes:
        raise FileNotFoundError(file_name)


def _build_service(
    tmp_path: Path,
) -> tuple[AudioGenerationService, InMemoryGeneratedAudioRepository, LocalObjectStorage]:
    storage = LocalObjectStorage(tmp_path, public_base_url="http://test/files")
    history = InMemoryGeneratedAudioRepository()
    service = AudioGenerationService(
        engine=AudioGenerationEngine(sample_rate=8000, rng=np.random.default_rng(0)),
        storage=storage,
        history=history,
        max_concurrency=1,
        clock=lambda: 1700000000.5,
    )
    return service, history, storage


@pytest.mark.asyncio
async def test_generate_binaural_beat_uploads_and_records(tmp_path: Path) -> None:
    service, history, storage = _build_service(tmp_path)

    record = await service.generate_binaural_beat(
        user_id="user-1",
        carrier_frequency=200,
        beat_frequency=10,
        duration_minutes=0.01,
        volume_dbfs=-6,
    )

    assert record.category is AudioCategory.BINAURAL
    assert record.title == "Binaural Beat - 200Hz"
    assert record.description == "Carrier: 200Hz, Beat: 10Hz, Volume: -6dBFS"
    assert record.file_name.startswith("binaural_1700000000500_")
    assert record.file_path == f"audio-generators/{record.file_name}"
    assert record.storage_url == f"http://test/files/{record.file_name}"
    assert record.duration_seconds == pytest.approx(0.6)
    assert record.visibility == "private"
    assert history.get(record.id) is record

    data = storage.read(record.file_name)
    assert len(data) == record.file_size
    with wave.open(io.BytesIO(data), "rb") as wf:
        assert wf.getnchannels() == 2
        assert wf.getframerate() == 8000


@pytest.mark.asyncio
async def test_generate_subliminal_audio_records_affirmation(tmp_path: Path) -> None:
    service, _, storage = _build_service(tmp_path)

    record = await service.generate_subliminal_audio(
        user_id="user-1",
        affirmation_text="I wake up rested",
        masking_sound="ambient-tone",
        duration_minutes=0.01,
    )

    assert record.category is AudioCategory.SUBLIMINAL
    assert record.title == "Subliminal Audio - ambient-tone"
    assert record.description == (
        "Affirmation: I wake up rested\n"
        "Masking: ambient-tone, Subliminal: -30dBFS, Masking: -10dBFS"
    )
    with wave.open(io.BytesIO(storage.read(record.file_name)), "rb") as wf:
        assert wf.getnchannels() == 1


@pytest.mark.asyncio
async def test_invalid_duration_is_rejected_before_upload(tmp_path: Path) -> None:
    service, history, _ = _build_service(tmp_path)

    with pytest.raises(InvalidAudioArgumentError):
        await service.generate_binaural_beat(
            user_id="user-1",
            carrier_frequency=200,
            beat_frequency=10,
            duration_minutes=-1,
        )

    assert history.list_for_user("user-1") == []


@pytest.mark.asyncio
async def test_storage_failure_leaves_history_untouched() -> None:
    history = InMemoryGeneratedAudioRepository()
    service = AudioGenerationService(
        engine=AudioGenerationEngine(sample_rate=8000),
        storage=_FailingStorage(),
        history=history,
    )

    with pytest.raises(StorageError):
        await service.generate_subliminal_audio(
            user_id="user-1",
            affirmation_text="I am focused",
            masking_sound="white-noise",
            duration_minutes=0.01,
        )

    assert history.list_for_user("user-1") == []


@pytest.mark.asyncio
async def test_list_history_is_newest_first_and_per_user(tmp_path: Path) -> None:
    service, _, _ = _build_service(tmp_path)

    first = await service.generate_binaural_beat(
        user_id="user-1", carrier_frequency=200, beat_frequency=10, duration_minutes=0.01
    )
    second = await service.generate_subliminal_audio(
        user_id="user-1",
        affirmation_text="I am calm",
        masking_sound="white-noise",
        duration_minutes=0.01,
    )
    await service.generate_binaural_beat(
        user_id="user-2", carrier_frequency=300, beat_frequency=5, duration_minutes=0.01
    )

    assert [r.id for r in service.list_history("user-1")] == [second.id, first.id]
    assert service.list_history("nobody") == []


@pytest.mark.asyncio
async def test_delete_removes_record_and_object(tmp_path: Path) -> None:
    service, history, storage = _build_service(tmp_path)
    record = await service.generate_binaural_beat(
        user_id="user-1", carrier_frequency=200, beat_frequency=10, duration_minutes=0.01
    )

    with pytest.raises(AudioOwnershipError):
        await service.delete(user_id="intruder", audio_id=record.id)
    assert history.get(record.id) is not None

    await service.delete(user_id="user-1", audio_id=record.id)

    assert history.get(record.id) is None
    with pytest.raises(FileNotFoundError):
        storage.read(record.file_name)
    with pytest.raises(AudioNotFoundError):
        await service.delete(user_id="user-1", audio_id=record.id)


class _ThreadRecordingStorage(LocalObjectStorage):
    def __init__(self, root: Path) -> None:
        super().__init__(root, public_base_url="http://test/files")
        self.threads: dict[str, int] = {}

    def upload(self, data: bytes, file_name: str, content_type: str = "audio/wav") -> StoredObject:
        self.threads["upload"] = threading.get_ident()
        return super().upload(data, file_name, content_type)

    def delete(self, path: str) -> bool:
        self.threads["delete"] = threading.get_ident()
        return super().delete(path)

    def read(self, file_name: str) -> bytes:
        self.threads["read"] = threading.get_ident()
        return super().read(file_name)


@pytest.mark.asyncio
async def test_storage_io_runs_off_the_event_loop_thread(tmp_path: Path) -> None:
    storage = _ThreadRecordingStorage(tmp_path)
    service = AudioGenerationService(
        engine=AudioGenerationEngine(sample_rate=8000),
        storage=storage,
        history=InMemoryGeneratedAudioRepository(),
    )
    loop_thread = threading.get_ident()

    record = await service.generate_binaural_beat(
        user_id="user-1", carrier_frequency=200, beat_frequency=10, duration_minutes=0.01
    )
    data = await service.read_file(record.file_name)
    await service.delete(user_id="user-1", audio_id=record.id)

    assert len(data) == record.file_size
    assert set(storage.threads) == {"upload", "read", "delete"}
    assert loop_thread not in storage.threads.values()
