from __future__ import annotations

from datetime import datetime, timedelta, timezone

from dream_audio.models import AudioCategory, GeneratedAudio
from dream_audio.repositories import InMemoryGeneratedAudioRepository


_T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _record(repo: InMemoryGeneratedAudioRepository, user_id: str, category: AudioCategory, minutes: int) -> GeneratedAudio:
    audio_id = repo.next_id()
    return GeneratedAudio(
        id=audio_id,
        user_id=user_id,
        title=f"audio {audio_id}",
        description="",
        category=category,
        file_path=f"Audio-Lib/audio-generators/{category.value}_{audio_id}.wav",
        storage_url=f"http://localhost/{category.value}_{audio_id}.wav",
        file_size=44,
        duration_seconds=60.0,
        created_at=_T0 + timedelta(minutes=minutes),
    )


def test_ids_are_sequential() -> None:
    repo = InMemoryGeneratedAudioRepository()

    assert [repo.next_id() for _ in range(3)] == [1, 2, 3]


def test_list_for_user_is_newest_first_and_scoped_to_user() -> None:
    repo = InMemoryGeneratedAudioRepository()
    older = _record(repo, "alice", AudioCategory.BINAURAL, 0)
    newer = _record(repo, "alice", AudioCategory.SUBLIMINAL, 5)
    other = _record(repo, "bob", AudioCategory.BINAURAL, 10)
    for r in (older, newer, other):
        repo.add(r)

    assert repo.list_for_user("alice") == [newer, older]
    assert repo.list_for_user("bob") == [other]
    assert repo.list_for_user("carol") == []


def test_list_for_user_filters_by_category() -> None:
    repo = InMemoryGeneratedAudioRepository()
    beat = _record(repo, "alice", AudioCategory.BINAURAL, 0)
    sub = _record(repo, "alice", AudioCategory.SUBLIMINAL, 1)
    repo.add(beat)
    repo.add(sub)

    assert repo.list_for_user("alice", {AudioCategory.BINAURAL}) == [beat]


def test_same_timestamp_orders_by_id() -> None:
    repo = InMemoryGeneratedAudioRepository()
    first = _record(repo, "alice", AudioCategory.BINAURAL, 0)
    second = _record(repo, "alice", AudioCategory.BINAURAL, 0)
    repo.add(first)
    repo.add(second)

    assert repo.list_for_user("alice") == [second, first]


def test_delete() -> None:
    repo = InMemoryGeneratedAudioRepository()
    record = _record(repo, "alice", AudioCategory.BINAURAL, 0)
    repo.add(record)

    assert repo.get(record.id) is record
    assert repo.delete(record.id) is True
    assert repo.get(record.id) is None
    assert repo.delete(record.id) is False
    assert record.file_name == "binaural_1.wav"
