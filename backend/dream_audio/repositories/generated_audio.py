from __future__ import annotations

from itertools import count
from threading import RLock
from typing import Dict, List, Optional, Protocol

from ..models import AudioCategory, GeneratedAudio


class GeneratedAudioRepository(Protocol):
    """Persistence interface for generated-audio history."""

    def next_id(self) -> int:
        ...

    def add(self, record: GeneratedAudio) -> None:
        ...

    def get(self, audio_id: int) -> Optional[GeneratedAudio]:
        ...

    def list_for_user(
        self,
        user_id: str,
        categories: Optional[set[AudioCategory]] = None,
    ) -> List[GeneratedAudio]:
        ...

    def delete(self, audio_id: int) -> bool:
        ...


class InMemoryGeneratedAudioRepository(GeneratedAudioRepository):
    """Simple in-memory history store for development and tests."""

    def __init__(self) -> None:
        self._items: Dict[int, GeneratedAudio] = {}
        self._ids = count(1)
        self._lock = RLock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def add(self, record: GeneratedAudio) -> None:
        with self._lock:
            self._items[record.id] = record

    def get(self, audio_id: int) -> Optional[GeneratedAudio]:
        with self._lock:
            return self._items.get(audio_id)

    def list_for_user(
        self,
        user_id: str,
        categories: Optional[set[AudioCategory]] = None,
    ) -> List[GeneratedAudio]:
        with self._lock:
            items = [
                r
                for r in self._items.values()
                if r.user_id == user_id
                and (categories is None or r.category in categories)
            ]
        # Newest first; ids break ties between records created in the same tick.
        return sorted(items, key=lambda r: (r.created_at, r.id), reverse=True)

    def delete(self, audio_id: int) -> bool:
        with self._lock:
            return self._items.pop(audio_id, None) is not None
