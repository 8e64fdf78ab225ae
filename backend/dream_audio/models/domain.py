from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class AudioCategory(str, Enum):
    BINAURAL = "binaural"
    SUBLIMINAL = "subliminal"


@dataclass
class GeneratedAudio:
    """History record for a rendered and stored audio file."""

    id: int
    user_id: str
    title: str
    description: str
    category: AudioCategory
    file_path: str
    storage_url: str
    file_size: int
    duration_seconds: float
    created_at: datetime
    file_type: str = "audio/wav"
    visibility: str = "private"

    @classmethod
    def new(
        cls,
        *,
        id: int,
        user_id: str,
        title: str,
        description: str,
        category: AudioCategory,
        file_path: str,
        storage_url: str,
        file_size: int,
        duration_seconds: float,
    ) -> "GeneratedAudio":
        return cls(
            id=id,
            user_id=user_id,
            title=title,
            description=description,
            category=category,
            file_path=file_path,
            storage_url=storage_url,
            file_size=file_size,
            duration_seconds=duration_seconds,
            created_at=datetime.now(timezone.utc),
        )

    @property
    def file_name(self) -> str:
        return self.file_path.rsplit("/", 1)[-1]
