from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from dream_audio import container
from dream_audio.engines import AudioGenerationEngine
from dream_audio.main import create_app
from dream_audio.repositories import InMemoryGeneratedAudioRepository
from dream_audio.services import (
    AudioGenerationService,
    LocalObjectStorage,
    RateLimitConfig,
    RateLimiter,
)


@pytest.fixture
def generation_service(tmp_path: Path) -> AudioGenerationService:
    # 8 kHz keeps the one-minute minimum duration cheap to render.
    return AudioGenerationService(
        engine=AudioGenerationEngine(sample_rate=8000),
        storage=LocalObjectStorage(
            tmp_path, public_base_url="http://testserver/v1/audio/files"
        ),
        history=InMemoryGeneratedAudioRepository(),
    )


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter(RateLimitConfig(max_requests_per_window=100, window_seconds=60))


@pytest.fixture
def client(
    monkeypatch: pytest.MonkeyPatch,
    generation_service: AudioGenerationService,
    rate_limiter: RateLimiter,
) -> TestClient:
    monkeypatch.setattr(container, "get_generation_service", lambda: generation_service)
    monkeypatch.setattr(container, "get_rate_limiter", lambda: rate_limiter)
    return TestClient(create_app())
