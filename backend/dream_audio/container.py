from __future__ import annotations

from functools import lru_cache

from dream_audio.config import settings
from dream_audio.engines import AudioGenerationEngine
from dream_audio.repositories import InMemoryGeneratedAudioRepository
from dream_audio.services import (
    AudioGenerationService,
    LocalObjectStorage,
    RateLimitConfig,
    RateLimiter,
)


@lru_cache(maxsize=1)
def get_engine() -> AudioGenerationEngine:
    return AudioGenerationEngine(sample_rate=settings.sample_rate_hz)


@lru_cache(maxsize=1)
def get_storage() -> LocalObjectStorage:
    return LocalObjectStorage(
        settings.storage_dir,
        bucket=settings.storage_bucket,
        prefix=settings.storage_prefix,
        public_base_url=settings.public_base_url,
    )


@lru_cache(maxsize=1)
def get_history_repo() -> InMemoryGeneratedAudioRepository:
    return InMemoryGeneratedAudioRepository()


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Return the process-wide limiter guarding the generation endpoints.

    The limits are defined in AppConfig so they can be tuned via
    environment variables.
    """
    config = RateLimitConfig(
        max_requests_per_window=settings.rate_limit_max_requests_per_window,
        window_seconds=settings.rate_limit_window_seconds,
    )
    return RateLimiter(config=config)


@lru_cache(maxsize=1)
def get_generation_service() -> AudioGenerationService:
    return AudioGenerationService(
        engine=get_engine(),
        storage=get_storage(),
        history=get_history_repo(),
        max_concurrency=settings.generation_max_concurrency,
    )
