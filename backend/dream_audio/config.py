from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Application configuration loaded from environment.

    Engine, storage and HTTP-layer knobs live here so that deployments can
    tune them via .env without touching code.
    """

    # 16 kHz keeps rendered files small; the engine accepts any positive rate.
    sample_rate_hz: int = int(os.getenv("AUDIO_SAMPLE_RATE_HZ", "16000"))

    storage_dir: str = os.getenv("AUDIO_STORAGE_DIR", "./storage")
    storage_bucket: str = os.getenv("AUDIO_STORAGE_BUCKET", "Audio-Lib")
    storage_prefix: str = os.getenv("AUDIO_STORAGE_PREFIX", "audio-generators")
    public_base_url: str = os.getenv(
        "AUDIO_PUBLIC_BASE_URL", "http://localhost:8000/v1/audio/files"
    )

    # Renders are CPU-bound and run on worker threads; bound how many at once.
    generation_max_concurrency: int = int(
        os.getenv("GENERATION_MAX_CONCURRENCY", "2")
    )

    rate_limit_max_requests_per_window: int = int(
        os.getenv("RATE_LIMIT_MAX_REQUESTS_PER_WINDOW", "20")
    )
    rate_limit_window_seconds: int = int(
        os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60")
    )

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = AppConfig()
