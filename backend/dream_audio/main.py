from __future__ import annotations

import time
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from dream_audio import __version__
from dream_audio.api import router as api_router
from dream_audio.config import settings
from dream_audio.container import (
    get_engine,
    get_generation_service,
    get_history_repo,
    get_rate_limiter,
    get_storage,
)
from dream_audio.logging_utils import get_logger


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Force-init singletons so that failures surface at startup.
    engine = get_engine()
    storage = get_storage()
    history = get_history_repo()
    rate_limiter = get_rate_limiter()
    get_generation_service()
    logger.info(
        "All singleton services initialized "
        "(sample_rate=%dHz, storage=%s, history=%s, rate_limiter=%s, max_concurrency=%d)",
        engine.sample_rate,
        type(storage).__name__,
        type(history).__name__,
        type(rate_limiter).__name__,
        settings.generation_max_concurrency,
    )
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="dream-audio", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_http_requests(request: Request, call_next):
        """Centralized logging for all HTTP requests."""
        start = time.monotonic()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration = time.monotonic() - start
            client_host = request.client.host if request.client else "unknown"
            status_code = response.status_code if response is not None else 500
            logger.info(
                "HTTP %s %s from %s -> %d in %.3fs",
                request.method,
                request.url.path,
                client_host,
                status_code,
                duration,
            )

    app.include_router(api_router)
    return app


@lru_cache(maxsize=1)
def get_app() -> FastAPI:
    return create_app()


app = get_app()
