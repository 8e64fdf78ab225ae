from __future__ import annotations

import logging
from typing import Optional

from dream_audio.config import settings


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-scoped logger configured for console output.

    Handlers are attached once per logger name so repeated calls (module
    reloads, app factories in tests) do not duplicate output.
    """

    logger_name = name or "dream-audio"
    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    return logger
