from .generation_service import (
    AudioGenerationService,
    AudioNotFoundError,
    AudioOwnershipError,
)
from .rate_limiter import RateLimitConfig, RateLimiter
from .storage import (
    AudioStorage,
    LocalObjectStorage,
    StorageError,
    StoredObject,
    validate_file_name,
)

__all__ = [
    "AudioGenerationService",
    "AudioNotFoundError",
    "AudioOwnershipError",
    "RateLimitConfig",
    "RateLimiter",
    "AudioStorage",
    "LocalObjectStorage",
    "StorageError",
    "StoredObject",
    "validate_file_name",
]
