from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from dream_audio.logging_utils import get_logger


logger = get_logger(__name__)


class StorageError(RuntimeError):
    """Raised when the object store cannot complete an upload."""


@dataclass
class StoredObject:
    """Location of an uploaded object."""

    path: str
    public_url: str
    file_name: str


class AudioStorage(Protocol):
    """Object-storage interface used by the generation service."""

    def upload(
        self,
        data: bytes,
        file_name: str,
        content_type: str = "audio/wav",
    ) -> StoredObject:
        ...

    def delete(self, path: str) -> bool:
        ...

    def read(self, file_name: str) -> bytes:
        ...


def validate_file_name(file_name: str) -> str:
    """Reject names that could escape the storage prefix."""
    if (
        not file_name
        or ".." in file_name
        or "/" in file_name
        or "\\" in file_name
    ):
        raise ValueError(f"Invalid file name '{file_name}'")
    return file_name


class LocalObjectStorage(AudioStorage):
    """Bucket-style object store backed by a local directory.

    Objects live at ``<root>/<bucket>/<prefix>/<file_name>`` and are never
    overwritten; the public URL is ``<public_base_url>/<file_name>``.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        bucket: str = "Audio-Lib",
        prefix: str = "audio-generators",
        public_base_url: str = "http://localhost:8000/v1/audio/files",
    ) -> None:
        self._bucket_dir = Path(root) / bucket
        self._prefix = prefix.strip("/")
        self._public_base_url = public_base_url.rstrip("/")

    def _object_path(self, key: str) -> Path:
        return self._bucket_dir / key

    def upload(
        self,
        data: bytes,
        file_name: str,
        content_type: str = "audio/wav",
    ) -> StoredObject:
        validate_file_name(file_name)
        key = f"{self._prefix}/{file_name}"
        target = self._object_path(key)
        logger.info(
            "Uploading %s (%d bytes, %s) to bucket %s",
            key,
            len(data),
            content_type,
            self._bucket_dir.name,
        )

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # Exclusive create: an existing object is never replaced.
            with target.open("xb") as fh:
                fh.write(data)
        except FileExistsError as exc:
            logger.error("Upload rejected, object %s already exists", key)
            raise StorageError(f"Object '{key}' already exists") from exc
        except OSError as exc:
            logger.error("Upload of %s failed: %s", key, exc, exc_info=True)
            raise StorageError(f"Upload of '{key}' failed: {exc}") from exc

        return StoredObject(
            path=key,
            public_url=f"{self._public_base_url}/{file_name}",
            file_name=file_name,
        )

    def delete(self, path: str) -> bool:
        target = self._object_path(path)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning("Delete skipped, object %s not found", path)
            return False
        except OSError as exc:
            logger.error("Delete of %s failed: %s", path, exc, exc_info=True)
            return False
        logger.info("Deleted %s from bucket %s", path, self._bucket_dir.name)
        return True

    def read(self, file_name: str) -> bytes:
        validate_file_name(file_name)
        return self._object_path(f"{self._prefix}/{file_name}").read_bytes()
