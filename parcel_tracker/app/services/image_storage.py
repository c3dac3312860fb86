"""
Image storage service.

Stores uploaded product images and hands back the URL to save on a
tracking. The tracking core never looks at the bytes.
"""

import logging
import secrets
from pathlib import Path
from typing import Protocol

from starlette.concurrency import run_in_threadpool

from parcel_tracker.app.core.config import settings
from parcel_tracker.app.core.exceptions import (
    PayloadTooLargeError,
    StorageUnavailableError,
    UnsupportedMediaTypeError,
)
from parcel_tracker.app.core.reliability import CircuitOpenError, storage_circuit_breaker

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class ImageStorage(Protocol):
    async def save(self, data: bytes, content_type: str) -> str:
        """Store the image and return its public URL."""
        ...


class LocalImageStorage:
    """Writes images to a local directory served as static files."""

    def __init__(self, directory: str, base_url: str):
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")

    async def save(self, data: bytes, content_type: str) -> str:
        filename = secrets.token_hex(16) + EXTENSIONS.get(content_type, "")
        await run_in_threadpool(self._write, filename, data)
        return f"{self.base_url}/{filename}"

    def _write(self, filename: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / filename).write_bytes(data)


def validate_image(content_type: str, size: int) -> None:
    """
    Raises:
        UnsupportedMediaTypeError: If the type is not an accepted image type.
        PayloadTooLargeError: If the file exceeds `upload_max_bytes`.
    """
    if content_type not in settings.upload_allowed_types:
        raise UnsupportedMediaTypeError(content_type, settings.upload_allowed_types)
    if size > settings.upload_max_bytes:
        raise PayloadTooLargeError(size, settings.upload_max_bytes)


async def store_image(storage: ImageStorage, data: bytes, content_type: str) -> str:
    """
    Validate and store an image through the storage circuit breaker.

    Raises:
        StorageUnavailableError: If storage fails or its circuit is open.
    """
    validate_image(content_type, len(data))

    try:
        return await storage_circuit_breaker.call(storage.save, data, content_type)
    except CircuitOpenError as exc:
        raise StorageUnavailableError() from exc
    except OSError as exc:
        logger.exception("Image storage failed")
        raise StorageUnavailableError() from exc


_local_storage = LocalImageStorage(settings.upload_dir, settings.upload_base_url)


def get_image_storage() -> ImageStorage:
    """FastAPI dependency returning the configured image storage."""
    return _local_storage
