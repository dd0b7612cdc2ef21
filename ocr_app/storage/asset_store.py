import time
from collections.abc import Callable
from pathlib import PurePosixPath

from ocr_app.extraction.models import ImageFile
from ocr_app.logging.logger import Log
from ocr_app.storage.base import BaseObjectStorage
from ocr_app.storage.exceptions import ObjectStorageError, StorageUnavailableError


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def primary_object_key(owner_id: str, file_name: str, millis: int) -> str:
    """Build the nested key: {owner_id}/{millis}.{ext}, or no extension if absent."""
    return f"{owner_id}/{millis}{PurePosixPath(file_name).suffix}"


def fallback_object_key(file_name: str, millis: int) -> str:
    """Build the flat key used after the nested upload failed: {millis}-{file_name}."""
    return f"{millis}-{file_name}"


class AssetStore:
    """Uploads images to the object store and resolves their public URLs.

    The nested per-owner key is tried first. If that upload fails for any
    reason, one retry is made with a flat key in the same bucket.
    """

    def __init__(
        self,
        storage: BaseObjectStorage,
        bucket: str,
        cache_seconds: int = 3600,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        self._storage = storage
        self._bucket = bucket
        self._cache_seconds = cache_seconds
        self._clock = clock

    def store(self, image: ImageFile, owner_id: str) -> str:
        """Upload the image and return its public URL.

        Raises:
            StorageUnavailableError: if both key strategies failed.
        """
        key = primary_object_key(owner_id, image.file_name, self._clock())
        try:
            self._upload(key, image)
        except ObjectStorageError as exc:
            Log.warning("Storage upload failed, retrying with flat key", key=key, reason=exc)
            key = fallback_object_key(image.file_name, self._clock())
            try:
                self._upload(key, image)
            except ObjectStorageError as fallback_exc:
                raise StorageUnavailableError(f"Storage error: {fallback_exc}") from fallback_exc

        Log.info("Uploaded image", bucket=self._bucket, key=key)
        return self._storage.get_public_url(self._bucket, key)

    def _upload(self, key: str, image: ImageFile) -> None:
        self._storage.upload(
            self._bucket,
            key,
            image.content,
            content_type=image.content_type,
            upsert=True,
            cache_seconds=self._cache_seconds,
        )

    def close(self) -> None:
        self._storage.close()
