from abc import ABC, abstractmethod


class BaseObjectStorage(ABC):
    """Contract for binary object stores that can serve public URLs."""

    @abstractmethod
    def upload(
        self,
        bucket: str,
        key: str,
        content: bytes,
        *,
        content_type: str,
        upsert: bool = True,
        cache_seconds: int = 3600,
    ) -> None:
        """Write content under bucket/key.

        Raises:
            ObjectStorageError: if the store rejected the object.
        """

    @abstractmethod
    def get_public_url(self, bucket: str, key: str) -> str:
        """Return the public URL for bucket/key. No network call."""

    def close(self) -> None:
        """Release any transport held by the store. No-op by default."""
