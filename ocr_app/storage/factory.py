from pathlib import Path

from ocr_app.config.settings import Settings
from ocr_app.storage.base import BaseObjectStorage
from ocr_app.storage.local_adapter import LocalStorageAdapter
from ocr_app.storage.supabase_adapter import SupabaseStorageAdapter


class ObjectStorageFactory:
    """Creates the object storage backend based on settings."""

    BACKENDS = ("supabase", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStorage:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalStorageAdapter(
                root=Path(settings.local_storage_root),
                public_base_url=settings.local_storage_public_url,
            )
        if backend == "supabase":
            if not settings.storage_url.strip():
                raise ValueError("storage_url is required for storage_backend=supabase")
            return SupabaseStorageAdapter(
                base_url=settings.storage_url,
                api_key=settings.storage_api_key,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
