from pathlib import Path

from ocr_app.storage.base import BaseObjectStorage
from ocr_app.storage.exceptions import ObjectStorageError


class LocalStorageAdapter(BaseObjectStorage):
    """Stores objects on the local filesystem: {root}/{bucket}/{key}.

    Public URLs are built from public_base_url; serving the directory is left
    to whatever static file server fronts it.
    """

    def __init__(self, root: Path, public_base_url: str) -> None:
        self._root = root
        self._public_base_url = public_base_url.rstrip("/")

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
        _ = content_type, cache_seconds
        path = self._resolve_path(bucket, key)
        if path.exists() and not upsert:
            raise ObjectStorageError(f"Object already exists: {bucket}/{key}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            raise ObjectStorageError(f"local write failed: {exc}") from exc

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self._public_base_url}/{bucket}/{key}"

    def _resolve_path(self, bucket: str, key: str) -> Path:
        bucket_root = (self._root / bucket).resolve()
        path = (bucket_root / key).resolve()
        if not path.is_relative_to(bucket_root) or path == bucket_root:
            raise ObjectStorageError(f"Invalid object key: {key}")
        return path
