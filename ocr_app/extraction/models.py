import mimetypes
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from ocr_app.extraction.exceptions import UnsupportedImageError

ACCEPTED_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"})


@dataclass(frozen=True)
class ImageFile:
    """An uploaded image held in memory."""

    file_name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: Path) -> "ImageFile":
        """Read a local file and guess its content type from the name."""
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            file_name=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )

    @property
    def extension(self) -> str:
        return PurePosixPath(self.file_name).suffix

    def validate(self) -> None:
        """Reject files that are not accepted images.

        Raises:
            UnsupportedImageError: for an unknown extension or empty content.
        """
        if self.extension.lower() not in ACCEPTED_EXTENSIONS:
            accepted = ", ".join(sorted(ACCEPTED_EXTENSIONS))
            raise UnsupportedImageError(
                f"Unsupported image type '{self.file_name}'. Accepted: {accepted}"
            )
        if not self.content:
            raise UnsupportedImageError(f"Image '{self.file_name}' is empty")
