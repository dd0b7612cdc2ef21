from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from ocr_app.database.models import ExtractionRecord

DEFAULT_DOWNLOAD_NAME = "extracted-text"
URL_DOWNLOAD_NAME = "image-from-url"


@dataclass(frozen=True)
class DownloadArtifact:
    file_name: str
    content: bytes
    media_type: str = "text/plain"


def build_artifact(text: str, suggested_name: str = DEFAULT_DOWNLOAD_NAME) -> DownloadArtifact:
    """Wrap text as a {suggested_name}.txt plain-text artifact.

    Directory parts of the suggested name are dropped, so the artifact name
    is always a bare file name.
    """
    return DownloadArtifact(
        file_name=f"{_safe_name(suggested_name)}.txt",
        content=text.encode("utf-8"),
    )


def download_name_for(record: ExtractionRecord) -> str:
    """Suggested download name: the source file name without extension."""
    if not record.file_name:
        return URL_DOWNLOAD_NAME
    return PurePosixPath(record.file_name).stem or DEFAULT_DOWNLOAD_NAME


def history_download_name(record: ExtractionRecord) -> str:
    """Download name used from the history view: the stored file name as is."""
    return record.file_name or DEFAULT_DOWNLOAD_NAME


def _safe_name(suggested_name: str) -> str:
    name = PurePosixPath(suggested_name.replace("\\", "/")).name
    if name in ("", ".", ".."):
        return DEFAULT_DOWNLOAD_NAME
    return name


class TextDownloader:
    """Materializes extracted text as a .txt file in a local directory."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    def download(self, text: str, suggested_name: str = DEFAULT_DOWNLOAD_NAME) -> Path:
        artifact = build_artifact(text, suggested_name)
        self._output_dir.mkdir(parents=True, exist_ok=True)
        path = self._output_dir / artifact.file_name
        path.write_bytes(artifact.content)
        return path
