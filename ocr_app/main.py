import argparse
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from ocr_app.config.settings import Settings
from ocr_app.database.connection import close_pool, init_pool
from ocr_app.database.exceptions import PersistenceFailedError, RecordNotFoundError
from ocr_app.database.models import ExtractionRecord
from ocr_app.extraction.downloader import (
    TextDownloader,
    download_name_for,
    history_download_name,
)
from ocr_app.extraction.exceptions import InvalidExtractionRequestError, UnsupportedImageError
from ocr_app.extraction.models import ImageFile
from ocr_app.extraction.service import ExtractionService, build_extraction_service
from ocr_app.logging.logger import Log
from ocr_app.recognition.exceptions import RecognitionFailedError
from ocr_app.storage.exceptions import StorageUnavailableError

EXTRACTION_ERRORS = (
    InvalidExtractionRequestError,
    UnsupportedImageError,
    StorageUnavailableError,
    RecognitionFailedError,
    PersistenceFailedError,
    OSError,
)
LOOKUP_ERRORS = (
    InvalidExtractionRequestError,
    RecordNotFoundError,
    PersistenceFailedError,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ocr-history",
        description="Extract text from images and browse extraction history.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    from_file = commands.add_parser("extract-file", help="upload a local image and extract text")
    from_file.add_argument("path", type=Path)
    from_file.add_argument("--user-id", required=True)
    from_file.add_argument("--download", action="store_true", help="save the text as a .txt file")

    from_url = commands.add_parser("extract-url", help="extract text from a remote image URL")
    from_url.add_argument("url")
    from_url.add_argument("--user-id", required=True)
    from_url.add_argument("--file-name", default=None)
    from_url.add_argument("--download", action="store_true", help="save the text as a .txt file")

    history = commands.add_parser("history", help="list previous extractions, newest first")
    history.add_argument("--user-id", required=True)

    show = commands.add_parser("show", help="print the full text of one previous extraction")
    show.add_argument("record_id")
    show.add_argument("--user-id", required=True)
    show.add_argument("--download", action="store_true", help="save the text as a .txt file")

    return parser


def run(args: argparse.Namespace, service: ExtractionService, downloader: TextDownloader) -> int:
    """Dispatch one command. Returns the process exit code."""
    if args.command == "history":
        records = service.history(args.user_id)
        for record in records:
            label = record.file_name or "Extracted Text"
            print(f"{record.created_at.isoformat()}  {record.id}  {label}")
        Log.info("Listed OCR results", user_id=args.user_id, count=len(records))
        return 0

    if args.command == "show":
        try:
            record = service.get_record(args.record_id, args.user_id)
        except LOOKUP_ERRORS as exc:
            Log.error(str(exc) or "Failed to fetch OCR result")
            return 1
        print(record.extracted_text)
        if args.download:
            _download(record, downloader, history_download_name)
        return 0

    try:
        if args.command == "extract-file":
            image = ImageFile.from_path(args.path)
            record = service.extract_from_file(image, args.user_id)
        else:
            record = service.extract_from_url(args.url, args.user_id, file_name=args.file_name)
    except EXTRACTION_ERRORS as exc:
        Log.error(str(exc) or "Failed to extract text")
        return 1

    print(record.extracted_text)
    if args.download:
        _download(record, downloader, download_name_for)
    return 0


def _download(
    record: ExtractionRecord,
    downloader: TextDownloader,
    name_for: Callable[[ExtractionRecord], str],
) -> None:
    if not record.extracted_text:
        Log.warning("No text to download", record_id=record.id)
        return
    path = downloader.download(record.extracted_text, name_for(record))
    Log.info("Text downloaded", path=path)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> load settings -> build service -> run command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    service = None
    try:
        service = build_extraction_service(settings)
        downloader = TextDownloader(Path(settings.download_dir))
        return run(args, service, downloader)
    finally:
        if service is not None:
            service.close()
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
