from ocr_app.config.settings import Settings
from ocr_app.database.models import ExtractionDraft, ExtractionRecord
from ocr_app.database.repositories.ocr_results_repository import OcrResultsRepository
from ocr_app.database.writers import (
    DirectInsertWriter,
    FallbackRecordWriter,
    PrivilegedProcedureWriter,
)
from ocr_app.extraction.exceptions import InvalidExtractionRequestError
from ocr_app.extraction.models import ImageFile
from ocr_app.logging.logger import Log
from ocr_app.recognition.base import BaseRecognitionClient
from ocr_app.recognition.factory import RecognitionClientFactory
from ocr_app.storage.asset_store import AssetStore
from ocr_app.storage.factory import ObjectStorageFactory


class ExtractionService:
    """Orchestrates extract-and-save for uploaded files and remote URLs.

    Pipeline: upload (files only) -> recognize -> persist.
    Errors from any step propagate unchanged. Nothing is persisted unless
    recognition succeeded, and there is no compensation if the save fails.
    """

    def __init__(
        self,
        asset_store: AssetStore,
        recognizer: BaseRecognitionClient,
        results_repo: OcrResultsRepository,
    ) -> None:
        self._asset_store = asset_store
        self._recognizer = recognizer
        self._results_repo = results_repo

    def extract_from_file(self, image: ImageFile, user_id: str) -> ExtractionRecord:
        _require_user(user_id)
        image.validate()
        Log.info("Processing uploaded image", file_name=image.file_name, user_id=user_id)
        public_url = self._asset_store.store(image, user_id)
        return self.extract_from_url(public_url, user_id, file_name=image.file_name)

    def extract_from_url(
        self,
        image_url: str,
        user_id: str,
        file_name: str | None = None,
    ) -> ExtractionRecord:
        _require_user(user_id)
        if not image_url.strip():
            raise InvalidExtractionRequestError("Please enter an image URL")
        text = self._recognizer.recognize(image_url)
        draft = ExtractionDraft(
            user_id=user_id,
            image_url=image_url,
            extracted_text=text,
            file_name=file_name,
        )
        return self._results_repo.save(draft)

    def history(self, user_id: str) -> list[ExtractionRecord]:
        return self._results_repo.list_by_user(user_id)

    def get_record(self, record_id: str, user_id: str) -> ExtractionRecord:
        _require_user(user_id)
        return self._results_repo.find_by_id(record_id, user_id)

    def close(self) -> None:
        """Release the HTTP clients held by the storage and recognition adapters."""
        self._asset_store.close()
        self._recognizer.close()


def _require_user(user_id: str) -> None:
    if not user_id.strip():
        raise InvalidExtractionRequestError("A user id is required")


def build_results_repository(settings: Settings) -> OcrResultsRepository:
    writer = FallbackRecordWriter(
        primary=DirectInsertWriter(),
        recovery=PrivilegedProcedureWriter(),
    )
    return OcrResultsRepository(writer, read_error_policy=settings.history_read_error_policy)


def build_extraction_service(settings: Settings) -> ExtractionService:
    """Build an ExtractionService with all required adapters."""
    asset_store = AssetStore(
        storage=ObjectStorageFactory.create(settings),
        bucket=settings.storage_bucket,
        cache_seconds=settings.storage_cache_seconds,
    )
    return ExtractionService(
        asset_store=asset_store,
        recognizer=RecognitionClientFactory.create(settings),
        results_repo=build_results_repository(settings),
    )
