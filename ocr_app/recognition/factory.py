from ocr_app.config.settings import Settings
from ocr_app.recognition.base import BaseRecognitionClient
from ocr_app.recognition.example_client import ExampleRecognitionClient
from ocr_app.recognition.ocr_space_adapter import OcrSpaceClientAdapter


class RecognitionClientFactory:
    """Creates the configured recognition client."""

    PROVIDERS = ("ocr_space", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseRecognitionClient:
        provider = settings.ocr_provider.lower()
        if provider == "example":
            return ExampleRecognitionClient()
        if provider == "ocr_space":
            return OcrSpaceClientAdapter(
                api_url=settings.ocr_api_url,
                api_key=settings.ocr_api_key,
                timeout_seconds=settings.ocr_timeout_seconds,
            )
        raise ValueError(
            f"Unknown OCR provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
