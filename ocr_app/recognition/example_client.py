"""Offline recognition client.

Returns fixed text without any network call. Useful for local development
together with the local storage backend.
"""

from ocr_app.recognition.base import BaseRecognitionClient


class ExampleRecognitionClient(BaseRecognitionClient):
    DEFAULT_TEXT = "Example recognized text"

    def __init__(self, text: str = DEFAULT_TEXT) -> None:
        self._text = text

    def recognize(self, image_url: str) -> str:
        _ = image_url
        return self._text
