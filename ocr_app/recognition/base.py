from abc import ABC, abstractmethod


class BaseRecognitionClient(ABC):
    """Contract for remote OCR providers."""

    @abstractmethod
    def recognize(self, image_url: str) -> str:
        """Extract text from the image at a publicly reachable URL.

        Args:
            image_url: Location the provider can fetch the image from. Local
                files must be uploaded to the asset store first.

        Returns:
            The first parsed text segment, verbatim.

        Raises:
            RecognitionFailedError: if the provider returned no parsed text.
            RecognitionNetworkError: if the request itself failed.
        """

    def close(self) -> None:
        """Release any transport held by the client. No-op by default."""
