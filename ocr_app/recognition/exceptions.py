class RecognitionFailedError(Exception):
    """Raised when the recognition service returns no usable text."""


class RecognitionNetworkError(RecognitionFailedError):
    """Raised when the recognition call fails at the transport level."""
