class PersistenceRejectedError(Exception):
    """Raised when the direct insert into ocr_results is rejected by the store."""


class PersistenceFailedError(Exception):
    """Raised when an OCR result cannot be saved or read back."""


class RecordNotFoundError(Exception):
    """Raised when an OCR result does not exist for the requesting user."""
