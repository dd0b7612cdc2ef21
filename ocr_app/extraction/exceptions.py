class UnsupportedImageError(Exception):
    """Raised when an uploaded file is not an accepted image."""


class InvalidExtractionRequestError(Exception):
    """Raised when an extraction is requested without a user id or image URL."""
