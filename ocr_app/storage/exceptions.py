class ObjectStorageError(Exception):
    """Raised when a single upload or URL resolution against a backend fails."""


class StorageUnavailableError(Exception):
    """Raised when every upload strategy for an image has failed."""
