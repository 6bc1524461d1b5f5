class StorageError(Exception):
    """Base exception for all object storage errors."""


class StorageUploadError(StorageError):
    """Raised when an object cannot be written to a bucket."""


class ObjectExistsError(StorageUploadError):
    """Raised when an upload would overwrite an existing object."""


class StorageRemoveError(StorageError):
    """Raised when objects cannot be removed from a bucket."""
