from abc import ABC, abstractmethod


class BaseObjectStore(ABC):
    """Contract for durable object storage backends addressed by bucket and path."""

    @abstractmethod
    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Write a new object and return its public URL.

        Never overwrites: an existing object at ``path`` is an error.

        Raises:
            ObjectExistsError: if an object already exists at ``path``.
            StorageUploadError: on any other write failure.
        """

    @abstractmethod
    def remove(self, bucket: str, paths: list[str]) -> None:
        """Remove objects. Missing objects are not an error.

        Raises:
            StorageRemoveError: if the backend rejects the removal.
        """

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """Public URL for an object path, by the backend's URL convention."""

    @abstractmethod
    def path_from_url(self, bucket: str, url: str) -> str | None:
        """Inverse of public_url. None if the URL does not belong to ``bucket``."""

    def close(self) -> None:  # noqa: B027
        """Release connections held by the backend. Nothing to do by default."""
