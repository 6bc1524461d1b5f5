from app.intake.models import PDF_MIME_TYPE
from app.storage.base import BaseObjectStore

THUMBNAIL_CONTENT_TYPE = "image/jpeg"


class StorageUploader:
    """Writes primary assets and thumbnails to their two separate buckets."""

    def __init__(
        self,
        store: BaseObjectStore,
        documents_bucket: str = "condition-documents",
        thumbnails_bucket: str = "document-thumbnails",
    ) -> None:
        self._store = store
        self.documents_bucket = documents_bucket
        self.thumbnails_bucket = thumbnails_bucket

    def upload_document(self, path: str, data: bytes, content_type: str = PDF_MIME_TYPE) -> str:
        """Store a primary asset and return its public URL.

        Raises:
            StorageUploadError: if the write fails or the path is taken.
        """
        return self._store.upload(self.documents_bucket, path, data, content_type)

    def upload_thumbnail(self, path: str, data: bytes) -> str:
        """Store a JPEG thumbnail and return its public URL.

        Raises:
            StorageUploadError: if the write fails or the path is taken.
        """
        return self._store.upload(self.thumbnails_bucket, path, data, THUMBNAIL_CONTENT_TYPE)

    def document_path_from_url(self, url: str) -> str | None:
        return self._store.path_from_url(self.documents_bucket, url)

    def thumbnail_path_from_url(self, url: str) -> str | None:
        return self._store.path_from_url(self.thumbnails_bucket, url)

    def remove_document(self, path: str) -> None:
        self._store.remove(self.documents_bucket, [path])

    def remove_thumbnail(self, path: str) -> None:
        self._store.remove(self.thumbnails_bucket, [path])
