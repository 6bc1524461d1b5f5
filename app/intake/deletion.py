from collections.abc import Callable
from dataclasses import dataclass

import psycopg

from app.database.repositories.associations_repository import AssociationsRepository
from app.database.repositories.documents_repository import DocumentsRepository
from app.logging.logger import Log
from app.storage.exceptions import StorageError
from app.storage.uploader import StorageUploader


@dataclass(frozen=True)
class DeletionResult:
    success: bool
    error: str | None = None


class DeletionCoordinator:
    """Removes a document's stored objects, its condition links, then its row.

    Storage and association removal are best effort; only the document row
    deletion decides the outcome.
    """

    def __init__(
        self,
        uploader: StorageUploader,
        documents_repo: DocumentsRepository,
        associations_repo: AssociationsRepository,
    ) -> None:
        self._uploader = uploader
        self._documents_repo = documents_repo
        self._associations_repo = associations_repo

    def delete(self, document_id: str) -> DeletionResult:
        try:
            locators = self._documents_repo.find_locators(document_id)
        except psycopg.Error as exc:
            Log.error(f"Could not load document {document_id} for deletion: {exc}")
            return DeletionResult(success=False, error=str(exc))

        if locators is not None:
            if locators.file_url:
                self._remove_object(
                    self._uploader.document_path_from_url(locators.file_url),
                    self._uploader.remove_document,
                )
            if locators.thumbnail_url:
                self._remove_object(
                    self._uploader.thumbnail_path_from_url(locators.thumbnail_url),
                    self._uploader.remove_thumbnail,
                )

        try:
            self._associations_repo.delete_by_document(document_id)
        except psycopg.Error as exc:
            Log.warning(f"Could not remove associations of document {document_id}: {exc}")

        try:
            self._documents_repo.delete(document_id)
        except psycopg.Error as exc:
            Log.error(f"Could not delete document {document_id}: {exc}")
            return DeletionResult(success=False, error=str(exc))

        Log.info(f"Deleted document {document_id}")
        return DeletionResult(success=True)

    def _remove_object(self, path: str | None, remove: Callable[[str], None]) -> None:
        if path is None:
            Log.warning("Stored object URL does not belong to its bucket, skipping")
            return
        try:
            remove(path)
        except StorageError as exc:
            Log.warning(f"Could not remove stored object {path}: {exc}")
