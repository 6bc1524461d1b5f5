from datetime import UTC, datetime

import psycopg

from app.database.models import REVIEW_STATUS_NEED_TO_REVIEW, DocumentRecord
from app.database.repositories.associations_repository import AssociationsRepository
from app.database.repositories.documents_repository import DocumentsRepository
from app.intake.exceptions import RecordCreationError
from app.logging.logger import Log


class MetadataRecorder:
    """Creates the document row and, for scoped uploads, its condition link."""

    def __init__(
        self,
        documents_repo: DocumentsRepository,
        associations_repo: AssociationsRepository,
    ) -> None:
        self._documents_repo = documents_repo
        self._associations_repo = associations_repo

    def record(
        self,
        *,
        loan_id: str,
        condition_id: str | None,
        file_url: str,
        thumbnail_url: str | None,
        file_size: int,
        mime_type: str,
        original_filename: str,
        page_count: int,
        created_by: str | None = None,
    ) -> DocumentRecord:
        """Insert one 'Need to Review' document, then link it to the condition.

        An association failure is logged and left in place; the created
        document is still returned.

        Raises:
            RecordCreationError: if the document row cannot be created.
        """
        try:
            document = self._documents_repo.create(
                loan_id=loan_id,
                document_name=original_filename,
                status=REVIEW_STATUS_NEED_TO_REVIEW,
                file_url=file_url,
                thumbnail_url=thumbnail_url,
                file_size=file_size,
                mime_type=mime_type,
                original_filename=original_filename,
                page_count=max(page_count, 1),
                created_by=created_by,
                created_on=datetime.now(UTC),
            )
        except (psycopg.Error, RuntimeError) as exc:
            raise RecordCreationError(f"Failed to create document record: {exc}") from exc

        if condition_id:
            try:
                self._associations_repo.create(document.id, condition_id)
            except psycopg.Error as exc:
                Log.error(
                    f"Document {document.id} created but linking to condition "
                    f"{condition_id} failed: {exc}"
                )
        return document
