from datetime import datetime
from typing import Any

from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.models import REVIEW_STATUSES, DocumentRecord, StoredLocators

_DOCUMENT_COLUMNS = """
    id, loan_id, document_name, document_type, description, expiration_date,
    status, file_url, thumbnail_url, file_size, mime_type, original_filename,
    page_count, created_by, created_on
"""


class DocumentsRepository:
    """Database operations for the condition_documents table."""

    def create(
        self,
        *,
        loan_id: str,
        document_name: str,
        status: str,
        file_url: str,
        thumbnail_url: str | None,
        file_size: int,
        mime_type: str,
        original_filename: str,
        page_count: int,
        created_by: str | None,
        created_on: datetime,
    ) -> DocumentRecord:
        """Insert one document row and return it as stored.

        Reviewer-owned columns (document_type, description, expiration_date)
        are always inserted as NULL.

        Raises:
            ValueError: if status is not a known review status.
        """
        if status not in REVIEW_STATUSES:
            raise ValueError(
                f"Unknown review status '{status}'. Choose from: {sorted(REVIEW_STATUSES)}"
            )
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO condition_documents
                    (loan_id, document_name, document_type, description,
                     expiration_date, status, file_url, thumbnail_url, file_size,
                     mime_type, original_filename, page_count, created_by, created_on)
                    VALUES (%s, %s, NULL, NULL, NULL, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_DOCUMENT_COLUMNS}
                    """,
                    (
                        loan_id,
                        document_name,
                        status,
                        file_url,
                        thumbnail_url,
                        file_size,
                        mime_type,
                        original_filename,
                        page_count,
                        created_by,
                        created_on,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT into condition_documents returned no row")
        return _row_to_record(row)

    def find_by_id(self, document_id: str) -> DocumentRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_DOCUMENT_COLUMNS} FROM condition_documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _row_to_record(row)

    def find_locators(self, document_id: str) -> StoredLocators | None:
        """Fetch file_url and thumbnail_url. None if the row does not exist."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT file_url, thumbnail_url FROM condition_documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return StoredLocators(file_url=row[0], thumbnail_url=row[1])

    def delete(self, document_id: str) -> int:
        """Delete the document row. Returns the number of rows removed."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM condition_documents WHERE id = %s",
                    (document_id,),
                )
                deleted = cur.rowcount
            conn.commit()
        return deleted


def _row_to_record(row: dict[str, Any]) -> DocumentRecord:
    return DocumentRecord(
        id=str(row["id"]),
        loan_id=str(row["loan_id"]),
        document_name=row["document_name"],
        document_type=row["document_type"],
        description=row["description"],
        expiration_date=row["expiration_date"],
        status=row["status"],
        file_url=row["file_url"],
        thumbnail_url=row["thumbnail_url"],
        file_size=row["file_size"],
        mime_type=row["mime_type"],
        original_filename=row["original_filename"],
        page_count=row["page_count"],
        created_by=row["created_by"],
        created_on=row["created_on"],
    )
