from app.database.connection import get_connection
from app.database.models import AssociationRecord


class AssociationsRepository:
    """Database operations for the document_condition_associations table."""

    def create(self, document_id: str, condition_id: str) -> AssociationRecord:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO document_condition_associations (document_id, condition_id)
                VALUES (%s, %s)
                """,
                (document_id, condition_id),
            )
            conn.commit()
        return AssociationRecord(document_id=document_id, condition_id=condition_id)

    def find_by_document(self, document_id: str) -> list[AssociationRecord]:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT document_id, condition_id
                    FROM document_condition_associations
                    WHERE document_id = %s
                    ORDER BY condition_id
                    """,
                    (document_id,),
                )
                rows = cur.fetchall()
        return [
            AssociationRecord(document_id=str(row[0]), condition_id=str(row[1]))
            for row in rows
        ]

    def delete_by_document(self, document_id: str) -> int:
        """Remove every association referencing the document. Returns the count."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM document_condition_associations WHERE document_id = %s",
                    (document_id,),
                )
                deleted = cur.rowcount
            conn.commit()
        return deleted
