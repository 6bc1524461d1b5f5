from dataclasses import dataclass
from datetime import date, datetime

REVIEW_STATUS_NEED_TO_REVIEW = "Need to Review"
REVIEW_STATUS_REVIEWED = "Reviewed"
REVIEW_STATUS_APPROVED = "Approved"

REVIEW_STATUSES = frozenset(
    {REVIEW_STATUS_NEED_TO_REVIEW, REVIEW_STATUS_REVIEWED, REVIEW_STATUS_APPROVED}
)


@dataclass(frozen=True)
class DocumentRecord:
    """Represents a row from the condition_documents table."""

    id: str
    loan_id: str
    document_name: str
    status: str
    file_url: str
    original_filename: str
    mime_type: str
    file_size: int
    page_count: int
    thumbnail_url: str | None = None
    document_type: str | None = None
    description: str | None = None
    expiration_date: date | None = None
    created_by: str | None = None
    created_on: datetime | None = None


@dataclass(frozen=True)
class AssociationRecord:
    """Represents a row from the document_condition_associations table."""

    document_id: str
    condition_id: str


@dataclass(frozen=True)
class StoredLocators:
    """The stored asset URLs of a document, fetched before deletion."""

    file_url: str | None
    thumbnail_url: str | None
