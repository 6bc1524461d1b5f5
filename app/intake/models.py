import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Generic, TypeVar

from app.database.models import DocumentRecord

MAX_FILE_SIZE = 10 * 1024 * 1024

PDF_MIME_TYPE = "application/pdf"
IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
ALLOWED_MIME_TYPES = IMAGE_MIME_TYPES | {PDF_MIME_TYPE}

# Hint for client-side pickers; FileValidator still enforces the whitelist.
ACCEPT_HINT = ",".join(sorted(ALLOWED_MIME_TYPES))

T = TypeVar("T")


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"


class FailureKind(str, Enum):
    VALIDATION = "validation"
    CONVERSION = "conversion"
    UPLOAD = "upload"
    RECORD = "record"


@dataclass(frozen=True)
class SourceFile:
    """A file handed to the intake pipeline: bytes plus declared metadata."""

    name: str
    mime_type: str
    data: bytes = field(repr=False)
    size: int = -1

    def __post_init__(self) -> None:
        if self.size < 0:
            object.__setattr__(self, "size", len(self.data))

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE

    @property
    def is_image(self) -> bool:
        return self.mime_type in IMAGE_MIME_TYPES

    @classmethod
    def from_path(cls, path: Path) -> "SourceFile":
        """Read a file from disk, guessing its MIME type from the extension."""
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            mime_type=mime_type or "application/octet-stream",
            data=path.read_bytes(),
        )


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None


@dataclass(frozen=True)
class ThumbnailResult:
    """Best-effort preview: JPEG bytes (or None) and the page count (>= 1)."""

    thumbnail: bytes | None
    page_count: int = 1


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of one pipeline stage: a value, or a failure kind with a reason."""

    value: T | None = None
    failure: FailureKind | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, failure: FailureKind, error: str) -> "StageResult[T]":
        return cls(failure=failure, error=error)


@dataclass(frozen=True)
class UploadItem:
    """Snapshot of one queued upload.

    Items are immutable; the queue replaces them wholesale on every change.
    ``document`` is set only when complete, ``error`` only when errored.
    """

    id: str
    source: SourceFile
    status: UploadStatus = UploadStatus.PENDING
    progress: int = 0
    document: DocumentRecord | None = None
    error: str | None = None
    failure: FailureKind | None = None
    attempt: int = 1
