from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from app.database.models import DocumentRecord
from app.intake.models import FailureKind, SourceFile, StageResult


@dataclass(slots=True)
class IntakeContext:
    """State handed from stage to stage during one pipeline run of one item."""

    item_id: str
    loan_id: str
    condition_id: str | None
    source: SourceFile
    created_by: str | None = None
    normalized: SourceFile | None = None
    unique_filename: str = ""
    storage_path: str = ""
    file_url: str = ""
    thumbnail: bytes | None = None
    thumbnail_url: str | None = None
    page_count: int = 1
    document: DocumentRecord | None = None


class PipelineStep(ABC):
    """One stage of the intake pipeline.

    ``progress`` is the checkpoint reported once the stage succeeds.
    ``blocking`` stages do I/O or heavy CPU work and run off the event loop.
    ``failure_kind`` classifies an unexpected exception raised by ``run``.
    """

    name: ClassVar[str]
    progress: ClassVar[int]
    failure_kind: ClassVar[FailureKind]
    blocking: ClassVar[bool] = True

    def start_progress(self, context: IntakeContext) -> int | None:
        """Optional checkpoint reported just before the stage starts."""
        return None

    @abstractmethod
    def run(self, context: IntakeContext) -> StageResult[IntakeContext]:
        raise NotImplementedError
