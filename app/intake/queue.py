import asyncio
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from typing import Any

from app.config.settings import Settings
from app.conversion.normalizer import FormatNormalizer
from app.database.repositories.associations_repository import AssociationsRepository
from app.database.repositories.documents_repository import DocumentsRepository
from app.intake.deletion import DeletionCoordinator, DeletionResult
from app.intake.models import FailureKind, SourceFile, UploadItem, UploadStatus
from app.intake.pipeline import IntakeContext, PipelineStep
from app.intake.recorder import MetadataRecorder
from app.intake.stages import (
    NormalizeStep,
    RecordStep,
    ThumbnailStep,
    UploadDocumentStep,
    ValidateStep,
)
from app.intake.validator import FileValidator
from app.logging.logger import Log
from app.pdf.factory import PdfRendererFactory
from app.storage.base import BaseObjectStore
from app.storage.factory import ObjectStoreFactory
from app.storage.uploader import StorageUploader
from app.thumbnails.generator import ThumbnailGenerator

QueueListener = Callable[[tuple[UploadItem, ...]], None]


class UploadQueueController:
    """Owns the upload queue for one loan (and optional condition) scope.

    Items live in an id-indexed arena and are replaced wholesale on every
    change. Each pipeline run is the only writer of its item; a run whose
    item was removed or retried has its remaining updates dropped. In-flight
    I/O is never cancelled, it finishes and its result is discarded.
    """

    def __init__(
        self,
        steps: Sequence[PipelineStep],
        deletion: DeletionCoordinator,
        *,
        loan_id: str,
        condition_id: str | None = None,
        created_by: str | None = None,
        max_concurrency: int = 4,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._steps = list(steps)
        self._deletion = deletion
        self._loan_id = loan_id
        self._condition_id = condition_id
        self._created_by = created_by
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._items: dict[str, UploadItem] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[QueueListener] = []

    def snapshot(self) -> tuple[UploadItem, ...]:
        """Current items in enqueue order."""
        return tuple(self._items.values())

    def get(self, item_id: str) -> UploadItem | None:
        return self._items.get(item_id)

    @property
    def has_active_uploads(self) -> bool:
        return any(
            item.status in (UploadStatus.PENDING, UploadStatus.UPLOADING)
            for item in self._items.values()
        )

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self._items.values() if item.status == UploadStatus.COMPLETE)

    def subscribe(self, listener: QueueListener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def submit(self, files: Iterable[SourceFile]) -> list[str]:
        """Enqueue one item per file and start each pipeline.

        Raises:
            RuntimeError: if no event loop is running; the queue is left unchanged.
        """
        loop = asyncio.get_running_loop()
        new_items = [UploadItem(id=_new_item_id(), source=source) for source in files]
        for item in new_items:
            self._items[item.id] = item
        if new_items:
            self._notify()
        for item in new_items:
            Log.info(f"Item {item.id}: queued '{item.source.name}' ({item.source.size} bytes)")
            self._start(loop, item)
        return [item.id for item in new_items]

    def retry(self, item_id: str) -> bool:
        """Restart an errored item from validation. False if it is not errored.

        Raises:
            RuntimeError: if no event loop is running; the item is left unchanged.
        """
        loop = asyncio.get_running_loop()
        item = self._items.get(item_id)
        if item is None or item.status != UploadStatus.ERROR:
            return False
        restarted = replace(
            item,
            status=UploadStatus.PENDING,
            progress=0,
            error=None,
            failure=None,
            document=None,
            attempt=item.attempt + 1,
        )
        self._items[item_id] = restarted
        self._notify()
        Log.info(f"Item {item_id}: retrying (attempt {restarted.attempt})")
        self._start(loop, restarted)
        return True

    async def remove(self, item_id: str) -> DeletionResult | None:
        """Drop an item at once; a complete item's stored document is then deleted.

        A second call for the same id finds nothing and deletes nothing.
        """
        item = self._items.pop(item_id, None)
        if item is None:
            return None
        self._notify()

        if item.status != UploadStatus.COMPLETE or item.document is None:
            return None
        document_id = item.document.id
        result = await asyncio.to_thread(self._deletion.delete, document_id)
        if not result.success:
            Log.error(f"Item {item_id}: deleting document {document_id} failed: {result.error}")
        return result

    def clear_completed(self) -> None:
        """Forget complete items without touching storage."""
        remaining = {
            item_id: item
            for item_id, item in self._items.items()
            if item.status != UploadStatus.COMPLETE
        }
        if len(remaining) != len(self._items):
            self._items = remaining
            self._notify()

    async def wait_idle(self) -> None:
        """Wait until every started pipeline run has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _start(self, loop: asyncio.AbstractEventLoop, item: UploadItem) -> None:
        task = loop.create_task(self._run(item.id, item.attempt))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, item_id: str, attempt: int) -> None:
        async with self._semaphore:
            item = self._items.get(item_id)
            if item is None or item.attempt != attempt:
                return
            context = IntakeContext(
                item_id=item_id,
                loan_id=self._loan_id,
                condition_id=self._condition_id,
                source=item.source,
                created_by=self._created_by,
            )
            last_index = len(self._steps) - 1

            for index, step in enumerate(self._steps):
                start = step.start_progress(context)
                if start is not None:
                    self._update(item_id, attempt, status=UploadStatus.UPLOADING, progress=start)

                try:
                    if step.blocking:
                        result = await asyncio.to_thread(step.run, context)
                    else:
                        result = step.run(context)
                except Exception as exc:
                    Log.exception(f"Item {item_id}: stage '{step.name}' crashed: {exc}")
                    self._fail(item_id, attempt, step.failure_kind, str(exc))
                    return

                if not result.ok or result.value is None:
                    Log.warning(f"Item {item_id}: stage '{step.name}' failed: {result.error}")
                    self._fail(item_id, attempt, result.failure or step.failure_kind, result.error)
                    return

                context = result.value
                if index < last_index:
                    self._update(
                        item_id, attempt, status=UploadStatus.UPLOADING, progress=step.progress
                    )

            completed = self._update(
                item_id,
                attempt,
                status=UploadStatus.COMPLETE,
                progress=100,
                document=context.document,
            )
            document_id = context.document.id if context.document else None
            if completed:
                Log.info(f"Item {item_id}: complete as document {document_id}")
            else:
                Log.warning(
                    f"Item {item_id}: finished after removal or retry, "
                    f"document {document_id} was not reported"
                )

    def _fail(
        self, item_id: str, attempt: int, failure: FailureKind, error: str | None
    ) -> None:
        self._update(
            item_id,
            attempt,
            status=UploadStatus.ERROR,
            error=error or "Upload failed",
            failure=failure,
            document=None,
        )

    def _update(self, item_id: str, attempt: int, **changes: Any) -> bool:
        item = self._items.get(item_id)
        if item is None or item.attempt != attempt:
            Log.debug(f"Item {item_id}: discarding update from a stale run")
            return False
        progress = changes.get("progress")
        if progress is not None and progress < item.progress:
            changes["progress"] = item.progress
        self._items[item_id] = replace(item, **changes)
        self._notify()
        return True

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as exc:
                Log.error(f"Upload queue listener failed: {exc}")


def _new_item_id() -> str:
    return uuid.uuid4().hex


def build_upload_queue(
    settings: Settings,
    *,
    loan_id: str,
    condition_id: str | None = None,
    created_by: str | None = None,
    store: BaseObjectStore | None = None,
) -> UploadQueueController:
    """Wire an UploadQueueController with all required collaborators."""
    uploader = StorageUploader(
        store if store is not None else ObjectStoreFactory.create(settings),
        documents_bucket=settings.documents_bucket,
        thumbnails_bucket=settings.thumbnails_bucket,
    )
    documents_repo = DocumentsRepository()
    associations_repo = AssociationsRepository()
    thumbnail_generator = ThumbnailGenerator(
        PdfRendererFactory.create(settings),
        jpeg_quality=settings.thumbnail_jpeg_quality,
    )
    steps: list[PipelineStep] = [
        ValidateStep(FileValidator(settings.max_upload_size_bytes)),
        NormalizeStep(FormatNormalizer(jpeg_quality=settings.pdf_image_jpeg_quality)),
        UploadDocumentStep(uploader),
        ThumbnailStep(thumbnail_generator, uploader),
        RecordStep(MetadataRecorder(documents_repo, associations_repo)),
    ]
    deletion = DeletionCoordinator(uploader, documents_repo, associations_repo)
    return UploadQueueController(
        steps,
        deletion,
        loan_id=loan_id,
        condition_id=condition_id,
        created_by=created_by,
        max_concurrency=settings.upload_max_concurrency,
    )
