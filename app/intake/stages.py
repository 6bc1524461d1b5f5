from app.conversion.normalizer import FormatNormalizer
from app.intake.exceptions import ConversionError, RecordCreationError
from app.intake.models import FailureKind, StageResult
from app.intake.naming import document_path, generate_unique_filename, thumbnail_path
from app.intake.pipeline import IntakeContext, PipelineStep
from app.intake.recorder import MetadataRecorder
from app.intake.validator import FileValidator
from app.logging.logger import Log
from app.storage.exceptions import StorageError
from app.storage.uploader import StorageUploader
from app.thumbnails.generator import ThumbnailGenerator


class ValidateStep(PipelineStep):
    name = "validate"
    failure_kind = FailureKind.VALIDATION
    progress = 5
    blocking = False

    def __init__(self, validator: FileValidator) -> None:
        self._validator = validator

    def run(self, context: IntakeContext) -> StageResult[IntakeContext]:
        result = self._validator.validate(context.source)
        if not result.valid:
            return StageResult.failed(FailureKind.VALIDATION, result.error or "Invalid file")
        return StageResult.success(context)


class NormalizeStep(PipelineStep):
    name = "normalize"
    failure_kind = FailureKind.CONVERSION
    progress = 25

    def __init__(self, normalizer: FormatNormalizer) -> None:
        self._normalizer = normalizer

    def start_progress(self, context: IntakeContext) -> int | None:
        return 10 if context.source.is_image else None

    def run(self, context: IntakeContext) -> StageResult[IntakeContext]:
        try:
            context.normalized = self._normalizer.normalize(context.source)
        except ConversionError as exc:
            Log.warning(f"Item {context.item_id}: {exc}")
            return StageResult.failed(FailureKind.CONVERSION, "Failed to convert image to PDF")
        return StageResult.success(context)


class UploadDocumentStep(PipelineStep):
    name = "upload_document"
    failure_kind = FailureKind.UPLOAD
    progress = 55

    def __init__(self, uploader: StorageUploader) -> None:
        self._uploader = uploader

    def run(self, context: IntakeContext) -> StageResult[IntakeContext]:
        if context.normalized is None:
            raise ValueError("IntakeContext.normalized must be set before upload")
        context.unique_filename = generate_unique_filename(context.normalized.name)
        context.storage_path = document_path(
            context.loan_id, context.condition_id, context.unique_filename
        )
        try:
            context.file_url = self._uploader.upload_document(
                context.storage_path,
                context.normalized.data,
                context.normalized.mime_type,
            )
        except StorageError as exc:
            Log.error(f"Item {context.item_id}: upload of {context.storage_path} failed: {exc}")
            return StageResult.failed(FailureKind.UPLOAD, str(exc) or "Failed to upload file")
        Log.info(f"Item {context.item_id}: stored {context.storage_path}")
        return StageResult.success(context)


class ThumbnailStep(PipelineStep):
    """Best effort: a failed preview or preview upload never fails the item."""

    name = "thumbnail"
    failure_kind = FailureKind.UPLOAD
    progress = 80

    def __init__(self, generator: ThumbnailGenerator, uploader: StorageUploader) -> None:
        self._generator = generator
        self._uploader = uploader

    def run(self, context: IntakeContext) -> StageResult[IntakeContext]:
        if context.normalized is None:
            raise ValueError("IntakeContext.normalized must be set before thumbnailing")
        result = self._generator.generate(context.normalized)
        context.thumbnail = result.thumbnail
        context.page_count = result.page_count

        if result.thumbnail is not None:
            path = thumbnail_path(context.loan_id, context.condition_id, context.unique_filename)
            try:
                context.thumbnail_url = self._uploader.upload_thumbnail(path, result.thumbnail)
            except StorageError as exc:
                Log.warning(f"Item {context.item_id}: thumbnail upload failed: {exc}")
                context.thumbnail_url = None
        return StageResult.success(context)


class RecordStep(PipelineStep):
    name = "record"
    failure_kind = FailureKind.RECORD
    progress = 100

    def __init__(self, recorder: MetadataRecorder) -> None:
        self._recorder = recorder

    def run(self, context: IntakeContext) -> StageResult[IntakeContext]:
        if context.normalized is None:
            raise ValueError("IntakeContext.normalized must be set before recording")
        try:
            context.document = self._recorder.record(
                loan_id=context.loan_id,
                condition_id=context.condition_id,
                file_url=context.file_url,
                thumbnail_url=context.thumbnail_url,
                file_size=context.normalized.size,
                mime_type=context.normalized.mime_type,
                original_filename=context.source.name,
                page_count=context.page_count,
                created_by=context.created_by,
            )
        except RecordCreationError as exc:
            # Known gap: the stored asset is left orphaned, nothing compensates.
            Log.error(
                f"Item {context.item_id}: {exc}; stored object {context.storage_path} "
                "is now orphaned"
            )
            return StageResult.failed(FailureKind.RECORD, str(exc))
        return StageResult.success(context)
