from app.intake.models import ALLOWED_MIME_TYPES, MAX_FILE_SIZE, SourceFile, ValidationResult

_SIZE_UNITS = ("B", "KB", "MB", "GB")

UNSUPPORTED_TYPE_MESSAGE = (
    "File type not supported. Please upload PDF or image files (JPEG, PNG, GIF, WebP)."
)


def format_file_size(num_bytes: int) -> str:
    """Render a byte count with 1024-based units, e.g. 10485760 -> '10 MB'."""
    if num_bytes <= 0:
        return "0 B"
    size = float(num_bytes)
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{round(size, 1):g} {_SIZE_UNITS[unit]}"


class FileValidator:
    """Rejects files that are too large or of a disallowed MIME type.

    Pure and synchronous: always the first stage, before any network call.
    """

    def __init__(self, max_size_bytes: int = MAX_FILE_SIZE) -> None:
        self._max_size_bytes = max_size_bytes

    def validate(self, source: SourceFile) -> ValidationResult:
        if source.size > self._max_size_bytes:
            return ValidationResult(
                valid=False,
                error=f"File size exceeds {format_file_size(self._max_size_bytes)} limit",
            )
        if source.mime_type not in ALLOWED_MIME_TYPES:
            return ValidationResult(valid=False, error=UNSUPPORTED_TYPE_MESSAGE)
        return ValidationResult(valid=True)
