class IntakeError(Exception):
    """Base exception for all document intake errors."""


class ConversionError(IntakeError):
    """Raised when an image cannot be converted into a PDF."""


class RecordCreationError(IntakeError):
    """Raised when the document metadata row cannot be created."""
