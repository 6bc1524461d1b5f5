class PdfRenderError(Exception):
    """Raised when a PDF cannot be opened or rendered."""
