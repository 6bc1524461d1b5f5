from app.config.settings import Settings
from app.logging.logger import Log
from app.pdf.base import BasePdfRenderer
from app.pdf.pdfplumber_adapter import PdfPlumberAdapter
from app.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfRendererFactory:
    """Picks the rasterizer used for first-page thumbnails."""

    ADAPTERS: dict[str, type[BasePdfRenderer]] = {
        "pymupdf": PyMuPdfAdapter,
        "pdfplumber": PdfPlumberAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfRenderer:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        Log.debug(f"Rendering PDF previews with {engine}")
        return adapter_cls()
