import pymupdf
from PIL import Image

from app.pdf.base import BasePdfRenderer, RenderedPage, fit_scale
from app.pdf.exceptions import PdfRenderError


class PyMuPdfAdapter(BasePdfRenderer):
    """Renders PDF pages using PyMuPDF."""

    def render_first_page(
        self, pdf_bytes: bytes, frame_width: int, frame_height: int
    ) -> RenderedPage:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                if doc.page_count < 1:
                    raise PdfRenderError("Document has no pages")
                page = doc.load_page(0)
                scale = fit_scale(page.rect.width, page.rect.height, frame_width, frame_height)
                pix = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=False)
                image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
                return RenderedPage(image=image, page_count=int(doc.page_count))
        except PdfRenderError:
            raise
        except Exception as exc:
            raise PdfRenderError(f"pymupdf rendering failed: {exc}") from exc
