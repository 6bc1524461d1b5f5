import io

import pdfplumber

from app.pdf.base import BasePdfRenderer, RenderedPage, fit_scale
from app.pdf.exceptions import PdfRenderError

_POINTS_PER_INCH = 72


class PdfPlumberAdapter(BasePdfRenderer):
    """Renders PDF pages using pdfplumber (pypdfium2 backend)."""

    def render_first_page(
        self, pdf_bytes: bytes, frame_width: int, frame_height: int
    ) -> RenderedPage:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                if not pdf.pages:
                    raise PdfRenderError("Document has no pages")
                page = pdf.pages[0]
                scale = fit_scale(page.width, page.height, frame_width, frame_height)
                rendered = page.to_image(resolution=_POINTS_PER_INCH * scale)
                image = rendered.original.convert("RGB")
                image.thumbnail((frame_width, frame_height))
                return RenderedPage(image=image, page_count=len(pdf.pages))
        except PdfRenderError:
            raise
        except Exception as exc:
            raise PdfRenderError(f"pdfplumber rendering failed: {exc}") from exc
