import pytest

from app.pdf.base import BasePdfRenderer, fit_scale
from app.pdf.exceptions import PdfRenderError
from app.pdf.pdfplumber_adapter import PdfPlumberAdapter
from app.pdf.pymupdf_adapter import PyMuPdfAdapter

ADAPTERS = [PyMuPdfAdapter, PdfPlumberAdapter]


def test_fit_scale_uses_binding_dimension() -> None:
    # letter page into 100x130: width binds (100/612 < 130/792)
    assert fit_scale(612, 792, 100, 130) == pytest.approx(100 / 612)
    # landscape page: width still binds
    assert fit_scale(792, 612, 100, 130) == pytest.approx(100 / 792)
    # very tall page: height binds
    assert fit_scale(100, 1000, 100, 130) == pytest.approx(0.13)


@pytest.mark.parametrize("adapter_cls", ADAPTERS)
class TestPdfRenderers:
    def test_page_count_single(
        self, adapter_cls: type[BasePdfRenderer], sample_pdf_bytes: bytes
    ) -> None:
        assert adapter_cls().render_first_page(sample_pdf_bytes, 100, 130).page_count == 1

    def test_render_fits_frame(
        self, adapter_cls: type[BasePdfRenderer], multi_page_pdf_bytes: bytes
    ) -> None:
        rendered = adapter_cls().render_first_page(multi_page_pdf_bytes, 100, 130)
        assert rendered.page_count == 2
        assert rendered.image.mode == "RGB"
        assert rendered.image.width <= 100
        assert rendered.image.height <= 130
        # letter page is width-bound: full width, ~129px tall
        assert rendered.image.width >= 99

    def test_render_raises_on_invalid_bytes(self, adapter_cls: type[BasePdfRenderer]) -> None:
        with pytest.raises(PdfRenderError):
            adapter_cls().render_first_page(b"not a pdf", 100, 130)
