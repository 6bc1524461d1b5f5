import io
from collections.abc import Callable

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.intake.models import SourceFile


def _image_bytes(size: tuple[int, int], fmt: str, color: str = "navy") -> bytes:
    buf = io.BytesIO()
    mode = "RGBA" if fmt == "PNG" else "RGB"
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "W-2 page one")
    c.showPage()
    c.drawString(72, 720, "W-2 page two")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    """A wide 400x200 PNG."""
    return _image_bytes((400, 200), "PNG")


@pytest.fixture()
def jpeg_bytes() -> bytes:
    """A tall 300x900 JPEG."""
    return _image_bytes((300, 900), "JPEG")


@pytest.fixture()
def make_source() -> Callable[..., SourceFile]:
    def _make(
        name: str = "w2.pdf",
        mime_type: str = "application/pdf",
        data: bytes = b"%PDF-fake",
        size: int = -1,
    ) -> SourceFile:
        return SourceFile(name=name, mime_type=mime_type, data=data, size=size)

    return _make
