import io
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from app.intake.exceptions import ConversionError
from app.intake.models import PDF_MIME_TYPE, SourceFile
from app.intake.naming import replace_extension

LETTER_WIDTH_PT, LETTER_HEIGHT_PT = letter
MARGIN_PT = 36


@dataclass(frozen=True)
class Placement:
    """Where the image lands on the page, in points from the bottom-left corner."""

    x: float
    y: float
    width: float
    height: float


def fit_on_page(
    image_width: int,
    image_height: int,
    page_width: float = LETTER_WIDTH_PT,
    page_height: float = LETTER_HEIGHT_PT,
    margin: float = MARGIN_PT,
) -> Placement:
    """Scale to fit inside the margins, keep aspect ratio, center both ways."""
    available_width = page_width - 2 * margin
    available_height = page_height - 2 * margin

    image_ratio = image_width / image_height
    area_ratio = available_width / available_height

    if image_ratio > area_ratio:
        width = available_width
        height = available_width / image_ratio
    else:
        height = available_height
        width = available_height * image_ratio

    return Placement(
        x=margin + (available_width - width) / 2,
        y=margin + (available_height - height) / 2,
        width=width,
        height=height,
    )


class FormatNormalizer:
    """Turns any accepted upload into a single PDF.

    PDFs pass through untouched. Raster images are drawn onto one US-Letter
    page inside a 36pt margin.
    """

    def __init__(self, jpeg_quality: int = 92) -> None:
        self._jpeg_quality = jpeg_quality

    def normalize(self, source: SourceFile) -> SourceFile:
        """Return a PDF SourceFile for ``source``.

        Raises:
            ConversionError: if the image cannot be decoded or the PDF written.
        """
        if source.is_pdf:
            return source
        if not source.is_image:
            raise ConversionError(f"Cannot convert '{source.mime_type}' to PDF")
        pdf_bytes = self._image_to_pdf(source)
        return SourceFile(
            name=replace_extension(source.name, ".pdf"),
            mime_type=PDF_MIME_TYPE,
            data=pdf_bytes,
        )

    def _image_to_pdf(self, source: SourceFile) -> bytes:
        try:
            with Image.open(io.BytesIO(source.data)) as opened:
                image = ImageOps.exif_transpose(opened)
                image.load()
            embedded, mask = self._encode_for_embedding(image, source.mime_type)
            placement = fit_on_page(image.width, image.height)

            buf = io.BytesIO()
            pdf = canvas.Canvas(buf, pagesize=letter)
            pdf.drawImage(
                ImageReader(io.BytesIO(embedded)),
                placement.x,
                placement.y,
                width=placement.width,
                height=placement.height,
                mask=mask,
            )
            pdf.showPage()
            pdf.save()
            return buf.getvalue()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise ConversionError(f"Failed to convert image to PDF: {exc}") from exc

    def _encode_for_embedding(
        self, image: Image.Image, mime_type: str
    ) -> tuple[bytes, str | None]:
        # PNG keeps transparency; every other format is flattened to JPEG.
        buf = io.BytesIO()
        if mime_type == "image/png":
            image.convert("RGBA").save(buf, format="PNG")
            return buf.getvalue(), "auto"
        image.convert("RGB").save(buf, format="JPEG", quality=self._jpeg_quality)
        return buf.getvalue(), None
