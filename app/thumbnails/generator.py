import io

from PIL import Image

from app.intake.models import SourceFile, ThumbnailResult
from app.logging.logger import Log
from app.pdf.base import BasePdfRenderer

THUMBNAIL_WIDTH = 100
THUMBNAIL_HEIGHT = 130


def crop_box(
    image_width: int,
    image_height: int,
    frame_width: int = THUMBNAIL_WIDTH,
    frame_height: int = THUMBNAIL_HEIGHT,
) -> tuple[float, float, float, float]:
    """Centered (left, upper, right, lower) region matching the frame aspect ratio."""
    image_ratio = image_width / image_height
    frame_ratio = frame_width / frame_height

    if image_ratio > frame_ratio:
        source_width = image_height * frame_ratio
        left = (image_width - source_width) / 2
        return (left, 0.0, left + source_width, float(image_height))

    source_height = image_width / frame_ratio
    upper = (image_height - source_height) / 2
    return (0.0, upper, float(image_width), upper + source_height)


class ThumbnailGenerator:
    """Produces a 100x130 JPEG preview and the page count of a file.

    Images are cropped to fill the frame; PDFs are scaled to fit it on a white
    background. Never raises: any failure yields no thumbnail and one page.
    """

    def __init__(
        self,
        pdf_renderer: BasePdfRenderer,
        jpeg_quality: int = 80,
        width: int = THUMBNAIL_WIDTH,
        height: int = THUMBNAIL_HEIGHT,
    ) -> None:
        self._pdf_renderer = pdf_renderer
        self._jpeg_quality = jpeg_quality
        self._width = width
        self._height = height

    def generate(self, source: SourceFile) -> ThumbnailResult:
        try:
            if source.is_pdf:
                return self._from_pdf(source.data)
            if source.is_image:
                return ThumbnailResult(thumbnail=self._from_image(source.data), page_count=1)
        except Exception as exc:
            Log.warning(f"Thumbnail generation failed for '{source.name}': {exc}")
        return ThumbnailResult(thumbnail=None, page_count=1)

    def _from_image(self, data: bytes) -> bytes:
        with Image.open(io.BytesIO(data)) as image:
            frame = image.convert("RGB").resize(
                (self._width, self._height),
                Image.Resampling.LANCZOS,
                box=crop_box(image.width, image.height, self._width, self._height),
            )
        return self._encode(frame)

    def _from_pdf(self, data: bytes) -> ThumbnailResult:
        rendered = self._pdf_renderer.render_first_page(data, self._width, self._height)
        frame = Image.new("RGB", (self._width, self._height), "white")
        offset_x = (self._width - rendered.image.width) // 2
        offset_y = (self._height - rendered.image.height) // 2
        frame.paste(rendered.image, (offset_x, offset_y))
        return ThumbnailResult(thumbnail=self._encode(frame), page_count=rendered.page_count)

    def _encode(self, frame: Image.Image) -> bytes:
        buf = io.BytesIO()
        frame.save(buf, format="JPEG", quality=self._jpeg_quality)
        return buf.getvalue()
