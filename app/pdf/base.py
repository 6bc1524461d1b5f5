from abc import ABC, abstractmethod
from dataclasses import dataclass

from PIL import Image


def fit_scale(page_width: float, page_height: float, frame_width: int, frame_height: int) -> float:
    """Largest scale at which the whole page fits inside the frame."""
    return min(frame_width / page_width, frame_height / page_height)


@dataclass(frozen=True)
class RenderedPage:
    """First page rendered to fit a frame, plus the document's page count."""

    image: Image.Image
    page_count: int


class BasePdfRenderer(ABC):
    """Contract for all PDF rendering adapters."""

    @abstractmethod
    def render_first_page(
        self, pdf_bytes: bytes, frame_width: int, frame_height: int
    ) -> RenderedPage:
        """Rasterize page one scaled by fit_scale so it fits the frame uncropped.

        Returns:
            RenderedPage with an RGB image no larger than the frame.

        Raises:
            PdfRenderError: if opening or rendering fails for any reason.
        """
