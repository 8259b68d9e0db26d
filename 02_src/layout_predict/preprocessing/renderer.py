"""Page renderer - decodes PDF and image documents into PNG pages.

PDF pages are rasterized with pymupdf (fitz); JPEG/PNG/BMP/TIFF inputs are
decoded with Pillow (multi-frame TIFF pages are frames).
"""

import io
import logging
from typing import Tuple

import fitz  # pymupdf
from PIL import Image, UnidentifiedImageError

from ..core.errors import InvalidFileFormatError
from ..schemas.config import RenderConfig
from ..schemas.document import SUPPORTED_CONTENT_TYPES

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class PageRenderer:
    """Renders document pages to PNG bytes."""

    def __init__(self, config: RenderConfig):
        """Initialize renderer with configuration.

        Args:
            config: Render configuration (DPI, output format)
        """
        self.config = config

    @staticmethod
    def check_content_type(content_type: str) -> None:
        """Raise InvalidFileFormatError for unsupported document types."""
        if content_type not in SUPPORTED_CONTENT_TYPES:
            raise InvalidFileFormatError(
                f"Unsupported file type '{content_type}'. "
                f"Supported: {', '.join(SUPPORTED_CONTENT_TYPES)}"
            )

    def count_pages(self, data: bytes, content_type: str) -> int:
        """Number of pages (PDF pages or image frames)."""
        self.check_content_type(content_type)
        try:
            if content_type == PDF_CONTENT_TYPE:
                doc = fitz.open(stream=data, filetype="pdf")
                try:
                    return len(doc)
                finally:
                    doc.close()

            with Image.open(io.BytesIO(data)) as img:
                return getattr(img, "n_frames", 1)
        except (fitz.FileDataError, RuntimeError, ValueError, OSError, UnidentifiedImageError) as exc:
            logger.error(f"Cannot decode {content_type} document: {exc}")
            raise InvalidFileFormatError(f"Cannot decode {content_type} document: {exc}") from exc

    def render_page(self, data: bytes, content_type: str, page_num: int) -> Tuple[bytes, int, int]:
        """Render a single page.

        Args:
            data: Document bytes
            content_type: Document MIME type
            page_num: 1-based page number

        Returns:
            (png_bytes, width, height)

        Raises:
            ValueError: If page_num is out of range
            InvalidFileFormatError: If the document cannot be decoded
        """
        self.check_content_type(content_type)
        try:
            if content_type == PDF_CONTENT_TYPE:
                img = self._render_pdf_page(data, page_num)
            else:
                img = self._render_image_frame(data, page_num)
        except ValueError:
            raise
        except (fitz.FileDataError, RuntimeError, OSError, UnidentifiedImageError) as exc:
            logger.error(f"Cannot render page {page_num}: {exc}")
            raise InvalidFileFormatError(f"Cannot render page {page_num}: {exc}") from exc

        buf = io.BytesIO()
        img.save(buf, format=self.config.format)
        image_bytes = buf.getvalue()

        logger.info(
            f"Rendered page {page_num} ({img.width}x{img.height}, {len(image_bytes)} bytes)"
        )
        return image_bytes, img.width, img.height

    def _render_pdf_page(self, data: bytes, page_num: int) -> Image.Image:
        doc = fitz.open(stream=data, filetype="pdf")
        try:
            total_pages = len(doc)
            if page_num < 1 or page_num > total_pages:
                raise ValueError(f"Invalid page number {page_num} (must be 1-{total_pages})")

            page = doc.load_page(page_num - 1)
            pix = page.get_pixmap(dpi=self.config.dpi)

            mode = "RGB" if pix.alpha == 0 else "RGBA"
            img = Image.frombytes(mode, [pix.width, pix.height], pix.samples)
            return img.convert("RGB") if mode == "RGBA" else img
        finally:
            doc.close()

    def _render_image_frame(self, data: bytes, page_num: int) -> Image.Image:
        with Image.open(io.BytesIO(data)) as img:
            total_frames = getattr(img, "n_frames", 1)
            if page_num < 1 or page_num > total_frames:
                raise ValueError(f"Invalid page number {page_num} (must be 1-{total_frames})")
            img.seek(page_num - 1)
            return img.convert("RGB")
