"""Page image provider - loads a document and serves page images on demand."""

import asyncio
import base64
import logging
import mimetypes
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple
from urllib.parse import urlparse

import requests

from ..core.errors import InvalidFileFormatError, ServiceConnectionError
from ..schemas.config import RenderConfig
from ..schemas.document import DocumentInfo, DocumentSource, PageImage
from .renderer import PageRenderer

logger = logging.getLogger(__name__)


class PageImageProvider(Protocol):
    """Protocol for page image providers."""

    async def load_document(self, source: DocumentSource) -> DocumentInfo:
        """Decode a document and return its page count and first page.

        Raises:
            InvalidFileFormatError: Document cannot be decoded
        """
        ...

    async def load_page(self, index: int) -> PageImage:
        """Return the image of a 1-based page of the loaded document."""
        ...


def to_data_uri(image_bytes: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(image_bytes).decode('utf-8')}"


class DocumentPageProvider:
    """Provider backed by PageRenderer.

    Rendering runs in worker threads. Rendered pages are cached for the
    lifetime of the loaded document.
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        renderer: Optional[PageRenderer] = None,
        fetch_timeout_sec: int = 60,
    ) -> None:
        self.config = config or RenderConfig()
        self.renderer = renderer or PageRenderer(self.config)
        self.fetch_timeout_sec = fetch_timeout_sec
        self._data: Optional[bytes] = None
        self._content_type: Optional[str] = None
        self._page_count = 0
        self._pages: Dict[int, PageImage] = {}

    @property
    def page_count(self) -> int:
        return self._page_count

    async def load_document(self, source: DocumentSource) -> DocumentInfo:
        if source.is_remote:
            data, content_type = await asyncio.to_thread(self._fetch, source.url)
        else:
            data, content_type = source.data, source.content_type or ""

        self.renderer.check_content_type(content_type)
        page_count = await asyncio.to_thread(self.renderer.count_pages, data, content_type)
        if page_count < 1:
            raise InvalidFileFormatError(f"Document '{source.label}' has no pages")

        self._data = data
        self._content_type = content_type
        self._page_count = page_count
        self._pages = {}
        logger.info(f"Loaded '{source.label}' ({content_type}, {page_count} pages)")

        first_page = await self.load_page(1)
        return DocumentInfo(page_count=page_count, first_page=first_page)

    async def load_page(self, index: int) -> PageImage:
        if self._data is None:
            raise RuntimeError("No document loaded")
        cached = self._pages.get(index)
        if cached is not None:
            return cached

        image_bytes, width, height = await asyncio.to_thread(
            self.renderer.render_page, self._data, self._content_type, index
        )
        page = PageImage(
            index=index,
            image_uri=to_data_uri(image_bytes),
            width=width,
            height=height,
            image=image_bytes,
        )
        self._pages[index] = page
        return page

    def _fetch(self, url: str) -> Tuple[bytes, str]:
        """Download a remote document; content type from header or URL suffix."""
        logger.info(f"Fetching document from {url}")
        try:
            response = requests.get(url, timeout=self.fetch_timeout_sec)
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            logger.error(f"Failed to fetch {url}: {exc}")
            raise ServiceConnectionError(f"Cannot fetch document from {url}: {exc}") from exc

        content_type = (response.headers.get("Content-Type") or "").split(";")[0].strip()
        if not content_type or content_type == "application/octet-stream":
            guessed, _ = mimetypes.guess_type(Path(urlparse(url).path).name)
            content_type = guessed or content_type
        return response.content, content_type
