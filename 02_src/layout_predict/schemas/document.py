"""Document source and page image schemas."""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

SUPPORTED_CONTENT_TYPES = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/tiff",
    "image/bmp",
)


@dataclass(frozen=True)
class DocumentSource:
    """Document selected by the user: local bytes or a remote URL.

    Attributes:
        label: File label used in artifact names
        data: Raw file bytes (None for remote sources)
        content_type: MIME type of ``data``
        url: Remote URL submitted as {"source": url} when no bytes are present
    """
    label: str
    data: Optional[bytes] = None
    content_type: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.data is None

    @classmethod
    def from_path(cls, path: Path) -> "DocumentSource":
        """Read a local file; content type is guessed from the extension."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            label=path.stem,
            data=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )

    @classmethod
    def from_url(cls, url: str) -> "DocumentSource":
        name = Path(urlparse(url).path).stem or "document"
        return cls(label=name, url=url)


@dataclass(frozen=True)
class PageImage:
    """One decoded page.

    Attributes:
        index: Page number (1-based)
        image_uri: PNG data URI for display
        width: Image width in pixels
        height: Image height in pixels
        image: PNG bytes
    """
    index: int
    image_uri: str
    width: int
    height: int
    image: bytes = b""


@dataclass(frozen=True)
class DocumentInfo:
    """Result of loading a document: first page plus page count."""

    page_count: int
    first_page: PageImage
