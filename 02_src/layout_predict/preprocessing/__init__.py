"""Document decoding: page rendering and page image provider."""

from .page_provider import DocumentPageProvider, PageImageProvider
from .renderer import PageRenderer

__all__ = ["DocumentPageProvider", "PageImageProvider", "PageRenderer"]
