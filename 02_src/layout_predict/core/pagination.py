"""Pagination controller - current page, stale-response guard and feature cache."""

import logging
from dataclasses import replace
from typing import Dict, Optional, Tuple

from ..preprocessing.page_provider import PageImageProvider
from ..schemas.document import PageImage
from ..schemas.layout import LayoutResult
from ..schemas.overlay import PageFeatures, PageState
from .layout_builder import build_page_features
from .overlay import OverlayStateMachine
from .rendering import OverlayRenderer

logger = logging.getLogger(__name__)


class PaginationController:
    """Owns PageState and num_pages.

    ``page`` always describes the page on screen; a requested page only
    replaces it once its image has arrived. Page loads are ordered by
    recency: every go_to_page() call takes a new sequence number and a
    response is applied only if it still carries the latest one. Earlier
    responses are dropped, never merged.
    """

    def __init__(
        self,
        provider: PageImageProvider,
        overlay: OverlayStateMachine,
        renderer: OverlayRenderer,
    ) -> None:
        self.provider = provider
        self.overlay = overlay
        self.renderer = renderer
        self.num_pages = 0
        self.page = PageState()
        self.layout_result: Optional[LayoutResult] = None
        self._pending_page: Optional[int] = None
        # (page, image width, image height) -> features in image pixels
        self._feature_cache: Dict[Tuple[int, int, int], PageFeatures] = {}
        self._request_seq = 0

    @property
    def current_page(self) -> int:
        """Requested page while its image loads, otherwise the displayed page."""
        return self._pending_page if self._pending_page is not None else self.page.index

    @property
    def is_loading(self) -> bool:
        return self._pending_page is not None

    def reset(self) -> None:
        """Forget the document; in-flight page loads become stale."""
        self._request_seq += 1
        self._pending_page = None
        self.num_pages = 0
        self.page = PageState()
        self.layout_result = None
        self._feature_cache.clear()
        self.overlay.clear_features()
        self.renderer.clear_features()

    def set_document(self, page_count: int, first_page: PageImage) -> None:
        """Start a document session on its first page."""
        self.reset()
        self.num_pages = page_count
        self._apply_page(first_page)
        logger.info(f"Document ready: {page_count} pages")

    def set_layout_result(self, result: Optional[LayoutResult]) -> None:
        """Attach (or clear) the layout result; cached geometries are dropped."""
        self.layout_result = result
        self._feature_cache.clear()
        if result is None:
            self.overlay.clear_features()
            self.renderer.clear_features()

    async def go_to_page(self, target: int) -> bool:
        """Navigate to a 1-based page.

        Returns:
            True if the page was loaded and applied; False for an out-of-range
            target or a response superseded by a newer request

        Raises:
            Exception: Whatever the provider raised for the latest request;
                the displayed page and its features are restored first
        """
        if target < 1 or target > self.num_pages:
            logger.debug(f"go_to_page({target}) ignored (num_pages={self.num_pages})")
            return False

        self._request_seq += 1
        seq = self._request_seq
        self._pending_page = target
        # Feature ids from the previous page must not survive navigation
        self.overlay.clear_features()
        self.renderer.clear_features()

        try:
            page_image = await self.provider.load_page(target)
        except Exception as exc:
            if seq != self._request_seq:
                logger.info(f"Ignoring failed load of superseded page {target}: {exc}")
                return False
            logger.error(f"Failed to load page {target}, staying on page {self.page.index}: {exc}")
            self._pending_page = None
            self.redraw()
            raise

        if seq != self._request_seq or target != self._pending_page:
            logger.info(
                f"Discarding stale page {target} response "
                f"(current page {self.current_page})"
            )
            return False

        self._pending_page = None
        self._apply_page(page_image)
        return True

    async def next_page(self) -> bool:
        target = min(self.current_page + 1, self.num_pages)
        if target == self.current_page:
            return False
        return await self.go_to_page(target)

    async def prev_page(self) -> bool:
        target = max(1, self.current_page - 1)
        if target == self.current_page:
            return False
        return await self.go_to_page(target)

    def redraw(self) -> None:
        """Draw the displayed page's features.

        No-op without a layout result, and while another page is loading:
        the page image and its pixel size are not known yet.
        """
        if self.layout_result is None:
            return
        if self.is_loading:
            logger.debug(f"Redraw deferred until page {self._pending_page} is loaded")
            return
        features = self.features_for(self.page.index)
        self.renderer.draw_features(features)
        layout = self.layout_result.page(self.page.index)
        self.overlay.load_features(
            self.page.index,
            features.tables,
            layout.tables if layout else (),
        )

    def features_for(self, page_num: int) -> PageFeatures:
        """Pixel-space features for a page at the displayed image size, computed once."""
        key = (page_num, self.page.width, self.page.height)
        cached = self._feature_cache.get(key)
        if cached is not None:
            return cached

        layout = self.layout_result.page(page_num) if self.layout_result else None
        if layout is None:
            features = PageFeatures(page=page_num)
        else:
            features = build_page_features(layout, self.page.width, self.page.height)
        self._feature_cache[key] = features
        logger.debug(f"Computed features for page {page_num}: {len(features.all())} shapes")
        return features

    def rotate(self, degrees: int) -> None:
        self.page = replace(self.page, rotation_degrees=self.page.rotation_degrees + degrees)
        self.renderer.set_rotation(self.page.rotation_degrees)

    def zoom_in(self) -> None:
        self.renderer.zoom_in()

    def zoom_out(self) -> None:
        self.renderer.zoom_out()

    def _apply_page(self, page_image: PageImage) -> None:
        self.page = PageState(
            index=page_image.index,
            image_uri=page_image.image_uri,
            width=page_image.width,
            height=page_image.height,
            rotation_degrees=self.page.rotation_degrees,
        )
        self.renderer.show_page(self.page)
        self.redraw()
