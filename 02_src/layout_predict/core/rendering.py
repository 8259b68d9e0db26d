"""Rendering capability interface and an in-memory recording renderer."""

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..schemas.overlay import InteractionState, OverlayLayer, PageFeatures, PageState

logger = logging.getLogger(__name__)


class OverlayRenderer(Protocol):
    """Instructions the controllers may issue to the view layer.

    Controllers never reach into renderer internals; everything goes
    through these calls.
    """

    def show_page(self, page: PageState) -> None:
        """Display a page image (uri, size, rotation)."""
        ...

    def draw_features(self, features: PageFeatures) -> None:
        """Replace overlay shapes with the given page's features."""
        ...

    def clear_features(self) -> None:
        ...

    def set_layer_visible(self, layer: OverlayLayer, visible: bool) -> None:
        ...

    def set_feature_state(self, feature_id: str, state: InteractionState) -> None:
        """Restyle one feature for its interaction state."""
        ...

    def zoom_in(self) -> None:
        ...

    def zoom_out(self) -> None:
        ...

    def set_rotation(self, degrees: int) -> None:
        ...


class RecordingRenderer:
    """Renderer that records instructions and mirrors the resulting view state.

    Used for headless runs and tests.
    """

    def __init__(self) -> None:
        self.commands: List[Tuple[str, Any]] = []
        self.page: Optional[PageState] = None
        self.features: Optional[PageFeatures] = None
        self.layer_visibility: Dict[OverlayLayer, bool] = {layer: True for layer in OverlayLayer}
        self.feature_states: Dict[str, InteractionState] = {}
        self.zoom_level = 0
        self.rotation = 0

    def _record(self, name: str, payload: Any = None) -> None:
        self.commands.append((name, payload))
        logger.debug(f"RecordingRenderer: {name} {payload!r}")

    def show_page(self, page: PageState) -> None:
        self.page = page
        self._record("show_page", page.index)

    def draw_features(self, features: PageFeatures) -> None:
        self.features = features
        self.feature_states = {f.id: InteractionState.REST for f in features.tables}
        self._record("draw_features", features.page)

    def clear_features(self) -> None:
        self.features = None
        self.feature_states = {}
        self._record("clear_features")

    def set_layer_visible(self, layer: OverlayLayer, visible: bool) -> None:
        self.layer_visibility[layer] = visible
        self._record("set_layer_visible", (layer, visible))

    def set_feature_state(self, feature_id: str, state: InteractionState) -> None:
        self.feature_states[feature_id] = state
        self._record("set_feature_state", (feature_id, state))

    def zoom_in(self) -> None:
        self.zoom_level += 1
        self._record("zoom_in")

    def zoom_out(self) -> None:
        self.zoom_level -= 1
        self._record("zoom_out")

    def set_rotation(self, degrees: int) -> None:
        self.rotation = degrees
        self._record("set_rotation", degrees)
