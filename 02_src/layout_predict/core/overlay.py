"""Overlay state machine - layer visibility, table hover and selection.

Table feature states: Rest -> Hovering -> Selected -> Rest, Hovering -> Rest.
At most one feature is Hovering and at most one is Selected at any time.
Every state change is mirrored to the renderer in the same call.
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from ..schemas.layout import TableDescriptor
from ..schemas.overlay import (
    BoundingBox,
    Feature,
    InteractionState,
    OverlayLayer,
    TableDetailView,
    TableFeature,
    TableTooltip,
)
from .rendering import OverlayRenderer

logger = logging.getLogger(__name__)


class OverlayStateMachine:
    """Owns layer flags and table interaction states for the current page."""

    def __init__(self, renderer: OverlayRenderer) -> None:
        self.renderer = renderer
        self.layers: Dict[OverlayLayer, bool] = {layer: True for layer in OverlayLayer}
        self.features: Dict[str, TableFeature] = {}
        self._tables: Dict[str, TableDescriptor] = {}
        self.hovering_id: Optional[str] = None
        self.selected_id: Optional[str] = None
        self.detail_view: Optional[TableDetailView] = None

    # Layers

    def toggle_layer(self, layer: Union[OverlayLayer, str]) -> bool:
        """Flip one layer and instruct the renderer in the same step.

        Args:
            layer: Layer enum or its name ("text", "tables", ...)

        Returns:
            New visibility value

        Raises:
            ValueError: Unknown layer name
        """
        layer = OverlayLayer(layer)
        visible = not self.layers[layer]
        self.layers[layer] = visible
        self.renderer.set_layer_visible(layer, visible)
        logger.info(f"Layer '{layer.value}' visible={visible}")
        return visible

    def is_visible(self, layer: Union[OverlayLayer, str]) -> bool:
        return self.layers[OverlayLayer(layer)]

    # Features

    def load_features(
        self,
        page: int,
        table_features: Iterable[Feature],
        tables: Iterable[TableDescriptor],
    ) -> None:
        """Register the current page's tables, all at Rest.

        Args:
            page: Page number the features belong to
            table_features: Table shapes in image pixels
            tables: Table descriptors (rows, columns, cells) for the same page
        """
        self.reset()
        self._tables = {table.id: table for table in tables}
        self.features = {}
        for feature in table_features:
            table = self._tables.get(feature.id)
            self.features[feature.id] = TableFeature(
                id=feature.id,
                page_index=page,
                geometry=BoundingBox.from_points(feature.points),
                rows=table.rows if table else 0,
                columns=table.columns if table else 0,
            )
        logger.debug(f"Loaded {len(self.features)} table features for page {page}")

    def clear_features(self) -> None:
        self.reset()
        self.features = {}
        self._tables = {}

    def reset(self) -> None:
        """Return every feature to Rest and drop hover, selection and detail view."""
        for feature in self.features.values():
            if feature.interaction_state is not InteractionState.REST:
                self._set_state(feature, InteractionState.REST)
        self.hovering_id = None
        self.selected_id = None
        self.detail_view = None

    def state_of(self, feature_id: str) -> Optional[InteractionState]:
        feature = self.features.get(feature_id)
        return feature.interaction_state if feature else None

    def selected_features(self) -> List[TableFeature]:
        return [
            f for f in self.features.values()
            if f.interaction_state is InteractionState.SELECTED
        ]

    # Pointer events

    def pointer_enter(self, feature_id: str) -> None:
        """Pointer entered a table feature."""
        feature = self.features.get(feature_id)
        if feature is None:
            logger.debug(f"pointer_enter on unknown feature '{feature_id}' ignored")
            return
        if self.hovering_id == feature_id:
            return

        self._clear_hover()
        self.hovering_id = feature_id
        if feature.interaction_state is InteractionState.REST:
            self._set_state(feature, InteractionState.HOVERING)

    def pointer_leave(self, feature_id: str) -> None:
        if self.hovering_id != feature_id:
            return
        self._clear_hover()

    def click(self) -> bool:
        """Select the hovering feature and open its detail view.

        Returns:
            True if a feature moved to Selected, False for a no-op or rejection
        """
        if self.hovering_id is None:
            return False
        feature = self.features[self.hovering_id]
        if feature.interaction_state is not InteractionState.HOVERING:
            return False
        if self.selected_id is not None:
            logger.info(
                f"Selection of '{feature.id}' rejected: '{self.selected_id}' is already selected"
            )
            return False

        self._set_state(feature, InteractionState.SELECTED)
        self.selected_id = feature.id
        table = self._tables.get(feature.id)
        self.detail_view = TableDetailView(
            table_id=feature.id,
            page=feature.page_index,
            rows=feature.rows,
            columns=feature.columns,
            grid=tuple(tuple(row) for row in table.grid()) if table else (),
        )
        logger.info(f"Opened detail view for '{feature.id}'")
        return True

    def close_detail_view(self) -> None:
        """Close the detail view; the selected feature returns to Rest."""
        if self.selected_id is None:
            return
        feature = self.features.get(self.selected_id)
        if feature is not None:
            self._set_state(feature, InteractionState.REST)
        if self.hovering_id == self.selected_id:
            self.hovering_id = None
        logger.info(f"Closed detail view for '{self.selected_id}'")
        self.selected_id = None
        self.detail_view = None

    @property
    def tooltip(self) -> Optional[TableTooltip]:
        """Tooltip for the hovering feature, None when nothing is hovered."""
        if self.hovering_id is None:
            return None
        feature = self.features[self.hovering_id]
        box = feature.geometry
        return TableTooltip(
            top=box.top,
            left=box.left,
            width=box.width,
            height=box.height,
            rows=feature.rows,
            columns=feature.columns,
        )

    def _clear_hover(self) -> None:
        if self.hovering_id is None:
            return
        previous = self.features.get(self.hovering_id)
        if previous is not None and previous.interaction_state is InteractionState.HOVERING:
            self._set_state(previous, InteractionState.REST)
        self.hovering_id = None

    def _set_state(self, feature: TableFeature, state: InteractionState) -> None:
        logger.debug(f"Feature '{feature.id}': {feature.interaction_state.value} -> {state.value}")
        feature.interaction_state = state
        self.renderer.set_feature_state(feature.id, state)
