"""Overlay schemas: layers, page state and pixel-space features."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .layout import Point


class OverlayLayer(str, Enum):
    """Fixed set of togglable annotation layers."""

    TEXT = "text"
    TABLES = "tables"
    CHECKBOXES = "checkboxes"
    LABEL = "label"
    DRAWN_REGIONS = "drawnRegions"


class InteractionState(str, Enum):
    """Interaction state of a table feature."""

    REST = "rest"
    HOVERING = "hovering"
    SELECTED = "selected"


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in image pixels (origin top-left)."""

    left: float
    top: float
    width: float
    height: float

    @classmethod
    def from_points(cls, points: Tuple[Point, ...]) -> "BoundingBox":
        if not points:
            return cls(0.0, 0.0, 0.0, 0.0)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


@dataclass(frozen=True)
class Feature:
    """A drawable overlay shape in image pixels.

    Attributes:
        id: Feature identifier (unique within a page)
        layer: Layer the feature belongs to
        points: Outline in image pixels
        label: Optional text shown with the shape
    """
    id: str
    layer: OverlayLayer
    points: Tuple[Point, ...]
    label: str = ""


@dataclass(frozen=True)
class PageFeatures:
    """All drawable features of one page, grouped by layer."""

    page: int
    text: Tuple[Feature, ...] = ()
    tables: Tuple[Feature, ...] = ()
    checkboxes: Tuple[Feature, ...] = ()

    def all(self) -> List[Feature]:
        return [*self.text, *self.tables, *self.checkboxes]


@dataclass
class TableFeature:
    """One table region with its interaction state."""

    id: str
    page_index: int
    geometry: BoundingBox
    rows: int
    columns: int
    interaction_state: InteractionState = InteractionState.REST


@dataclass(frozen=True)
class TableTooltip:
    """Tooltip geometry for the hovering table."""

    top: float
    left: float
    width: float
    height: float
    rows: int
    columns: int

    @property
    def text(self) -> str:
        return f"rows: {self.rows} columns: {self.columns}"


@dataclass(frozen=True)
class TableDetailView:
    """Content of the opened table detail view."""

    table_id: str
    page: int
    rows: int
    columns: int
    grid: Tuple[Tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class PageState:
    """Currently displayed page.

    Attributes:
        index: Page number (1-based, within [1, num_pages])
        image_uri: Data URI of the rendered page image
        width: Image width in pixels
        height: Image height in pixels
        rotation_degrees: Accumulated user rotation
    """
    index: int = 1
    image_uri: Optional[str] = None
    width: int = 0
    height: int = 0
    rotation_degrees: int = 0
