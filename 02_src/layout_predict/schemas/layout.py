"""Layout result schemas - structured output of a succeeded analysis job.

Geometry is stored in page units as reported by the service (inch or pixel,
see ``PageLayout.unit``). Conversion to image pixels happens in
``core.layout_builder`` when features are drawn.
"""

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

Point = Tuple[float, float]
Polygon = Tuple[Point, ...]


@dataclass(frozen=True)
class TextRegion:
    """One recognized text line.

    Attributes:
        page: Page number (1-based)
        text: Line content
        polygon: Outline in page units
    """
    page: int
    text: str
    polygon: Polygon


@dataclass(frozen=True)
class CheckboxRegion:
    """One selection mark (checkbox).

    Attributes:
        page: Page number (1-based)
        state: "selected" or "unselected"
        polygon: Outline in page units
        confidence: Service confidence, if reported
    """
    page: int
    state: str
    polygon: Polygon
    confidence: Optional[float] = None


@dataclass(frozen=True)
class TableCell:
    """One table cell, spans included."""

    row_index: int
    column_index: int
    text: str
    row_span: int = 1
    column_span: int = 1
    is_header: bool = False


@dataclass(frozen=True)
class TableDescriptor:
    """One detected table on a page.

    Attributes:
        id: Table identifier, unique within a result (e.g. "table_2_1")
        page: Page number (1-based)
        polygon: Table outline in page units
        rows: Row count
        columns: Column count
        cells: Flat cell list
    """
    id: str
    page: int
    polygon: Polygon
    rows: int
    columns: int
    cells: Tuple[TableCell, ...] = ()

    def grid(self) -> List[List[str]]:
        """Cell text as a rows x columns grid (spanned slots left empty)."""
        grid = [["" for _ in range(self.columns)] for _ in range(self.rows)]
        for cell in self.cells:
            if 0 <= cell.row_index < self.rows and 0 <= cell.column_index < self.columns:
                grid[cell.row_index][cell.column_index] = cell.text
        return grid


@dataclass(frozen=True)
class PageLayout:
    """Everything detected on one page."""

    page: int
    width: float
    height: float
    unit: str = "pixel"
    angle: float = 0.0
    text_regions: Tuple[TextRegion, ...] = ()
    tables: Tuple[TableDescriptor, ...] = ()
    checkboxes: Tuple[CheckboxRegion, ...] = ()


@dataclass(frozen=True)
class LayoutResult:
    """Structured output of a succeeded analysis job.

    ``pages`` is a read-only mapping. ``raw`` is a deep copy of the service
    response, detached from the object the transport returned.

    Attributes:
        pages: Mapping of page number (1-based) to its layout
        raw: Full service response (status + analyzeResult), used for download
    """
    pages: Mapping[int, PageLayout] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pages", MappingProxyType(dict(self.pages)))
        object.__setattr__(self, "raw", copy.deepcopy(self.raw))

    @property
    def tables(self) -> List[TableDescriptor]:
        """All tables across pages, in page order."""
        return [table for page in sorted(self.pages) for table in self.pages[page].tables]

    def page(self, page_num: int) -> Optional[PageLayout]:
        return self.pages.get(page_num)

    def find_table(self, page_num: int, table_id: str) -> Optional[TableDescriptor]:
        layout = self.pages.get(page_num)
        if layout is None:
            return None
        for table in layout.tables:
            if table.id == table_id:
                return table
        return None
