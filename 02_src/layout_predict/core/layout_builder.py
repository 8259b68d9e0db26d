"""Layout builder - parses analyzeResult payloads and projects geometry to image pixels.

Two payload shapes are accepted:
- 3.x: analyzeResult.pages[] + analyzeResult.tables[] with boundingRegions/polygon
- 2.x: analyzeResult.readResults[] + analyzeResult.pageResults[] with boundingBox
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..schemas.layout import (
    CheckboxRegion,
    LayoutResult,
    PageLayout,
    Polygon,
    TableCell,
    TableDescriptor,
    TextRegion,
)
from ..schemas.overlay import Feature, OverlayLayer, PageFeatures

logger = logging.getLogger(__name__)


def to_polygon(flat: Optional[Sequence[Any]]) -> Polygon:
    """Convert [x1, y1, x2, y2, ...] or [{"x":..,"y":..}, ...] into point tuples."""
    if not flat:
        return ()
    if isinstance(flat[0], dict):
        return tuple((float(p["x"]), float(p["y"])) for p in flat)
    values = [float(v) for v in flat]
    return tuple(zip(values[0::2], values[1::2]))


def parse_layout_result(payload: Dict[str, Any]) -> LayoutResult:
    """Build LayoutResult from a succeeded status response.

    Args:
        payload: Full status response {"status": ..., "analyzeResult": {...}}

    Returns:
        LayoutResult keyed by page number
    """
    analyze = payload.get("analyzeResult") or {}

    if "pages" in analyze:
        pages = _parse_v3(analyze)
    elif "readResults" in analyze:
        pages = _parse_v2(analyze)
    else:
        logger.warning("analyzeResult has neither 'pages' nor 'readResults'; result is empty")
        pages = {}

    table_count = sum(len(p.tables) for p in pages.values())
    logger.info(f"Parsed layout result: {len(pages)} pages, {table_count} tables")
    return LayoutResult(pages=pages, raw=payload)


def _parse_v3(analyze: Dict[str, Any]) -> Dict[int, PageLayout]:
    tables_by_page: Dict[int, List[TableDescriptor]] = {}
    for table in analyze.get("tables") or []:
        regions = table.get("boundingRegions") or [{}]
        region = regions[0]
        page_num = int(region.get("pageNumber", 1))
        page_tables = tables_by_page.setdefault(page_num, [])
        page_tables.append(TableDescriptor(
            id=f"table_{page_num}_{len(page_tables) + 1}",
            page=page_num,
            polygon=to_polygon(region.get("polygon")),
            rows=int(table.get("rowCount", 0)),
            columns=int(table.get("columnCount", 0)),
            cells=tuple(_parse_cells(table.get("cells") or [], text_key="content")),
        ))

    pages: Dict[int, PageLayout] = {}
    for page in analyze.get("pages") or []:
        page_num = int(page.get("pageNumber", len(pages) + 1))
        pages[page_num] = PageLayout(
            page=page_num,
            width=float(page.get("width") or 0),
            height=float(page.get("height") or 0),
            unit=page.get("unit", "pixel"),
            angle=float(page.get("angle") or 0),
            text_regions=tuple(
                TextRegion(page_num, line.get("content", ""), to_polygon(line.get("polygon")))
                for line in page.get("lines") or []
            ),
            tables=tuple(tables_by_page.get(page_num, [])),
            checkboxes=tuple(
                CheckboxRegion(
                    page_num,
                    mark.get("state", "unselected"),
                    to_polygon(mark.get("polygon")),
                    mark.get("confidence"),
                )
                for mark in page.get("selectionMarks") or []
            ),
        )
    return pages


def _parse_v2(analyze: Dict[str, Any]) -> Dict[int, PageLayout]:
    tables_by_page: Dict[int, List[TableDescriptor]] = {}
    for page_result in analyze.get("pageResults") or []:
        page_num = int(page_result.get("page", 1))
        page_tables = tables_by_page.setdefault(page_num, [])
        for table in page_result.get("tables") or []:
            page_tables.append(TableDescriptor(
                id=f"table_{page_num}_{len(page_tables) + 1}",
                page=page_num,
                polygon=to_polygon(table.get("boundingBox")),
                rows=int(table.get("rows", 0)),
                columns=int(table.get("columns", 0)),
                cells=tuple(_parse_cells(table.get("cells") or [], text_key="text")),
            ))

    pages: Dict[int, PageLayout] = {}
    for read in analyze.get("readResults") or []:
        page_num = int(read.get("page", len(pages) + 1))
        pages[page_num] = PageLayout(
            page=page_num,
            width=float(read.get("width") or 0),
            height=float(read.get("height") or 0),
            unit=read.get("unit", "pixel"),
            angle=float(read.get("angle") or 0),
            text_regions=tuple(
                TextRegion(page_num, line.get("text", ""), to_polygon(line.get("boundingBox")))
                for line in read.get("lines") or []
            ),
            tables=tuple(tables_by_page.get(page_num, [])),
            checkboxes=tuple(
                CheckboxRegion(
                    page_num,
                    mark.get("state", "unselected"),
                    to_polygon(mark.get("boundingBox")),
                    mark.get("confidence"),
                )
                for mark in read.get("selectionMarks") or []
            ),
        )
    return pages


def _parse_cells(cells: Iterable[Dict[str, Any]], text_key: str) -> List[TableCell]:
    return [
        TableCell(
            row_index=int(cell.get("rowIndex", 0)),
            column_index=int(cell.get("columnIndex", 0)),
            text=cell.get(text_key, ""),
            row_span=int(cell.get("rowSpan", 1)),
            column_span=int(cell.get("columnSpan", 1)),
            is_header=bool(cell.get("isHeader")) or cell.get("kind") == "columnHeader",
        )
        for cell in cells
    ]


def build_page_features(layout: PageLayout, image_width: int, image_height: int) -> PageFeatures:
    """Project page-unit geometry onto an image of the given pixel size.

    Args:
        layout: Page layout in page units
        image_width: Rendered image width in pixels
        image_height: Rendered image height in pixels

    Returns:
        PageFeatures in image pixels
    """
    if layout.width <= 0 or layout.height <= 0:
        logger.warning(f"Page {layout.page} has no dimensions; features skipped")
        return PageFeatures(page=layout.page)

    sx = image_width / layout.width
    sy = image_height / layout.height

    def scale(polygon: Polygon) -> Polygon:
        return tuple((x * sx, y * sy) for x, y in polygon)

    text = tuple(
        Feature(f"text_{layout.page}_{i}", OverlayLayer.TEXT, scale(region.polygon), region.text)
        for i, region in enumerate(layout.text_regions, start=1)
    )
    tables = tuple(
        Feature(table.id, OverlayLayer.TABLES, scale(table.polygon))
        for table in layout.tables
    )
    checkboxes = tuple(
        Feature(f"checkbox_{layout.page}_{i}", OverlayLayer.CHECKBOXES, scale(mark.polygon), mark.state)
        for i, mark in enumerate(layout.checkboxes, start=1)
    )
    return PageFeatures(page=layout.page, text=text, tables=tables, checkboxes=checkboxes)
