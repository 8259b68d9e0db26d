"""Root conftest: loads .env, configures file logging and shared fakes."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import Mock

import pytest
from dotenv import load_dotenv

from layout_predict.schemas.document import DocumentInfo, DocumentSource, PageImage
from layout_predict.schemas.job import JobHandle

load_dotenv()

# === File logging to tests/.logs/ ===
LOGS_DIR = Path(__file__).parent / ".logs"
LOGS_DIR.mkdir(parents=True, exist_ok=True)

_ts = datetime.now().strftime("%Y-%m-%d_%H%M%S")
_log_file = LOGS_DIR / f"run_{_ts}.log"

_file_handler = logging.FileHandler(_log_file, encoding="utf-8")
_file_handler.setLevel(logging.DEBUG)
_file_handler.setFormatter(logging.Formatter(
    "%(asctime)s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
))

logging.getLogger("layout_predict").addHandler(_file_handler)
logging.getLogger("layout_predict").setLevel(logging.DEBUG)


class FakePageProvider:
    """PageImageProvider whose page loads can be held open by the test."""

    def __init__(self, page_count: int = 3, width: int = 850, height: int = 1100,
                 error: Optional[Exception] = None,
                 sizes: Optional[Dict[int, Tuple[int, int]]] = None) -> None:
        self.page_count = page_count
        self.width = width
        self.height = height
        self.error = error
        self.sizes = sizes or {}
        # page -> error raised by load_page
        self.page_errors: Dict[int, Exception] = {}
        self.gates: Dict[int, asyncio.Event] = {}
        self.load_calls: List[int] = []

    def hold(self, page: int) -> asyncio.Event:
        """Block load_page(page) until the returned event is set (call inside the loop)."""
        gate = asyncio.Event()
        self.gates[page] = gate
        return gate

    def page(self, index: int) -> PageImage:
        width, height = self.sizes.get(index, (self.width, self.height))
        return PageImage(
            index=index,
            image_uri=f"data:image/png;base64,page{index}",
            width=width,
            height=height,
            image=f"page{index}".encode(),
        )

    async def load_document(self, source: DocumentSource) -> DocumentInfo:
        if self.error is not None:
            raise self.error
        return DocumentInfo(page_count=self.page_count, first_page=self.page(1))

    async def load_page(self, index: int) -> PageImage:
        self.load_calls.append(index)
        gate = self.gates.pop(index, None)
        if gate is not None:
            await gate.wait()
        if index in self.page_errors:
            raise self.page_errors[index]
        return self.page(index)


class FakeJobClient:
    """AnalysisJobClient stand-in with a scripted outcome."""

    def __init__(self, result: Any = None, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.gate: Optional[asyncio.Event] = None
        self.submitted: List[DocumentSource] = []

    async def submit(self, document, endpoint, api_key) -> JobHandle:
        self.submitted.append(document)
        return JobHandle(operation_location="https://svc.test/operations/1", api_key=api_key)

    async def poll(self, handle: JobHandle):
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


def make_response(
    status_code: int = 200,
    json_data: Any = None,
    headers: Optional[Dict[str, str]] = None,
    text: str = "",
) -> Mock:
    """Mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


def _rect(x1: float, y1: float, x2: float, y2: float) -> List[float]:
    return [x1, y1, x2, y1, x2, y2, x1, y2]


def build_layout_payload(tables_per_page: Dict[int, int], num_pages: int = 2) -> Dict[str, Any]:
    """Succeeded 3.x-style status response (pages in inches, 8.5 x 11)."""
    pages = []
    for n in range(1, num_pages + 1):
        pages.append({
            "pageNumber": n,
            "width": 8.5,
            "height": 11,
            "unit": "inch",
            "angle": 0,
            "lines": [
                {"content": f"Heading on page {n}", "polygon": _rect(1, 0.5, 5, 0.8)},
                {"content": f"Body on page {n}", "polygon": _rect(1, 1.0, 6, 1.3)},
            ],
            "selectionMarks": [
                {"state": "selected", "polygon": _rect(7, 0.5, 7.2, 0.7), "confidence": 0.98},
            ],
        })

    tables = []
    for page_num, count in tables_per_page.items():
        for i in range(count):
            top = 2 + i * 3
            tables.append({
                "rowCount": 2,
                "columnCount": 3,
                "cells": [
                    {"rowIndex": r, "columnIndex": c, "content": f"r{r}c{c}",
                     "kind": "columnHeader" if r == 0 else "content"}
                    for r in range(2) for c in range(3)
                ],
                "boundingRegions": [{"pageNumber": page_num, "polygon": _rect(1, top, 7.5, top + 2)}],
            })

    return {
        "status": "succeeded",
        "createdDateTime": "2026-10-19T10:00:00Z",
        "lastUpdatedDateTime": "2026-10-19T10:00:03Z",
        "analyzeResult": {"apiVersion": "2023-07-31", "pages": pages, "tables": tables},
    }


@pytest.fixture
def fake_provider() -> FakePageProvider:
    return FakePageProvider()


@pytest.fixture
def layout_payload() -> Dict[str, Any]:
    """Two tables on page 1, one on page 2."""
    return build_layout_payload({1: 2, 2: 1})


@pytest.fixture
def pdf_source() -> DocumentSource:
    return DocumentSource(label="invoice", data=b"%PDF-1.4 fake", content_type="application/pdf")
