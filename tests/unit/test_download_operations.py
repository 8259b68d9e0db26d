"""Unit tests for result and script download operations."""

import asyncio
import json
from unittest.mock import patch

import pytest

from conftest import FakeJobClient, FakePageProvider, build_layout_payload
from layout_predict.core.alerts import DOWNLOAD_FAILED_TITLE, AlertReporter
from layout_predict.core.layout_builder import parse_layout_result
from layout_predict.core.rendering import RecordingRenderer
from layout_predict.core.storage import DiskStorage, MemoryStorage
from layout_predict.core.workflow import WorkflowController
from layout_predict.operations.download_result import DownloadResultOperation, result_file_name
from layout_predict.operations.download_script import (
    SCRIPT_FILE_NAME,
    DownloadScriptOperation,
    fill_template,
    load_template,
)
from layout_predict.schemas.config import PrebuiltSettings

SETTINGS = PrebuiltSettings(service_uri="https://svc.test/", api_key="secret-key")


class ReadOnlyStorage(MemoryStorage):
    """Storage whose writes fail like a full or read-only disk."""

    def save(self, key, value):
        raise OSError(f"Read-only file system: '{key}'")


@pytest.fixture
def payload():
    return build_layout_payload({1: 1}, num_pages=1)


@pytest.fixture
def workflow(payload):
    return WorkflowController(
        provider=FakePageProvider(page_count=1),
        job_client=FakeJobClient(result=parse_layout_result(payload)),
        renderer=RecordingRenderer(),
        reporter=AlertReporter(),
    )


@pytest.fixture
def analyzed(workflow, pdf_source):
    async def scenario():
        await workflow.select_document(pdf_source)
        await workflow.run_analysis(SETTINGS)

    asyncio.run(scenario())
    return workflow


class TestDownloadResult:
    def test_file_name(self):
        assert result_file_name("invoice") == "Layout-invoice.json"

    def test_saves_full_response(self, analyzed, payload):
        storage = MemoryStorage()
        location = DownloadResultOperation(analyzed, storage).execute()

        assert location == "results/Layout-invoice.json"
        assert storage.load(location) == payload

    def test_saves_to_disk(self, analyzed, payload, tmp_path):
        location = DownloadResultOperation(analyzed, DiskStorage(tmp_path)).execute()

        assert location.endswith("Layout-invoice.json")
        with open(location, "r", encoding="utf-8") as f:
            assert json.load(f) == payload

    def test_unavailable_without_result(self, workflow):
        with pytest.raises(RuntimeError, match="No layout result"):
            DownloadResultOperation(workflow, MemoryStorage()).execute()


class TestDownloadScript:
    def test_fill_template_case_insensitive(self):
        template = "url=<endpoint> key=<Subscription_Key> v=<API_VERSION> again=<endpoint>"

        assert fill_template(template, "https://e/", "k", "v2.1") == (
            "url=https://e/ key=k v=v2.1 again=https://e/"
        )

    def test_packaged_template_has_placeholders(self):
        template = load_template()

        assert "<endpoint>" in template
        assert "<subscription_key>" in template
        assert "<API_version>" in template

    def test_execute_fills_packaged_template(self, workflow):
        storage = MemoryStorage()
        location = DownloadScriptOperation(workflow, storage).execute(SETTINGS, "v2.1")

        assert location == f"scripts/{SCRIPT_FILE_NAME}"
        text = storage.load(location)
        assert 'ENDPOINT = "https://svc.test/"' in text
        assert 'API_KEY = "secret-key"' in text
        assert 'API_VERSION = "v2.1"' in text
        assert "<endpoint>" not in text

    def test_custom_template(self, workflow):
        storage = MemoryStorage()
        DownloadScriptOperation(workflow, storage).execute(SETTINGS, "v2.0", template="<API_version>")

        assert storage.load(f"scripts/{SCRIPT_FILE_NAME}") == "v2.0"


class TestDownloadFailure:
    def test_result_write_failure_is_reported(self, analyzed):
        with pytest.raises(OSError):
            DownloadResultOperation(analyzed, ReadOnlyStorage()).execute()

        alert = analyzed.reporter.current
        assert alert.title == DOWNLOAD_FAILED_TITLE
        assert "Layout-invoice.json" in alert.message
        assert "Read-only file system" in alert.message

    def test_script_write_failure_is_reported(self, workflow):
        with pytest.raises(OSError):
            DownloadScriptOperation(workflow, ReadOnlyStorage()).execute(SETTINGS, "v2.1")

        assert workflow.reporter.current.title == DOWNLOAD_FAILED_TITLE

    def test_missing_template_is_reported(self, workflow):
        storage = MemoryStorage()
        with patch(
            "layout_predict.operations.download_script.load_template",
            side_effect=FileNotFoundError("layout-analyze.py.tmpl"),
        ):
            with pytest.raises(FileNotFoundError):
                DownloadScriptOperation(workflow, storage).execute(SETTINGS, "v2.1")

        assert workflow.reporter.current.message == (
            f"Could not save {SCRIPT_FILE_NAME}: layout-analyze.py.tmpl"
        )
        assert not storage.exists(f"scripts/{SCRIPT_FILE_NAME}")
