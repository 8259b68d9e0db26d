"""Workflow controller - top-level state machine for one document instance.

States: IDLE -> FILE_LOADING -> FILE_READY -> ANALYZING -> ANALYSIS_COMPLETE,
or ANALYZING -> ANALYSIS_FAILED -> FILE_READY.
"""

import logging
from enum import Enum
from typing import Awaitable, List, Optional, Union

from ..preprocessing.page_provider import PageImageProvider
from ..schemas.config import PrebuiltSettings
from ..schemas.document import DocumentSource
from ..schemas.job import AnalysisJob, JobStatus
from ..schemas.layout import LayoutResult
from ..schemas.overlay import OverlayLayer
from .alerts import (
    ANALYZE_FAILED_TITLE,
    FILE_LOAD_FAILED_TITLE,
    ErrorReporter,
    alert_message_for,
)
from .errors import LayoutPredictError
from .job_client import AnalysisJobClient
from .overlay import OverlayStateMachine
from .pagination import PaginationController
from .rendering import OverlayRenderer

logger = logging.getLogger(__name__)

LEAVE_WARNING = "A prediction operation is currently in progress, are you sure you want to leave?"


class WorkflowState(str, Enum):
    IDLE = "idle"
    FILE_LOADING = "file_loading"
    FILE_READY = "file_ready"
    ANALYZING = "analyzing"
    ANALYSIS_COMPLETE = "analysis_complete"
    ANALYSIS_FAILED = "analysis_failed"


_BUSY_STATES = (WorkflowState.FILE_LOADING, WorkflowState.ANALYZING)
_RUNNABLE_STATES = (WorkflowState.FILE_READY, WorkflowState.ANALYSIS_COMPLETE)


class WorkflowController:
    """Sequences file readiness, gates analysis and maps outcomes onto the overlay.

    Owns the AnalysisJob and LayoutResult for the lifetime of one document.
    """

    def __init__(
        self,
        provider: PageImageProvider,
        job_client: AnalysisJobClient,
        renderer: OverlayRenderer,
        reporter: ErrorReporter,
    ) -> None:
        """Initialize the workflow.

        Args:
            provider: Page image provider (document decoding)
            job_client: Analysis job client
            renderer: Rendering collaborator
            reporter: Error reporter for user-facing alerts
        """
        self.provider = provider
        self.job_client = job_client
        self.renderer = renderer
        self.reporter = reporter
        self.overlay = OverlayStateMachine(renderer)
        self.pagination = PaginationController(provider, self.overlay, renderer)

        self.state = WorkflowState.IDLE
        self.history: List[WorkflowState] = [WorkflowState.IDLE]
        self.document: Optional[DocumentSource] = None
        self.job: Optional[AnalysisJob] = None
        self.layout_result: Optional[LayoutResult] = None

    def _transition(self, new_state: WorkflowState) -> None:
        logger.info(f"Workflow: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    # Derived flags

    @property
    def is_analyzing(self) -> bool:
        return self.state is WorkflowState.ANALYZING

    @property
    def controls_disabled(self) -> bool:
        """Document picker and source switch are disabled while busy."""
        return self.state in _BUSY_STATES

    @property
    def should_confirm_leave(self) -> bool:
        """Navigation-away needs confirmation while analysis runs."""
        return self.is_analyzing

    @property
    def download_available(self) -> bool:
        return self.layout_result is not None and not self.is_analyzing

    def can_run_analysis(self, settings: PrebuiltSettings) -> bool:
        return (
            self.state in _RUNNABLE_STATES
            and self.document is not None
            and settings.is_complete
        )

    # Document selection

    async def select_document(self, source: DocumentSource) -> bool:
        """Load a new document and show its first page.

        Returns:
            True if the document is ready; False if rejected or loading failed
        """
        if self.controls_disabled:
            logger.warning(f"Document selection rejected in state '{self.state.value}'")
            return False

        self._transition(WorkflowState.FILE_LOADING)
        self._clear_document()
        self.document = source

        try:
            info = await self.provider.load_document(source)
        except LayoutPredictError as exc:
            logger.error(f"Failed to load '{source.label}': {exc}")
            self._file_load_failed(exc)
            return False
        except Exception as exc:
            logger.exception(f"Unexpected error loading '{source.label}': {exc}")
            self._file_load_failed(exc)
            return False

        self.pagination.set_document(info.page_count, info.first_page)
        self._transition(WorkflowState.FILE_READY)
        return True

    def change_source(self) -> bool:
        """Switch input source (file/URL): drop the document and any result."""
        if self.controls_disabled:
            logger.warning(f"Source change rejected in state '{self.state.value}'")
            return False
        self._clear_document()
        self._transition(WorkflowState.IDLE)
        return True

    def _clear_document(self) -> None:
        self.document = None
        self.job = None
        self.layout_result = None
        self.pagination.reset()

    def _file_load_failed(self, exc: Exception) -> None:
        message = exc.message if isinstance(exc, LayoutPredictError) else alert_message_for(exc)
        self.reporter.report(FILE_LOAD_FAILED_TITLE, message)
        self._clear_document()
        self._transition(WorkflowState.IDLE)

    # Analysis

    async def run_analysis(self, settings: PrebuiltSettings) -> bool:
        """Submit the current document and wait for the layout result.

        Returns:
            True on AnalysisComplete; False if rejected by the guard or failed
        """
        if not self.can_run_analysis(settings):
            logger.warning(
                f"Run analysis rejected (state={self.state.value}, "
                f"document={'yes' if self.document else 'no'}, "
                f"settings_complete={settings.is_complete})"
            )
            return False

        self._transition(WorkflowState.ANALYZING)
        self.layout_result = None
        self.pagination.set_layout_result(None)
        self.job = AnalysisJob()

        try:
            handle = await self.job_client.submit(
                self.document, settings.service_uri, settings.api_key
            )
            self.job.handle = handle
            result = await self.job_client.poll(handle)
        except LayoutPredictError as exc:
            logger.error(f"Analysis failed ({exc.error_code.value}): {exc}")
            self._analysis_failed(exc)
            return False
        except Exception as exc:
            logger.exception(f"Unexpected analysis error: {exc}")
            self._analysis_failed(exc)
            return False

        self.job.succeed(result)
        self.layout_result = result
        self.pagination.set_layout_result(result)
        self.pagination.redraw()
        self._transition(WorkflowState.ANALYSIS_COMPLETE)
        logger.info(f"Analysis complete: {len(result.tables)} tables on {len(result.pages)} pages")
        return True

    def _analysis_failed(self, exc: Exception) -> None:
        if self.job is not None and self.job.status is JobStatus.PENDING:
            self.job.fail(str(exc))
        self.layout_result = None
        self.pagination.set_layout_result(None)
        self._transition(WorkflowState.ANALYSIS_FAILED)
        self.reporter.report(ANALYZE_FAILED_TITLE, alert_message_for(exc))
        self._transition(WorkflowState.FILE_READY)

    # View commands

    async def go_to_page(self, target: int) -> bool:
        return await self._navigate(self.pagination.go_to_page(target))

    async def next_page(self) -> bool:
        return await self._navigate(self.pagination.next_page())

    async def prev_page(self) -> bool:
        return await self._navigate(self.pagination.prev_page())

    async def _navigate(self, navigation: Awaitable[bool]) -> bool:
        """Run a page change; a failed page load is reported, the displayed page stays."""
        try:
            return await navigation
        except LayoutPredictError as exc:
            logger.error(f"Page load failed ({exc.error_code.value}): {exc}")
            self.reporter.report(FILE_LOAD_FAILED_TITLE, exc.message)
        except Exception as exc:
            logger.exception(f"Unexpected page load error: {exc}")
            self.reporter.report(FILE_LOAD_FAILED_TITLE, alert_message_for(exc))
        return False

    def toggle_layer(self, layer: Union[OverlayLayer, str]) -> bool:
        return self.overlay.toggle_layer(layer)

    def zoom_in(self) -> None:
        self.pagination.zoom_in()

    def zoom_out(self) -> None:
        self.pagination.zoom_out()

    def rotate(self, degrees: int) -> None:
        self.pagination.rotate(degrees)
