"""Core components: job client, overlay and pagination state machines, workflow."""

from .errors import (
    AnalysisTimeoutError,
    AuthError,
    ErrorCode,
    InvalidFileFormatError,
    LayoutPredictError,
    ModelNotFoundError,
    PredictForbiddenError,
    ServiceConnectionError,
    ServiceError,
)
from .alerts import Alert, AlertReporter, ErrorReporter, alert_message_for
from .service_helper import ServiceHelper
from .layout_builder import build_page_features, parse_layout_result
from .job_client import AnalysisJobClient, classify_status
from .rendering import OverlayRenderer, RecordingRenderer
from .overlay import OverlayStateMachine
from .pagination import PaginationController
from .storage import ArtifactStorage, DiskStorage, MemoryStorage
from .workflow import WorkflowController, WorkflowState

__all__ = [
    # Errors
    "AnalysisTimeoutError",
    "AuthError",
    "ErrorCode",
    "InvalidFileFormatError",
    "LayoutPredictError",
    "ModelNotFoundError",
    "PredictForbiddenError",
    "ServiceConnectionError",
    "ServiceError",
    # Alerts
    "Alert",
    "AlertReporter",
    "ErrorReporter",
    "alert_message_for",
    # Service
    "ServiceHelper",
    "AnalysisJobClient",
    "classify_status",
    "build_page_features",
    "parse_layout_result",
    # Overlay
    "OverlayRenderer",
    "RecordingRenderer",
    "OverlayStateMachine",
    "PaginationController",
    # Storage
    "ArtifactStorage",
    "DiskStorage",
    "MemoryStorage",
    # Workflow
    "WorkflowController",
    "WorkflowState",
]
