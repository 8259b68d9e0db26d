"""
Layout Predict - submit documents to a layout analysis service and explore the result.

This package provides:
- AnalysisJobClient: submit a document and poll the job to a terminal state
- WorkflowController: file/analysis state machine for one document instance
- OverlayStateMachine / PaginationController: layers, table hover/selection, navigation
- Download operations for the result JSON and the analyze script
"""

__version__ = "0.1.0"

# Core classes
from .core.errors import (
    AnalysisTimeoutError,
    AuthError,
    InvalidFileFormatError,
    LayoutPredictError,
    ModelNotFoundError,
    PredictForbiddenError,
    ServiceConnectionError,
    ServiceError,
)
from .core.alerts import AlertReporter, ErrorReporter
from .core.job_client import AnalysisJobClient
from .core.overlay import OverlayStateMachine
from .core.pagination import PaginationController
from .core.rendering import OverlayRenderer, RecordingRenderer
from .core.storage import DiskStorage, MemoryStorage
from .core.workflow import WorkflowController, WorkflowState
from .preprocessing.page_provider import DocumentPageProvider, PageImageProvider

# Operations
from .operations.download_result import DownloadResultOperation
from .operations.download_script import DownloadScriptOperation

# Schemas
from .schemas.config import PrebuiltSettings, RenderConfig, ServiceConfig
from .schemas.document import DocumentSource
from .schemas.layout import LayoutResult, TableDescriptor
from .schemas.overlay import InteractionState, OverlayLayer, PageState

__all__ = [
    # Version
    "__version__",

    # Errors
    "AnalysisTimeoutError",
    "AuthError",
    "InvalidFileFormatError",
    "LayoutPredictError",
    "ModelNotFoundError",
    "PredictForbiddenError",
    "ServiceConnectionError",
    "ServiceError",

    # Core classes
    "AlertReporter",
    "ErrorReporter",
    "AnalysisJobClient",
    "OverlayStateMachine",
    "PaginationController",
    "OverlayRenderer",
    "RecordingRenderer",
    "DiskStorage",
    "MemoryStorage",
    "WorkflowController",
    "WorkflowState",
    "DocumentPageProvider",
    "PageImageProvider",

    # Operations
    "DownloadResultOperation",
    "DownloadScriptOperation",

    # Schemas
    "PrebuiltSettings",
    "RenderConfig",
    "ServiceConfig",
    "DocumentSource",
    "LayoutResult",
    "TableDescriptor",
    "InteractionState",
    "OverlayLayer",
    "PageState",
]
