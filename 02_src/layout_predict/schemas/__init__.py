"""Data schemas for Layout Predict."""

from .config import PrebuiltSettings, RenderConfig, ServiceConfig
from .document import DocumentInfo, DocumentSource, PageImage
from .job import AnalysisJob, JobHandle, JobStatus
from .layout import (
    CheckboxRegion,
    LayoutResult,
    PageLayout,
    TableCell,
    TableDescriptor,
    TextRegion,
)
from .overlay import (
    BoundingBox,
    Feature,
    InteractionState,
    OverlayLayer,
    PageFeatures,
    PageState,
    TableDetailView,
    TableFeature,
    TableTooltip,
)

__all__ = [
    "PrebuiltSettings",
    "RenderConfig",
    "ServiceConfig",
    "DocumentInfo",
    "DocumentSource",
    "PageImage",
    "AnalysisJob",
    "JobHandle",
    "JobStatus",
    "CheckboxRegion",
    "LayoutResult",
    "PageLayout",
    "TableCell",
    "TableDescriptor",
    "TextRegion",
    "BoundingBox",
    "Feature",
    "InteractionState",
    "OverlayLayer",
    "PageFeatures",
    "PageState",
    "TableDetailView",
    "TableFeature",
    "TableTooltip",
]
