"""Base operation class."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from ..core.alerts import DOWNLOAD_FAILED_TITLE
from ..core.storage import ArtifactStorage

logger = logging.getLogger(__name__)


class BaseOperation(ABC):
    """Abstract base class for download operations.

    Operations receive the workflow controller (source of the document and
    result, and the error reporter) and the storage backend the artifact is
    written to.
    """

    def __init__(self, workflow: Any, storage: ArtifactStorage):
        """Initialize operation.

        Args:
            workflow: WorkflowController instance
            storage: Artifact storage backend
        """
        self.workflow = workflow
        self.storage = storage

    @abstractmethod
    def execute(self, **kwargs) -> Any:
        """Execute the operation.

        Returns:
            Operation-specific result
        """
        pass

    def _save(self, key: str, value: Any) -> str:
        """Save an artifact; failures are reported as a download alert and re-raised."""
        try:
            return self.storage.save(key, value)
        except (OSError, TypeError, ValueError) as exc:
            self._report_failure(key, exc)
            raise

    def _report_failure(self, artifact: str, exc: Exception) -> None:
        logger.error(f"Download of '{artifact}' failed: {exc}")
        self.workflow.reporter.report(DOWNLOAD_FAILED_TITLE, f"Could not save {artifact}: {exc}")
