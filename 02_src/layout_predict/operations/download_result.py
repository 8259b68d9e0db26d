"""Download of the analysis result as Layout-<fileLabel>.json."""

import logging
from typing import Any, Dict

from .base import BaseOperation

logger = logging.getLogger(__name__)

RESULT_FILE_PREFIX = "Layout-"


def result_file_name(file_label: str) -> str:
    return f"{RESULT_FILE_PREFIX}{file_label}.json"


class DownloadResultOperation(BaseOperation):
    """Serialize the full service response for download."""

    def execute(self) -> str:
        """Write the result JSON.

        Returns:
            Location of the saved artifact

        Raises:
            RuntimeError: No result available (no analysis, or analysis running)
        """
        if not self.workflow.download_available:
            raise RuntimeError("No layout result available for download")

        payload: Dict[str, Any] = self.workflow.layout_result.raw
        label = self.workflow.document.label if self.workflow.document else "document"
        location = self._save(f"results/{result_file_name(label)}", payload)
        logger.info(f"Layout result saved to {location}")
        return location
