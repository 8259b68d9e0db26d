"""Download of the templated layout-analyze.py script.

The template is opaque text; it is filled in and stored, never executed.
"""

import logging
import re
from importlib import resources
from typing import Optional

from ..schemas.config import PrebuiltSettings
from .base import BaseOperation

logger = logging.getLogger(__name__)

SCRIPT_FILE_NAME = "layout-analyze.py"
TEMPLATE_RESOURCE = "resources/layout-analyze.py.tmpl"

_PLACEHOLDER_RE = re.compile(r"<endpoint>|<subscription_key>|<API_version>", re.IGNORECASE)


def load_template() -> str:
    """Read the packaged script template."""
    return resources.files("layout_predict").joinpath(TEMPLATE_RESOURCE).read_text(encoding="utf-8")


def fill_template(template: str, endpoint: str, api_key: str, api_version: str) -> str:
    """Substitute <endpoint>, <subscription_key> and <API_version> (case-insensitive)."""
    values = {
        "<endpoint>": endpoint,
        "<subscription_key>": api_key,
        "<api_version>": api_version,
    }
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(0).lower()], template)


class DownloadScriptOperation(BaseOperation):
    """Fill the analyze script template with the current settings and store it."""

    def execute(
        self,
        settings: PrebuiltSettings,
        api_version: str,
        template: Optional[str] = None,
    ) -> str:
        """Write layout-analyze.py.

        Args:
            settings: Current endpoint and key (validity is checked by the service, not here)
            api_version: Service version substituted for <API_version>
            template: Template text (packaged template if omitted)

        Returns:
            Location of the saved artifact

        Raises:
            OSError: Template unreadable or artifact not writable (reported first)
        """
        if template is None:
            try:
                template = load_template()
            except OSError as exc:
                self._report_failure(SCRIPT_FILE_NAME, exc)
                raise

        text = fill_template(
            template,
            settings.service_uri or "",
            settings.api_key or "",
            api_version,
        )
        location = self._save(f"scripts/{SCRIPT_FILE_NAME}", text)
        logger.info(f"Analyze script saved to {location}")
        return location
