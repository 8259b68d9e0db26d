"""Configuration schemas for the analysis service and page rendering."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENDPOINT_ENV = "FORM_RECOGNIZER_ENDPOINT"
API_KEY_ENV = "FORM_RECOGNIZER_API_KEY"


@dataclass
class ServiceConfig:
    """Configuration for the layout analysis service client.

    Attributes:
        api_version: Service version used in the analyze path
        timeout_sec: Per-request timeout in seconds
        max_retries: Maximum attempts for transient failures (429, 5xx, network)
        backoff_base: Base for exponential backoff calculation
        poll_interval_ms: Delay between status checks
        poll_timeout_ms: Wall-clock cap for the whole poll loop
    """
    api_version: str = "v2.1"
    timeout_sec: int = 60
    max_retries: int = 3
    backoff_base: float = 1.5
    poll_interval_ms: int = 500
    poll_timeout_ms: int = 120000


@dataclass
class PrebuiltSettings:
    """Endpoint and credential passed explicitly at submission time.

    Attributes:
        service_uri: Base URI of the service (e.g. https://<name>.cognitiveservices.azure.com/)
        api_key: Subscription key sent in the credential header
    """
    service_uri: Optional[str] = None
    api_key: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """Both endpoint and credential are present."""
        return bool(self.service_uri) and bool(self.api_key)

    @classmethod
    def from_env(cls) -> "PrebuiltSettings":
        """Load settings from environment (and .env file if present)."""
        load_dotenv()
        settings = cls(
            service_uri=os.getenv(ENDPOINT_ENV),
            api_key=os.getenv(API_KEY_ENV),
        )
        if not settings.is_complete:
            logger.warning(
                f"{ENDPOINT_ENV} or {API_KEY_ENV} not set - analysis will be unavailable"
            )
        return settings


@dataclass
class RenderConfig:
    """Configuration for page rendering."""

    dpi: int = 150
    format: str = "PNG"
