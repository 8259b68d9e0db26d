"""User-facing alerts: error reporter protocol and message mapping."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .errors import ErrorCode, LayoutPredictError

logger = logging.getLogger(__name__)

ANALYZE_FAILED_TITLE = "Analyze Failed"
DOWNLOAD_FAILED_TITLE = "Download failed"
FILE_LOAD_FAILED_TITLE = "Failed to load file"

ENDPOINT_CONNECTION_MESSAGE = (
    "Cannot connect to the {endpoint}. Please make sure the endpoint is correct "
    "and reachable, then try again."
)
PREDICT_FORBIDDEN_MESSAGE = (
    "The service refused to analyze this document. Please check that your "
    "subscription allows layout analysis."
)
TIMEOUT_MESSAGE = (
    "The analysis did not finish in time. The {endpoint} may be busy; please try again."
)
ENDPOINT_LABEL = "form recognizer backend URL"


@dataclass(frozen=True)
class Alert:
    """A titled alert shown to the user."""

    title: str
    message: str


class ErrorReporter(Protocol):
    """Protocol for surfacing errors to the user."""

    def report(self, title: str, message: str) -> None:
        ...


class AlertReporter:
    """ErrorReporter that keeps the current alert and an alert history."""

    def __init__(self) -> None:
        self.current: Optional[Alert] = None
        self.history: List[Alert] = []

    @property
    def should_show(self) -> bool:
        return self.current is not None

    def report(self, title: str, message: str) -> None:
        alert = Alert(title=title, message=message)
        self.current = alert
        self.history.append(alert)
        logger.warning(f"Alert shown: {title} - {message}")

    def dismiss(self) -> None:
        self.current = None


def alert_message_for(error: Exception, endpoint_label: str = ENDPOINT_LABEL) -> str:
    """Map an error onto the alert message text.

    Service-provided messages are passed through; connection and unknown
    failures get the generic endpoint connection text.
    """
    if not isinstance(error, LayoutPredictError):
        return ENDPOINT_CONNECTION_MESSAGE.format(endpoint=endpoint_label)

    code = error.error_code
    if code is ErrorCode.PREDICT_WITHOUT_TRAIN_FORBIDDEN:
        return error.message or PREDICT_FORBIDDEN_MESSAGE
    if code is ErrorCode.TIMEOUT:
        return TIMEOUT_MESSAGE.format(endpoint=endpoint_label)
    if code is ErrorCode.ENDPOINT_CONNECTION:
        return ENDPOINT_CONNECTION_MESSAGE.format(endpoint=endpoint_label)
    if error.message:
        return error.message
    return ENDPOINT_CONNECTION_MESSAGE.format(endpoint=endpoint_label)
