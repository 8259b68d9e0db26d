"""Error taxonomy for analysis, transport and file loading failures."""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Error codes surfaced to the user."""

    UNKNOWN = "Unknown"
    HTTP_STATUS_UNAUTHORIZED = "HttpStatusUnauthorized"
    ENDPOINT_CONNECTION = "EndpointConnectionError"
    SERVICE_ERROR = "ServiceError"
    TIMEOUT = "Timeout"
    INVALID_FILE_FORMAT = "InvalidFileFormat"
    MODEL_NOT_FOUND = "ModelNotFound"
    PREDICT_WITHOUT_TRAIN_FORBIDDEN = "PredictWithoutTrainForbidden"


class LayoutPredictError(RuntimeError):
    """Base error with a user-facing code and message."""

    error_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, error_code: Optional[ErrorCode] = None) -> None:
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class AuthError(LayoutPredictError):
    """Missing or rejected endpoint/credential."""

    error_code = ErrorCode.HTTP_STATUS_UNAUTHORIZED


class ServiceConnectionError(LayoutPredictError, ConnectionError):
    """Service endpoint unreachable."""

    error_code = ErrorCode.ENDPOINT_CONNECTION


class ServiceError(LayoutPredictError):
    """Non-2xx response after retries, or an explicit failed job status."""

    error_code = ErrorCode.SERVICE_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[ErrorCode] = None,
    ) -> None:
        super().__init__(message, error_code)
        self.status_code = status_code


class AnalysisTimeoutError(LayoutPredictError, TimeoutError):
    """Polling exceeded its wall-clock cap."""

    error_code = ErrorCode.TIMEOUT


class InvalidFileFormatError(LayoutPredictError):
    """Document could not be decoded into page images."""

    error_code = ErrorCode.INVALID_FILE_FORMAT


class ModelNotFoundError(ServiceError):
    """Service reported that the requested model/route does not exist."""

    error_code = ErrorCode.MODEL_NOT_FOUND


class PredictForbiddenError(ServiceError):
    """Service refused the analysis request."""

    error_code = ErrorCode.PREDICT_WITHOUT_TRAIN_FORBIDDEN
