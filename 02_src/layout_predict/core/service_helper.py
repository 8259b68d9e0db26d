"""Service transport - REST calls with bounded auto-retry and error classification."""

import logging
import time
from typing import Any, Dict, Optional

import requests

from ..schemas.config import ServiceConfig
from .errors import (
    AuthError,
    LayoutPredictError,
    ModelNotFoundError,
    PredictForbiddenError,
    ServiceConnectionError,
    ServiceError,
)

logger = logging.getLogger(__name__)

CREDENTIAL_HEADER = "Ocp-Apim-Subscription-Key"

_INVALID_ENDPOINT_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
)


class ServiceHelper:
    """Blocking REST helper with retry logic.

    Features:
    - Retry on 429 (rate limit), 500-599 (server errors) and network errors
    - Exponential backoff: sleep_s = backoff_base ** (attempt - 1)
    - No retry on other 4xx
    - Failures converted into the error taxonomy
    """

    def __init__(self, config: ServiceConfig) -> None:
        self.config = config

    def post_with_auto_retry(
        self,
        url: str,
        headers: Dict[str, str],
        api_key: str,
        data: Optional[bytes] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """POST with retry. Body is raw bytes or a JSON document."""
        return self._request_with_retry("POST", url, headers, api_key, data=data, json=json_body)

    def get_with_auto_retry(
        self,
        url: str,
        headers: Dict[str, str],
        api_key: str,
    ) -> requests.Response:
        return self._request_with_retry("GET", url, headers, api_key)

    def _request_with_retry(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        api_key: str,
        **kwargs: Any,
    ) -> requests.Response:
        """Make a request, retrying transient failures.

        Returns:
            Successful (2xx) response

        Raises:
            AuthError: Endpoint malformed or credential rejected
            ServiceConnectionError: Network unreachable after all retries
            ServiceError: Non-2xx status after all retries
        """
        request_headers = dict(headers)
        request_headers[CREDENTIAL_HEADER] = api_key
        max_retries = self.config.max_retries

        for attempt in range(1, max_retries + 1):
            call = requests.post if method == "POST" else requests.get
            try:
                logger.debug(f"{method} {url} attempt {attempt}/{max_retries}")
                response = call(
                    url,
                    headers=request_headers,
                    timeout=self.config.timeout_sec,
                    **kwargs,
                )
            except _INVALID_ENDPOINT_ERRORS as exc:
                logger.error(f"Invalid service endpoint '{url}': {exc}")
                raise AuthError(f"Invalid service endpoint: {url}") from exc
            except requests.exceptions.RequestException as exc:
                if attempt < max_retries:
                    sleep_s = self._backoff(attempt)
                    logger.warning(
                        f"{method} {url} failed, retry {attempt}/{max_retries} "
                        f"after {sleep_s:.1f}s: {exc}"
                    )
                    time.sleep(sleep_s)
                    continue
                logger.error(f"{method} {url} failed after {attempt} attempts: {exc}")
                raise ServiceConnectionError(f"Cannot connect to {url}: {exc}") from exc

            status = response.status_code
            is_retryable = status == 429 or (500 <= status < 600)

            if is_retryable and attempt < max_retries:
                sleep_s = self._backoff(attempt)
                logger.warning(
                    f"Service {status} error, retry {attempt}/{max_retries} after {sleep_s:.1f}s"
                )
                time.sleep(sleep_s)
                continue

            if status >= 400:
                logger.info(f"{method} {url} failed with status={status} (attempt {attempt})")
                raise self.handle_service_error(response, url)

            return response

        # Loop always returns or raises; kept for max_retries < 1
        raise ServiceError(f"No request attempted for {url} (max_retries={max_retries})")

    def _backoff(self, attempt: int) -> float:
        return self.config.backoff_base ** (attempt - 1)

    @staticmethod
    def handle_service_error(response: requests.Response, endpoint: str) -> LayoutPredictError:
        """Classify a non-2xx response.

        Args:
            response: Failed response
            endpoint: URL the request was sent to (used in messages)

        Returns:
            Error instance to raise
        """
        status = response.status_code
        message = _error_message(response)

        if status == 401:
            return AuthError(
                message or f"Access denied by {endpoint}: check the API key and endpoint"
            )
        if status == 403:
            return PredictForbiddenError(message or "The service refused the request", status)
        if status == 404:
            return ModelNotFoundError(message or f"Resource not found at {endpoint}", status)
        return ServiceError(message or f"Service returned status {status}", status)


def _error_message(response: requests.Response) -> str:
    """Extract error.message from a service error body, falling back to raw text."""
    try:
        payload = response.json()
    except ValueError:
        return (response.text or "")[:400]

    if isinstance(payload, dict):
        error = payload.get("error") or {}
        if isinstance(error, dict) and error.get("message"):
            code = error.get("code")
            return f"{code}: {error['message']}" if code else str(error["message"])
    return (response.text or "")[:400]
