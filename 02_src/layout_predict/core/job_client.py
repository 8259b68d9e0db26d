"""Analysis job client - submits a document and polls the job to a terminal state.

Blocking HTTP calls go through ServiceHelper and run in worker threads via
asyncio.to_thread, so the caller's event loop stays responsive. Each poll
check is one suspend/resume cycle; the loop sleeps between checks instead
of spinning.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urljoin

from ..schemas.config import ServiceConfig
from ..schemas.document import DocumentSource
from ..schemas.job import JobHandle, JobStatus
from ..schemas.layout import LayoutResult
from .errors import AnalysisTimeoutError, AuthError, ServiceError
from .layout_builder import parse_layout_result
from .service_helper import ServiceHelper

logger = logging.getLogger(__name__)

OPERATION_LOCATION_HEADER = "operation-location"

_PENDING_STATUSES = {"notstarted", "running"}


def classify_status(payload: Dict[str, Any]) -> JobStatus:
    """Map a status response onto Pending/Succeeded/Failed.

    Unknown statuses are treated as Pending; the wall-clock cap still bounds them.
    """
    status = str(payload.get("status", "")).lower()
    if status == "succeeded":
        return JobStatus.SUCCEEDED
    if status == "failed":
        return JobStatus.FAILED
    if status not in _PENDING_STATUSES:
        logger.warning(f"Unknown job status '{payload.get('status')}', treating as pending")
    return JobStatus.PENDING


def _failure_message(payload: Dict[str, Any]) -> str:
    analyze = payload.get("analyzeResult") or {}
    errors = payload.get("errors") or analyze.get("errors") or []
    error = payload.get("error") or (errors[0] if errors else {})
    if isinstance(error, dict) and error.get("message"):
        return f"Analysis failed: {error['message']}"
    return "Analysis failed: the service reported a failed status"


class AnalysisJobClient:
    """Client for the layout analyze API.

    No cancellation primitive is exposed: once submit() succeeds, poll()
    runs to exactly one of Succeeded, Failed (ServiceError) or
    AnalysisTimeoutError.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        service: Optional[ServiceHelper] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Service configuration (defaults used if omitted)
            service: Transport helper (created from config if omitted)
        """
        self.config = config or ServiceConfig()
        self.service = service or ServiceHelper(self.config)

    def build_analyze_url(self, endpoint: str) -> str:
        """Build the analyze URL: {endpoint}/formrecognizer/{version}/layout/analyze."""
        return urljoin(endpoint, f"/formrecognizer/{self.config.api_version}/layout/analyze")

    async def submit(
        self,
        document: DocumentSource,
        endpoint: Optional[str],
        api_key: Optional[str],
    ) -> JobHandle:
        """Submit a document for analysis.

        Args:
            document: Local bytes or remote URL
            endpoint: Service base URI
            api_key: Subscription key

        Returns:
            Handle referencing the server-supplied operation-location URL

        Raises:
            AuthError: Endpoint or credential missing/rejected
            ServiceConnectionError: Service unreachable
            ServiceError: Non-2xx after retries or no operation-location
        """
        if not endpoint or not api_key:
            raise AuthError("Service endpoint and API key are required to run analysis")

        url = self.build_analyze_url(endpoint)
        headers = {"cache-control": "no-cache"}

        if document.is_remote:
            headers["Content-Type"] = "application/json"
            logger.info(f"Submitting remote document '{document.url}' to {url}")
            response = await asyncio.to_thread(
                self.service.post_with_auto_retry,
                url,
                headers,
                api_key,
                json_body={"source": document.url},
            )
        else:
            headers["Content-Type"] = document.content_type or "application/octet-stream"
            logger.info(
                f"Submitting '{document.label}' ({len(document.data)} bytes, "
                f"{headers['Content-Type']}) to {url}"
            )
            response = await asyncio.to_thread(
                self.service.post_with_auto_retry,
                url,
                headers,
                api_key,
                data=document.data,
            )

        operation_location = response.headers.get(OPERATION_LOCATION_HEADER)
        if not operation_location:
            raise ServiceError(
                "Service response did not include an operation-location header",
                response.status_code,
            )

        logger.info(f"Job accepted, tracking at {operation_location}")
        return JobHandle(operation_location=operation_location, api_key=api_key)

    async def poll(
        self,
        handle: JobHandle,
        interval_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> LayoutResult:
        """Poll the job until a terminal state or the time cap.

        Args:
            handle: Handle returned by submit()
            interval_ms: Delay between checks (default from config, 500)
            timeout_ms: Wall-clock cap (default from config, 120000)

        Returns:
            Parsed layout result

        Raises:
            ServiceError: Job reported failed, or a check failed after retries
            AnalysisTimeoutError: No terminal status before the cap
        """
        interval_s = (interval_ms if interval_ms is not None else self.config.poll_interval_ms) / 1000
        timeout_s = (timeout_ms if timeout_ms is not None else self.config.poll_timeout_ms) / 1000

        start = time.monotonic()
        attempt = 0

        while True:
            attempt += 1
            # A single check, transport retries included, must not outlive the cap
            remaining = timeout_s - (time.monotonic() - start)
            try:
                response = await asyncio.wait_for(
                    asyncio.to_thread(
                        self.service.get_with_auto_retry,
                        handle.operation_location,
                        {"cache-control": "no-cache"},
                        handle.api_key,
                    ),
                    timeout=max(remaining, 0),
                )
            except asyncio.TimeoutError as exc:
                elapsed = time.monotonic() - start
                logger.error(f"Status check #{attempt} still running at the time cap ({elapsed:.1f}s)")
                raise AnalysisTimeoutError(
                    f"Analysis did not complete within {timeout_s * 1000:.0f}ms"
                ) from exc
            try:
                payload = response.json()
            except ValueError as exc:
                raise ServiceError(
                    f"Invalid status response: {exc}", response.status_code
                ) from exc

            status = classify_status(payload)
            elapsed = time.monotonic() - start
            logger.info(
                f"Poll #{attempt}: status={payload.get('status')}, "
                f"elapsed={elapsed * 1000:.0f}ms"
            )

            if status is JobStatus.SUCCEEDED:
                return parse_layout_result(payload)
            if status is JobStatus.FAILED:
                raise ServiceError(_failure_message(payload), response.status_code)

            remaining = timeout_s - elapsed
            if remaining <= 0:
                logger.error(f"Polling timed out after {attempt} checks ({elapsed:.1f}s)")
                raise AnalysisTimeoutError(
                    f"Analysis did not complete within {timeout_s * 1000:.0f}ms"
                )

            await asyncio.sleep(min(interval_s, remaining))

    async def analyze(
        self,
        document: DocumentSource,
        endpoint: Optional[str],
        api_key: Optional[str],
    ) -> LayoutResult:
        """Submit and poll with the configured interval and timeout."""
        handle = await self.submit(document, endpoint, api_key)
        return await self.poll(handle)
