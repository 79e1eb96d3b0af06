"""
everyrow API client.

This module provides a thin interface to the everyrow REST API (v0) via httpx,
with error wrapping and retry logic for transient failures:
- 5xx responses and transport errors are retried with exponential backoff
- 401/403 responses raise AuthError immediately
- other error responses raise APIError with the service's ``detail`` message
"""

import json
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

import httpx

from everyrow_sheets.client.base import check_api_key
from everyrow_sheets.exceptions import APIError, AuthError
from everyrow_sheets.tasks.models import SubmittedTask, Task

if TYPE_CHECKING:
    from everyrow_sheets.config import ApiSettings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://engine.futuresearch.ai/api/v0"


class EveryrowClient:
    """
    A wrapper around httpx for everyrow API calls.

    The client owns one ``httpx.Client`` carrying the bearer credential. Use it
    as a context manager, or call ``close()`` when done.

    Attributes:
        base_url: API root, e.g. ``https://engine.futuresearch.ai/api/v0``
        max_retries: Maximum number of retry attempts for transient failures
        retry_base_delay: Base delay in seconds for exponential backoff
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: everyrow API key, sent as a bearer token
            base_url: API root URL
            timeout_seconds: Per-request timeout
            max_retries: Retry attempts for 5xx and transport errors (default: 2)
            retry_base_delay: Base delay for exponential backoff (default: 1.0)
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
            sleep: Function used to wait between retries

        Raises:
            ConfigurationError: If api_key is empty or malformed
        """
        check_api_key(api_key)

        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        api_key: str,
        settings: "ApiSettings",
        **kwargs: Any,
    ) -> "EveryrowClient":
        """Create a client from ``ApiSettings``."""
        return cls(
            api_key,
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            max_retries=settings.max_retries,
            retry_base_delay=settings.retry_base_delay,
            **kwargs,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "EveryrowClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def submit(self, path: str, body: Dict[str, Any]) -> SubmittedTask:
        """
        Submit an operation.

        Args:
            path: Operation endpoint, e.g. ``/operations/rank``
            body: JSON request body

        Returns:
            The new task id and the session the service placed it in

        Raises:
            AuthError: If the API key is rejected
            APIError: If the call fails or the response has no task id
        """
        data = self._request("POST", path, body, f"submit {path}")
        if not isinstance(data, dict) or not data.get("task_id"):
            raise APIError(f"Response from {path} did not include a task_id")

        submitted = SubmittedTask(
            task_id=str(data["task_id"]),
            session_id=data.get("session_id"),
        )
        logger.info("Submitted %s as task %s (session %s)", path, submitted.task_id, submitted.session_id)
        return submitted

    def get_status(self, task_id: str) -> Task:
        """
        Fetch the current status of a task.

        Raises:
            AuthError: If the API key is rejected
            APIError: If the call fails
        """
        data = self._request("GET", f"/tasks/{task_id}/status", None, f"get status of task {task_id}")
        if not isinstance(data, dict):
            raise APIError(f"Unexpected status response for task {task_id}")
        return Task.from_dict(task_id, data)

    def get_result(self, task_id: str) -> Any:
        """
        Fetch the raw result body of a completed task.

        The body is returned as parsed JSON; see
        ``everyrow_sheets.tasks.normalizer`` for how it is flattened.

        Raises:
            AuthError: If the API key is rejected
            APIError: If the call fails
        """
        return self._request("GET", f"/tasks/{task_id}/result", None, f"get result of task {task_id}")

    def _request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]],
        description: str,
    ) -> Any:
        """Execute a request with retry logic and exponential backoff.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            body: JSON body for POST/PUT/PATCH requests
            description: Human-readable description for error messages

        Returns:
            Parsed JSON response body (None for an empty body)

        Raises:
            AuthError: On HTTP 401/403
            APIError: On other error responses, or once retries are exhausted
        """
        last_error: Optional[APIError] = None

        for attempt in range(self.max_retries + 1):
            if attempt > 0:
                delay = self.retry_base_delay * (2 ** (attempt - 1))
                logger.warning(
                    "Retrying %s in %.1fs (attempt %d/%d): %s",
                    description, delay, attempt + 1, self.max_retries + 1, last_error,
                )
                self._sleep(delay)

            try:
                logger.debug("%s %s", method, path)
                json_body = body if method in ("POST", "PUT", "PATCH") else None
                response = self._client.request(method, path, json=json_body)
            except httpx.TransportError as e:
                last_error = APIError(f"Failed to {description}: {e}")
                continue

            if response.is_success:
                if not response.content:
                    return None
                try:
                    return response.json()
                except ValueError as e:
                    raise APIError(
                        f"Failed to {description}: invalid JSON response", response.status_code
                    ) from e

            message = _error_message(response)
            if response.status_code in (401, 403):
                raise AuthError(message, response.status_code)
            if response.status_code >= 500:
                last_error = APIError(message, response.status_code)
                continue
            raise APIError(message, response.status_code)

        # All retries exhausted
        raise APIError(
            f"Failed to {description} after {self.max_retries + 1} attempts: {last_error}",
            last_error.status_code if last_error else None,
        )


def _error_message(response: httpx.Response) -> str:
    """Extract a user-facing message from an error response.

    Uses the body's ``detail`` field when present (JSON-encoded if it is not a
    string), otherwise the status code and the start of the raw body.
    """
    message = f"API error {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return f"{message}: {response.text[:200]}"

    detail = body.get("detail") if isinstance(body, dict) else None
    if detail is None:
        return message
    return detail if isinstance(detail, str) else json.dumps(detail)
