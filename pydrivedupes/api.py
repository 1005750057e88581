"""API client for Google Drive."""

from __future__ import annotations

import logging
import random
import time
from typing import Any

import httpx

from .config import config
from .exceptions import (
    DriveAPIError,
    DriveAuthenticationError,
    DriveConfigError,
    DriveInvalidResponseError,
    DriveNetworkError,
    DriveNotFoundError,
    DrivePermissionError,
    DriveRateLimitError,
)
from .utils import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY

logger = logging.getLogger(__name__)

# Reasons Drive attaches to 403 responses that are really rate limits
RATE_LIMIT_REASONS = frozenset(
    {"rateLimitExceeded", "userRateLimitExceeded", "dailyLimitExceeded"}
)


def _extract_error(response: httpx.Response) -> tuple[str | None, str | None]:
    """Pull ``(message, reason)`` out of a Drive error body.

    Drive errors look like
    ``{"error": {"code": 403, "message": "...", "errors": [{"reason": "..."}]}}``.
    """
    try:
        if not response.content:
            return None, None
        data = response.json()
    except ValueError:
        return None, None

    if not isinstance(data, dict):
        return None, None

    error = data.get("error")
    if isinstance(error, str):
        return data.get("error_description") or error, None
    if not isinstance(error, dict):
        return None, None

    reason = None
    errors = error.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        reason = errors[0].get("reason")
    return error.get("message"), reason


class DriveClient:
    """Client for interacting with the Google Drive v3 API."""

    def __init__(
        self,
        access_token: str | None = None,
        api_url: str | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = 30.0,
    ):
        """Initialize Drive API client.

        Args:
            access_token: OAuth access token (uses config if not provided)
            api_url: Optional API URL (uses config if not provided)
            max_retries: Maximum number of retry attempts (default: 3)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Request timeout in seconds (default: 30.0)
        """
        self.access_token = access_token or config.access_token
        self.api_url = (api_url or config.api_url).rstrip("/")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

        if not self.access_token:
            raise DriveConfigError(
                "Access token not configured. Run 'pydrivedupes init' or set "
                "GDRIVE_ACCESS_TOKEN environment variable."
            )

        self._client: httpx.Client | None = None

    def __enter__(self) -> DriveClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        # Add jitter: +/- 25% of base delay
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    def _handle_http_error(
        self, e: httpx.HTTPStatusError, attempt: int
    ) -> tuple[DriveAPIError, bool]:
        """Map an HTTP error to a Drive exception and decide whether to retry.

        Args:
            e: The HTTP error exception
            attempt: Current attempt number

        Returns:
            Tuple of (exception to raise, should_retry)
        """
        status_code = e.response.status_code
        message, reason = _extract_error(e.response)
        can_retry = attempt < self.max_retries

        if status_code == 401:
            return (
                DriveAuthenticationError(
                    "Invalid or expired access token - run 'pydrivedupes init'"
                ),
                False,
            )
        if status_code == 429 or (status_code == 403 and reason in RATE_LIMIT_REASONS):
            return (
                DriveRateLimitError("Rate limit exceeded - please try again later"),
                can_retry,
            )
        if status_code == 403:
            detail = f": {message}" if message else ""
            return (DrivePermissionError(f"Access forbidden{detail}"), False)
        if status_code == 404:
            detail = f": {message}" if message else ""
            return (DriveNotFoundError(f"Resource not found{detail}"), False)

        error_msg = f"API request failed with status {status_code}"
        if message:
            error_msg = f"{error_msg}: {message}"
        return (DriveAPIError(error_msg), 500 <= status_code < 600 and can_retry)

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make an API request with retry logic.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data

        Raises:
            DriveAPIError: If the request fails after all retries
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        last_exception: Exception | None = None
        client = self._get_client()

        for attempt in range(self.max_retries + 1):
            try:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()

                content_type = response.headers.get("Content-Type", "")
                if response.content and "application/json" not in content_type:
                    raise DriveInvalidResponseError(
                        f"Unexpected response type: {content_type}"
                    )

                if response.content:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise DriveInvalidResponseError(
                            "Invalid JSON response from server"
                        ) from e
                return {}

            except httpx.HTTPStatusError as e:
                error, should_retry = self._handle_http_error(e, attempt)
                last_exception = error

                if should_retry:
                    retry_after = e.response.headers.get("Retry-After")
                    if retry_after and retry_after.isdigit():
                        delay = float(retry_after)
                    else:
                        delay = self._calculate_retry_delay(attempt)
                    logger.debug(
                        f"{method} {endpoint} failed ({error}), "
                        f"retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)
                    continue
                raise error from e
            except DriveAPIError:
                raise
            except httpx.RequestError as e:
                error = DriveNetworkError(f"Network error: {e}")
                last_exception = error
                if attempt < self.max_retries:
                    delay = self._calculate_retry_delay(attempt)
                    logger.debug(
                        f"{method} {endpoint} failed ({error}), "
                        f"retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)
                    continue
                raise error from e

        if last_exception:
            raise last_exception
        raise DriveAPIError("Request failed after all retry attempts")

    # =========================
    # File Operations
    # =========================

    def list_files(
        self,
        page_size: int = 1000,
        page_token: str | None = None,
        fields: str | None = None,
        query: str | None = None,
    ) -> Any:
        """List one page of files visible to the user.

        Args:
            page_size: Maximum number of files per page (Drive caps this at 1000)
            page_token: Token of the page to fetch (None for the first page)
            fields: Partial response selector, e.g.
                "nextPageToken, files(id, name, md5Checksum)"
            query: Drive search query, e.g. "trashed = false"

        Returns:
            Response with 'files' and, if more pages exist, 'nextPageToken'
        """
        params: dict[str, Any] = {"pageSize": page_size}

        if page_token:
            params["pageToken"] = page_token
        if fields:
            params["fields"] = fields
        if query:
            params["q"] = query

        return self._request("GET", "/files", params=params)

    def get_file(self, file_id: str, fields: str | None = None) -> Any:
        """Get metadata for a single file or folder.

        Args:
            file_id: Drive file ID
            fields: Partial response selector, e.g. "id, name, parents"

        Returns:
            File resource
        """
        params: dict[str, Any] = {}
        if fields:
            params["fields"] = fields
        return self._request("GET", f"/files/{file_id}", params=params or None)

    def get_about(self, fields: str = "user, storageQuota") -> Any:
        """Get information about the user and their storage quota.

        Args:
            fields: Partial response selector (required by the Drive API)

        Returns:
            About resource
        """
        return self._request("GET", "/about", params={"fields": fields})
