"""API client for GitHub."""

from __future__ import annotations

import logging
import random
import time
from typing import Any
from urllib.parse import quote

import httpx

from .config import config
from .exceptions import (
    GitHubAPIError,
    GitHubAuthenticationError,
    GitHubDownloadError,
    GitHubInvalidResponseError,
    GitHubNetworkError,
    GitHubNotFoundError,
    GitHubPermissionError,
    GitHubRateLimitError,
)
from .models import RepositoryTree
from .utils import DEFAULT_REF, decode_base64_content

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/vnd.github+json"
RAW_MEDIA_TYPE = "application/vnd.github.raw"
API_VERSION = "2022-11-28"
USER_AGENT = "md-downloader"


class GitHubClient:
    """Client for the parts of the GitHub REST API used to mirror files."""

    def __init__(
        self,
        access_token: str | None = None,
        api_url: str | None = None,
        max_retries: int = 0,
        retry_delay: float = 1.0,
        timeout: float | None = None,
    ):
        """Initialize GitHub API client.

        Args:
            access_token: Optional bearer token (uses GITHUB_TOKEN if not provided).
                Without a token only public repositories can be read.
            api_url: Optional API URL (uses config if not provided)
            max_retries: Maximum number of retry attempts (default: 0)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Request timeout in seconds (default: httpx default)
        """
        self.access_token = access_token or config.access_token
        self.api_url = (api_url or config.api_url).rstrip("/")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": JSON_MEDIA_TYPE,
                "User-Agent": USER_AGENT,
                "X-GitHub-Api-Version": API_VERSION,
            }
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            kwargs: dict[str, Any] = {"headers": headers, "follow_redirects": True}
            if self.timeout is not None:
                kwargs["timeout"] = httpx.Timeout(self.timeout)
            self._client = httpx.Client(**kwargs)
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _url(self, endpoint: str) -> str:
        """Build an absolute URL; locators returned by the API are used as-is."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.api_url}/{endpoint.lstrip('/')}"

    def _should_retry(self, exception: Exception, attempt: int) -> bool:
        """Determine if a request should be retried.

        Args:
            exception: The exception that occurred
            attempt: Current attempt number (0-based)

        Returns:
            True if the request should be retried, False otherwise
        """
        if attempt >= self.max_retries:
            return False

        # Transient failures only; auth and permission errors never heal
        return isinstance(exception, (GitHubNetworkError, GitHubRateLimitError))

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
    ) -> tuple[Exception, bool]:
        """Handle HTTP errors and determine if retry should occur.

        Args:
            e: The HTTP error exception
            attempt: Current attempt number

        Returns:
            Tuple of (exception to raise, should_retry)
        """
        response = e.response
        status_code = response.status_code

        # GitHub reports an exhausted primary rate limit as 403
        rate_limited = status_code == 429 or (
            status_code == 403
            and response.headers.get("X-RateLimit-Remaining") == "0"
        )

        if status_code == 401:
            raise GitHubAuthenticationError(
                "Invalid access token or unauthorized access"
            ) from e
        elif rate_limited:
            error = GitHubRateLimitError("Rate limit exceeded - please try again later")
            return (error, attempt < self.max_retries)
        elif status_code == 403:
            raise GitHubPermissionError(
                "Access forbidden - check your token permissions"
            ) from e
        elif status_code == 404:
            raise GitHubNotFoundError(f"Resource not found: {response.url}") from e

        error_msg = f"API request failed with status {status_code}"
        try:
            if response.content:
                error_data = response.json()
                if isinstance(error_data, dict) and error_data.get("message"):
                    error_msg = f"{error_msg}: {error_data['message']}"
        except ValueError:
            # Body is not JSON, keep the status-based message
            pass

        should_retry = 500 <= status_code < 600 and attempt < self.max_retries
        return (GitHubAPIError(error_msg), should_retry)

    def _send(
        self, method: str, endpoint: str, headers: dict[str, str] | None = None
    ) -> httpx.Response:
        """Send a request with retry logic and return the successful response.

        Raises:
            GitHubAPIError: If the request fails after all retries
        """
        url = self._url(endpoint)
        client = self._get_client()
        last_exception: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                logger.debug("%s %s (attempt %d)", method, url, attempt + 1)
                response = client.request(method, url, headers=headers)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as e:
                error, should_retry = self._handle_http_error(e, attempt)
                last_exception = error

                if should_retry:
                    retry_after = e.response.headers.get("Retry-After")
                    if retry_after and retry_after.isdigit():
                        delay = float(retry_after)
                    else:
                        delay = self._calculate_retry_delay(attempt)
                    logger.debug("Retrying %s in %.1fs: %s", url, delay, error)
                    time.sleep(delay)
                    continue
                raise error from e
            except httpx.RequestError as e:
                error = GitHubNetworkError(f"Network error: {e}")
                last_exception = error
                if self._should_retry(error, attempt):
                    delay = self._calculate_retry_delay(attempt)
                    logger.debug("Retrying %s in %.1fs: %s", url, delay, error)
                    time.sleep(delay)
                    continue
                raise error from e

        if last_exception:
            raise last_exception
        raise GitHubAPIError("Request failed after all retry attempts")

    def _request(self, method: str, endpoint: str) -> Any:
        """Make an API request and return the decoded JSON payload.

        Raises:
            GitHubInvalidResponseError: If the response body is not JSON
        """
        response = self._send(method, endpoint)
        try:
            return response.json()
        except ValueError as e:
            raise GitHubInvalidResponseError(
                f"Invalid JSON response from {response.url}"
            ) from e

    # =========================
    # Git Data Operations
    # =========================

    def get_tree(
        self, repo: str, ref: str = DEFAULT_REF, recursive: bool = True
    ) -> RepositoryTree:
        """List the tree of a repository at a ref.

        Args:
            repo: Repository identifier (``owner/name``)
            ref: Branch, tag or commit SHA (default: master)
            recursive: List all nested objects, not only the top level

        Returns:
            RepositoryTree with one TreeEntry per object

        Raises:
            GitHubAPIError: On network, HTTP or payload errors
        """
        endpoint = f"/repos/{repo}/git/trees/{quote(ref, safe='')}"
        if recursive:
            endpoint += "?recursive=1"
        data = self._request("GET", endpoint)
        return RepositoryTree.from_api_response(repo, ref, data)

    def get_blob_content(self, url: str) -> bytes:
        """Download a blob through the Git Data API and decode it.

        Args:
            url: Blob locator as returned in a tree listing

        Returns:
            Raw file content

        Raises:
            GitHubDownloadError: If the payload carries no decodable content
        """
        data = self._request("GET", url)
        if not isinstance(data, dict) or not isinstance(data.get("content"), str):
            raise GitHubDownloadError(f"Blob response without content: {url}")

        encoding = data.get("encoding", "base64")
        if encoding == "utf-8":
            return data["content"].encode("utf-8")
        if encoding != "base64":
            raise GitHubDownloadError(f"Unsupported blob encoding: {encoding}")

        try:
            return decode_base64_content(data["content"])
        except ValueError as e:
            raise GitHubDownloadError(f"Failed to decode blob {url}: {e}") from e

    def get_raw_content(self, repo: str, path: str, ref: str = DEFAULT_REF) -> bytes:
        """Download a file's raw bytes through the contents API.

        Args:
            repo: Repository identifier (``owner/name``)
            path: Repository-relative file path
            ref: Branch, tag or commit SHA (default: master)

        Returns:
            Raw file content
        """
        endpoint = f"/repos/{repo}/contents/{quote(path)}?ref={quote(ref, safe='')}"
        response = self._send("GET", endpoint, headers={"Accept": RAW_MEDIA_TYPE})
        return response.content
