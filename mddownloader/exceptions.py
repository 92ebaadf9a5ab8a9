"""Exceptions raised by the GitHub API client and the sync engine."""


class GitHubAPIError(Exception):
    """Base exception for all GitHub API errors."""


class GitHubAuthenticationError(GitHubAPIError):
    """Raised when the access token is rejected (HTTP 401)."""


class GitHubPermissionError(GitHubAPIError):
    """Raised when access to a resource is forbidden (HTTP 403)."""


class GitHubNotFoundError(GitHubAPIError):
    """Raised when a repository, ref or object does not exist (HTTP 404)."""


class GitHubRateLimitError(GitHubAPIError):
    """Raised when the API rate limit is exceeded (HTTP 429)."""


class GitHubNetworkError(GitHubAPIError):
    """Raised on connection failures and timeouts."""


class GitHubInvalidResponseError(GitHubAPIError):
    """Raised when the server returns a payload that cannot be parsed."""


class GitHubDownloadError(GitHubAPIError):
    """Raised when file content cannot be retrieved or decoded."""
