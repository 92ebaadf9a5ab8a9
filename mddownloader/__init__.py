"""md-downloader - mirror Markdown files from GitHub repositories."""

from .api import GitHubClient
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
from .models import RepositoryTree, TreeEntry
from .utils import normalize_repo_identifier, repo_basename

__version__ = "0.1.0"

__all__ = [
    "GitHubClient",
    "GitHubAPIError",
    "GitHubAuthenticationError",
    "GitHubDownloadError",
    "GitHubInvalidResponseError",
    "GitHubNetworkError",
    "GitHubNotFoundError",
    "GitHubPermissionError",
    "GitHubRateLimitError",
    "RepositoryTree",
    "TreeEntry",
    "normalize_repo_identifier",
    "repo_basename",
]
