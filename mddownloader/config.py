"""Environment-derived settings for md-downloader."""

import os
from typing import Optional

DEFAULT_API_URL = "https://api.github.com"


class Config:
    """Client settings read from the environment.

    Values passed on the command line take precedence; this object only
    provides the fallbacks used by ``GitHubClient``.
    """

    TOKEN_ENV_VAR = "GITHUB_TOKEN"
    API_URL_ENV_VAR = "GITHUB_API_URL"

    @property
    def access_token(self) -> Optional[str]:
        """Access token from ``GITHUB_TOKEN`` (None if unset or empty)."""
        token = os.environ.get(self.TOKEN_ENV_VAR, "")
        return token or None

    @property
    def api_url(self) -> str:
        """API base URL, without trailing slash."""
        url = os.environ.get(self.API_URL_ENV_VAR, "") or DEFAULT_API_URL
        return url.rstrip("/")


config = Config()
