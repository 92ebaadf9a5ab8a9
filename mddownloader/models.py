"""Data models for GitHub API responses."""

from dataclasses import dataclass, field
from typing import Any

from .exceptions import GitHubInvalidResponseError

SYMLINK_MODE = "120000"
"""Git file mode of a symbolic link (stored as a blob holding the target)"""


@dataclass
class TreeEntry:
    """One object in a recursive git tree listing."""

    path: str
    """Repository-relative path (forward slashes)"""

    type: str
    """Object type: "blob", "tree" or "commit" (submodule)"""

    sha: str
    """Git object SHA, changes iff the content changes"""

    url: str = ""
    """API locator of the object (blob endpoint for files)"""

    mode: str = ""
    """File mode as reported by git (e.g. "100644")"""

    @property
    def is_file(self) -> bool:
        """True for regular file objects.

        Symlinks are blobs too, but their content is the link target, so
        they are not treated as files.
        """
        return self.type == "blob" and self.mode != SYMLINK_MODE

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "TreeEntry":
        """Create a TreeEntry from one element of the ``tree`` array.

        Raises:
            GitHubInvalidResponseError: If a required field is missing or
                is not a string
        """
        if not isinstance(data, dict) or not all(
            isinstance(data.get(key), str) for key in ("path", "type", "sha")
        ):
            raise GitHubInvalidResponseError(f"Malformed tree entry: {data!r}")
        return cls(
            path=data["path"],
            type=data["type"],
            sha=data["sha"],
            url=data.get("url") or "",
            mode=data.get("mode") or "",
        )


@dataclass
class RepositoryTree:
    """Recursive tree of a repository at one ref."""

    repo: str
    ref: str
    entries: list[TreeEntry] = field(default_factory=list)
    truncated: bool = False
    """GitHub sets this when the listing exceeded the API limits"""

    @classmethod
    def from_api_response(
        cls, repo: str, ref: str, data: Any
    ) -> "RepositoryTree":
        """Parse the payload of ``GET /repos/{repo}/git/trees/{ref}``.

        Raises:
            GitHubInvalidResponseError: If the payload has no ``tree`` array
                or one of its items is malformed
        """
        if not isinstance(data, dict) or not isinstance(data.get("tree"), list):
            raise GitHubInvalidResponseError(
                f"Invalid tree payload for {repo}@{ref}"
            )
        return cls(
            repo=repo,
            ref=ref,
            entries=[TreeEntry.from_api_response(item) for item in data["tree"]],
            truncated=bool(data.get("truncated", False)),
        )
