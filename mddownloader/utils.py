"""Utility functions for md-downloader."""

import base64
import binascii
import posixpath
from collections.abc import Iterable

# =============================================================================
# Defaults
# =============================================================================

# Branch reference every tree is listed at
DEFAULT_REF: str = "master"

# Extension of the files to synchronize
DEFAULT_EXTENSION: str = ".md"

DEFAULT_OUTPUT_DIR: str = "docs"
DEFAULT_HISTORY_FILE: str = "history.json"

# Prefixes stripped from repository arguments given as URLs
GITHUB_URL_PREFIXES: tuple[str, ...] = (
    "https://github.com/",
    "http://github.com/",
)


# =============================================================================
# Repository identifier utilities
# =============================================================================


def normalize_repo_identifier(repo: str) -> str:
    """Strip a known host URL prefix from a repository argument.

    Args:
        repo: Repository identifier or full URL

    Returns:
        Repository identifier in ``owner/name`` form

    Examples:
        >>> normalize_repo_identifier("https://github.com/owner/project")
        'owner/project'
        >>> normalize_repo_identifier("owner/project")
        'owner/project'
    """
    for prefix in GITHUB_URL_PREFIXES:
        if repo.startswith(prefix):
            return repo[len(prefix) :]
    return repo


def repo_basename(repo: str) -> str:
    """Return the repository name without its owner prefix.

    Examples:
        >>> repo_basename("owner/project")
        'project'
        >>> repo_basename("project")
        'project'
    """
    return posixpath.basename(repo.rstrip("/"))


def split_repo_values(values: Iterable[str]) -> list[str]:
    """Flatten repeated and comma-separated ``--repo`` values.

    Empty items are dropped and URL prefixes are stripped.

    Examples:
        >>> split_repo_values(["a/b,c/d", "https://github.com/e/f"])
        ['a/b', 'c/d', 'e/f']
    """
    repos = []
    for value in values:
        for item in value.split(","):
            item = item.strip()
            if item:
                repos.append(normalize_repo_identifier(item))
    return repos


# =============================================================================
# File utilities
# =============================================================================


def has_extension(path: str, extension: str) -> bool:
    """Check whether the final path component ends with ``extension``.

    The comparison is case-sensitive and only looks at the last suffix,
    so ``guide.md`` matches ``.md`` but ``guide.MD`` and ``guide.md.bak``
    do not. A dot file such as ``.md`` counts as having that extension.

    Examples:
        >>> has_extension("docs/guide.md", ".md")
        True
        >>> has_extension("README.txt", ".md")
        False
    """
    name = posixpath.basename(path)
    dot = name.rfind(".")
    if dot < 0:
        return False
    return name[dot:] == extension


def decode_base64_content(content: str) -> bytes:
    """Decode the base64 ``content`` field of a blob response.

    GitHub wraps the encoded content at 60 columns; whitespace is removed
    before strict decoding.

    Raises:
        ValueError: If the content is not valid base64
    """
    compact = "".join(content.split())
    try:
        return base64.b64decode(compact, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 content: {e}") from e
