"""Fetch and write operations used by the sync engine."""

import logging
from pathlib import Path, PurePosixPath

from ..api import GitHubClient
from ..models import TreeEntry
from ..utils import DEFAULT_REF, repo_basename
from .modes import FetchStrategy

logger = logging.getLogger(__name__)


class SyncOperations:
    """Retrieves file content with the configured strategy and writes it out."""

    def __init__(
        self, client: GitHubClient, strategy: FetchStrategy = FetchStrategy.BLOB
    ):
        """Initialize sync operations.

        Args:
            client: GitHub API client
            strategy: How file content is retrieved
        """
        self.client = client
        self.strategy = strategy

    def fetch(self, entry: TreeEntry, repo: str, ref: str = DEFAULT_REF) -> bytes:
        """Retrieve the content of one tree entry.

        Args:
            entry: Tree entry of the file
            repo: Repository identifier
            ref: Ref the tree was listed at (used by the raw strategy)

        Returns:
            File content, byte-identical to the upstream file

        Raises:
            GitHubAPIError: If the content cannot be retrieved or decoded
        """
        if self.strategy == FetchStrategy.RAW:
            return self.client.get_raw_content(repo, entry.path, ref)

        url = entry.url or f"/repos/{repo}/git/blobs/{entry.sha}"
        return self.client.get_blob_content(url)

    def materialize(
        self, output_root: Path, repo: str, path: str, content: bytes
    ) -> Path:
        """Write file content below the repository's output directory.

        Creates ``output_root/<repo name>/`` and any parent directories of
        ``path``, and overwrites an existing file.

        Args:
            output_root: Root output directory
            repo: Repository identifier; only its name is used
            path: Repository-relative file path
            content: File content

        Returns:
            Path the content was written to

        Raises:
            ValueError: If ``path`` would leave the repository directory
            OSError: If a directory or the file cannot be written
        """
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Refusing to write outside output directory: {path}")

        local_path = Path(output_root) / repo_basename(repo) / Path(*relative.parts)
        local_path.parent.mkdir(parents=True, exist_ok=True)
        local_path.write_bytes(content)
        logger.debug(f"Wrote {len(content)} bytes to {local_path}")
        return local_path
