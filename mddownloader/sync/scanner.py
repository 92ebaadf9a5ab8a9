"""Selects the tree entries that are candidates for synchronization."""

import logging
from collections.abc import Iterable

from ..models import TreeEntry
from ..utils import DEFAULT_EXTENSION, has_extension

logger = logging.getLogger(__name__)


class TreeScanner:
    """Filters a tree listing down to regular files with one extension.

    Examples:
        >>> scanner = TreeScanner(".md")
        >>> candidates = scanner.scan(tree.entries)
    """

    def __init__(self, extension: str = DEFAULT_EXTENSION):
        """Initialize tree scanner.

        Args:
            extension: Case-sensitive file suffix to keep, including the dot
        """
        self.extension = extension

    def is_candidate(self, entry: TreeEntry) -> bool:
        """Check if an entry is a regular file with the target extension."""
        return entry.is_file and has_extension(entry.path, self.extension)

    def scan(self, entries: Iterable[TreeEntry]) -> list[TreeEntry]:
        """Return the candidate entries in listing order.

        Args:
            entries: Tree entries from the API

        Returns:
            List of TreeEntry objects to run through the comparator
        """
        candidates = []
        skipped = 0
        for entry in entries:
            if self.is_candidate(entry):
                candidates.append(entry)
            else:
                skipped += 1
        logger.debug(
            f"Found {len(candidates)} {self.extension} file(s), "
            f"ignored {skipped} other entries"
        )
        return candidates
