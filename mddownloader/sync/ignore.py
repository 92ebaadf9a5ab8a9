"""Per-repository path exclusions.

Exclusions are given on the command line as ``repo:path1,path2,...``.
Matching is exact: no globbing, no prefix matching and no whitespace
trimming, so ``docs/a.md`` excludes only that file.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..utils import normalize_repo_identifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExclusionConfig:
    """Immutable mapping of repository identifier to excluded paths."""

    paths: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def parse(cls, raw_entries: Iterable[str]) -> "ExclusionConfig":
        """Parse ``repo:path1,path2,...`` entries.

        Entries without a colon are logged and skipped; the remaining
        entries are still parsed. When a repository appears more than
        once, the last entry wins.

        Args:
            raw_entries: Raw ``--ignore`` values

        Returns:
            ExclusionConfig

        Examples:
            >>> config = ExclusionConfig.parse(["owner/repo:a.md,docs/b.md"])
            >>> config.is_excluded("owner/repo", "docs/b.md")
            True
        """
        parsed: dict[str, frozenset[str]] = {}
        for raw in raw_entries:
            # Strip the URL prefix first, its scheme contains a colon
            repo, sep, path_list = normalize_repo_identifier(raw).partition(":")
            if not sep:
                logger.error(f"Invalid ignore entry (expected repo:paths): {raw}")
                continue
            parsed[repo] = frozenset(path_list.split(","))
            logger.debug(f"Excluding {len(parsed[repo])} path(s) in {repo}")
        return cls(paths=MappingProxyType(parsed))

    def is_excluded(self, repo: str, path: str) -> bool:
        """Check whether ``path`` is excluded for ``repo``."""
        excluded = self.paths.get(repo)
        return excluded is not None and path in excluded
