"""Run configuration for a documentation sync."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..utils import (
    DEFAULT_EXTENSION,
    DEFAULT_HISTORY_FILE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REF,
    repo_basename,
    split_repo_values,
)
from .ignore import ExclusionConfig
from .modes import FetchStrategy

REPO_PLACEHOLDER = "{repo}"


@dataclass(frozen=True)
class SyncTarget:
    """One repository to synchronize and where its files and record go."""

    repo: str
    """Repository identifier (``owner/name``)"""

    ref: str
    """Git ref the tree is listed at"""

    output_root: Path
    """Root output directory; files land in ``output_root/<name>/``"""

    history_path: Path
    """Change record file for this repository"""

    record_prefix: str = ""
    """Key prefix of this repository's entries in a shared record"""

    @property
    def output_dir(self) -> Path:
        """Per-repository output directory (owner prefix dropped)."""
        return self.output_root / repo_basename(self.repo)


@dataclass(frozen=True)
class SyncConfig:
    """Settings for one run, built once at startup and passed explicitly.

    ``history`` may contain a ``{repo}`` placeholder which is replaced by
    the repository name, giving each repository its own record file.
    Without it all repositories share a single record, in which each
    repository's entries are keyed by ``<name>/<path>``.
    """

    repos: tuple[str, ...] = ()
    output_root: Path = Path(DEFAULT_OUTPUT_DIR)
    history: str = DEFAULT_HISTORY_FILE
    exclusions: ExclusionConfig = field(default_factory=ExclusionConfig)
    extension: str = DEFAULT_EXTENSION
    ref: str = DEFAULT_REF
    fetch_strategy: FetchStrategy = FetchStrategy.BLOB
    prune: bool = False
    dry_run: bool = False

    @classmethod
    def create(
        cls,
        repos: Iterable[str],
        ignore: Iterable[str] = (),
        output: str = DEFAULT_OUTPUT_DIR,
        history: str = DEFAULT_HISTORY_FILE,
        **kwargs,
    ) -> "SyncConfig":
        """Build a config from raw command line values.

        Repository arguments are split on commas, stripped of their URL
        prefix and de-duplicated in order; ignore entries are parsed into
        an ExclusionConfig.
        """
        normalized = tuple(dict.fromkeys(split_repo_values(repos)))
        return cls(
            repos=normalized,
            output_root=Path(output),
            history=history,
            exclusions=ExclusionConfig.parse(ignore),
            **kwargs,
        )

    def history_path_for(self, repo: str) -> Path:
        """Return the change record file used for ``repo``."""
        if REPO_PLACEHOLDER in self.history:
            return Path(self.history.replace(REPO_PLACEHOLDER, repo_basename(repo)))
        return Path(self.history)

    def shares_history(self, repo: str) -> bool:
        """True if another configured repository uses the same record file."""
        own = self.history_path_for(repo)
        return any(
            other != repo and self.history_path_for(other) == own
            for other in self.repos
        )

    def record_prefix_for(self, repo: str) -> str:
        """Return the key prefix of ``repo`` in its change record.

        Entries of a shared record are kept under the repository name, the
        same segment the output directory uses. An unshared record keeps
        plain paths.
        """
        if self.shares_history(repo):
            return f"{repo_basename(repo)}/"
        return ""

    def targets(self) -> list[SyncTarget]:
        """Expand the configured repositories into sync targets."""
        return [
            SyncTarget(
                repo=repo,
                ref=self.ref,
                output_root=self.output_root,
                history_path=self.history_path_for(repo),
                record_prefix=self.record_prefix_for(repo),
            )
            for repo in self.repos
        ]
