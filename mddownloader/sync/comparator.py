"""Decides which remote files need to be fetched."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .ignore import ExclusionConfig
from .state import ChangeRecord, Failed, RecordEntry, Synced


class SyncAction(str, Enum):
    """Actions that can be taken for a remote file."""

    FETCH = "fetch"
    """Download the file and update the record"""

    SKIP_CURRENT = "skip_current"
    """Local copy is up to date (record untouched)"""

    SKIP_EXCLUDED = "skip_excluded"
    """Path is excluded for this repository (record untouched)"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    relative_path: str
    """Repository-relative path of the file"""

    sha: str
    """Current content SHA of the remote file"""

    previous: Optional[RecordEntry] = None
    """Record entry before this run (None if never attempted)"""


class FileComparator:
    """Compares remote content SHAs against the change record."""

    def __init__(self, exclusions: Optional[ExclusionConfig] = None):
        """Initialize file comparator.

        Args:
            exclusions: Per-repository excluded paths
        """
        self.exclusions = exclusions or ExclusionConfig()

    def decide(
        self, repo: str, path: str, sha: str, record: ChangeRecord
    ) -> SyncDecision:
        """Decide whether one remote file must be fetched.

        Exclusion is checked before the record, so an excluded file is never
        fetched even when it changed upstream.

        Args:
            repo: Repository identifier
            path: Repository-relative path
            sha: Current content SHA
            record: Change record of the repository

        Returns:
            SyncDecision for this file
        """
        previous = record.get(path)

        if self.exclusions.is_excluded(repo, path):
            return SyncDecision(
                action=SyncAction.SKIP_EXCLUDED,
                reason="Excluded by ignore configuration",
                relative_path=path,
                sha=sha,
                previous=previous,
            )

        if previous is None:
            return SyncDecision(
                action=SyncAction.FETCH,
                reason="New remote file",
                relative_path=path,
                sha=sha,
            )

        if isinstance(previous, Failed):
            return SyncDecision(
                action=SyncAction.FETCH,
                reason="Previous attempt failed",
                relative_path=path,
                sha=sha,
                previous=previous,
            )

        if isinstance(previous, Synced) and previous.sha != sha:
            return SyncDecision(
                action=SyncAction.FETCH,
                reason="Remote file changed",
                relative_path=path,
                sha=sha,
                previous=previous,
            )

        return SyncDecision(
            action=SyncAction.SKIP_CURRENT,
            reason="Already up to date",
            relative_path=path,
            sha=sha,
            previous=previous,
        )
