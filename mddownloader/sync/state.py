"""Change record tracking which files were synchronized at which content SHA.

The record maps repository-relative paths to the outcome of the most recent
attempt: either the git blob SHA that was written locally, or a failure
marker which forces the file to be fetched again on the next run.
"""

import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

ERROR_MARKER = "ERROR"
"""On-disk encoding of a failed entry. Git SHAs are hex and never collide."""


@dataclass(frozen=True)
class Synced:
    """The file was written locally at this content SHA."""

    sha: str


@dataclass(frozen=True)
class Failed:
    """The last attempt to fetch or write the file failed."""


RecordEntry = Union[Synced, Failed]


@dataclass
class ChangeRecord:
    """In-memory path -> entry mapping for one sync pass."""

    files: dict[str, RecordEntry] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def get(self, path: str) -> Optional[RecordEntry]:
        """Return the entry for ``path`` or None if it was never attempted."""
        return self.files.get(path)

    def mark_synced(self, path: str, sha: str) -> None:
        self.files[path] = Synced(sha)

    def mark_failed(self, path: str) -> None:
        self.files[path] = Failed()

    def prune(self, seen_paths: Iterable[str]) -> list[str]:
        """Remove entries whose path is not in ``seen_paths``.

        Args:
            seen_paths: Paths that still exist upstream

        Returns:
            Sorted list of removed paths
        """
        keep = set(seen_paths)
        removed = sorted(path for path in self.files if path not in keep)
        for path in removed:
            del self.files[path]
        return removed

    def scope(self, prefix: str) -> "ChangeRecord":
        """Return the entries stored under ``prefix``, with the prefix removed.

        A record shared by several repositories keeps each repository's
        entries under ``<name>/`` so equal paths do not collide.

        Args:
            prefix: Key prefix of one repository ("" for an unshared record)

        Returns:
            The record itself for an empty prefix, otherwise a new record
        """
        if not prefix:
            return self
        return ChangeRecord(
            files={
                path[len(prefix):]: entry
                for path, entry in self.files.items()
                if path.startswith(prefix)
            }
        )

    def replace_scope(self, prefix: str, scoped: "ChangeRecord") -> None:
        """Replace the entries under ``prefix`` with those of ``scoped``."""
        if not prefix:
            if scoped is not self:
                self.files = dict(scoped.files)
            return
        for path in [p for p in self.files if p.startswith(prefix)]:
            del self.files[path]
        for path, entry in scoped.files.items():
            self.files[prefix + path] = entry

    def to_dict(self) -> dict:
        """Convert record to dictionary for JSON serialization."""
        files = {}
        for path in sorted(self.files):
            entry = self.files[path]
            files[path] = entry.sha if isinstance(entry, Synced) else ERROR_MARKER
        return {"files": files}

    @classmethod
    def from_dict(cls, data: object) -> "ChangeRecord":
        """Create a ChangeRecord from its JSON form.

        Raises:
            ValueError: If the data does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("record is not a JSON object")
        raw_files = data.get("files")
        if raw_files is None:
            # Written by an interrupted run or by hand; nothing recorded yet
            return cls()
        if not isinstance(raw_files, dict):
            raise ValueError("'files' is not a JSON object")

        files: dict[str, RecordEntry] = {}
        for path, value in raw_files.items():
            if not isinstance(value, str) or not value:
                raise ValueError(f"invalid status for {path!r}: {value!r}")
            files[path] = Failed() if value == ERROR_MARKER else Synced(value)
        return cls(files=files)


class ChangeRecordStore:
    """Loads and persists change records as JSON files.

    Neither operation raises: a record that cannot be read is replaced by an
    empty one (every file is fetched again), and a record that cannot be
    written is reported so the caller can continue with other repositories.
    """

    def load(self, locator: Path) -> ChangeRecord:
        """Load the change record stored at ``locator``.

        Args:
            locator: Path of the record file

        Returns:
            The stored record, or an empty record if the file is missing or
            cannot be parsed
        """
        try:
            with open(locator, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"No change record at {locator}, starting empty")
            return ChangeRecord()
        except (OSError, ValueError) as e:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            logger.warning(f"Failed to read change record {locator}: {e}")
            return ChangeRecord()

        try:
            record = ChangeRecord.from_dict(data)
        except ValueError as e:
            logger.warning(f"Failed to parse change record {locator}: {e}")
            return ChangeRecord()

        logger.debug(f"Loaded change record with {len(record)} entries from {locator}")
        return record

    def save(self, locator: Path, record: ChangeRecord) -> bool:
        """Overwrite ``locator`` with the complete record.

        The record is written to a temporary file next to the target and
        renamed over it, so readers never see a partially written record.

        Args:
            locator: Path of the record file
            record: Record to persist

        Returns:
            True if the record was saved, False otherwise
        """
        locator = Path(locator)
        tmp_name: Optional[str] = None
        try:
            locator.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=locator.parent, prefix=f".{locator.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, indent=4)
                f.write("\n")
            os.replace(tmp_name, locator)
        except OSError as e:
            logger.error(f"Failed to save change record {locator}: {e}")
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            return False

        logger.debug(f"Saved change record with {len(record)} entries to {locator}")
        return True
