"""Sync engine for md-downloader - incremental mirroring of repository files."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .engine import SyncEngine
from .ignore import ExclusionConfig
from .modes import FetchStrategy
from .operations import SyncOperations
from .scanner import TreeScanner
from .state import (
    ERROR_MARKER,
    ChangeRecord,
    ChangeRecordStore,
    Failed,
    RecordEntry,
    Synced,
)
from .target import SyncConfig, SyncTarget

__all__ = [
    "SyncEngine",
    "SyncConfig",
    "SyncTarget",
    "SyncOperations",
    "FetchStrategy",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "TreeScanner",
    "ExclusionConfig",
    "ChangeRecord",
    "ChangeRecordStore",
    "RecordEntry",
    "Synced",
    "Failed",
    "ERROR_MARKER",
]
