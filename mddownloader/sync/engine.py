"""Core sync engine for mirroring documentation files."""

import logging
import time
from typing import Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..api import GitHubClient
from ..exceptions import GitHubAPIError
from ..models import RepositoryTree, TreeEntry
from ..output import OutputFormatter
from .comparator import FileComparator, SyncAction, SyncDecision
from .operations import SyncOperations
from .scanner import TreeScanner
from .state import ChangeRecord, ChangeRecordStore
from .target import SyncConfig, SyncTarget

logger = logging.getLogger(__name__)


class SyncEngine:
    """Core sync engine that mirrors files from repositories to disk.

    Repositories are processed one at a time and files in listing order.
    Failures are handled where they occur: a repository whose tree cannot
    be listed is skipped, a file that cannot be fetched or written is
    marked as failed in the change record and retried on the next run.
    """

    def __init__(
        self,
        client: GitHubClient,
        output: Optional[OutputFormatter] = None,
        store: Optional[ChangeRecordStore] = None,
    ):
        """Initialize sync engine.

        Args:
            client: GitHub API client
            output: Output formatter for displaying progress/status
            store: Change record store (default: JSON files)
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.store = store or ChangeRecordStore()

    def run(self, config: SyncConfig) -> dict[str, dict]:
        """Synchronize every configured repository.

        Args:
            config: Run configuration

        Returns:
            Dictionary mapping repository identifier to its statistics

        Examples:
            >>> engine = SyncEngine(GitHubClient())
            >>> config = SyncConfig.create(repos=["owner/project"])
            >>> results = engine.run(config)
            >>> print(results["owner/project"]["fetched"])
        """
        operations = SyncOperations(self.client, config.fetch_strategy)
        comparator = FileComparator(config.exclusions)
        scanner = TreeScanner(config.extension)

        results = {}
        for target in config.targets():
            results[target.repo] = self.sync_repository(
                target, config, operations, comparator, scanner
            )
        return results

    def sync_repository(
        self,
        target: SyncTarget,
        config: SyncConfig,
        operations: Optional[SyncOperations] = None,
        comparator: Optional[FileComparator] = None,
        scanner: Optional[TreeScanner] = None,
    ) -> dict:
        """Synchronize a single repository.

        Args:
            target: Repository to synchronize
            config: Run configuration
            operations: Fetch/write operations (built from config if omitted)
            comparator: File comparator (built from config if omitted)
            scanner: Tree scanner (built from config if omitted)

        Returns:
            Dictionary with sync statistics
        """
        operations = operations or SyncOperations(self.client, config.fetch_strategy)
        comparator = comparator or FileComparator(config.exclusions)
        scanner = scanner or TreeScanner(config.extension)

        stats = self._create_empty_stats()
        start_time = time.time()

        self.output.info(f"Syncing: {target.repo}@{target.ref} -> {target.output_dir}")
        if config.dry_run:
            self.output.info("Dry run: No files will be written")

        # Step 1: List the tree; without it nothing is touched
        try:
            tree = self._list_tree(target)
        except GitHubAPIError as e:
            self.output.error(f"Failed to list files of {target.repo}: {e}")
            stats["error"] = str(e)
            return stats

        if tree.truncated:
            self.output.warning(
                f"Tree listing of {target.repo} was truncated by GitHub, "
                "some files will not be synchronized"
            )

        # Step 2: Load the change record, narrowed to this repository's entries
        full_record = self.store.load(target.history_path)
        record = full_record.scope(target.record_prefix)

        # Step 3: Decide and execute per candidate file
        candidates = scanner.scan(tree.entries)
        stats["candidates"] = len(candidates)

        try:
            for entry in candidates:
                decision = comparator.decide(target.repo, entry.path, entry.sha, record)
                self._execute_decision(
                    decision, entry, target, record, operations, stats, config.dry_run
                )
        except KeyboardInterrupt:
            self.output.warning(f"\nSync of {target.repo} cancelled by user")
            raise

        # Step 4: Optionally drop entries for files that disappeared upstream
        if config.prune:
            self._prune_record(record, candidates, stats)

        # Step 5: Persist the complete record
        full_record.replace_scope(target.record_prefix, record)
        if config.dry_run:
            logger.debug("Dry run, change record not saved")
        elif not self.store.save(target.history_path, full_record):
            self.output.error(f"Failed to save change record {target.history_path}")
            stats["error"] = f"failed to save {target.history_path}"

        logger.debug(
            "Sync of %s took %.2fs", target.repo, time.time() - start_time
        )
        self._display_summary(target, stats, config.dry_run)
        return stats

    def _create_empty_stats(self) -> dict:
        """Create an empty statistics dictionary.

        Returns:
            Dictionary with zero counts for all stat categories
        """
        return {
            "candidates": 0,
            "fetched": 0,
            "would_fetch": 0,
            "failed": 0,
            "skipped": 0,
            "excluded": 0,
            "pruned": 0,
            "error": None,
        }

    def _list_tree(self, target: SyncTarget) -> RepositoryTree:
        """List the repository tree behind a spinner.

        Raises:
            GitHubAPIError: If the tree cannot be listed
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet or self.output.json_output,
        ) as progress:
            task = progress.add_task(f"Listing {target.repo}...", total=None)
            tree = self.client.get_tree(target.repo, target.ref)
            progress.update(
                task, description=f"Found {len(tree.entries)} object(s)"
            )
        logger.debug(
            "Listed %d objects in %s@%s", len(tree.entries), target.repo, target.ref
        )
        return tree

    def _execute_decision(
        self,
        decision: SyncDecision,
        entry: TreeEntry,
        target: SyncTarget,
        record: ChangeRecord,
        operations: SyncOperations,
        stats: dict,
        dry_run: bool,
    ) -> None:
        """Execute a single decision and update record and stats.

        Args:
            decision: Decision for the file
            entry: Tree entry of the file
            target: Repository being synchronized
            record: Change record (modified in place)
            operations: Fetch/write operations
            stats: Statistics dictionary (modified in place)
            dry_run: Only report what would be fetched
        """
        path = decision.relative_path

        if decision.action == SyncAction.SKIP_EXCLUDED:
            self.output.info(f"Ignoring file: {path}")
            stats["excluded"] += 1
            return

        if decision.action == SyncAction.SKIP_CURRENT:
            self.output.info(f"Skipping file: {path} (already up to date)")
            stats["skipped"] += 1
            return

        if dry_run:
            self.output.info(f"Would download: {path} ({decision.reason})")
            stats["would_fetch"] += 1
            return

        self.output.info(f"Downloading file: {path} ({decision.reason})")

        try:
            content = operations.fetch(entry, target.repo, target.ref)
        except GitHubAPIError as e:
            self.output.error(f"Failed to download {path}: {e}")
            record.mark_failed(path)
            stats["failed"] += 1
            return

        try:
            local_path = operations.materialize(
                target.output_root, target.repo, path, content
            )
        except (OSError, ValueError) as e:
            self.output.error(f"Failed to save {path}: {e}")
            record.mark_failed(path)
            stats["failed"] += 1
            return

        record.mark_synced(path, decision.sha)
        stats["fetched"] += 1
        self.output.success(f"File downloaded: {local_path}")

    def _prune_record(
        self, record: ChangeRecord, candidates: list[TreeEntry], stats: dict
    ) -> None:
        """Remove record entries for files no longer present upstream.

        ``record`` only holds the entries of the repository being synced,
        so other repositories sharing the file are left alone.
        """
        removed = record.prune(entry.path for entry in candidates)
        for path in removed:
            logger.debug("Pruned record entry %s", path)
        stats["pruned"] = len(removed)
        if removed:
            self.output.info(f"Pruned {len(removed)} stale record entries")

    def _display_summary(self, target: SyncTarget, stats: dict, dry_run: bool) -> None:
        """Display sync summary.

        Args:
            target: Repository that was synchronized
            stats: Statistics dictionary
            dry_run: Whether this was a dry run
        """
        self.output.print("")
        if dry_run:
            self.output.success(f"Dry run of {target.repo} complete!")
        else:
            self.output.success(f"Sync of {target.repo} complete!")

        verb = "Would download" if dry_run else "Downloaded"
        count = stats["would_fetch"] if dry_run else stats["fetched"]
        self.output.info(f"  {verb}: {count}")
        self.output.info(f"  Up to date: {stats['skipped']}")
        if stats["excluded"] > 0:
            self.output.info(f"  Ignored: {stats['excluded']}")
        if stats["pruned"] > 0:
            self.output.info(f"  Pruned: {stats['pruned']}")
        if stats["failed"] > 0:
            self.output.warning(f"  Failed: {stats['failed']} (retried on next run)")
        self.output.print("")
