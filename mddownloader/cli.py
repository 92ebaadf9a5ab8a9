"""CLI interface for md-downloader."""

import logging
from typing import Optional

import click

from . import __version__
from .api import GitHubClient
from .output import OutputFormatter
from .sync import FetchStrategy, SyncConfig, SyncEngine
from .utils import (
    DEFAULT_EXTENSION,
    DEFAULT_HISTORY_FILE,
    DEFAULT_OUTPUT_DIR,
)

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Configure logging based on the verbose flag."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("mddownloader").setLevel(logging.DEBUG)
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
    else:
        # Only record warnings and errors are of interest by default
        logging.basicConfig(
            level=logging.WARNING,
            format="%(levelname)s: %(message)s",
        )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--access-token",
    envvar="GITHUB_TOKEN",
    default="",
    help="GitHub access token (env: GITHUB_TOKEN)",
)
@click.option(
    "--repo",
    "repos",
    multiple=True,
    help="Repository (owner/name or https://github.com/owner/name); repeatable",
)
@click.option(
    "--output",
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Output directory",
)
@click.option(
    "--history",
    default=DEFAULT_HISTORY_FILE,
    show_default=True,
    help="Change record file; {repo} is replaced by the repository name",
)
@click.option(
    "--ignore",
    multiple=True,
    help="Paths to skip, as repo:path1,path2,...; repeatable",
)
@click.option(
    "--extension",
    default=DEFAULT_EXTENSION,
    show_default=True,
    help="Extension of the files to download (case-sensitive)",
)
@click.option(
    "--fetch-strategy",
    type=click.Choice([s.value for s in FetchStrategy]),
    default=FetchStrategy.BLOB.value,
    show_default=True,
    help="Download through the blob API (base64) or the raw contents API",
)
@click.option(
    "--prune",
    is_flag=True,
    help="Drop change record entries of files removed upstream",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be downloaded without writing"
)
@click.option(
    "--max-retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retries for rate limits, server and network errors",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Request timeout in seconds (default: httpx default)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__)
def main(
    access_token: str,
    repos: tuple[str, ...],
    output: str,
    history: str,
    ignore: tuple[str, ...],
    extension: str,
    fetch_strategy: str,
    prune: bool,
    dry_run: bool,
    max_retries: int,
    timeout: Optional[float],
    quiet: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """md-downloader - download .md files from GitHub repositories.

    Only files that are new or changed since the previous run are
    downloaded; the content SHA of every written file is kept in the
    history file. Files that failed are downloaded again on the next run.

    \b
    Examples:
        md-downloader --repo owner/project
        md-downloader --repo owner/a --repo owner/b --output site/docs
        md-downloader --repo owner/a --ignore owner/a:CHANGELOG.md,docs/old.md
        md-downloader --repo owner/a --repo owner/b --history ".history/{repo}.json"
    """
    configure_logging(verbose)
    out = OutputFormatter(json_output=json_output, quiet=quiet)

    sync_config = SyncConfig.create(
        repos=repos,
        ignore=ignore,
        output=output,
        history=history,
        extension=extension,
        fetch_strategy=FetchStrategy.from_string(fetch_strategy),
        prune=prune,
        dry_run=dry_run,
    )

    if not sync_config.repos:
        out.warning("No repositories given, use --repo owner/name")
        return

    logger.debug(
        "Syncing %d repositories to %s",
        len(sync_config.repos),
        sync_config.output_root,
    )

    client = GitHubClient(
        access_token=access_token or None,
        max_retries=max_retries,
        timeout=timeout,
    )
    try:
        engine = SyncEngine(client, out)
        results = engine.run(sync_config)
    finally:
        client.close()

    if json_output:
        out.output_json(results)


if __name__ == "__main__":
    main()
