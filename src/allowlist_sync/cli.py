"""Command line interface for Allowlist Sync."""

import asyncio
import logging
import sys
from typing import List, Optional, Sequence, Tuple

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .api_clients.allowlist_client import AllowlistAPIClient
from .cli_error_display import CLIErrorDisplay
from .config import ConfigurationError, SyncConfig
from .services.allowlist_sync import AllowlistSynchronizer, SyncReport
from .services.document_collector import Document, DocumentCollector

logger = logging.getLogger(__name__)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    # httpx logs every request at INFO
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


async def synchronize(config: SyncConfig, documents: Sequence[Document]) -> SyncReport:
    """Run one synchronization against the configured engine."""
    async with AllowlistAPIClient(
        server_url=config.host,
        admin_secret=config.admin_secret,
        role=config.role,
        timeout=config.timeout,
    ) as client:
        synchronizer = AllowlistSynchronizer(client, config.collection_name)
        return await synchronizer.run(documents)


def _display_documents(documents: List[Document]) -> None:
    table = Table(title=f"Query documents ({len(documents)})")
    table.add_column("Query name", style="cyan", overflow="fold")
    table.add_column("Path", style="dim", overflow="fold")
    for document in documents:
        table.add_row(document.name, str(document.path))
    console.print(table)


def _display_report(report: SyncReport) -> None:
    existed = "existing" if report.outcome.pre_existed else "new"
    console.print(
        f"✅ Synchronized {report.documents_total} query document(s) into "
        f"{existed} collection '{report.collection_name}'",
        style="green",
    )
    console.print(
        f"   {report.documents_added} added, "
        f"{report.documents_already_present} already present, "
        f"allowlist activation: {report.activation.value}",
        style="dim",
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--host", help="GraphQL engine URL [env: INPUT_HOST]")
@click.option("--key", help="Admin secret [env: INPUT_KEY]")
@click.option(
    "--path",
    "path_pattern",
    help="Glob of query documents [env: INPUT_PATH] (default: <workspace>/**/*.gql)",
)
@click.option(
    "--workspace",
    type=click.Path(file_okay=False),
    help="Repository checkout root [env: GITHUB_WORKSPACE]",
)
@click.option(
    "--repository",
    help="Repository identifier used in query names [env: GITHUB_REPOSITORY]",
)
@click.option("--collection", "collection_name", help="Query collection name")
@click.option(
    "--no-metadata",
    is_flag=True,
    help="Register queries under their bare file name",
)
@click.option(
    "--exclude",
    "exclude_patterns",
    multiple=True,
    help="Gitignore-style pattern to skip (repeatable, default: node_modules/)",
)
@click.option("--timeout", type=float, help="HTTP timeout in seconds")
@click.option(
    "--dry-run", is_flag=True, help="List the query documents without calling the API"
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="allowlist-sync")
def main(
    host: Optional[str],
    key: Optional[str],
    path_pattern: Optional[str],
    workspace: Optional[str],
    repository: Optional[str],
    collection_name: Optional[str],
    no_metadata: bool,
    exclude_patterns: Tuple[str, ...],
    timeout: Optional[float],
    dry_run: bool,
    verbose: bool,
):
    """Register GraphQL query documents in the engine's allowlist.

    \b
    Collects query documents, adds them to a fixed query collection and
    adds that collection to the allowlist. Safe to run repeatedly: existing
    collections and queries are left as they are.

    \b
    EXAMPLES:
      allowlist-sync --host https://graphql.example.com --key "$SECRET"
      allowlist-sync --path "queries/**/*.graphql" --dry-run
    """
    _configure_logging(verbose)
    error_display = CLIErrorDisplay()

    try:
        config = SyncConfig.from_environment(
            host=host,
            admin_secret=key,
            path_pattern=path_pattern,
            workspace=workspace,
            repository=repository,
            collection_name=collection_name,
            append_metadata=False if no_metadata else None,
            exclude_patterns=list(exclude_patterns) if exclude_patterns else None,
            timeout=timeout,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        error_display.display_error(e)
        sys.exit(1)

    try:
        documents = DocumentCollector(config).collect()

        if dry_run:
            _display_documents(documents)
            return

        if verbose:
            console.print(
                f"🔍 Publishing {len(documents)} query document(s) to {config.host}",
                style="dim",
            )
        report = asyncio.run(synchronize(config, documents))
    except Exception as e:
        logger.error(f"Allowlist synchronization failed: {e}")
        error_display.display_error(e, show_technical_details=verbose)
        sys.exit(1)

    _display_report(report)


if __name__ == "__main__":
    main()
