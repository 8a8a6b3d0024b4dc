"""Sync command for albumsync CLI.

Commands:
- sync: Copy missing assets along every edge of the peer config
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from albumsync.client.cli.config import (
    config_option,
    configure_logging,
    load_peers_or_exit,
)
from albumsync.core.types import AlbumSyncError, TransferStatus

if TYPE_CHECKING:
    from albumsync.client.sync import EdgeResult, TransferOutcome


@click.command()
@config_option
@click.option("--dry-run", "-n", "-d", is_flag=True, help="Only print missing assets.")
@click.option(
    "--workers",
    type=click.IntRange(1, 32),
    default=4,
    show_default=True,
    help="Maximum concurrent asset transfers per edge.",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retries per remote call on network errors, 429 and 5xx responses.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="HTTP timeout in seconds (default: wait indefinitely).",
)
@click.option(
    "--cache-listings",
    is_flag=True,
    help="List each album once per run instead of once per edge.",
)
@click.option(
    "--staging-dir",
    type=click.Path(exists=True, file_okay=False, writable=True, path_type=Path),
    default=None,
    help="Directory for temporary files (default: system temp dir).",
)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v, -vv).")
def sync(
    config_path: Path,
    dry_run: bool,
    workers: int,
    retries: int,
    timeout: float | None,
    cache_listings: bool,
    staging_dir: Path | None,
    verbose: int,
) -> None:
    """Copy assets missing from each peer's album from the peers it syncs with.

    Assets are compared by checksum only. Nothing is ever deleted.
    """
    from albumsync.client.api import AlbumClient
    from albumsync.client.sync import SyncOrchestrator

    configure_logging(verbose)
    peers = load_peers_or_exit(config_path)

    def on_edge(edge: EdgeResult) -> None:
        click.echo(
            f"Adding assets from {edge.source} ({edge.source_album}) "
            f"to {edge.destination} ({edge.destination_album}) ..."
        )

    def on_outcome(outcome: TransferOutcome) -> None:
        name = outcome.asset.display_name
        if outcome.status == TransferStatus.PLANNED:
            click.echo(f"  · {name}")
        elif outcome.status == TransferStatus.SUCCEEDED:
            click.echo(f"  ↑ {name}")
        else:
            click.echo(click.style(f"  ✗ {name}: {outcome.error}", fg="red"), err=True)

    try:
        with AlbumClient(timeout=timeout) as client:
            orchestrator = SyncOrchestrator(
                peers,
                client,
                dry_run=dry_run,
                max_workers=workers,
                max_retries=retries,
                cache_listings=cache_listings,
                staging_root=staging_dir,
                on_edge=on_edge,
                on_outcome=on_outcome,
            )
            result = orchestrator.run()
    except AlbumSyncError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    display_summary(result.edges, dry_run)

    if not result.ok:
        sys.exit(1)


def display_summary(edges: list[EdgeResult], dry_run: bool) -> None:
    """Display one line per edge, then the errors."""
    if not edges:
        click.echo("No peer syncs with another peer.")
        return

    click.echo("\nSummary:")
    for edge in edges:
        if edge.error:
            click.echo(click.style(f"  ✗ {edge.describe()}: {edge.error}", fg="red"))
        elif edge.missing_count == 0:
            click.echo(f"  ✓ {edge.describe()}: No assets to synchronize")
        elif dry_run:
            click.echo(f"  · {edge.describe()}: {edge.missing_count} assets would be synced")
        else:
            line = (
                f"{edge.describe()}: Uploaded {len(edge.transferred)} of "
                f"{edge.missing_count} missing assets"
            )
            if edge.failures:
                click.echo(click.style(f"  ✗ {line} ({len(edge.failures)} failed)", fg="yellow"))
            else:
                click.echo(f"  ✓ {line}")

    failed = [edge for edge in edges if not edge.ok]
    if failed:
        click.echo(click.style("\nErrors:", fg="red"), err=True)
        for edge in failed:
            if edge.error:
                click.echo(f"  ✗ {edge.describe()}: {edge.error}", err=True)
            for outcome in edge.failures:
                click.echo(
                    f"  ✗ {edge.describe()}: {outcome.asset.display_name}: {outcome.error}",
                    err=True,
                )
