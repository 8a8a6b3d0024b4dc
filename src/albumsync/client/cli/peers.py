"""Peers command for albumsync CLI.

Commands:
- peers: Validate the config and show the sync graph
"""

from __future__ import annotations

from pathlib import Path

import click

from albumsync.client.cli.config import config_option, load_peers_or_exit
from albumsync.core.config import iter_edges


@click.command()
@config_option
def peers(config_path: Path) -> None:
    """Validate the config file and list peers and their sync sources.

    No network access is made.
    """
    table = load_peers_or_exit(config_path)

    if not table:
        click.echo("No peers configured.")
        return

    for peer in table.values():
        click.echo(f"{peer.name}: {peer.reference.base_url}")
        if peer.sync_with:
            for source in peer.sync_with:
                click.echo(f"  ← {source}")
        else:
            click.echo("  (does not sync from any peer)")

    edges = iter_edges(table)
    click.echo(f"\n{len(table)} peers, {len(edges)} sync edges")
