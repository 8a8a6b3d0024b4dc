"""Command-line interface for albumsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- sync: Copy missing assets between shared albums
- peers: Validate the config file and list the sync graph
"""

from __future__ import annotations

import click

from albumsync import __version__
from albumsync.client.cli.config import configure_logging, load_peers_or_exit
from albumsync.client.cli.peers import peers
from albumsync.client.cli.sync import sync


@click.group()
@click.version_option(version=__version__, prog_name="albumsync")
def cli() -> None:
    """albumsync - Keep shared photo albums in sync by content checksum."""


cli.add_command(sync)
cli.add_command(peers)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "configure_logging",
    "load_peers_or_exit",
    "main",
]
