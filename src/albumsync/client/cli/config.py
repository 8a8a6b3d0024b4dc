"""Configuration utilities for albumsync CLI.

This module provides shared functions used across CLI commands.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from albumsync.core.config import PeerTable, load_config
from albumsync.core.types import AlbumSyncError

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def config_option(func):  # type: ignore[no-untyped-def]
    """Add the --config option shared by all commands."""
    return click.option(
        "--config",
        "-c",
        "config_path",
        required=True,
        type=click.Path(dir_okay=False, path_type=Path),
        help="Path to the peer config file (TOML).",
    )(func)


def load_peers_or_exit(config_path: Path) -> PeerTable:
    """Load the peer table, or print the error and exit with status 1."""
    try:
        return load_config(config_path)
    except AlbumSyncError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


def configure_logging(verbosity: int) -> None:
    """Send albumsync log records to stderr.

    Args:
        verbosity: 0 for warnings, 1 for info, 2 or more for debug.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    albumsync_logger = logging.getLogger("albumsync")
    # Remove any existing handlers
    for existing in albumsync_logger.handlers[:]:
        albumsync_logger.removeHandler(existing)
    albumsync_logger.addHandler(handler)
    albumsync_logger.setLevel(level)
    # Prevent propagation to root logger
    albumsync_logger.propagate = False
