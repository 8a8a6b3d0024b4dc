"""Core module - Peer configuration and shared types."""

from albumsync.core.config import (
    ConfigError,
    Peer,
    PeerTable,
    ReferenceParseError,
    ShareReference,
    UnknownPeerError,
    iter_edges,
    load_config,
    parse_config,
)
from albumsync.core.types import AlbumSyncError, TransferStatus

__all__ = [
    # Config
    "ConfigError",
    "Peer",
    "PeerTable",
    "ReferenceParseError",
    "ShareReference",
    "UnknownPeerError",
    "iter_edges",
    "load_config",
    "parse_config",
    # Types
    "AlbumSyncError",
    "TransferStatus",
]
