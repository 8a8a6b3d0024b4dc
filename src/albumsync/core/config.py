"""Peer configuration for albumsync.

This module provides:
- ShareReference: base URL + access key parsed from a share link
- Peer: one named entry of the config file
- load_config / parse_config: build the read-only peer table

Config files are TOML documents with one top-level table per peer::

    [family]
    shared_link = "https://photos.example.com/share/abc123"
    sync_with = ["friends"]

    [friends]
    url = "https://other.example.org"
    key = "def456"
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from albumsync.core.types import AlbumSyncError

SHARE_SEPARATOR = "/share/"

PeerTable = Mapping[str, "Peer"]


class ConfigError(AlbumSyncError):
    """Config file is unreadable, malformed or inconsistent."""


class UnknownPeerError(ConfigError):
    """A sync_with entry names a peer that is not declared."""

    def __init__(self, peer: str, unknown: str) -> None:
        self.peer = peer
        self.unknown = unknown
        super().__init__(f"Peer '{peer}' syncs with unknown peer '{unknown}'")


class ReferenceParseError(AlbumSyncError):
    """A share reference cannot be split into a base URL and a key."""


@dataclass(frozen=True)
class ShareReference:
    """Location of one shared album.

    Attributes:
        base_url: Base URL of the service (e.g., "https://photos.example.com").
        key: Access key of the shared link.
    """

    base_url: str
    key: str

    def __post_init__(self) -> None:
        """Normalize base URL."""
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def parse(cls, link: str) -> ShareReference:
        """Parse a combined "<base_url>/share/<key>" link.

        Args:
            link: Share link as copied from the service.

        Returns:
            The parsed reference.

        Raises:
            ReferenceParseError: If the link has no "/share/" part, or
                either side of it is empty.
        """
        base_url, separator, key = link.strip().partition(SHARE_SEPARATOR)
        key = key.strip("/")
        if not separator or not base_url or not key:
            raise ReferenceParseError(f"Invalid share link: {link!r}")
        return cls(base_url=base_url, key=key)

    def api_url(self, path: str) -> str:
        """Absolute URL of an API endpoint, without the key parameter."""
        return f"{self.base_url}/api{path}"


@dataclass(frozen=True)
class Peer:
    """A named shared album and the peers it pulls assets from."""

    name: str
    reference: ShareReference
    sync_with: tuple[str, ...] = field(default_factory=tuple)


def _parse_reference(name: str, entry: Mapping[str, Any]) -> ShareReference:
    shared_link = entry.get("shared_link")
    url = entry.get("url")
    key = entry.get("key")

    if shared_link is not None:
        if url is not None or key is not None:
            raise ConfigError(
                f"Peer '{name}': use either 'shared_link' or 'url' and 'key', not both"
            )
        if not isinstance(shared_link, str):
            raise ConfigError(f"Peer '{name}': 'shared_link' must be a string")
        try:
            return ShareReference.parse(shared_link)
        except ReferenceParseError as e:
            raise ReferenceParseError(f"Peer '{name}': {e}") from e

    if url is None or key is None:
        raise ConfigError(
            f"Peer '{name}': missing 'shared_link' (or both 'url' and 'key')"
        )
    if not isinstance(url, str) or not isinstance(key, str):
        raise ConfigError(f"Peer '{name}': 'url' and 'key' must be strings")
    if not url.strip("/ ") or not key.strip():
        raise ReferenceParseError(f"Peer '{name}': empty 'url' or 'key'")
    return ShareReference(base_url=url.strip(), key=key.strip())


def _parse_sync_with(name: str, entry: Mapping[str, Any]) -> tuple[str, ...]:
    sync_with = entry.get("sync_with", [])
    if not isinstance(sync_with, list) or not all(
        isinstance(other, str) for other in sync_with
    ):
        raise ConfigError(f"Peer '{name}': 'sync_with' must be a list of peer names")
    return tuple(sync_with)


def parse_config(data: Mapping[str, Any]) -> PeerTable:
    """Build the peer table from a decoded config document.

    Every reference and every sync_with name is validated here, so that a
    bad config aborts before any network call.

    Args:
        data: Mapping of peer name to peer table, as decoded from TOML.

    Returns:
        Read-only mapping of peer name to Peer, in document order.

    Raises:
        ConfigError: If a peer entry is malformed or names an unknown peer.
        ReferenceParseError: If a share reference cannot be parsed.
    """
    peers: dict[str, Peer] = {}
    for name, entry in data.items():
        if not isinstance(entry, Mapping):
            raise ConfigError(f"Peer '{name}' must be a table")
        peers[name] = Peer(
            name=name,
            reference=_parse_reference(name, entry),
            sync_with=_parse_sync_with(name, entry),
        )

    for peer in peers.values():
        for other in peer.sync_with:
            if other not in peers:
                raise UnknownPeerError(peer.name, other)

    return MappingProxyType(peers)


def load_config(path: Path) -> PeerTable:
    """Load and validate the peer table from a TOML file.

    Args:
        path: Config file path.

    Returns:
        Read-only peer table.

    Raises:
        ConfigError: If the file cannot be read or parsed.
        ReferenceParseError: If a share reference cannot be parsed.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e

    return parse_config(data)


def iter_edges(peers: PeerTable) -> list[tuple[str, str]]:
    """List every (destination, source) edge in config order."""
    return [(peer.name, other) for peer in peers.values() for other in peer.sync_with]
