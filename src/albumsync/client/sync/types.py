"""Shared types and dataclasses for sync operations.

This module provides:
- SyncError: Exception raised for sync-level misuse
- TransferOutcome: Result of transferring one asset
- EdgeResult: Result of syncing one (destination, source) pair
- SyncResult: Overall result of a run
- Type aliases for callbacks
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from albumsync.client.api import Asset
from albumsync.core.types import AlbumSyncError, TransferStatus


class SyncError(AlbumSyncError):
    """Base exception for sync errors."""


@dataclass
class TransferOutcome:
    """Result of one asset transfer.

    Attributes:
        asset: The source asset.
        status: SUCCEEDED, FAILED, or PLANNED for dry runs.
        new_asset_id: Id of the uploaded asset in the destination.
        error: Error message if failed.
    """

    asset: Asset
    status: TransferStatus
    new_asset_id: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == TransferStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status == TransferStatus.FAILED


@dataclass
class EdgeResult:
    """Result of syncing one destination peer from one source peer.

    Attributes:
        destination: Destination peer name.
        source: Source peer name.
        destination_album: Display name of the destination album, if resolved.
        source_album: Display name of the source album, if resolved.
        missing_count: Size of the missing set.
        outcomes: Per-asset outcomes, in missing-set order.
        error: Error that aborted the edge before or outside the transfers.
    """

    destination: str
    source: str
    destination_album: str | None = None
    source_album: str | None = None
    missing_count: int = 0
    outcomes: list[TransferOutcome] = field(default_factory=list)
    error: str | None = None

    @property
    def transferred(self) -> list[TransferOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failures(self) -> list[TransferOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def ok(self) -> bool:
        """True if the edge completed without any failure."""
        return self.error is None and not self.failures

    def describe(self) -> str:
        """Human-readable edge label."""
        source = f"{self.source} ({self.source_album})" if self.source_album else self.source
        destination = (
            f"{self.destination} ({self.destination_album})"
            if self.destination_album
            else self.destination
        )
        return f"{source} -> {destination}"


@dataclass
class SyncResult:
    """Result of a whole run."""

    edges: list[EdgeResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(edge.ok for edge in self.edges)

    @property
    def transferred_count(self) -> int:
        return sum(len(edge.transferred) for edge in self.edges)

    @property
    def failed_edges(self) -> list[EdgeResult]:
        return [edge for edge in self.edges if not edge.ok]


# Type alias for per-asset outcome callback (called in completion order)
OutcomeCallback = Callable[[TransferOutcome], None]

# Type alias for edge start callback
EdgeCallback = Callable[[EdgeResult], None]
