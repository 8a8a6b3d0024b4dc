"""Sync orchestrator: walk the peer graph and sync every edge.

This module provides:
- SyncOrchestrator: Resolves peers, diffs listings and runs the pipeline per edge
- AlbumService: Remote operations the orchestrator needs

Edges are processed one at a time, in config order. Each edge is a single
diff-and-transfer pass, so cycles in the peer graph (a syncs from b, b
syncs from a) simply give two independent edges.

The missing set of an edge is a snapshot taken when the diff runs. Assets
added to the destination by someone else after that point are not seen
and may be uploaded a second time.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Protocol

from albumsync.client.api import Asset, AssetDownload, RemoteAlbum, RemoteError
from albumsync.client.sync.diff import missing_assets
from albumsync.client.sync.pipeline import TransferPipeline
from albumsync.client.sync.retry import DEFAULT_MAX_RETRIES
from albumsync.client.sync.staging import StagingDirectory
from albumsync.client.sync.types import (
    EdgeCallback,
    EdgeResult,
    OutcomeCallback,
    SyncResult,
)
from albumsync.client.sync.workers import DEFAULT_MAX_WORKERS
from albumsync.core.config import Peer, PeerTable, ShareReference, UnknownPeerError

logger = logging.getLogger(__name__)


class AlbumService(Protocol):
    """Remote operations of a sync run (implemented by AlbumClient)."""

    def resolve(self, reference: ShareReference | str) -> RemoteAlbum: ...

    def list_assets(self, album: RemoteAlbum) -> list[Asset]: ...

    def download_asset(self, album: RemoteAlbum, asset: Asset) -> AssetDownload: ...

    def upload_asset(self, album: RemoteAlbum, asset: Asset) -> str: ...


class SyncOrchestrator:
    """Drives a sync run over every edge of the peer table.

    Listing policy: by default every edge re-lists both albums, so each
    diff sees the freshest state at the cost of extra remote calls. With
    cache_listings, each peer is resolved and listed at most once per run;
    assets uploaded during the run are added to the cached destination
    listing so that later edges into the same peer do not upload them again.

    Usage:
        with AlbumClient() as client:
            orchestrator = SyncOrchestrator(peers, client, dry_run=True)
            result = orchestrator.run()
    """

    def __init__(
        self,
        peers: PeerTable,
        client: AlbumService,
        dry_run: bool = False,
        max_workers: int = DEFAULT_MAX_WORKERS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        cache_listings: bool = False,
        staging_root: Path | None = None,
        on_edge: EdgeCallback | None = None,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            peers: Validated, read-only peer table.
            client: Client for remote operations.
            dry_run: Only report what would be transferred.
            max_workers: Maximum concurrent transfers per edge.
            max_retries: Retries per remote call on transient failures.
            cache_listings: Resolve and list each peer once per run.
            staging_root: Parent directory for staging directories.
            on_edge: Called when an edge starts, once both albums are known.
            on_outcome: Called for every asset outcome.
        """
        self._peers = peers
        self._client = client
        self._dry_run = dry_run
        self._cache_listings = cache_listings
        self._staging_root = staging_root
        self._on_edge = on_edge
        self._pipeline = TransferPipeline(
            client,
            max_workers=max_workers,
            max_retries=max_retries,
            on_outcome=on_outcome,
        )
        self._albums: dict[str, RemoteAlbum] = {}

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def run(self) -> SyncResult:
        """Sync every edge of the peer table.

        Returns:
            SyncResult with one EdgeResult per edge, in config order.

        Raises:
            UnknownPeerError: If a sync_with entry is not in the peer table.
        """
        for peer in self._peers.values():
            for source_name in peer.sync_with:
                self._lookup(peer.name, source_name)

        result = SyncResult()
        self._albums.clear()

        for peer in self._peers.values():
            if not peer.sync_with:
                continue

            try:
                destination = self._load_album(peer)
            except RemoteError as e:
                logger.error(f"Cannot load album of peer '{peer.name}': {e}")
                result.edges.extend(
                    EdgeResult(
                        destination=peer.name,
                        source=source_name,
                        error=f"Cannot load album of peer '{peer.name}': {e}",
                    )
                    for source_name in peer.sync_with
                )
                continue

            for position, source_name in enumerate(peer.sync_with):
                result.edges.append(
                    self._sync_edge(peer, destination, source_name, refresh=position > 0)
                )

        return result

    def sync_edge(self, destination: str, source: str) -> EdgeResult:
        """Sync a single edge.

        Args:
            destination: Name of the peer receiving assets.
            source: Name of the peer providing assets.

        Returns:
            EdgeResult of the edge.

        Raises:
            UnknownPeerError: If either peer is not in the peer table.
        """
        peer = self._lookup(destination, destination)
        self._lookup(destination, source)
        try:
            album = self._load_album(peer)
        except RemoteError as e:
            return EdgeResult(
                destination=destination,
                source=source,
                error=f"Cannot load album of peer '{destination}': {e}",
            )
        return self._sync_edge(peer, album, source, refresh=False)

    def _lookup(self, referrer: str, name: str) -> Peer:
        try:
            return self._peers[name]
        except KeyError:
            raise UnknownPeerError(referrer, name) from None

    def _load_album(self, peer: Peer) -> RemoteAlbum:
        """Resolve a peer's album and list its assets.

        Raises:
            RemoteError: If resolving or listing fails.
        """
        if self._cache_listings and peer.name in self._albums:
            return self._albums[peer.name]

        album = self._client.resolve(peer.reference)
        self._client.list_assets(album)
        if self._cache_listings:
            self._albums[peer.name] = album
        return album

    def _sync_edge(
        self,
        peer: Peer,
        destination: RemoteAlbum,
        source_name: str,
        refresh: bool,
    ) -> EdgeResult:
        source_peer = self._lookup(peer.name, source_name)
        edge = EdgeResult(
            destination=peer.name,
            source=source_name,
            destination_album=destination.name,
        )

        try:
            source = self._load_album(source_peer)
        except RemoteError as e:
            edge.error = f"Cannot load album of peer '{source_name}': {e}"
            logger.error(f"{edge.describe()}: {edge.error}")
            return edge

        if refresh and not self._cache_listings:
            try:
                self._client.list_assets(destination)
            except RemoteError as e:
                edge.error = f"Cannot refresh album of peer '{peer.name}': {e}"
                logger.error(f"{edge.describe()}: {edge.error}")
                return edge

        edge.source_album = source.name
        if self._on_edge:
            self._on_edge(edge)

        missing = missing_assets(source.assets, destination.assets)
        edge.missing_count = len(missing)
        logger.info(f"{edge.describe()}: {len(missing)} missing assets")

        with StagingDirectory(root=self._staging_root) as staging:
            edge.outcomes = self._pipeline.run(
                missing,
                source=source,
                destination=destination,
                staging=staging,
                dry_run=self._dry_run,
            )

        if self._cache_listings:
            # Keep the cached listing in step with what was uploaded, under
            # the ids the destination assigned.
            destination.assets.extend(
                dataclasses.replace(outcome.asset, id=outcome.new_asset_id)
                for outcome in edge.transferred
            )

        return edge
