"""Transfer worker: copy one asset from a source album to a destination album.

This module provides:
- TransferWorker: download, stage, upload and attach one asset
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Protocol

from albumsync.client.sync.retry import DEFAULT_MAX_RETRIES, retry_with_backoff
from albumsync.client.sync.workers.base import BaseWorker, WorkerContext

if TYPE_CHECKING:
    from albumsync.client.api import Asset, AssetDownload, RemoteAlbum
    from albumsync.client.sync.staging import StagingDirectory

logger = logging.getLogger(__name__)


class TransferClient(Protocol):
    """Remote operations a transfer needs (implemented by AlbumClient)."""

    def download_asset(self, album: RemoteAlbum, asset: Asset) -> AssetDownload: ...

    def upload_asset(self, album: RemoteAlbum, asset: Asset) -> str: ...


class TransferWorker(BaseWorker):
    """Worker copying one asset between albums.

    The downloaded bytes are written to the staging directory just before
    the upload and the staged file is released right after it, whether
    the upload succeeded or not.

    Usage:
        worker = TransferWorker(client, source, destination, staging)
        result = worker.execute(WorkerContext(asset=asset, index=0))
    """

    def __init__(
        self,
        client: TransferClient,
        source: RemoteAlbum,
        destination: RemoteAlbum,
        staging: StagingDirectory,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        """Initialize the transfer worker.

        Args:
            client: Client for remote operations.
            source: Album to download from.
            destination: Album to upload to.
            staging: Staging directory of the current edge.
            max_retries: Retries per remote call on transient failures.
        """
        super().__init__()
        self._client = client
        self._source = source
        self._destination = destination
        self._staging = staging
        self._max_retries = max_retries

    @property
    def worker_type(self) -> str:
        """Return worker type name."""
        return "transfer"

    def _do_work(self, ctx: WorkerContext) -> str:
        """Transfer the asset.

        Args:
            ctx: Worker context with the source asset.

        Returns:
            Id of the new asset in the destination.

        Raises:
            RemoteError: If a remote call fails.
            LocalIOError: If the asset cannot be staged.
        """
        asset = ctx.asset
        logger.info(
            f"Transferring '{asset.display_name}' from '{self._source.name}' "
            f"to '{self._destination.name}'"
        )

        download = retry_with_backoff(
            lambda: self._client.download_asset(self._source, asset),
            max_retries=self._max_retries,
        )
        staged_path = self._staging.write(f"{ctx.index:06d}", download.filename, download.content)
        staged = dataclasses.replace(
            asset, local_path=staged_path, content_type=download.content_type
        )

        try:
            new_id = retry_with_backoff(
                lambda: self._client.upload_asset(self._destination, staged),
                max_retries=self._max_retries,
            )
        finally:
            self._staging.release(staged_path)

        logger.info(f"Uploaded '{asset.display_name}' to '{self._destination.name}' as {new_id}")
        return new_id
