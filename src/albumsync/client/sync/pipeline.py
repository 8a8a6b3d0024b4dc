"""Transfer pipeline: move a missing set from one album to another.

This module provides:
- TransferPipeline: Runs the transfers of one edge on a bounded worker pool
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from albumsync.client.sync.retry import DEFAULT_MAX_RETRIES
from albumsync.client.sync.types import OutcomeCallback, TransferOutcome
from albumsync.client.sync.workers import (
    DEFAULT_MAX_WORKERS,
    TransferClient,
    TransferWorker,
    WorkerPool,
    WorkerResult,
)
from albumsync.core.types import TransferStatus

if TYPE_CHECKING:
    from albumsync.client.api import Asset, RemoteAlbum
    from albumsync.client.sync.staging import StagingDirectory

logger = logging.getLogger(__name__)


class TransferPipeline:
    """Downloads missing assets from a source album and uploads them to a destination.

    Every asset is transferred independently: a failure is recorded in its
    outcome and the other transfers go on. At most max_workers assets are
    in flight at any time.
    """

    def __init__(
        self,
        client: TransferClient,
        max_workers: int = DEFAULT_MAX_WORKERS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            client: Client for remote operations.
            max_workers: Maximum concurrent transfers.
            max_retries: Retries per remote call on transient failures.
            on_outcome: Called once per asset, in completion order.
        """
        self._client = client
        self._max_workers = max_workers
        self._max_retries = max_retries
        self._on_outcome = on_outcome
        self._callback_lock = threading.Lock()

    def run(
        self,
        missing: Sequence[Asset],
        source: RemoteAlbum,
        destination: RemoteAlbum,
        staging: StagingDirectory,
        dry_run: bool = False,
    ) -> list[TransferOutcome]:
        """Transfer the missing assets.

        Args:
            missing: Assets to copy, as computed by missing_assets().
            source: Album to download from.
            destination: Album to upload to.
            staging: Staging directory of this edge.
            dry_run: Only report what would be transferred.

        Returns:
            One outcome per asset, in the order of missing.
        """
        if dry_run:
            planned = [TransferOutcome(asset=a, status=TransferStatus.PLANNED) for a in missing]
            for outcome in planned:
                self._notify(outcome)
            return planned

        if not missing:
            return []

        outcomes: list[TransferOutcome | None] = [None] * len(missing)

        def make_on_complete(index: int) -> Callable[[WorkerResult], None]:
            asset = missing[index]

            def _on_complete(result: WorkerResult) -> None:
                outcome = self._to_outcome(asset, result)
                outcomes[index] = outcome
                self._notify(outcome)

            return _on_complete

        pool = WorkerPool(
            lambda: TransferWorker(
                client=self._client,
                source=source,
                destination=destination,
                staging=staging,
                max_retries=self._max_retries,
            ),
            max_workers=min(self._max_workers, len(missing)),
        )
        with pool:
            for index, asset in enumerate(missing):
                pool.submit(asset, index, on_complete=make_on_complete(index))
            pool.join()

        logger.info(
            f"Transferred {pool.completed_count} of {len(missing)} assets "
            f"from '{source.name}' to '{destination.name}' "
            f"({pool.error_count} failed, peak concurrency {pool.peak_active})"
        )

        return [
            outcome
            if outcome is not None
            else TransferOutcome(
                asset=missing[i],
                status=TransferStatus.FAILED,
                error="Transfer did not report a result",
            )
            for i, outcome in enumerate(outcomes)
        ]

    def _to_outcome(self, asset: Asset, result: WorkerResult) -> TransferOutcome:
        if result.success:
            return TransferOutcome(
                asset=asset,
                status=TransferStatus.SUCCEEDED,
                new_asset_id=result.result,
            )
        return TransferOutcome(asset=asset, status=TransferStatus.FAILED, error=result.error)

    def _notify(self, outcome: TransferOutcome) -> None:
        if self._on_outcome is None:
            return
        with self._callback_lock:
            self._on_outcome(outcome)
