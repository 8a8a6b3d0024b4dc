"""Workers for concurrent transfer operations.

This package provides:
- BaseWorker: Abstract base class reporting failures as results
- TransferWorker: Copies one asset between two albums
- WorkerPool: Manages a bounded number of worker threads

Usage:
    from albumsync.client.sync.workers import TransferWorker, WorkerPool

    with WorkerPool(lambda: TransferWorker(client, src, dst, staging)) as pool:
        pool.submit(asset, 0, on_complete=callback)
        pool.join()
"""

from albumsync.client.sync.workers.base import (
    BaseWorker,
    WorkerContext,
    WorkerResult,
    WorkerState,
)
from albumsync.client.sync.workers.pool import (
    DEFAULT_MAX_WORKERS,
    PoolState,
    WorkerPool,
    WorkerTask,
)
from albumsync.client.sync.workers.transfer_worker import TransferClient, TransferWorker

__all__ = [
    # Base
    "BaseWorker",
    "WorkerContext",
    "WorkerResult",
    "WorkerState",
    # Workers
    "TransferClient",
    "TransferWorker",
    # Pool
    "DEFAULT_MAX_WORKERS",
    "PoolState",
    "WorkerPool",
    "WorkerTask",
]
