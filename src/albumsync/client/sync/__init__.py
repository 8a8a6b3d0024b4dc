"""Sync engine for shared albums.

Architecture:
    PeerTable → SyncOrchestrator → missing_assets → TransferPipeline → Workers

Components:
- **SyncOrchestrator**: Walks the peer graph, resolves albums, one edge at a time
- **missing_assets**: Checksum diff between two listings
- **TransferPipeline**: Transfers a missing set on a bounded WorkerPool
- **TransferWorker**: Download → stage → upload → attach for one asset
- **StagingDirectory**: Temporary files scoped to one edge

All public symbols are re-exported here.
"""

from albumsync.client.api import LocalIOError
from albumsync.client.sync.diff import missing_assets
from albumsync.client.sync.orchestrator import AlbumService, SyncOrchestrator
from albumsync.client.sync.pipeline import TransferPipeline
from albumsync.client.sync.retry import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MAX_RETRIES,
    retry_with_backoff,
)
from albumsync.client.sync.staging import StagingDirectory
from albumsync.client.sync.types import (
    EdgeCallback,
    EdgeResult,
    OutcomeCallback,
    SyncError,
    SyncResult,
    TransferOutcome,
)
from albumsync.client.sync.workers import (
    DEFAULT_MAX_WORKERS,
    BaseWorker,
    PoolState,
    TransferClient,
    TransferWorker,
    WorkerContext,
    WorkerPool,
    WorkerResult,
    WorkerState,
    WorkerTask,
)

__all__ = [
    # Retry functions and constants
    "DEFAULT_BACKOFF_MULTIPLIER",
    "DEFAULT_INITIAL_BACKOFF",
    "DEFAULT_MAX_BACKOFF",
    "DEFAULT_MAX_RETRIES",
    "retry_with_backoff",
    # Types and dataclasses
    "EdgeCallback",
    "EdgeResult",
    "LocalIOError",
    "OutcomeCallback",
    "SyncError",
    "SyncResult",
    "TransferOutcome",
    # Diff
    "missing_assets",
    # Pipeline & orchestrator
    "AlbumService",
    "StagingDirectory",
    "SyncOrchestrator",
    "TransferPipeline",
    # Workers
    "DEFAULT_MAX_WORKERS",
    "BaseWorker",
    "PoolState",
    "TransferClient",
    "TransferWorker",
    "WorkerContext",
    "WorkerPool",
    "WorkerResult",
    "WorkerState",
    "WorkerTask",
]
