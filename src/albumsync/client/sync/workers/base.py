"""Base worker class.

This module provides:
- WorkerState: Enum for worker lifecycle states
- WorkerResult: Result of a worker execution
- WorkerContext: Input of a worker execution
- BaseWorker: Abstract base class for transfer workers
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from albumsync.client.api import Asset

logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """State of a worker."""

    IDLE = auto()
    RUNNING = auto()
    COMPLETED = auto()
    FAILED = auto()


@dataclass
class WorkerResult:
    """Result of a worker execution.

    Attributes:
        success: Whether the operation succeeded.
        result: The result value if successful (type depends on worker).
        error: Error message if failed.
        exception: The exception that caused the failure.
        elapsed_time: Time taken in seconds.
    """

    success: bool
    result: Any = None
    error: str | None = None
    exception: BaseException | None = None
    elapsed_time: float = 0.0


@dataclass
class WorkerContext:
    """Context passed to worker execution.

    Attributes:
        asset: The asset being processed.
        index: Position of the asset in the submitted batch.
    """

    asset: Asset
    index: int = 0


class BaseWorker(ABC):
    """Abstract base class for workers.

    Subclasses must implement:
    - _do_work(): The actual work logic
    - worker_type: Property returning the worker type name

    execute() never raises for errors of the work itself: they are
    reported in the returned WorkerResult so that one failing asset does
    not stop the others.

    Usage:
        class MyWorker(BaseWorker):
            @property
            def worker_type(self) -> str:
                return "my_worker"

            def _do_work(self, ctx: WorkerContext) -> str:
                return ctx.asset.id

        result = MyWorker().execute(WorkerContext(asset=asset))
    """

    def __init__(self) -> None:
        """Initialize the worker."""
        self._worker_state = WorkerState.IDLE
        self._lock = threading.Lock()

    @property
    @abstractmethod
    def worker_type(self) -> str:
        """Return the worker type name (e.g., 'transfer')."""
        ...

    @property
    def state(self) -> WorkerState:
        """Get current worker state."""
        return self._worker_state

    @property
    def is_running(self) -> bool:
        """Check if worker is currently running."""
        return self._worker_state == WorkerState.RUNNING

    def execute(self, ctx: WorkerContext) -> WorkerResult:
        """Execute the worker operation.

        Args:
            ctx: Asset to process.

        Returns:
            WorkerResult describing success or failure.

        Raises:
            RuntimeError: If the worker is already running.
        """
        with self._lock:
            if self._worker_state == WorkerState.RUNNING:
                raise RuntimeError(f"{self.worker_type} worker: already running")
            self._worker_state = WorkerState.RUNNING

        start_time = time.monotonic()

        try:
            result_value = self._do_work(ctx)
        except Exception as e:
            elapsed = time.monotonic() - start_time
            self._worker_state = WorkerState.FAILED
            logger.error(f"{self.worker_type} worker failed: {e}")
            return WorkerResult(
                success=False,
                error=str(e),
                exception=e,
                elapsed_time=elapsed,
            )

        elapsed = time.monotonic() - start_time
        self._worker_state = WorkerState.COMPLETED
        logger.debug(f"{self.worker_type} worker: done in {elapsed:.2f}s")
        return WorkerResult(success=True, result=result_value, elapsed_time=elapsed)

    @abstractmethod
    def _do_work(self, ctx: WorkerContext) -> Any:
        """Perform the actual work.

        Args:
            ctx: Worker context with the asset.

        Returns:
            The result of the operation.

        Raises:
            Exception: Any error during execution.
        """
        ...
