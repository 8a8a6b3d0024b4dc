"""Worker pool for concurrent transfer operations.

This module provides:
- WorkerPool: Runs tasks on a fixed number of worker threads
- WorkerTask: Represents a queued task for the pool
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from albumsync.client.sync.workers.base import BaseWorker, WorkerContext, WorkerResult

if TYPE_CHECKING:
    from albumsync.client.api import Asset

logger = logging.getLogger(__name__)

# At most this many assets are in flight at once, which bounds both the
# concurrent downloads and the concurrent uploads.
DEFAULT_MAX_WORKERS = 4


class PoolState(Enum):
    """State of the worker pool."""

    STOPPED = auto()
    RUNNING = auto()
    STOPPING = auto()


@dataclass
class WorkerTask:
    """A task to be executed by the worker pool.

    Attributes:
        context: Asset and batch position to process.
        on_complete: Callback with the result, called from the worker thread.
    """

    context: WorkerContext
    on_complete: Callable[[WorkerResult], None] | None = None


class WorkerPool:
    """Pool of worker threads for concurrent transfers.

    Tasks are taken from a queue by a fixed number of threads, so no more
    than max_workers tasks ever run at the same time. A failing task only
    produces a failed WorkerResult.

    Usage:
        pool = WorkerPool(lambda: TransferWorker(...), max_workers=4)
        pool.start()

        # Submit tasks
        pool.submit(asset, index, on_complete=callback)

        # Wait for every task, then stop
        pool.join()
        pool.stop()
    """

    def __init__(
        self,
        worker_factory: Callable[[], BaseWorker],
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        """Initialize the worker pool.

        Args:
            worker_factory: Creates the worker for each task.
            max_workers: Number of worker threads.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self._worker_factory = worker_factory
        self._max_workers = max_workers

        # Pool state
        self._pool_state = PoolState.STOPPED
        self._lock = threading.Lock()

        # Task queue
        self._task_queue: queue.Queue[WorkerTask | None] = queue.Queue()

        # Worker threads
        self._workers: list[threading.Thread] = []

        # Statistics
        self._active_count = 0
        self._peak_active = 0
        self._completed_count = 0
        self._error_count = 0

    @property
    def state(self) -> PoolState:
        """Get current pool state."""
        return self._pool_state

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def active_count(self) -> int:
        """Get number of running tasks."""
        with self._lock:
            return self._active_count

    @property
    def peak_active(self) -> int:
        """Get the highest number of tasks that ran at the same time."""
        with self._lock:
            return self._peak_active

    @property
    def queue_size(self) -> int:
        """Get number of queued tasks."""
        return self._task_queue.qsize()

    @property
    def completed_count(self) -> int:
        """Get number of successful tasks."""
        with self._lock:
            return self._completed_count

    @property
    def error_count(self) -> int:
        """Get number of failed tasks."""
        with self._lock:
            return self._error_count

    def __enter__(self) -> WorkerPool:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()

    def start(self) -> None:
        """Start the worker pool."""
        with self._lock:
            if self._pool_state != PoolState.STOPPED:
                logger.warning("Worker pool already running")
                return

            self._pool_state = PoolState.RUNNING

            for i in range(self._max_workers):
                thread = threading.Thread(
                    target=self._worker_loop,
                    name=f"WorkerPool-{i}",
                    daemon=True,
                )
                thread.start()
                self._workers.append(thread)

            logger.debug(f"Worker pool started with {self._max_workers} workers")

    def submit(
        self,
        asset: Asset,
        index: int = 0,
        on_complete: Callable[[WorkerResult], None] | None = None,
    ) -> bool:
        """Submit a task to the pool.

        Args:
            asset: Asset to process.
            index: Position of the asset in its batch.
            on_complete: Callback with the task's result.

        Returns:
            True if task was submitted, False if pool is not running.
        """
        if self._pool_state != PoolState.RUNNING:
            logger.warning("Cannot submit task: pool not running")
            return False

        task = WorkerTask(
            context=WorkerContext(asset=asset, index=index),
            on_complete=on_complete,
        )
        self._task_queue.put(task)
        logger.debug(f"Task submitted: {asset.display_name}")
        return True

    def join(self) -> None:
        """Block until every submitted task has been processed."""
        self._task_queue.join()

    def stop(self) -> None:
        """Stop the worker pool once the queued tasks are done."""
        with self._lock:
            if self._pool_state == PoolState.STOPPED:
                return

            self._pool_state = PoolState.STOPPING

            # Send poison pills to stop workers
            for _ in self._workers:
                self._task_queue.put(None)

        for worker in self._workers:
            worker.join()

        with self._lock:
            self._pool_state = PoolState.STOPPED
            self._workers.clear()
            logger.debug("Worker pool stopped")

    def _worker_loop(self) -> None:
        """Main loop for worker threads."""
        while True:
            task = self._task_queue.get()
            try:
                if task is None:
                    # Poison pill - stop worker
                    return
                self._process_task(task)
            finally:
                self._task_queue.task_done()

    def _process_task(self, task: WorkerTask) -> None:
        """Process a single task.

        Args:
            task: The task to process.
        """
        with self._lock:
            self._active_count += 1
            self._peak_active = max(self._peak_active, self._active_count)

        try:
            try:
                worker = self._worker_factory()
                result = worker.execute(task.context)
            except Exception as e:
                logger.exception(f"Task error: {task.context.asset.display_name}")
                result = WorkerResult(success=False, error=str(e), exception=e)

            with self._lock:
                if result.success:
                    self._completed_count += 1
                else:
                    self._error_count += 1

            if task.on_complete:
                try:
                    task.on_complete(result)
                except Exception:
                    logger.exception("Error in task completion callback")
        finally:
            with self._lock:
                self._active_count -= 1
