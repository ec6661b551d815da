"""Bounded worker pool for CPU-bound image work.

Architecture:
    FastAPI (async) -> asyncio.Semaphore(N) -> ThreadPoolExecutor(N) -> decode/annotate/encode

At most ``max_queue_depth`` requests may wait for a slot. Further requests
are rejected at once with :class:`PoolBusyError`; waiting requests give up
after ``queue_timeout`` seconds with :class:`TimeoutError`. Both map to 503.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from facebox.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PoolBusyError(RuntimeError):
    """Raised when the wait queue is full."""


class WorkerPool:
    """Manages the semaphore, wait queue and thread pool for image processing."""

    def __init__(self, max_workers: int, max_queue_depth: int, queue_timeout: float) -> None:
        self._semaphore = asyncio.Semaphore(max_workers)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="facebox-worker",
        )
        self._max_queue_depth = max_queue_depth
        self._queue_timeout = queue_timeout
        self._active_count: int = 0
        self._queue_depth: int = 0
        self._counter_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> WorkerPool:
        return cls(
            max_workers=settings.max_concurrent,
            max_queue_depth=settings.max_queue_depth,
            queue_timeout=settings.queue_timeout,
        )

    async def run(self, func: Callable[..., T], *args: object) -> T:
        """Submit a synchronous function to the worker thread pool.

        Raises:
            PoolBusyError: If ``max_queue_depth`` requests are already waiting.
            TimeoutError: If no slot frees up within the queue timeout.
        """
        with self._counter_lock:
            if self._semaphore.locked() and self._queue_depth >= self._max_queue_depth:
                logger.warning("Worker queue full (%d waiting), rejecting request", self._queue_depth)
                raise PoolBusyError("Server busy, retry later")
            self._queue_depth += 1
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self._queue_timeout)
        finally:
            with self._counter_lock:
                self._queue_depth -= 1

        with self._counter_lock:
            self._active_count += 1
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, func, *args)
        finally:
            self._semaphore.release()
            with self._counter_lock:
                self._active_count -= 1

    @property
    def active_count(self) -> int:
        """Number of currently running tasks."""
        with self._counter_lock:
            return self._active_count

    @property
    def queue_depth(self) -> int:
        """Number of requests waiting for a slot."""
        with self._counter_lock:
            return self._queue_depth

    def shutdown(self) -> None:
        """Shut down the thread pool executor."""
        self._executor.shutdown(wait=True)
