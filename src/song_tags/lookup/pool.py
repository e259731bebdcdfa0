"""Fixed-capacity worker pool for tag lookups."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

MAX_WORKERS = 80


def clamp_workers(requested: int, ceiling: int = MAX_WORKERS) -> int:
    """Effective worker count: ``requested`` capped at ``ceiling``, never below 1."""

    if ceiling < 1:
        raise ValueError(f"Worker ceiling must be a positive integer, got {ceiling!r}.")
    effective = max(1, min(requested, ceiling))
    if effective != requested:
        logger.info("Requested %d workers, using %d (ceiling %d)", requested, effective, ceiling)
    return effective


class WorkerPool:
    """Runs submitted callables on at most ``capacity`` threads at once.

    Submissions never block the caller; extra items wait in the executor queue
    until a thread frees up. ``shutdown`` waits for every submitted item and
    joins the threads, so nothing started by the pool outlives it.
    """

    def __init__(self, capacity: int, *, name_prefix: str = "song-tags") -> None:
        if capacity < 1:
            raise ValueError(f"Pool capacity must be a positive integer, got {capacity!r}.")
        self.capacity = capacity
        self._executor = ThreadPoolExecutor(max_workers=capacity, thread_name_prefix=name_prefix)
        self._lock = threading.Lock()
        self._closed = False
        self._submitted = 0

    @property
    def submitted(self) -> int:
        return self._submitted

    def submit(self, fn: Callable[[T], R], item: T) -> Future[R]:
        with self._lock:
            if self._closed:
                raise RuntimeError("Cannot submit to a worker pool that is shut down.")
            self._submitted += 1
            return self._executor.submit(fn, item)

    def shutdown(self) -> None:
        """Wait for all submitted work and release the worker threads."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=True)
        logger.debug("Worker pool shut down after %d submissions", self._submitted)

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(self, *_: object) -> None:
        self.shutdown()
