"""Bounded fan-out of tag lookups with result aggregation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import wait
from functools import partial

from song_tags.lookup.collector import ResultCollector
from song_tags.lookup.fetchers import TagFetcher, TagFetchError
from song_tags.lookup.models import (
    FailureMode,
    LookupResult,
    SongTask,
    TagOutcome,
    TaskFailure,
)
from song_tags.lookup.pool import MAX_WORKERS, WorkerPool, clamp_workers

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_CODE = "unexpected_error"


class TagLookupOrchestrator:
    """Runs one lookup per task on a worker pool and returns all results at once.

    A failed lookup never stops the run. It is logged with enough context to
    re-run that one row and, in ``FailureMode.RECORD``, kept as a
    ``TaskFailure``. ``FailureMode.DROP`` only logs, so the task simply has no
    outcome.
    """

    def __init__(
        self,
        fetcher: TagFetcher,
        *,
        max_workers: int = MAX_WORKERS,
        failure_mode: FailureMode = FailureMode.RECORD,
        on_progress: Callable[[str], None] | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.max_workers = max_workers
        self.failure_mode = failure_mode
        self._on_progress = on_progress
        self._progress_lock = threading.Lock()

    def run(self, tasks: Sequence[SongTask], requested_workers: int) -> LookupResult:
        workers = clamp_workers(requested_workers, self.max_workers)
        collector = ResultCollector(submitted=len(tasks))
        if not tasks:
            return collector.drain()

        logger.info("Looking up tags for %d songs with %d workers", len(tasks), workers)
        with WorkerPool(workers) as pool:
            process = partial(self._process, collector=collector)
            futures = [pool.submit(process, task) for task in tasks]
            wait(futures)
            for future in futures:
                # _process handles its own errors; anything here is a bug in it.
                future.result()

        result = collector.drain()
        logger.info(
            "Tag lookup finished: submitted=%d succeeded=%d failed=%d",
            pool.submitted,
            len(result.outcomes),
            result.failed_count,
        )
        return result

    def _process(self, task: SongTask, collector: ResultCollector) -> None:
        try:
            tags = self.fetcher.fetch(task)
        except TagFetchError as exc:
            self._fail(task, collector, url=exc.url, error=str(exc), code=exc.code)
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error looking up %s", task.label())
            self._fail(
                task,
                collector,
                url=None,
                error=f"{type(exc).__name__}: {exc}",
                code=UNEXPECTED_ERROR_CODE,
            )
            return

        collector.record(TagOutcome.for_task(task, tags))
        self._emit(f"Finished: {task.label()}. Found {len(tags)} tags.")

    def _fail(
        self,
        task: SongTask,
        collector: ResultCollector,
        *,
        url: str | None,
        error: str,
        code: str,
    ) -> None:
        logger.warning(
            "Tag lookup failed for row %d (artist=%r song=%r url=%s code=%s): %s",
            task.index,
            task.artist,
            task.song,
            url or "-",
            code,
            error,
        )
        if self.failure_mode == FailureMode.RECORD:
            collector.record_failure(TaskFailure.for_task(task, url=url, error=error, code=code))
        self._emit(f"Error: {task.label()} ({url or '-'}): {error}")

    def _emit(self, message: str) -> None:
        if self._on_progress is None:
            return
        with self._progress_lock:
            try:
                self._on_progress(message)
            except Exception:  # noqa: BLE001
                logger.exception("Progress callback failed for message %r", message)
