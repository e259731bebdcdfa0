"""Thread-safe fan-in of per-task results."""

from __future__ import annotations

import threading

from song_tags.lookup.models import LookupResult, TagOutcome, TaskFailure


class ResultCollector:
    """Gathers outcomes and failures from concurrent workers for one run.

    Workers call ``record`` / ``record_failure`` from their own threads. The
    owner calls ``drain`` once all work has finished; after that the collector
    is closed and rejects new records.
    """

    def __init__(self, *, submitted: int = 0) -> None:
        self._lock = threading.Lock()
        self._outcomes: list[TagOutcome] = []
        self._failures: list[TaskFailure] = []
        self._submitted = submitted
        self._closed = False

    def record(self, outcome: TagOutcome) -> None:
        with self._lock:
            self._ensure_open()
            self._outcomes.append(outcome)

    def record_failure(self, failure: TaskFailure) -> None:
        with self._lock:
            self._ensure_open()
            self._failures.append(failure)

    def drain(self) -> LookupResult:
        """Close the collector and return a snapshot of everything recorded."""

        with self._lock:
            self._closed = True
            return LookupResult(
                outcomes=list(self._outcomes),
                failures=list(self._failures),
                submitted=self._submitted,
            )

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Result collector is already drained.")
