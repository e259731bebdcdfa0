from __future__ import annotations

import threading
import time

import allure
import pytest

from song_tags.io.songs_csv import read_songs, select_range
from song_tags.lookup.fetchers import TagFetchError
from song_tags.lookup.models import FailureMode, SongTask
from song_tags.lookup.orchestrator import TagLookupOrchestrator

pytestmark = [
    allure.epic("Tag Lookup"),
    allure.feature("Orchestrator"),
]


def _tasks(count: int) -> list[SongTask]:
    return [
        SongTask(artist=f"Artist {number}", song=f"Song {number}", index=number)
        for number in range(1, count + 1)
    ]


class StaticFetcher:
    def __init__(self, tags: list[str] | None = None) -> None:
        self._tags = tags or ["rock"]
        self._lock = threading.Lock()
        self.calls: list[SongTask] = []

    def fetch(self, task: SongTask) -> list[str]:
        with self._lock:
            self.calls.append(task)
        return list(self._tags)


class FailingFetcher:
    def fetch(self, task: SongTask) -> list[str]:
        raise TagFetchError(message="HTTP 404", url=f"https://example.com/{task.index}")


class ScriptedFetcher:
    def __init__(self, script: dict[int, list[str] | Exception]) -> None:
        self._script = script

    def fetch(self, task: SongTask) -> list[str]:
        planned = self._script[task.index]
        if isinstance(planned, Exception):
            raise planned
        return planned


class CountingFetcher:
    def __init__(self, delay: float = 0.005) -> None:
        self._lock = threading.Lock()
        self._delay = delay
        self.current = 0
        self.peak = 0
        self.finished = 0

    def fetch(self, task: SongTask) -> list[str]:  # noqa: ARG002
        with self._lock:
            self.current += 1
            self.peak = max(self.peak, self.current)
        time.sleep(self._delay)
        with self._lock:
            self.current -= 1
            self.finished += 1
        return []


def test_all_successful_tasks_yield_one_outcome_each() -> None:
    fetcher = StaticFetcher()
    result = TagLookupOrchestrator(fetcher).run(_tasks(50), requested_workers=7)

    songs = sorted(outcome.song for outcome in result.outcomes)
    assert len(result.outcomes) == 50
    assert songs == sorted(f"Song {number}" for number in range(1, 51))
    assert result.failures == []
    assert result.submitted == 50
    assert len(fetcher.calls) == 50
    assert len(set(fetcher.calls)) == 50


def test_all_failing_tasks_yield_empty_outcomes() -> None:
    result = TagLookupOrchestrator(FailingFetcher()).run(_tasks(12), requested_workers=4)

    assert result.outcomes == []
    assert result.failed_count == 12
    assert sorted(failure.index for failure in result.failures) == list(range(1, 13))


def test_mixed_outcomes_keep_exact_tag_lists() -> None:
    fetcher = ScriptedFetcher(
        {
            1: ["rock"],
            2: TagFetchError(message="timeout", url="https://example.com/2", code="timeout"),
            3: ["pop", "indie"],
            4: TagFetchError(message="HTTP 500", url="https://example.com/4"),
            5: [],
        },
    )

    result = TagLookupOrchestrator(fetcher).run(_tasks(5), requested_workers=3)

    by_song = {outcome.song: outcome.tags for outcome in result.outcomes}
    assert by_song == {"Song 1": ["rock"], "Song 3": ["pop", "indie"], "Song 5": []}
    assert len(result.outcomes) == 3
    failures = sorted(result.failures, key=lambda failure: failure.index)
    assert [(failure.index, failure.url, failure.error) for failure in failures] == [
        (2, "https://example.com/2", "timeout"),
        (4, "https://example.com/4", "HTTP 500"),
    ]
    assert [failure.code for failure in failures] == ["timeout", "fetch_error"]


def test_drop_mode_keeps_no_failure_records(caplog) -> None:
    fetcher = ScriptedFetcher(
        {1: ["rock"], 2: TagFetchError(message="HTTP 404", url="https://example.com/2")},
    )

    with caplog.at_level("WARNING", logger="song_tags.lookup.orchestrator"):
        result = TagLookupOrchestrator(fetcher, failure_mode=FailureMode.DROP).run(
            _tasks(2),
            requested_workers=2,
        )

    assert [outcome.song for outcome in result.outcomes] == ["Song 1"]
    assert result.failures == []
    assert result.failed_count == 1
    assert "row 2" in caplog.text
    assert "Artist 2" in caplog.text
    assert "https://example.com/2" in caplog.text
    assert "HTTP 404" in caplog.text


def test_unexpected_fetcher_exception_does_not_abort_run() -> None:
    fetcher = ScriptedFetcher({1: RuntimeError("parser exploded"), 2: ["jazz"]})

    result = TagLookupOrchestrator(fetcher).run(_tasks(2), requested_workers=2)

    assert [outcome.tags for outcome in result.outcomes] == [["jazz"]]
    assert len(result.failures) == 1
    assert result.failures[0].error == "RuntimeError: parser exploded"
    assert result.failures[0].url is None
    assert result.failures[0].code == "unexpected_error"


def test_concurrency_never_exceeds_default_ceiling() -> None:
    fetcher = CountingFetcher()

    result = TagLookupOrchestrator(fetcher).run(_tasks(240), requested_workers=1000)

    assert fetcher.peak <= 80
    assert fetcher.finished == 240
    assert len(result.outcomes) == 240


def test_concurrency_respects_configured_ceiling() -> None:
    fetcher = CountingFetcher()

    TagLookupOrchestrator(fetcher, max_workers=3).run(_tasks(30), requested_workers=50)

    assert fetcher.peak <= 3


def test_non_positive_worker_request_runs_with_one_worker() -> None:
    fetcher = CountingFetcher()

    result = TagLookupOrchestrator(fetcher).run(_tasks(5), requested_workers=0)

    assert fetcher.peak == 1
    assert len(result.outcomes) == 5


def test_result_is_complete_when_run_returns() -> None:
    fetcher = CountingFetcher(delay=0.02)

    result = TagLookupOrchestrator(fetcher).run(_tasks(16), requested_workers=4)

    assert fetcher.current == 0
    assert fetcher.finished == 16
    assert len(result.outcomes) == 16


def test_empty_task_list_returns_empty_result() -> None:
    result = TagLookupOrchestrator(StaticFetcher()).run([], requested_workers=10)

    assert result.outcomes == []
    assert result.failures == []
    assert result.submitted == 0


def test_progress_messages_cover_every_task() -> None:
    messages: list[str] = []
    fetcher = ScriptedFetcher({1: ["rock", "pop"], 2: TagFetchError(message="HTTP 404")})

    TagLookupOrchestrator(fetcher, on_progress=messages.append).run(
        _tasks(2),
        requested_workers=2,
    )

    assert "Finished: #1 Artist 1 - Song 1. Found 2 tags." in messages
    assert any(message.startswith("Error: #2 Artist 2 - Song 2") for message in messages)
    assert len(messages) == 2


def test_range_selection_submits_exactly_selected_tasks(songs_csv) -> None:
    fetcher = StaticFetcher()
    tasks = select_range(read_songs(songs_csv), 5, 10)

    result = TagLookupOrchestrator(fetcher).run(tasks, requested_workers=20)

    assert len(fetcher.calls) == 5
    assert sorted(task.index for task in fetcher.calls) == [5, 6, 7, 8, 9]
    assert result.submitted == 5


def test_setup_error_propagates() -> None:
    with pytest.raises(ValueError, match="ceiling"):
        TagLookupOrchestrator(StaticFetcher(), max_workers=0).run(_tasks(1), requested_workers=1)


def test_failing_progress_callback_does_not_lose_results(caplog) -> None:
    def _on_progress(message: str) -> None:
        if "#2 " in message:
            raise OSError("stdout closed")

    with caplog.at_level("ERROR", logger="song_tags.lookup.orchestrator"):
        result = TagLookupOrchestrator(StaticFetcher(), on_progress=_on_progress).run(
            _tasks(5),
            requested_workers=3,
        )

    assert sorted(outcome.song for outcome in result.outcomes) == [
        f"Song {number}" for number in range(1, 6)
    ]
    assert result.failures == []
    assert "Progress callback failed" in caplog.text
