"""JSON reports for tag lookup results."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from song_tags.lookup.models import TagOutcome, TaskFailure


def outcomes_payload(outcomes: Iterable[TagOutcome]) -> list[dict[str, object]]:
    return [
        {"Artist": outcome.artist, "Song": outcome.song, "Tags": list(outcome.tags)}
        for outcome in outcomes
    ]


def failures_payload(failures: Iterable[TaskFailure]) -> list[dict[str, object]]:
    return [
        {
            "Index": failure.index,
            "Artist": failure.artist,
            "Song": failure.song,
            "Url": failure.url,
            "Error": failure.error,
            "Code": failure.code,
        }
        for failure in sorted(failures, key=lambda item: item.index)
    ]


def write_report(path: Path, outcomes: Iterable[TagOutcome]) -> None:
    _write_json(path, outcomes_payload(outcomes))


def write_failures(path: Path, failures: Iterable[TaskFailure]) -> None:
    _write_json(path, failures_payload(failures))


def _write_json(path: Path, payload: list[dict[str, object]]) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
