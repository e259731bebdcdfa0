"""Domain models for tag lookup runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FailureMode(str, Enum):
    """What to keep for a task whose fetch failed."""

    RECORD = "record"
    DROP = "drop"


@dataclass(frozen=True, slots=True)
class SongTask:
    """One song to look up, built from a single CSV row."""

    artist: str
    song: str
    link: str = ""
    text: str = ""
    index: int = 0

    def label(self) -> str:
        return f"#{self.index} {self.artist} - {self.song}"


@dataclass(slots=True)
class TagOutcome:
    """Tags found for one song."""

    artist: str
    song: str
    tags: list[str] = field(default_factory=list)

    @classmethod
    def for_task(cls, task: SongTask, tags: list[str]) -> TagOutcome:
        return cls(artist=task.artist, song=task.song, tags=list(tags))


@dataclass(slots=True)
class TaskFailure:
    """Failure marker for a song whose lookup did not produce tags."""

    index: int
    artist: str
    song: str
    url: str | None
    error: str
    code: str = "fetch_error"

    @classmethod
    def for_task(
        cls,
        task: SongTask,
        *,
        url: str | None,
        error: str,
        code: str = "fetch_error",
    ) -> TaskFailure:
        return cls(
            index=task.index,
            artist=task.artist,
            song=task.song,
            url=url,
            error=error,
            code=code,
        )


@dataclass(slots=True)
class LookupResult:
    """Everything one orchestrator run produced.

    ``outcomes`` holds one entry per successful task in completion order, which
    is unrelated to input order. ``failures`` stays empty when failures are
    dropped.
    """

    outcomes: list[TagOutcome] = field(default_factory=list)
    failures: list[TaskFailure] = field(default_factory=list)
    submitted: int = 0

    @property
    def failed_count(self) -> int:
        return self.submitted - len(self.outcomes)
