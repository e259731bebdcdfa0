"""Controller for tag lookup CLI commands."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from song_tags.config import Settings
from song_tags.http.fetcher import HttpFetcher
from song_tags.io.report import write_failures, write_report
from song_tags.io.songs_csv import read_songs, select_range
from song_tags.lookup.fetchers import LastFmTagFetcher
from song_tags.lookup.models import FailureMode
from song_tags.lookup.orchestrator import TagLookupOrchestrator


@dataclass(slots=True)
class FetchTagsCommand:
    """CLI inputs for the fetch command. ``None`` means use the environment setting."""

    input_file: Path
    output_file: Path
    songs_from: int = 1
    songs_to: int = 20
    workers: int | None = None
    max_workers: int | None = None
    failure_mode: FailureMode | None = None
    failures_file: Path | None = None
    timeout_seconds: float | None = None


class TagsCliController:
    """Coordinates one tag lookup run from CSV to JSON report."""

    def fetch_tags(self, command: FetchTagsCommand) -> list[str]:
        settings = _effective_settings(command)
        settings.validate()

        all_songs = read_songs(command.input_file)
        songs = select_range(all_songs, command.songs_from, command.songs_to)
        lines = [
            f"Loading songs {command.songs_from} to {command.songs_to} "
            f"of {len(all_songs)} songs ({len(songs)} selected)",
        ]

        with HttpFetcher(
            timeout_seconds=settings.http.request_timeout_seconds,
            user_agent=settings.http.user_agent,
        ) as http:
            orchestrator = TagLookupOrchestrator(
                LastFmTagFetcher(
                    http,
                    base_url=settings.http.base_url,
                    tags_xpath=settings.http.tags_xpath,
                ),
                max_workers=settings.lookup.max_workers,
                failure_mode=settings.lookup.failure_mode,
                on_progress=lines.append,
            )
            result = orchestrator.run(songs, settings.lookup.workers)

        write_report(command.output_file, result.outcomes)
        lines.append(
            "Done: "
            f"submitted={result.submitted} "
            f"succeeded={len(result.outcomes)} "
            f"failed={result.failed_count} "
            f"report={command.output_file}",
        )
        if command.failures_file is not None:
            if settings.lookup.failure_mode == FailureMode.RECORD:
                write_failures(command.failures_file, result.failures)
                lines.append(f"Failures: {len(result.failures)} written to {command.failures_file}")
            else:
                lines.append("Failures file skipped: failure mode is 'drop'.")
        return lines


def _effective_settings(command: FetchTagsCommand) -> Settings:
    settings = Settings.from_env()
    lookup = settings.lookup
    if command.workers is not None:
        lookup = replace(lookup, workers=command.workers)
    if command.max_workers is not None:
        lookup = replace(lookup, max_workers=command.max_workers)
    if command.failure_mode is not None:
        lookup = replace(lookup, failure_mode=command.failure_mode)
    http = settings.http
    if command.timeout_seconds is not None:
        http = replace(http, request_timeout_seconds=command.timeout_seconds)
    return replace(settings, lookup=lookup, http=http)
