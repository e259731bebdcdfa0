"""Songs CSV loading and range selection."""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path

from song_tags.lookup.models import SongTask

_COLUMNS = 4


class SongsFileError(Exception):
    """Songs CSV cannot be read or has malformed rows."""


def read_songs(path: Path) -> list[SongTask]:
    """Load ``artist, song, link, text`` rows into tasks numbered from 1.

    A leading ``artist,song,...`` header row is skipped and not numbered.
    """

    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            rows = list(csv.reader(handle))
    except (OSError, UnicodeDecodeError, csv.Error) as error:
        raise SongsFileError(f"Cannot read songs file {str(path)!r}: {error}") from error

    songs: list[SongTask] = []
    for row_no, row in enumerate(rows, start=1):
        if not row:
            continue
        if row_no == 1 and _is_header(row):
            continue
        if len(row) < _COLUMNS:
            raise SongsFileError(
                f"{path}: row {row_no}: expected {_COLUMNS} columns "
                f"(artist, song, link, text), got {len(row)}.",
            )
        artist, song, link, text = row[:_COLUMNS]
        songs.append(
            SongTask(
                artist=artist.strip(),
                song=song.strip(),
                link=link.strip(),
                text=text,
                index=len(songs) + 1,
            ),
        )
    return songs


def select_range(songs: Sequence[SongTask], songs_from: int, songs_to: int) -> list[SongTask]:
    """Songs numbered ``songs_from`` (inclusive) to ``songs_to`` (exclusive), 1-based."""

    if songs_from < 1:
        raise ValueError(f"songs_from must be >= 1, got {songs_from}.")
    if songs_to < songs_from:
        raise ValueError(f"songs_to ({songs_to}) must not be less than songs_from ({songs_from}).")
    return list(songs[songs_from - 1 : songs_to - 1])


def _is_header(row: list[str]) -> bool:
    return len(row) >= 2 and row[0].strip().lower() == "artist" and row[1].strip().lower() == "song"
