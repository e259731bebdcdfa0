"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _clean_song_tags_env(monkeypatch):
    """Keep tests independent of SONG_TAGS_* variables set in the shell."""
    for name in list(os.environ):
        if name.startswith("SONG_TAGS_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def songs_csv(tmp_path: Path) -> Path:
    """CSV with a header row and 20 songs numbered 1..20."""
    lines = ["artist,song,link,text"]
    for number in range(1, 21):
        lines.append(f'Artist {number},Song {number},/a/{number}.html,"line one\nline two"')
    path = tmp_path / "songs.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
