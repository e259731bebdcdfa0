"""CLI entrypoint for song-tags."""

from pathlib import Path

import rich_click as click

from song_tags import __version__
from song_tags.controllers import FetchTagsCommand, TagsCliController
from song_tags.io.songs_csv import SongsFileError
from song_tags.lookup.models import FailureMode

click.rich_click.USE_MARKDOWN = True
TAGS_CONTROLLER = TagsCliController()


@click.group()
@click.version_option(version=__version__, prog_name="song-tags")
def song_tags() -> None:
    """Bulk genre tag lookup for songs in a CSV file."""


@song_tags.command("fetch")
@click.option(
    "--input-file",
    type=click.Path(path_type=Path),
    default=Path("songdata.csv"),
    show_default=True,
    help="Input CSV with artist, song, link, text columns.",
)
@click.option(
    "--output-file",
    type=click.Path(path_type=Path),
    default=Path("results.json"),
    show_default=True,
    help="Output JSON report.",
)
@click.option(
    "--songs-from",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of the first song in the CSV (1-based, inclusive).",
)
@click.option(
    "--songs-to",
    type=click.IntRange(min=1),
    default=20,
    show_default=True,
    help="Number of the last song in the CSV (exclusive).",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Concurrent workers. Defaults to SONG_TAGS_WORKERS or 20.",
)
@click.option(
    "--max-workers",
    type=click.IntRange(min=1),
    default=None,
    help="Hard ceiling for --workers. Defaults to SONG_TAGS_MAX_WORKERS or 80.",
)
@click.option(
    "--failure-mode",
    type=click.Choice([mode.value for mode in FailureMode], case_sensitive=False),
    default=None,
    help="`record` keeps failed songs for the failures file, `drop` only logs them.",
)
@click.option(
    "--failures-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Optional JSON file listing songs whose lookup failed.",
)
@click.option(
    "--timeout-seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-request timeout. Defaults to SONG_TAGS_REQUEST_TIMEOUT_SECONDS or 30.",
)
def fetch(  # noqa: PLR0913
    input_file: Path,
    output_file: Path,
    songs_from: int,
    songs_to: int,
    workers: int | None,
    max_workers: int | None,
    failure_mode: str | None,
    failures_file: Path | None,
    timeout_seconds: float | None,
) -> None:
    """Fetch tags for a range of songs and write a JSON report."""

    command = FetchTagsCommand(
        input_file=input_file,
        output_file=output_file,
        songs_from=songs_from,
        songs_to=songs_to,
        workers=workers,
        max_workers=max_workers,
        failure_mode=FailureMode(failure_mode.lower()) if failure_mode else None,
        failures_file=failures_file,
        timeout_seconds=timeout_seconds,
    )
    try:
        lines = TAGS_CONTROLLER.fetch_tags(command)
    except (SongsFileError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    except OSError as error:
        raise click.ClickException(f"Cannot write report: {error}") from error
    _emit_lines(lines)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    song_tags()
