"""Tag fetcher contracts and the Last.fm track page implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote_plus

from song_tags.http.fetcher import HttpFetcher
from song_tags.http.tag_extractor import DEFAULT_TAGS_XPATH, extract_tags
from song_tags.lookup.models import SongTask

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.last.fm"


@dataclass(slots=True)
class TagFetchError(Exception):
    """Tag lookup for one song failed; the run goes on without it."""

    message: str
    url: str | None = None
    code: str = "fetch_error"

    def __str__(self) -> str:
        return self.message


class TagFetcher(Protocol):
    """Anything that can turn a song into its tag list."""

    def fetch(self, task: SongTask) -> list[str]:
        """Return tags for ``task`` or raise ``TagFetchError``."""
        raise NotImplementedError


def build_track_url(artist: str, song: str, *, base_url: str = DEFAULT_BASE_URL) -> str:
    """Last.fm track page, e.g. ``https://www.last.fm/music/ABBA/_/Dancing+Queen``."""

    return f"{base_url.rstrip('/')}/music/{quote_plus(artist)}/_/{quote_plus(song)}"


class LastFmTagFetcher:
    """Downloads a track page and extracts its tag list."""

    def __init__(
        self,
        http: HttpFetcher,
        *,
        base_url: str = DEFAULT_BASE_URL,
        tags_xpath: str = DEFAULT_TAGS_XPATH,
    ) -> None:
        self.http = http
        self.base_url = base_url
        self.tags_xpath = tags_xpath

    def url_for(self, task: SongTask) -> str:
        return build_track_url(task.artist, task.song, base_url=self.base_url)

    def fetch(self, task: SongTask) -> list[str]:
        url = self.url_for(task)
        page = self.http.get(url)
        if not page.is_success:
            code = "timeout" if page.error == "timeout" else f"http_{page.status_code}"
            raise TagFetchError(message=page.error or "request failed", url=url, code=code)

        extracted = extract_tags(page.content, xpath=self.tags_xpath, url=url)
        if not extracted.is_success:
            raise TagFetchError(
                message=extracted.error or "extraction failed",
                url=url,
                code="parse_error",
            )
        return extracted.tags
