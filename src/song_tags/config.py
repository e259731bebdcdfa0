"""Runtime configuration for tag lookup runs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from song_tags.http.fetcher import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from song_tags.http.tag_extractor import DEFAULT_TAGS_XPATH
from song_tags.lookup.fetchers import DEFAULT_BASE_URL
from song_tags.lookup.models import FailureMode
from song_tags.lookup.pool import MAX_WORKERS


@dataclass(slots=True)
class LookupSettings:
    """Worker pool and failure handling settings."""

    workers: int = 20
    max_workers: int = MAX_WORKERS
    failure_mode: FailureMode = FailureMode.RECORD


@dataclass(slots=True)
class HttpSettings:
    """Track page download settings."""

    base_url: str = DEFAULT_BASE_URL
    tags_xpath: str = DEFAULT_TAGS_XPATH
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    lookup: LookupSettings = field(default_factory=LookupSettings)
    http: HttpSettings = field(default_factory=HttpSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from ``SONG_TAGS_*`` environment variables."""

        return cls(
            lookup=LookupSettings(
                workers=_env_int("SONG_TAGS_WORKERS", 20),
                max_workers=_env_int("SONG_TAGS_MAX_WORKERS", MAX_WORKERS),
                failure_mode=_env_failure_mode("SONG_TAGS_FAILURE_MODE", FailureMode.RECORD),
            ),
            http=HttpSettings(
                base_url=os.getenv("SONG_TAGS_BASE_URL", DEFAULT_BASE_URL).strip(),
                tags_xpath=os.getenv("SONG_TAGS_TAGS_XPATH", DEFAULT_TAGS_XPATH),
                request_timeout_seconds=_env_float(
                    "SONG_TAGS_REQUEST_TIMEOUT_SECONDS",
                    DEFAULT_TIMEOUT_SECONDS,
                ),
                user_agent=os.getenv("SONG_TAGS_USER_AGENT", DEFAULT_USER_AGENT),
            ),
        )

    def validate(self) -> None:
        """Raise ``ValueError`` naming the first invalid setting."""

        if self.lookup.workers <= 0:
            raise ValueError("SONG_TAGS_WORKERS must be a positive integer.")
        if self.lookup.max_workers <= 0:
            raise ValueError("SONG_TAGS_MAX_WORKERS must be a positive integer.")
        if self.http.request_timeout_seconds <= 0:
            raise ValueError("SONG_TAGS_REQUEST_TIMEOUT_SECONDS must be > 0.")
        if not self.http.tags_xpath.strip():
            raise ValueError("SONG_TAGS_TAGS_XPATH must not be empty.")
        parsed = urlparse(self.http.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                "Invalid SONG_TAGS_BASE_URL: "
                f"{self.http.base_url!r}. Expected an absolute http:// or https:// URL.",
            )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {raw!r}") from error


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError as error:
        raise ValueError(f"Invalid number value for {name}: {raw!r}") from error


def _env_failure_mode(name: str, default: FailureMode) -> FailureMode:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return FailureMode(raw.strip().lower())
    except ValueError as error:
        choices = ", ".join(mode.value for mode in FailureMode)
        raise ValueError(
            f"Invalid value for {name}: {raw!r}. Expected one of: {choices}",
        ) from error
