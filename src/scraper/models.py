"""Data models for the scraper submodule."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DownloadOption:
    """One candidate download link found on the results page."""

    url: str
    label: str


@dataclass
class ScrapeResult:
    """Title and download options extracted from a single submission."""

    title: str | None = None
    options: list[DownloadOption] = field(default_factory=list)
