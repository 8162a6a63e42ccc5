"""GrabnWatch scraping submodule: browser sessions, page driver, extraction."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import BrowserStartupError, NavigationError, ScraperError
from .extract import extract_download_options, extract_title
from .grabnwatch import PageScraper
from .models import DownloadOption, ScrapeResult
from .session import PerRequestSessions, SessionPool, SessionProvider

if TYPE_CHECKING:
    from src.config import Settings

__all__ = [
    "BrowserStartupError",
    "DownloadOption",
    "NavigationError",
    "PageScraper",
    "PerRequestSessions",
    "ScrapeResult",
    "ScraperError",
    "SessionPool",
    "SessionProvider",
    "build_session_provider",
    "extract_download_options",
    "extract_title",
]

logger = logging.getLogger(__name__)


def build_session_provider(settings: Settings, scraper: PageScraper) -> SessionProvider:
    """Build the session provider selected by ``settings.session_mode``."""
    if settings.session_mode == "per_request":
        logger.debug("using per-request browser sessions")
        return PerRequestSessions(settings, scraper.prepare)

    logger.debug("using pooled browser sessions", extra={"pool_size": settings.pool_size})
    return SessionPool(
        settings,
        scraper.prepare,
        size=settings.pool_size,
        prewarm=settings.pool_prewarm,
    )
