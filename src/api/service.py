"""Service layer — runs a scrape on a browser session for the API routes."""

from __future__ import annotations

import logging

from src.api.schemas import DownloadOptionOut, ProcessResponse
from src.scraper import PageScraper, SessionProvider

logger = logging.getLogger(__name__)


async def process_video_url(
    sessions: SessionProvider,
    scraper: PageScraper,
    url: str,
) -> ProcessResponse | None:
    """Scrape download links for *url*.

    Returns ``None`` when the site produced no links. Session startup and
    navigation failures propagate to the caller.
    """
    logger.info("api request received", extra={"original_url": url})

    async with sessions.acquire() as page:
        result = await scraper.scrape(page, url)

    if result is None:
        return None

    return ProcessResponse(
        original_url=url,
        title=result.title,
        download_options=[
            DownloadOptionOut(url=opt.url, label=opt.label) for opt in result.options
        ],
    )
