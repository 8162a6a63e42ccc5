"""GrabnWatch page scraper — drives the site's form and reads the results."""

from __future__ import annotations

import asyncio
import logging
import random
import string

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.config import Settings

from .errors import NavigationError
from .extract import extract_download_options, extract_title
from .models import ScrapeResult

logger = logging.getLogger(__name__)

URL_INPUT = "#video_url"
SUBMIT_BUTTON = "#submitBtn"

_FILL_GROUP_JS = """(token) => {
    const el = document.getElementById('i_group');
    if (el && !el.value) {
        el.value = token;
        return true;
    }
    return false;
}"""

_LOADING_GONE_JS = """() => {
    const el = document.getElementById('loading');
    return !el || el.style.display === 'none';
}"""

_TOKEN_ALPHABET = string.ascii_lowercase + string.digits


def _group_token(length: int = 8) -> str:
    return "".join(random.choices(_TOKEN_ALPHABET, k=length))


def _ms(seconds: float) -> float:
    return seconds * 1000


class PageScraper:
    """Submits a video URL to GrabnWatch and scrapes the download links."""

    def __init__(self, settings: Settings) -> None:
        self._site_url = settings.site_url
        self._navigation_timeout = settings.navigation_timeout_seconds
        self._challenge_wait = settings.challenge_wait_seconds
        self._form_ready_timeout = settings.form_ready_timeout_seconds
        self._return_wait = settings.return_wait_seconds
        self._loading_timeout = settings.loading_timeout_seconds
        self._settle_wait = settings.settle_wait_seconds

    @property
    def site_url(self) -> str:
        return self._site_url

    async def prepare(self, page: Page) -> None:
        """Open the home page on a fresh page and wait for the form.

        The challenge wait is a blind timer; nothing checks that the
        bot-check actually passed apart from the form becoming visible.
        """
        logger.info("opening site", extra={"site_url": self._site_url})
        try:
            await page.goto(
                self._site_url,
                wait_until="domcontentloaded",
                timeout=_ms(self._navigation_timeout),
            )
            logger.info("waiting for bot check", extra={"seconds": self._challenge_wait})
            await asyncio.sleep(self._challenge_wait)
            await page.wait_for_selector(
                URL_INPUT,
                state="visible",
                timeout=_ms(self._form_ready_timeout),
            )
        except PlaywrightError as exc:
            raise NavigationError(f"site not ready: {exc}") from exc
        logger.info("site ready for input", extra={"site_url": self._site_url})

    async def _ensure_home(self, page: Page) -> None:
        if page.url.rstrip("/") == self._site_url.rstrip("/"):
            return
        logger.info("navigating back to home page", extra={"current_url": page.url})
        try:
            await page.goto(
                self._site_url,
                wait_until="domcontentloaded",
                timeout=_ms(self._navigation_timeout),
            )
        except PlaywrightError as exc:
            raise NavigationError(f"could not return to home page: {exc}") from exc
        await asyncio.sleep(self._return_wait)

    async def _fill_form(self, page: Page, target_url: str) -> None:
        url_input = page.locator(URL_INPUT)
        await url_input.fill("")
        await url_input.press_sequentially(target_url)
        logger.info("url entered into form")

        # i_group is optional on the site
        try:
            filled = await page.evaluate(_FILL_GROUP_JS, _group_token())
            logger.debug("group field checked", extra={"filled": filled})
        except PlaywrightError:
            logger.debug("group field unavailable", exc_info=True)

    async def _submit_and_wait(self, page: Page) -> None:
        await page.click(SUBMIT_BUTTON)
        logger.info("form submitted, waiting for results")
        try:
            await page.wait_for_function(
                _LOADING_GONE_JS,
                timeout=_ms(self._loading_timeout),
            )
        except PlaywrightTimeoutError as exc:
            logger.warning("loading indicator did not disappear: %s", exc)
        await asyncio.sleep(self._settle_wait)

    async def scrape(self, page: Page, target_url: str) -> ScrapeResult | None:
        """Run the full submission sequence for *target_url*.

        Returns ``None`` when no download links were found or the page
        misbehaved after the form was reached. Raises
        :class:`NavigationError` when the home page cannot be reached.
        """
        logger.info("processing url", extra={"target_url": target_url})
        await self._ensure_home(page)

        try:
            await self._fill_form(page, target_url)
            await self._submit_and_wait(page)
            html = await page.content()
        except PlaywrightError:
            logger.error("error processing url", extra={"target_url": target_url}, exc_info=True)
            return None

        title = extract_title(html)
        logger.info("video title", extra={"title": title[:80]})

        options = extract_download_options(html, page.url or self._site_url)
        if not options:
            logger.error("no download links found", extra={"target_url": target_url})
            return None

        logger.info(
            "download options found",
            extra={"target_url": target_url, "option_count": len(options)},
        )
        return ScrapeResult(title=title, options=options)
