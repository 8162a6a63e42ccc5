"""Fixtures — zero-wait settings, fake Playwright page."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config import Settings

SITE_URL = "https://grabnwatch.com/"


@pytest.fixture
def settings() -> Settings:
    """Settings with every blind wait disabled so tests run instantly."""
    return Settings(
        _env_file=None,
        site_url=SITE_URL,
        challenge_wait_seconds=0,
        return_wait_seconds=0,
        settle_wait_seconds=0,
    )


def make_page(html: str = "<html></html>", url: str = SITE_URL) -> MagicMock:
    """A Playwright ``Page`` stand-in whose async methods are AsyncMocks."""
    page = MagicMock()
    page.url = url
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.evaluate = AsyncMock(return_value=True)
    url_input = MagicMock()
    url_input.fill = AsyncMock()
    url_input.press_sequentially = AsyncMock()
    page.locator = MagicMock(return_value=url_input)
    page.click = AsyncMock()
    page.wait_for_function = AsyncMock()
    page.content = AsyncMock(return_value=html)
    return page


@pytest.fixture
def page_factory():
    return make_page
