"""Headless browser sessions — pooled or created per request."""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Protocol

from playwright.async_api import Browser, Page, Playwright, async_playwright

from src.config import Settings

from .errors import BrowserStartupError, ScraperError

logger = logging.getLogger(__name__)

PrepareCallback = Callable[[Page], Awaitable[None]]


class SessionProvider(Protocol):
    """Hands out prepared pages, one caller at a time per page."""

    async def start(self) -> None: ...

    def acquire(self) -> AbstractAsyncContextManager[Page]: ...

    async def close(self) -> None: ...


@dataclass
class BrowserSession:
    """A launched Chromium browser with a single prepared page."""

    browser: Browser
    page: Page

    def is_alive(self) -> bool:
        return self.browser.is_connected()

    async def close(self) -> None:
        try:
            await self.browser.close()
        except Exception:
            logger.warning("browser close failed", exc_info=True)


async def launch_session(
    playwright: Playwright,
    settings: Settings,
    prepare: PrepareCallback,
) -> BrowserSession:
    """Launch Chromium, open a page and run *prepare* on it.

    Any failure closes the half-built browser and raises
    :class:`BrowserStartupError`.
    """
    launch_kwargs: dict = {
        "headless": settings.headless,
        "args": settings.browser_arg_list(),
    }
    if settings.browser_executable_path:
        launch_kwargs["executable_path"] = settings.browser_executable_path
    logger.info(
        "launching browser",
        extra={"headless": settings.headless, "executable_path": settings.browser_executable_path or None},
    )

    try:
        browser = await playwright.chromium.launch(**launch_kwargs)
    except Exception as exc:
        raise BrowserStartupError(f"browser launch failed: {exc}") from exc

    try:
        context = await browser.new_context(user_agent=settings.user_agent)
        page = await context.new_page()
        await prepare(page)
    except Exception as exc:
        try:
            await browser.close()
        except Exception:
            logger.warning("browser close failed", exc_info=True)
        if isinstance(exc, ScraperError):
            raise BrowserStartupError(str(exc)) from exc
        raise BrowserStartupError(f"browser setup failed: {exc}") from exc

    return BrowserSession(browser=browser, page=page)


class SessionPool:
    """Fixed number of long-lived sessions, each used by one request at a time.

    Slots start empty and are filled lazily (or by :meth:`start` when
    pre-warming). A slot whose browser has disconnected is relaunched on the
    next acquire.
    """

    def __init__(
        self,
        settings: Settings,
        prepare: PrepareCallback,
        *,
        size: int = 1,
        prewarm: bool = False,
    ) -> None:
        if size < 1:
            raise ValueError("pool size must be at least 1")
        self._settings = settings
        self._prepare = prepare
        self._size = size
        self._prewarm = prewarm
        self._playwright: Playwright | None = None
        self._slots: asyncio.Queue[BrowserSession | None] = asyncio.Queue()
        self._sessions: list[BrowserSession] = []
        self._started = False
        self._start_lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return self._size

    async def start(self) -> None:
        async with self._start_lock:
            if self._started:
                return
            self._playwright = await async_playwright().start()
            self._started = True
            for _ in range(self._size):
                session = None
                if self._prewarm:
                    try:
                        session = await self._launch()
                    except BrowserStartupError:
                        logger.exception("session pre-warm failed")
                self._slots.put_nowait(session)
        logger.info("session pool started", extra={"pool_size": self._size})

    async def _launch(self) -> BrowserSession:
        if self._playwright is None:
            raise BrowserStartupError("session pool not started")
        session = await launch_session(self._playwright, self._settings, self._prepare)
        self._sessions.append(session)
        return session

    async def _discard(self, session: BrowserSession) -> None:
        if session in self._sessions:
            self._sessions.remove(session)
        await session.close()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Page]:
        if not self._started:
            await self.start()

        session = await self._slots.get()
        try:
            if session is not None and not session.is_alive():
                logger.warning("browser disconnected, relaunching")
                await self._discard(session)
                session = None
            if session is None:
                session = await self._launch()
            yield session.page
        finally:
            self._slots.put_nowait(session)

    async def close(self) -> None:
        for session in list(self._sessions):
            await self._discard(session)
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        self._slots = asyncio.Queue()
        self._started = False
        logger.info("session pool closed")


class PerRequestSessions:
    """A fresh driver and browser for every acquire, torn down afterwards."""

    def __init__(self, settings: Settings, prepare: PrepareCallback) -> None:
        self._settings = settings
        self._prepare = prepare

    async def start(self) -> None:
        return None

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Page]:
        playwright = await async_playwright().start()
        try:
            session = await launch_session(playwright, self._settings, self._prepare)
            try:
                yield session.page
            finally:
                await session.close()
        finally:
            await playwright.stop()

    async def close(self) -> None:
        return None
