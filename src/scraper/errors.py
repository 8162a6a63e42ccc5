"""Scraper exceptions."""


class ScraperError(Exception):
    """Base class for failures that abort a scrape."""


class BrowserStartupError(ScraperError):
    """The browser could not be launched or prepared."""


class NavigationError(ScraperError):
    """The site's home page could not be reached or never showed the form."""
