"""DOM extraction for the GrabnWatch results page.

Both helpers work on the serialized rendered DOM (``page.content()``) so they
can be exercised against static HTML without a browser.
"""

from __future__ import annotations

import logging
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup, Tag

from .models import DownloadOption

logger = logging.getLogger(__name__)

SITE_NAME = "GrabnWatch"
TITLE_PLACEHOLDER = "Video"

# Probed in order; the first element with non-empty text wins.
TITLE_SELECTORS: tuple[str, ...] = ("p.h5", "h1", "h2", ".video-title", ".title")

# (css selector, default label) for the path-prefix passes
_WATCH_PASS = ('a[href^="/w/"]', "Download")
_REDIRECT_PASS = ('a[href^="/r/"]', "Download")
_MEDIA_PASS = ('a[href*="/download/"], a[href*=".mp4"], a[href*=".m3u8"]', "Alternative")
_ORIGINAL_LABEL = "Original"

_DEFAULT_PORTS = {"http": 80, "https": 443}
_PATH_SAFE = "/%:@!$&'()*+,;=~"
_QUERY_SAFE = _PATH_SAFE + "?"


def _parse(html: str | BeautifulSoup) -> BeautifulSoup:
    if isinstance(html, BeautifulSoup):
        return html
    return BeautifulSoup(html, "html.parser")


def _remove_dot_segments(path: str) -> str:
    segments = path.split("/")
    out: list[str] = []
    for seg in segments[1:]:
        if seg == ".":
            continue
        if seg == "..":
            if out:
                out.pop()
            continue
        out.append(seg)
    if segments[-1] in (".", ".."):
        out.append("")
    return "/" + "/".join(out)


def normalize_url(url: str) -> str:
    """Canonicalize an absolute http(s) URL the way a browser reports ``link.href``.

    Lower-cases scheme and host, drops the default port, resolves ``.`` and
    ``..`` path segments and percent-encodes unsafe characters such as
    spaces. Other schemes are returned unchanged.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not parts.hostname:
        return url
    try:
        port = parts.port
    except ValueError:
        return url

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    netloc = host if port in (None, _DEFAULT_PORTS[scheme]) else f"{host}:{port}"
    userinfo = parts.netloc.rpartition("@")[0]
    if userinfo:
        netloc = f"{userinfo}@{netloc}"

    path = quote(_remove_dot_segments(parts.path or "/"), safe=_PATH_SAFE)
    query = quote(parts.query, safe=_QUERY_SAFE)
    fragment = quote(parts.fragment, safe=_QUERY_SAFE)
    return urlunsplit((scheme, netloc, path, query, fragment))


def _document_title(soup: BeautifulSoup) -> str:
    """Mimic ``document.title``: first <title>, whitespace collapsed."""
    tag = soup.find("title")
    if tag is None:
        return ""
    return " ".join(tag.get_text().split())


def extract_title(html: str | BeautifulSoup) -> str:
    """Return the video title shown on the results page."""
    soup = _parse(html)

    for selector in TITLE_SELECTORS:
        for el in soup.select(selector):
            text = el.get_text().strip()
            if text:
                return text

    doc_title = _document_title(soup)
    if doc_title:
        stripped = doc_title.replace(SITE_NAME, "", 1).replace("-", "", 1).strip()
        if stripped:
            return stripped

    return TITLE_PLACEHOLDER


class _OptionCollector:
    """Accumulates options across passes, deduplicating by absolute URL."""

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url
        self._seen: set[str] = set()
        self.options: list[DownloadOption] = []

    def add(self, link: Tag, default_label: str) -> None:
        href = (link.get("href") or "").strip()
        if not href:
            return
        url = normalize_url(urljoin(self._base_url, href))
        if url in self._seen:
            return
        self._seen.add(url)
        label = link.get_text().strip() or default_label
        self.options.append(DownloadOption(url=url, label=label))

    def add_all(self, links: list[Tag], default_label: str) -> None:
        for link in links:
            self.add(link, default_label)


def extract_download_options(
    html: str | BeautifulSoup,
    base_url: str,
) -> list[DownloadOption]:
    """Collect download links from the results page.

    Passes run in a fixed order: watch links (``/w/``), links mentioning
    "original", redirect links (``/r/``), then generic download/media links.
    The first occurrence of a URL keeps its label.
    """
    soup = _parse(html)
    base_tag = soup.find("base", href=True)
    if base_tag is not None:
        base_url = urljoin(base_url, base_tag["href"].strip())
    collector = _OptionCollector(base_url)

    collector.add_all(soup.select(_WATCH_PASS[0]), _WATCH_PASS[1])
    collector.add_all(
        [a for a in soup.find_all("a") if "original" in a.get_text().lower()],
        _ORIGINAL_LABEL,
    )
    collector.add_all(soup.select(_REDIRECT_PASS[0]), _REDIRECT_PASS[1])
    collector.add_all(soup.select(_MEDIA_PASS[0]), _MEDIA_PASS[1])

    logger.debug(
        "download options extracted",
        extra={"base_url": base_url, "option_count": len(collector.options)},
    )
    return collector.options
