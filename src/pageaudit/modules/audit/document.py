"""Parsed page documents queried by the signal collector."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup


def resolve_url(value: str, base: str) -> str | None:
    """Resolve ``value`` against ``base``; ``None`` when it cannot be parsed."""
    try:
        absolute = urljoin(base, value.strip())
        urlsplit(absolute)
    except ValueError:
        return None
    return absolute


def scheme_of(url: str) -> str:
    try:
        return urlsplit(url).scheme.lower()
    except ValueError:
        return ""


def is_http_url(url: str | None) -> bool:
    return bool(url) and scheme_of(url) == "http"


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` for a URL, or ``""``."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return ""
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


@dataclass(eq=False)
class PageDocument:
    """A page URL together with its parsed DOM tree."""

    url: str
    soup: BeautifulSoup

    @classmethod
    def from_html(cls, url: str, html: str) -> PageDocument:
        return cls(url=url, soup=BeautifulSoup(html or "", "html.parser"))

    @property
    def protocol(self) -> str:
        scheme = scheme_of(self.url)
        return f"{scheme}:" if scheme else ""

    @property
    def is_https(self) -> bool:
        return scheme_of(self.url) == "https"

    @property
    def origin(self) -> str:
        return origin_of(self.url)

    @property
    def search(self) -> str:
        """Query string with its ``?`` prefix, or ``""``."""
        query = urlsplit(self.url).query if scheme_of(self.url) else ""
        return f"?{query}" if query else ""

    @property
    def hash(self) -> str:
        """Fragment with its ``#`` prefix, or ``""``."""
        fragment = urlsplit(self.url).fragment if scheme_of(self.url) else ""
        return f"#{fragment}" if fragment else ""

    @cached_property
    def base_url(self) -> str:
        """Document base: the first ``<base href>`` resolved against the URL."""
        base = self.soup.find("base", href=True)
        if base is not None:
            resolved = resolve_url(str(base["href"]), self.url)
            if resolved:
                return resolved
        return self.url

    def resolve(self, value: str) -> str | None:
        return resolve_url(value, self.base_url)
