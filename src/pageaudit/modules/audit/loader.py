"""Page loader that plays the part of the browser's event sources.

It fetches a page over HTTP, reports navigation, document headers and
completed loads to the router, and attaches the parsed document so signal
collection can query it.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from pageaudit.errors import PageLoadError
from pageaudit.tools.http import HTTPClient

from .document import PageDocument, scheme_of
from .messages import (
    DOCUMENT_LEVEL,
    HeadersEvent,
    MessageRouter,
    NavigationEvent,
    RequestCompletedEvent,
)

logger = logging.getLogger(__name__)

# (selector, attribute, resource type as reported by request completion)
SUBRESOURCE_SELECTORS: tuple[tuple[str, str, str], ...] = (
    ("script[src]", "src", "script"),
    ("img[src]", "src", "image"),
    ("link[rel~='stylesheet' i][href]", "href", "stylesheet"),
    ("iframe[src]", "src", "sub_frame"),
    ("audio[src], video[src], source[src]", "src", "media"),
)


def discover_subresources(document: PageDocument) -> list[tuple[str, str]]:
    """Return unique ``(absolute_url, resource_type)`` pairs in document order."""
    seen: set[str] = set()
    found: list[tuple[str, str]] = []
    for selector, attr, resource_type in SUBRESOURCE_SELECTORS:
        for element in document.soup.select(selector):
            value = element.get(attr)
            if not value:
                continue
            absolute = document.resolve(str(value))
            if not absolute or scheme_of(absolute) not in ("http", "https"):
                continue
            if absolute in seen:
                continue
            seen.add(absolute)
            found.append((absolute, resource_type))
    return found


class PageLoader:
    """Load a page into a target, emitting the events a browser would."""

    def __init__(
        self,
        router: MessageRouter,
        timeout: float = 15.0,
        verify_ssl: bool = True,
        user_agent: str | None = None,
        fetch_subresources: bool = False,
        concurrency: int = 8,
    ):
        self.router = router
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent
        self.fetch_subresources = fetch_subresources
        self.concurrency = max(1, concurrency)

    def _client(self) -> HTTPClient:
        return HTTPClient(
            timeout=self.timeout,
            verify_ssl=self.verify_ssl,
            user_agent=self.user_agent,
        )

    async def load(self, target_id: int, url: str) -> PageDocument:
        """Navigate ``target_id`` to ``url`` and return the parsed document."""
        self.router.dispatch(NavigationEvent(target_id=target_id, frame_depth=0))

        async with self._client() as client:
            try:
                response = await client.get(url)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise PageLoadError(url, str(exc) or type(exc).__name__) from exc
            logger.debug(
                "Loaded %s (%s) in %.2fs",
                response.url,
                response.status_code,
                response.response_time,
            )

            self.router.dispatch(
                HeadersEvent(
                    target_id=target_id,
                    resource_kind=DOCUMENT_LEVEL,
                    url=response.url,
                    status_code=response.status_code,
                    headers=tuple(response.headers),
                )
            )
            self.router.dispatch(
                RequestCompletedEvent(
                    target_id=target_id, url=response.url, resource_kind="main_frame"
                )
            )

            document = PageDocument.from_html(response.url, response.body)
            self.router.documents.attach(target_id, document)

            if self.fetch_subresources:
                await self._load_subresources(client, target_id, document)
        return document

    async def _load_subresources(
        self, client: HTTPClient, target_id: int, document: PageDocument
    ) -> None:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def fetch(resource_url: str, resource_type: str) -> None:
            async with semaphore:
                try:
                    response = await client.get(resource_url)
                except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
                    logger.debug("Subresource %s failed: %s", resource_url, exc)
                    return
            self.router.dispatch(
                RequestCompletedEvent(
                    target_id=target_id, url=response.url, resource_kind=resource_type
                )
            )

        await asyncio.gather(
            *(fetch(resource_url, kind) for resource_url, kind in discover_subresources(document))
        )
