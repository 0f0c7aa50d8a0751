"""Async HTTP client used to load pages under audit."""

import time
from dataclasses import dataclass, field

import httpx

DEFAULT_USER_AGENT = "PageAudit/0.1 (+passive security posture audit)"


@dataclass
class HTTPResponse:
    """Represents an HTTP response."""

    url: str
    status_code: int
    headers: list[tuple[str, str]]
    body: str
    response_time: float
    content_type: str = ""
    redirects: list[str] = field(default_factory=list)

    def header(self, name: str) -> str:
        """Return the last value of a header by case-insensitive name."""
        found = ""
        for key, value in self.headers:
            if key.lower() == name.lower():
                found = value
        return found


class HTTPClient:
    """Async HTTP client for fetching documents and their subresources."""

    def __init__(
        self,
        timeout: float = 15.0,
        follow_redirects: bool = True,
        verify_ssl: bool = True,
        user_agent: str | None = None,
    ):
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
            verify=self.verify_ssl,
            headers={"User-Agent": self.user_agent},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()

    async def request(self, method: str, url: str) -> HTTPResponse:
        """Make an HTTP request."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        start = time.time()
        response = await self.client.request(method=method, url=url)
        elapsed = time.time() - start

        return HTTPResponse(
            url=str(response.url),
            status_code=response.status_code,
            headers=list(response.headers.multi_items()),
            body=response.text,
            response_time=elapsed,
            content_type=response.headers.get("content-type", ""),
            redirects=[str(item.url) for item in response.history],
        )

    async def get(self, url: str) -> HTTPResponse:
        """Make a GET request."""
        return await self.request("GET", url)
