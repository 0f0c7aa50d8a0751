"""Tests for the HTTP page loader and one-shot audit."""

import httpx
import pytest
import respx
from httpx import Response

from pageaudit.errors import PageLoadError
from pageaudit.modules.audit import AuditConfig, PageLoader, audit_url
from pageaudit.modules.audit.loader import discover_subresources
from pageaudit.tools.http import HTTPClient

PAGE = """<html><head>
<link rel="stylesheet" href="/site.css">
<script src="http://cdn.example/lib.js"></script>
</head><body>
<img src="/logo.png"><img src="/logo.png"><img src="data:image/png;base64,AA==">
<a target="_blank" href="https://other.example">out</a>
</body></html>"""


class TestHTTPClient:
    """Test HTTPClient functionality."""

    @respx.mock
    async def test_get_request_keeps_repeated_headers(self):
        respx.get("https://example.com").mock(
            return_value=Response(
                200,
                text="Hello",
                headers=[("X-Dup", "one"), ("X-Dup", "two"), ("Content-Type", "text/html")],
            )
        )

        async with HTTPClient() as client:
            response = await client.get("https://example.com")

        assert response.status_code == 200
        assert response.body == "Hello"
        assert response.header("x-dup") == "two"
        assert response.content_type == "text/html"

    async def test_request_requires_context_manager(self):
        with pytest.raises(RuntimeError):
            await HTTPClient().get("https://example.com")


class TestPageLoader:
    """Test navigation, header and request events emitted by the loader."""

    def test_discover_subresources(self):
        from pageaudit.modules.audit import PageDocument

        document = PageDocument.from_html("https://example.com/", PAGE)

        assert discover_subresources(document) == [
            ("http://cdn.example/lib.js", "script"),
            ("https://example.com/logo.png", "image"),
            ("https://example.com/site.css", "stylesheet"),
        ]

    @respx.mock
    async def test_load_populates_tracker_and_documents(self, router, tracker, documents):
        respx.get("https://example.com/").mock(
            return_value=Response(
                200,
                text=PAGE,
                headers={"Content-Security-Policy": "default-src 'self'", "Content-Type": "text/html"},
            )
        )
        tracker.on_request_completed(1, "https://stale.example/", "main_frame")

        document = await PageLoader(router).load(1, "https://example.com/")

        state = tracker.get_state(1)
        assert state.main_frame.url == "https://example.com/"
        assert state.main_frame.header("content-security-policy") == "default-src 'self'"
        assert [entry.url for entry in state.request_log] == ["https://example.com/"]
        assert documents.get(1) is document

    @respx.mock
    async def test_load_fetches_subresources_when_enabled(self, router, tracker):
        respx.get("https://example.com/").mock(return_value=Response(200, text=PAGE))
        respx.get("http://cdn.example/lib.js").mock(return_value=Response(200, text="//"))
        respx.get("https://example.com/logo.png").mock(return_value=Response(200, content=b"png"))
        respx.get("https://example.com/site.css").mock(side_effect=httpx.ConnectError("refused"))

        await PageLoader(router, fetch_subresources=True).load(1, "https://example.com/")

        log = {(entry.url, entry.resource_type) for entry in tracker.get_state(1).request_log}
        assert log == {
            ("https://example.com/", "main_frame"),
            ("http://cdn.example/lib.js", "script"),
            ("https://example.com/logo.png", "image"),
        }

    @respx.mock
    async def test_load_failure_raises_page_load_error(self, router):
        respx.get("https://down.example/").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(PageLoadError):
            await PageLoader(router).load(1, "https://down.example/")


class TestAuditUrl:
    """Test the one-shot audit entry point."""

    @respx.mock
    async def test_audit_url_end_to_end(self):
        respx.get("https://example.com/").mock(return_value=Response(200, text=PAGE))

        result = await audit_url(AuditConfig(url="https://example.com/"))

        ids = [finding.id for finding in result.findings]
        assert ids[0] == "CSP_MISSING"
        assert "HSTS_MISSING" in ids
        assert result.error is None
        assert len(result.content.tabnabbing) == 1
        assert len(result.content.mixed_content) == 1


class TestSubresourceFailures:
    """Test that a bad subresource never aborts the page load."""

    @respx.mock
    async def test_unencodable_host_is_skipped(self, router, tracker):
        page = '<script src="http://xn--a.com/a.js"></script><img src="/logo.png">'
        respx.get("https://example.com/").mock(return_value=Response(200, text=page))
        respx.get("https://example.com/logo.png").mock(return_value=Response(200, content=b"png"))

        await PageLoader(router, fetch_subresources=True).load(1, "https://example.com/")

        log = [(entry.url, entry.resource_type) for entry in tracker.get_state(1).request_log]
        assert ("https://example.com/logo.png", "image") in log
        assert all("xn--a.com" not in url for url, _ in log)
