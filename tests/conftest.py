"""Test configuration and fixtures for PageAudit."""

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from pageaudit.modules.audit import DocumentRegistry, MessageRouter, PageDocument, TargetStateTracker
from pageaudit.utils.debug import set_debug_enabled


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
    """Keep tests away from the user's real config and environment."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    work = temp_dir / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    for key in (
        "PAGEAUDIT_TIMEOUT",
        "PAGEAUDIT_COLLECT_TIMEOUT",
        "PAGEAUDIT_VERIFY_SSL",
        "PAGEAUDIT_USER_AGENT",
        "PAGEAUDIT_FETCH_SUBRESOURCES",
        "PAGEAUDIT_DEBUG",
    ):
        monkeypatch.delenv(key, raising=False)
    set_debug_enabled(False)


@pytest.fixture
def tracker() -> TargetStateTracker:
    return TargetStateTracker()


@pytest.fixture
def documents() -> DocumentRegistry:
    return DocumentRegistry()


@pytest.fixture
def router(tracker: TargetStateTracker, documents: DocumentRegistry) -> MessageRouter:
    return MessageRouter(tracker, documents)


@pytest.fixture
def make_document() -> Callable[..., PageDocument]:
    """Build a document from a body fragment, served at ``url``."""

    def _make(body: str, url: str = "https://example.com/page") -> PageDocument:
        return PageDocument.from_html(url, f"<html><head></head><body>{body}</body></html>")

    return _make


@pytest.fixture
def secure_headers() -> dict[str, str]:
    """Headers that satisfy every header rule."""
    return {
        "strict-transport-security": "max-age=63072000",
        "content-security-policy": "default-src 'self'; frame-ancestors 'none'",
        "x-frame-options": "DENY",
        "x-content-type-options": "nosniff",
        "referrer-policy": "strict-origin-when-cross-origin",
        "permissions-policy": "camera=()",
    }
