"""HTTP helpers for PageAudit."""

from .client import DEFAULT_USER_AGENT, HTTPClient, HTTPResponse

__all__ = [
    "DEFAULT_USER_AGENT",
    "HTTPClient",
    "HTTPResponse",
]
