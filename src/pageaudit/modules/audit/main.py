"""One-shot audit of a URL."""

from dataclasses import dataclass

from .auditor import DEFAULT_COLLECT_TIMEOUT, Auditor
from .loader import PageLoader
from .messages import MessageRouter
from .models import AuditResult
from .tracker import TargetStateTracker

DEFAULT_TARGET_ID = 1


@dataclass
class AuditConfig:
    """Configuration for an audit run."""

    url: str
    timeout: float = 15.0
    verify_ssl: bool = True
    user_agent: str | None = None
    fetch_subresources: bool = False
    collect_timeout: float = DEFAULT_COLLECT_TIMEOUT
    concurrency: int = 8


async def audit_url(config: AuditConfig, target_id: int = DEFAULT_TARGET_ID) -> AuditResult:
    """Load ``config.url`` into a fresh target and audit it.

    Raises ``PageLoadError`` when the page itself cannot be fetched.
    """
    router = MessageRouter(TargetStateTracker())
    loader = PageLoader(
        router,
        timeout=config.timeout,
        verify_ssl=config.verify_ssl,
        user_agent=config.user_agent,
        fetch_subresources=config.fetch_subresources,
        concurrency=config.concurrency,
    )
    await loader.load(target_id, config.url)
    return await Auditor(router, collect_timeout=config.collect_timeout).audit(target_id)
