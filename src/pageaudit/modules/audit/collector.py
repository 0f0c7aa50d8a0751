"""Page signal collection over a parsed document.

Each ``collect_*`` function is an independent read-only scan returning the
signals it found, in document order. ``collect`` runs all six.
"""

import re
import time

from bs4.element import NavigableString, Tag

from .document import PageDocument, is_http_url
from .evidence import locate
from .models import (
    ContentAudit,
    DomXssInlineSignal,
    FormPostsToHttpSignal,
    InlineHandlerSignal,
    MixedContentSignal,
    PasswordAutocompleteMissingSignal,
    PasswordViaGetSignal,
    Signal,
    TabnabbingSignal,
    TokenInUrlSignal,
)

MIXED_CONTENT_SELECTORS: tuple[tuple[str, str], ...] = (
    ("script[src]", "src"),
    ("img[src]", "src"),
    ("iframe[src]", "src"),
    ("link[rel~='stylesheet' i][href]", "href"),
    ("audio[src], video[src], source[src]", "src"),
)

PASSWORD_INPUT = "input[type='password' i]"

TOKEN_PATTERNS: tuple[str, ...] = (
    r"access_token=",
    r"id_token=",
    r"\btoken=",
    r"\bjwt=",
    r"\bapikey=",
    r"\bapi_key=",
    r"\bsession=",
)

# Order matters: the first listed match is the one reported.
DOM_XSS_SOURCES: tuple[str, ...] = (
    "location",
    "location.href",
    "location.search",
    "location.hash",
    "document.cookie",
    "localStorage",
    "sessionStorage",
    "postMessage",
    "event.data",
)
DOM_XSS_SINKS: tuple[str, ...] = (
    "innerHTML",
    "outerHTML",
    "insertAdjacentHTML",
    "document.write",
    "eval(",
    "new Function",
)

INLINE_HANDLER_ATTRS: tuple[str, ...] = (
    "onclick",
    "onload",
    "onerror",
    "onmouseover",
    "onfocus",
    "oninput",
    "onsubmit",
)


def _attr(element: Tag, name: str) -> str:
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _text_content(element: Tag) -> str:
    return "".join(
        str(child) for child in element.descendants if isinstance(child, NavigableString)
    )


def collect_mixed_content(document: PageDocument) -> list[MixedContentSignal]:
    """Find plain-HTTP subresources on an HTTPS page."""
    if not document.is_https:
        return []

    issues: list[MixedContentSignal] = []
    for selector, attr in MIXED_CONTENT_SELECTORS:
        for element in document.soup.select(selector):
            value = _attr(element, attr)
            if not value:
                continue
            absolute = document.resolve(value)
            if is_http_url(absolute):
                issues.append(
                    MixedContentSignal(
                        element=element.name.lower(),
                        attr=attr,
                        url=absolute,
                        evidence=locate(element),
                    )
                )
    return issues


def collect_form_issues(document: PageDocument) -> list[Signal]:
    """Check forms for cleartext submission and password field hygiene."""
    issues: list[Signal] = []
    for form in document.soup.find_all("form"):
        action = _attr(form, "action") or document.url
        absolute = document.resolve(action)
        method = (_attr(form, "method") or "get").lower()
        password = form.select_one(PASSWORD_INPUT)

        if absolute is not None and document.is_https and is_http_url(absolute):
            issues.append(
                FormPostsToHttpSignal(url=absolute, method=method, evidence=locate(form))
            )
        if password is not None and method == "get":
            issues.append(PasswordViaGetSignal(evidence=locate(form)))
        if password is not None and not _attr(password, "autocomplete"):
            issues.append(PasswordAutocompleteMissingSignal(evidence=locate(password)))
    return issues


def collect_url_leakage(document: PageDocument) -> list[TokenInUrlSignal]:
    """Report the first token-like parameter name in the query or fragment."""
    haystack = f"{document.search}&{document.hash}"
    for pattern in TOKEN_PATTERNS:
        if re.search(pattern, haystack, re.IGNORECASE):
            return [
                TokenInUrlSignal(
                    pattern=pattern,
                    evidence=f"URL contains sensitive-looking parameter matching /{pattern}/i",
                )
            ]
    return []


def find_source_to_sink(code: str) -> tuple[str, str] | None:
    """Return ``(source, sink)`` when the code names both, else ``None``.

    This is a substring heuristic, not a parser. Sources are only looked for
    once a sink is present, so a script naming just one of them is ignored.
    """
    sink = next((name for name in DOM_XSS_SINKS if name in code), None)
    if sink is None:
        return None
    source = next((name for name in DOM_XSS_SOURCES if name in code), None)
    if source is None:
        return None
    return source, sink


def collect_dom_xss_inline(document: PageDocument) -> list[DomXssInlineSignal]:
    """Flag inline scripts that mention both a taint source and a DOM sink."""
    issues: list[DomXssInlineSignal] = []
    for script in document.soup.select("script:not([src])"):
        match = find_source_to_sink(_text_content(script))
        if match is None:
            continue
        source, sink = match
        issues.append(DomXssInlineSignal(source=source, sink=sink, evidence=locate(script)))
    return issues


def collect_tabnabbing(document: PageDocument) -> list[TabnabbingSignal]:
    """Flag ``target=_blank`` links missing ``noopener`` or ``noreferrer``."""
    issues: list[TabnabbingSignal] = []
    for anchor in document.soup.select("a[target='_blank' i]"):
        rel = _attr(anchor, "rel").lower()
        if "noopener" not in rel or "noreferrer" not in rel:
            issues.append(TabnabbingSignal(href=_attr(anchor, "href"), evidence=locate(anchor)))
    return issues


def collect_inline_handlers(document: PageDocument) -> list[InlineHandlerSignal]:
    """One signal per element carrying an inline event handler attribute."""
    selector = ",".join(f"[{attr}]" for attr in INLINE_HANDLER_ATTRS)
    issues: list[InlineHandlerSignal] = []
    for element in document.soup.select(selector):
        found = next(attr for attr in INLINE_HANDLER_ATTRS if element.has_attr(attr))
        issues.append(InlineHandlerSignal(attr=found, evidence=locate(element)))
    return issues


def collect(document: PageDocument) -> ContentAudit:
    """Run every sub-scan against ``document``."""
    return ContentAudit(
        url=document.url,
        origin=document.origin,
        protocol=document.protocol,
        timestamp=time.time(),
        mixed_content=tuple(collect_mixed_content(document)),
        form_issues=tuple(collect_form_issues(document)),
        url_leakage=tuple(collect_url_leakage(document)),
        dom_xss_inline=tuple(collect_dom_xss_inline(document)),
        tabnabbing=tuple(collect_tabnabbing(document)),
        inline_handlers=tuple(collect_inline_handlers(document)),
    )
