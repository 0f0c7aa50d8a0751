"""Structural locator strings used as audit evidence."""

from bs4 import BeautifulSoup
from bs4.element import Tag

MAX_DEPTH = 5
SEPARATOR = " > "


def _is_element(node) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def _class_tokens(element: Tag) -> list[str]:
    value = element.get("class") or []
    if isinstance(value, str):
        value = value.split()
    return [token for token in value if token]


def locate(node) -> str:
    """Build a short CSS-like path from ``node`` up through its ancestors.

    An element with an ``id`` ends the path early, since the id is taken as
    unique enough to anchor it. At most ``MAX_DEPTH`` segments are produced.
    Anything that is not an element yields an empty string.
    """
    if not _is_element(node):
        return ""

    parts: list[str] = []
    element = node
    while _is_element(element) and len(parts) < MAX_DEPTH:
        part = element.name.lower()
        element_id = element.get("id")
        if element_id:
            parts.insert(0, f"{part}#{element_id}")
            break
        classes = _class_tokens(element)
        if classes:
            part += "." + ".".join(classes[:2])
        parts.insert(0, part)
        element = element.parent
    return SEPARATOR.join(parts)
