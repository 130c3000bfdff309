"""HTML escaping strategies for verbatim code block content"""

from typing import Callable

from markdown_it.common.utils import escapeHtml


Escaper = Callable[[str], str]

DEFAULT_ESCAPER = "markdown-it"

ENTITY_MAP = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}


def escape_entities(text: str) -> str:
    """Replace the five HTML-significant characters using a fixed entity map."""
    return "".join(ENTITY_MAP.get(ch, ch) for ch in text)


ESCAPERS: dict[str, Escaper] = {
    "markdown-it": escapeHtml,
    "entities":    escape_entities,
}


def get_escaper(name: str) -> Escaper:
    """Return the escaper registered under name."""
    try:
        return ESCAPERS[name]
    except KeyError:
        raise ValueError(f"Unknown escaper: {name!r} (expected one of {sorted(ESCAPERS)})") from None
