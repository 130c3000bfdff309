"""HTML fragment to ParsedNode trees: stdlib-parser builder and line fallback"""

import logging
import re
from html.parser import HTMLParser
from typing import Protocol

from mdbridge.core.models import ElementNode, ParsedNode, TextNode


log = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset({
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'source', 'track', 'wbr',
})

# Start tags that close an open <p> first.
P_CLOSERS = frozenset({
    'address', 'article', 'aside', 'blockquote', 'details', 'div', 'dl',
    'fieldset', 'figcaption', 'figure', 'footer', 'form', 'h1', 'h2', 'h3',
    'h4', 'h5', 'h6', 'header', 'hr', 'li', 'main', 'nav', 'ol', 'p',
    'pre', 'section', 'table', 'ul', 'dd', 'dt',
})
P_SCOPE = frozenset({'button', 'caption', 'html', 'table', 'td', 'th', 'template'})

# Start tag -> (open tags it implicitly ends, tags that bound the search).
IMPLIED_END_TAGS: dict[str, tuple[frozenset, frozenset]] = {
    'li':     (frozenset({'li'}), frozenset({'ul', 'ol'})),
    'dt':     (frozenset({'dt', 'dd'}), frozenset({'dl'})),
    'dd':     (frozenset({'dt', 'dd'}), frozenset({'dl'})),
    'tr':     (frozenset({'tr'}), frozenset({'table', 'thead', 'tbody', 'tfoot'})),
    'td':     (frozenset({'td', 'th'}), frozenset({'tr', 'table'})),
    'th':     (frozenset({'td', 'th'}), frozenset({'tr', 'table'})),
    'thead':  (frozenset({'thead', 'tbody', 'tfoot', 'tr', 'td', 'th'}), frozenset({'table'})),
    'tbody':  (frozenset({'thead', 'tbody', 'tfoot', 'tr', 'td', 'th'}), frozenset({'table'})),
    'tfoot':  (frozenset({'thead', 'tbody', 'tfoot', 'tr', 'td', 'th'}), frozenset({'table'})),
    'option': (frozenset({'option'}), frozenset({'select', 'datalist', 'optgroup'})),
}

LINE_TAG_RE = re.compile(r'<(\w+)([^>]*)>(.*?)</\1>', re.IGNORECASE)
ATTR_RE = re.compile(r'''([\w-]+)=["']([^"']*)["']''')


class TreeBuilder(Protocol):
    name: str

    def build(self, html: str) -> list[ParsedNode]:
        ...


class _Frame:
    """Mutable element under construction; frozen into an ElementNode on close."""

    def __init__(self, tag: str, attributes: dict[str, str]):
        self.tag = tag
        self.attributes = attributes
        self.children: list[ParsedNode] = []

    def freeze(self) -> ElementNode:
        return ElementNode(tag=self.tag, attributes=self.attributes, children=tuple(self.children))


class _TreeParser(HTMLParser):
    """HTMLParser subclass that assembles a node tree instead of emitting events."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = _Frame('#root', {})
        self.stack: list[_Frame] = [self.root]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attributes: dict[str, str] = {}
        for name, value in attrs:
            attributes.setdefault(name, value if value is not None else '')
        self._close_implied(tag)
        if tag in VOID_ELEMENTS:
            self.stack[-1].children.append(ElementNode(tag=tag, attributes=attributes))
            return
        self.stack.append(_Frame(tag, attributes))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in VOID_ELEMENTS:
            self.handle_starttag(tag, attrs)
            return
        self.handle_starttag(tag, attrs)
        self._close_top()

    def handle_endtag(self, tag: str) -> None:
        # Close back to the nearest matching element; ignore strays.
        for depth in range(len(self.stack) - 1, 0, -1):
            if self.stack[depth].tag == tag:
                while len(self.stack) > depth:
                    self._close_top()
                return

    def _close_implied(self, tag: str) -> None:
        """Close elements whose end tag is optional and implied by this start tag."""
        if tag in P_CLOSERS:
            self._close_open(frozenset({'p'}), P_SCOPE)
        if tag in IMPLIED_END_TAGS:
            targets, boundary = IMPLIED_END_TAGS[tag]
            while self._close_open(targets, boundary):
                pass

    def _close_open(self, targets: frozenset, boundary: frozenset) -> bool:
        """Close back through the nearest open target not hidden behind a boundary tag."""
        for depth in range(len(self.stack) - 1, 0, -1):
            tag = self.stack[depth].tag
            if tag in targets:
                while len(self.stack) > depth:
                    self._close_top()
                return True
            if tag in boundary:
                return False
        return False

    def handle_data(self, data: str) -> None:
        self.stack[-1].children.append(TextNode(data))

    def _close_top(self) -> None:
        frame = self.stack.pop()
        self.stack[-1].children.append(frame.freeze())

    def result(self) -> list[ParsedNode]:
        self.close()
        while len(self.stack) > 1:
            self._close_top()
        return list(self.root.children)


class StandardTreeBuilder:
    """Tree builder backed by the standard library HTML tokenizer."""
    name = 'html.parser'

    def build(self, html: str) -> list[ParsedNode]:
        parser = _TreeParser()
        parser.feed(html)
        return parser.result()


def parse_attributes(attr_string: str) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for name, value in ATTR_RE.findall(attr_string):
        attributes.setdefault(name, value)
    return attributes


class LineTreeBuilder:
    """Degraded builder: at most one open+close tag pair per line.

    Elements spanning several lines are not reconstructed; their lines come
    back as plain text nodes.
    """
    name = 'line'

    def build(self, html: str) -> list[ParsedNode]:
        nodes: list[ParsedNode] = []
        for line in html.split('\n'):
            trimmed = line.strip()
            if not trimmed:
                continue
            m = LINE_TAG_RE.search(trimmed)
            if m:
                tag, attrs, content = m.groups()
                nodes.append(ElementNode(
                    tag=tag.lower(),
                    attributes=parse_attributes(attrs),
                    children=(TextNode(content),) if content else (),
                ))
            else:
                nodes.append(TextNode(trimmed))
        return nodes


TREE_BUILDERS: dict[str, type] = {
    StandardTreeBuilder.name: StandardTreeBuilder,
    LineTreeBuilder.name:     LineTreeBuilder,
}


def get_tree_builder(name: str) -> TreeBuilder:
    """Instantiate the tree builder registered under name."""
    try:
        builder = TREE_BUILDERS[name]()
    except KeyError:
        raise ValueError(f"Unknown markup parser: {name!r} (expected one of {sorted(TREE_BUILDERS)})") from None
    if builder.name == LineTreeBuilder.name:
        log.info("Using line-oriented markup parser; multi-line elements will not be reconstructed")
    return builder


def parse_html(html: str, builder: TreeBuilder) -> list[ParsedNode]:
    """Parse an HTML fragment into top-level nodes in document order."""
    nodes = builder.build(html)
    log.debug("Parsed %d top-level node(s) with %s builder", len(nodes), builder.name)
    return nodes
