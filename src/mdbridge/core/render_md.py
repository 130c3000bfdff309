"""ParsedNode tree to Markdown rendering via a tag dispatch table"""

import re
from typing import Callable

from mdbridge.config import ConversionConfig
from mdbridge.core.models import ElementNode, ParsedNode, TextNode


WS_RE = re.compile(r'\s+')
BLANK_RUN_RE = re.compile(r'\n{3,}')
LIST_TAGS = frozenset({'ul', 'ol'})
INLINE_TAGS = frozenset({'a', 'b', 'code', 'del', 'em', 'i', 'img', 's', 'span', 'strike', 'strong'})
INDENT = '  '


def text_content(nodes: tuple[ParsedNode, ...] | list[ParsedNode]) -> str:
    """Concatenate all descendant text, no markup."""
    parts = []
    for node in nodes:
        if isinstance(node, TextNode):
            parts.append(node.content)
        else:
            parts.append(text_content(node.children))
    return ''.join(parts)


def single_line(text: str) -> str:
    """Join the non-blank lines of text with single spaces."""
    return ' '.join(line.strip() for line in text.splitlines() if line.strip())


def normalize(markdown: str) -> str:
    """Collapse runs of blank lines to one and trim the document edges."""
    return BLANK_RUN_RE.sub('\n\n', markdown).strip('\n').strip()


def _find(node: ElementNode, predicate: Callable[[ElementNode], bool]) -> ElementNode | None:
    """Depth-first search for the first descendant element matching predicate."""
    for child in node.children:
        if isinstance(child, ElementNode):
            if predicate(child):
                return child
            found = _find(child, predicate)
            if found is not None:
                return found
    return None


class MarkdownRenderer:
    """Walk a parsed HTML tree and emit Markdown.

    Tags are looked up in TAG_RENDERERS; anything unregistered falls back to
    its flattened text. Feature-gated tags use the same fallback when their
    feature is disabled.
    """

    def __init__(self, config: ConversionConfig):
        self.config = config

    def render(self, nodes: list[ParsedNode]) -> str:
        return normalize(self.render_blocks(nodes))

    def render_blocks(self, nodes, indent: int = 0) -> str:
        """Render nodes in block context: loose text is trimmed and space-joined."""
        parts = []
        last = len(nodes) - 1
        for i, node in enumerate(nodes):
            if isinstance(node, TextNode):
                text = node.content.strip()
                if not text:
                    continue
                prev = nodes[i - 1] if i else None
                # Keep the gap after an inline sibling: <b>x</b> y is "**x** y".
                if isinstance(prev, ElementNode) and prev.tag in INLINE_TAGS and node.content[0].isspace():
                    text = ' ' + text
                parts.append(text + (' ' if i < last else ''))
            else:
                parts.append(self.render_element(node, indent))
        return ''.join(parts)

    def render_inline(self, nodes, indent: int = 0) -> str:
        """Render nodes in inline context: text whitespace collapses to single spaces."""
        parts = []
        for node in nodes:
            if isinstance(node, TextNode):
                parts.append(WS_RE.sub(' ', node.content))
            else:
                parts.append(self.render_element(node, indent))
        return ''.join(parts)

    def render_element(self, node: ElementNode, indent: int = 0) -> str:
        strategy = TAG_RENDERERS.get(node.tag, render_fallback)
        return strategy(self, node, indent)

    # -- lists ---------------------------------------------------------------

    def render_list(self, node: ElementNode, indent: int) -> str:
        if node.tag == 'ul' and self.config.enable_task_lists and 'task-list' in node.classes():
            return self._render_items(node, indent, task=True)
        return self._render_items(node, indent, task=False)

    def _render_items(self, node: ElementNode, indent: int, task: bool) -> str:
        lines = []
        number = _list_start(node)
        for item in node.children:
            if not isinstance(item, ElementNode) or item.tag != 'li':
                continue
            if node.tag == 'ol':
                marker = f'{number}.'
                number += 1
            else:
                marker = '-'
            if task:
                marker += ' ' + _checkbox_mark(item)

            nested, own = [], []
            for c in item.children:
                (nested if isinstance(c, ElementNode) and c.tag in LIST_TAGS else own).append(c)
            text = single_line(self.render_inline(own, indent))
            lines.append(f'{INDENT * indent}{marker} {text}'.rstrip() + '\n')
            for sub in nested:
                lines.append(self.render_list(sub, indent + 1))
        return ''.join(lines)

    # -- tables --------------------------------------------------------------

    def render_table(self, node: ElementNode) -> str:
        rows: list[list[str]] = []
        has_header = False
        for child in node.children:
            if not isinstance(child, ElementNode):
                continue
            if child.tag == 'thead':
                has_header = True
                rows.extend(self._table_rows(child))
            elif child.tag in ('tbody', 'tfoot'):
                rows.extend(self._table_rows(child))
            elif child.tag == 'tr':
                rows.append(self._table_cells(child))
        if not rows:
            return ''

        lines = []
        for i, row in enumerate(rows):
            lines.append('| ' + ' | '.join(row) + ' |')
            if i == 0 and (has_header or len(rows) > 1):
                lines.append('| ' + ' | '.join('---' for _ in row) + ' |')
        return '\n'.join(lines) + '\n'

    def _table_rows(self, section: ElementNode) -> list[list[str]]:
        return [
            self._table_cells(tr) for tr in section.children
            if isinstance(tr, ElementNode) and tr.tag == 'tr'
        ]

    def _table_cells(self, tr: ElementNode) -> list[str]:
        return [
            single_line(self.render_inline(cell.children)).replace('|', '\\|')
            for cell in tr.children
            if isinstance(cell, ElementNode) and cell.tag in ('th', 'td')
        ]


def _list_start(node: ElementNode) -> int:
    start = node.attributes.get('start', '')
    return int(start) if start.isdigit() else 1


def _checkbox_mark(item: ElementNode) -> str:
    box = _find(item, lambda n: n.tag == 'input' and n.attributes.get('type') == 'checkbox')
    return '[x]' if box is not None and 'checked' in box.attributes else '[ ]'


# -- strategies ----------------------------------------------------------------

Strategy = Callable[[MarkdownRenderer, ElementNode, int], str]


def render_fallback(r: MarkdownRenderer, node: ElementNode, indent: int) -> str:
    return WS_RE.sub(' ', text_content(node.children))


def render_nothing(r: MarkdownRenderer, node: ElementNode, indent: int) -> str:
    return ''


def render_heading(r, node, indent):
    text = r.render_inline(node.children).strip()
    return f"\n{'#' * int(node.tag[1])} {text}\n\n"


def render_paragraph(r, node, indent):
    text = r.render_inline(node.children, indent).strip()
    return f'\n{text}\n\n' if text else ''


def _wrap(marker: str) -> Strategy:
    def render(r, node, indent):
        return f'{marker}{r.render_inline(node.children, indent).strip()}{marker}'
    return render


def render_strikethrough(r, node, indent):
    if not r.config.enable_strikethrough:
        return render_fallback(r, node, indent)
    return _wrap('~~')(r, node, indent)


def render_code(r, node, indent):
    return f'`{text_content(node.children)}`'


def render_pre(r, node, indent):
    code = next((c for c in node.children if isinstance(c, ElementNode) and c.tag == 'code'), None)
    language = ''
    if code is not None:
        language = next((c[len('language-'):] for c in code.classes() if c.startswith('language-')), '')
    body = text_content((code or node).children)
    if body.startswith('\n'):
        body = body[1:]
    return f'\n```{language}\n{body.rstrip()}\n```\n\n'


def render_link(r, node, indent):
    text = r.render_inline(node.children, indent).strip()
    href = node.attributes.get('href', '')
    title = node.attributes.get('title')
    return f'[{text}]({href} "{title}")' if title else f'[{text}]({href})'


def render_image(r, node, indent):
    alt = node.attributes.get('alt', '')
    src = node.attributes.get('src', '')
    title = node.attributes.get('title')
    return f'![{alt}]({src} "{title}")' if title else f'![{alt}]({src})'


def render_blockquote(r, node, indent):
    content = r.render_blocks(node.children, indent)
    quoted = ''.join(f'> {line.strip()}\n' for line in content.split('\n') if line.strip())
    return f'\n{quoted}\n'


def render_list(r, node, indent):
    return f'\n{r.render_list(node, indent)}\n'


def render_table(r, node, indent):
    if not r.config.enable_tables:
        return render_fallback(r, node, indent)
    return f'\n{r.render_table(node)}\n'


def render_container(r, node, indent):
    return r.render_blocks(node.children, indent)


def render_span(r, node, indent):
    return r.render_inline(node.children, indent)


TAG_RENDERERS: dict[str, Strategy] = {
    **{f'h{n}': render_heading for n in range(1, 7)},
    'p':          render_paragraph,
    'strong':     _wrap('**'),
    'b':          _wrap('**'),
    'em':         _wrap('*'),
    'i':          _wrap('*'),
    'code':       render_code,
    'pre':        render_pre,
    'a':          render_link,
    'img':        render_image,
    'blockquote': render_blockquote,
    'ul':         render_list,
    'ol':         render_list,
    'table':      render_table,
    'hr':         lambda r, node, indent: '\n---\n\n',
    'br':         lambda r, node, indent: '\n',
    'del':        render_strikethrough,
    's':          render_strikethrough,
    'strike':     render_strikethrough,
    'span':       render_span,
    **{tag: render_container for tag in (
        'div', 'section', 'article', 'main', 'header', 'footer', 'nav', 'body', 'html')},
    **{tag: render_nothing for tag in ('head', 'title', 'script', 'style')},
}


def render_markdown(nodes: list[ParsedNode], config: ConversionConfig) -> str:
    """Render a parsed HTML fragment as normalized Markdown."""
    return MarkdownRenderer(config).render(nodes)
