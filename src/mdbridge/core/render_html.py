"""Block sequence to HTML rendering with list tracking, TOC, and document shell"""

import re
from dataclasses import dataclass, field

from mdbridge.config import ConversionConfig
from mdbridge.core.escape import Escaper
from mdbridge.core.inline import process_inline
from mdbridge.core.models import BlockElement, BlockType, TocEntry
from mdbridge.core.utils.slug import slugify


TABLE_DIVIDER_RE = re.compile(r'^[\s|:-]+$')
CELL_SEPARATOR_RE = re.compile(r'(?<!\\)\|')

# list kind -> (open tag, close tag)
LIST_TAGS: dict[BlockType, tuple[str, str]] = {
    BlockType.unordered_list_item: ('<ul>', '</ul>'),
    BlockType.ordered_list_item:   ('<ol>', '</ol>'),
    BlockType.task_list_item:      ('<ul class="task-list">', '</ul>'),
}

DOCUMENT_SHELL = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Converted Document</title>
    <style>
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; max-width: 800px; margin: 0 auto; padding: 2rem; }
        h1, h2, h3, h4, h5, h6 { margin-top: 2rem; margin-bottom: 1rem; }
        pre { background: #f4f4f4; padding: 1rem; border-radius: 4px; overflow-x: auto; }
        code { background: #f4f4f4; padding: 0.2rem 0.4rem; border-radius: 3px; font-family: 'Monaco', 'Consolas', monospace; }
        blockquote { border-left: 4px solid #ddd; margin: 0; padding-left: 1rem; }
        table { border-collapse: collapse; width: 100%; }
        th, td { border: 1px solid #ddd; padding: 0.5rem; text-align: left; }
        th { background: #f4f4f4; }
        .task-list { list-style: none; padding-left: 0; }
        .task-list-item { margin: 0.5rem 0; }
        .table-of-contents { background: #f9f9f9; padding: 1rem; border-radius: 4px; margin-bottom: 2rem; }
        .table-of-contents ul { margin: 0; padding-left: 1.5rem; }
    </style>
</head>
<body>
{body}
</body>
</html>"""


@dataclass
class RenderedHtml:
    """Forward rendering result: the HTML fragment and the TOC it was built with."""
    html: str
    toc: list[TocEntry] = field(default_factory=list)


def split_row(row: str) -> list[str]:
    """Split a pipe-delimited row into trimmed cells, dropping empty edge cells.

    An escaped pipe (\\|) stays inside its cell as a literal |.
    """
    cells = [c.strip().replace('\\|', '|') for c in CELL_SEPARATOR_RE.split(row)]
    while cells and not cells[0]:
        cells.pop(0)
    while cells and not cells[-1]:
        cells.pop()
    return cells


def heading_level(block: BlockElement, offset: int) -> int:
    return min(max((block.level or 1) + offset, 1), 6)


class HtmlRenderer:
    """Render a block sequence to an HTML fragment.

    One instance per call: the open-list stack and TOC are per-document state.
    """

    def __init__(self, config: ConversionConfig, escape: Escaper):
        self.config = config
        self.escape = escape
        self.parts: list[str] = []
        self.list_stack: list[BlockType] = []
        self.toc: list[TocEntry] = []

    def render(self, blocks: list[BlockElement]) -> RenderedHtml:
        for block in blocks:
            if block.type is BlockType.empty_line:
                continue
            kind = self._list_kind(block)
            if kind is None:
                self._close_lists()
            elif not self.list_stack or self.list_stack[-1] is not kind:
                # Lists of different kinds never nest; close before switching.
                self._close_lists()
                self.parts.append(LIST_TAGS[kind][0] + '\n')
                self.list_stack.append(kind)
            self.parts.append(self._render_block(block))
        self._close_lists()

        html = ''.join(self.parts)
        if self.toc:
            html = self._render_toc() + html
        return RenderedHtml(html=html.strip(), toc=self.toc)

    def _list_kind(self, block: BlockElement) -> BlockType | None:
        if block.type is BlockType.task_list_item and not self.config.enable_task_lists:
            return BlockType.unordered_list_item
        return block.type if block.is_list_item else None

    def _close_lists(self) -> None:
        while self.list_stack:
            self.parts.append(LIST_TAGS[self.list_stack.pop()][1] + '\n')

    def _inline(self, text: str) -> str:
        return process_inline(text, self.config)

    def _render_block(self, block: BlockElement) -> str:
        t = block.type
        if t is BlockType.heading:
            return self._render_heading(block)
        if t is BlockType.paragraph:
            return f'<p>{self._inline(block.content)}</p>\n'
        if t is BlockType.code_block:
            cls = f' class="language-{block.language}"' if block.language else ''
            return f'<pre><code{cls}>{self.escape(block.content)}</code></pre>\n'
        if t is BlockType.blockquote:
            return f'<blockquote><p>{self._inline(block.content)}</p></blockquote>\n'
        if t is BlockType.table:
            return self._render_table(block)
        if t is BlockType.hr:
            return '<hr>\n'
        if t is BlockType.task_list_item:
            return self._render_task_item(block)
        return f'  <li>{self._inline(block.content)}</li>\n'

    def _render_heading(self, block: BlockElement) -> str:
        level = heading_level(block, self.config.heading_offset)
        slug = slugify(block.content)
        if self.config.generate_toc:
            self.toc.append(TocEntry(level=level, title=block.content, slug=slug))
        return f'<h{level} id="{slug}">{self._inline(block.content)}</h{level}>\n'

    def _render_task_item(self, block: BlockElement) -> str:
        if not self.config.enable_task_lists:
            mark = '[x]' if block.checked else '[ ]'
            return f'  <li>{mark} {self._inline(block.content)}</li>\n'
        checked = ' checked' if block.checked else ''
        return (
            f'  <li class="task-list-item"><input type="checkbox"{checked} disabled> '
            f'{self._inline(block.content)}</li>\n'
        )

    def _render_table(self, block: BlockElement) -> str:
        rows = [split_row(r) for r in block.content.split('\n') if not TABLE_DIVIDER_RE.match(r.strip())]
        rows = [r for r in rows if r]
        if not self.config.enable_tables:
            return ''.join(f'<p>{self._inline(" | ".join(r))}</p>\n' for r in rows)
        if not rows:
            return ''

        header, body = rows[0], rows[1:]
        out = ['<table>\n', '<thead>\n', self._render_row(header, 'th'), '</thead>\n']
        if body:
            out.append('<tbody>\n')
            out.extend(self._render_row(r, 'td') for r in body)
            out.append('</tbody>\n')
        out.append('</table>\n')
        return ''.join(out)

    def _render_row(self, cells: list[str], tag: str) -> str:
        inner = ''.join(f'    <{tag}>{self._inline(c)}</{tag}>\n' for c in cells)
        return f'  <tr>\n{inner}  </tr>\n'

    def _render_toc(self) -> str:
        items = ''.join(f'  <li><a href="#{e.slug}">{e.title}</a></li>\n' for e in self.toc)
        return (
            '<div class="table-of-contents">\n<h2>Table of Contents</h2>\n<ul>\n'
            f'{items}</ul>\n</div>\n\n'
        )


def render_html(blocks: list[BlockElement], config: ConversionConfig, escape: Escaper) -> RenderedHtml:
    """Render blocks to an HTML fragment, with the TOC prepended when enabled."""
    return HtmlRenderer(config, escape).render(blocks)


def wrap_document(fragment: str) -> str:
    """Wrap an HTML fragment in a standalone document with baseline styles."""
    return DOCUMENT_SHELL.replace('{body}', fragment)
