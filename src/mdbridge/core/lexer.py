"""Line-oriented Markdown block lexer driven by an explicit state machine"""

import re
from enum import Enum

from mdbridge.core.models import BlockElement, BlockType


FENCE = "```"
TABLE_SEPARATOR = "|"

HEADING_RE = re.compile(r'^#+')
HR_RE = re.compile(r'^[-*_]{3,}$')
TASK_ITEM_RE = re.compile(r'^(?:[*+-]|\d+\.)\s+\[([ xX])\]\s+')
LIST_ITEM_RE = re.compile(r'^(?:([*+-])|(\d+)\.)\s+')


class LexState(Enum):
    NORMAL = "normal"
    IN_FENCE = "in_fence"
    IN_TABLE = "in_table"


class BlockLexer:
    """Split Markdown text into an ordered list of BlockElements.

    States and their accumulators:
      NORMAL    - each line classified on its own
      IN_FENCE  - fence language + raw lines, closed by the next fence line
      IN_TABLE  - raw rows, closed by the first line without a '|'

    A lexer instance holds state for a single pass; use lex() for one-shot calls.
    """

    def __init__(self):
        self.state = LexState.NORMAL
        self.blocks: list[BlockElement] = []
        self._fence_language = ""
        self._fence_lines: list[str] = []
        self._table_rows: list[str] = []

    def run(self, text: str) -> list[BlockElement]:
        for line in text.split('\n'):
            self.feed(line)
        self.finish()
        return self.blocks

    def feed(self, line: str) -> None:
        trimmed = line.strip()

        if self.state is LexState.IN_FENCE:
            if trimmed.startswith(FENCE):
                self._close_fence()
            else:
                self._fence_lines.append(line)
            return

        if trimmed.startswith(FENCE):
            self._close_table()
            self.state = LexState.IN_FENCE
            self._fence_language = trimmed[len(FENCE):].strip()
            return

        if TABLE_SEPARATOR in trimmed:
            self.state = LexState.IN_TABLE
            self._table_rows.append(line)
            return

        self._close_table()
        self.blocks.append(classify_line(trimmed))

    def finish(self) -> None:
        """Flush whatever accumulator is still open at end of input."""
        if self.state is LexState.IN_FENCE:
            self._close_fence()
        self._close_table()

    def _close_fence(self) -> None:
        self.blocks.append(BlockElement(
            type=BlockType.code_block,
            content='\n'.join(self._fence_lines),
            language=self._fence_language or None,
        ))
        self._fence_lines = []
        self._fence_language = ""
        self.state = LexState.NORMAL

    def _close_table(self) -> None:
        if self.state is not LexState.IN_TABLE:
            return
        self.blocks.append(BlockElement(type=BlockType.table, content='\n'.join(self._table_rows)))
        self._table_rows = []
        self.state = LexState.NORMAL


def classify_line(trimmed: str) -> BlockElement:
    """Classify a single trimmed line outside fences and tables."""
    if trimmed.startswith('#'):
        markers = HEADING_RE.match(trimmed).group(0)
        return BlockElement(
            type=BlockType.heading,
            content=trimmed[len(markers):].strip(),
            level=min(len(markers), 6),
        )

    if HR_RE.match(trimmed):
        return BlockElement(type=BlockType.hr)

    # Task items share the list marker syntax, so they must be tried first.
    if m := TASK_ITEM_RE.match(trimmed):
        return BlockElement(
            type=BlockType.task_list_item,
            content=trimmed[m.end():],
            checked=m.group(1) in 'xX',
        )

    if m := LIST_ITEM_RE.match(trimmed):
        item_type = BlockType.unordered_list_item if m.group(1) else BlockType.ordered_list_item
        return BlockElement(type=item_type, content=trimmed[m.end():])

    if trimmed.startswith('>'):
        return BlockElement(type=BlockType.blockquote, content=trimmed[1:].strip())

    if trimmed:
        return BlockElement(type=BlockType.paragraph, content=trimmed)
    return BlockElement(type=BlockType.empty_line)


def lex(text: str) -> list[BlockElement]:
    """Return the block sequence for Markdown text."""
    return BlockLexer().run(text)
