"""Document statistics computed alongside a conversion"""

import re

from mdbridge.core.models import BlockElement, BlockType, ConversionStats


LINK_RE = re.compile(r'(?<!!)\[([^\]]+)\]\(([^)]+)\)')
IMAGE_RE = re.compile(r'!\[([^\]]*)\]\(([^)]+)\)')
HTML_TABLE_RE = re.compile(r'<table[^>]*>', re.IGNORECASE)


def _count(blocks: list[BlockElement], *types: BlockType) -> int:
    return sum(1 for b in blocks if b.type in types)


def collect_stats(original: str, output: str, blocks: list[BlockElement]) -> ConversionStats:
    """Compute counts from the original input and the lexed block sequence.

    Text-level counts (words, characters, lines, links, images) always come
    from original, never from output.
    """
    return ConversionStats(
        original_size=len(original),
        processed_size=len(output),
        word_count=len(original.split()),
        character_count=len(original),
        line_count=len(original.split('\n')),
        heading_count=_count(blocks, BlockType.heading),
        link_count=len(LINK_RE.findall(original)),
        image_count=len(IMAGE_RE.findall(original)),
        code_block_count=_count(blocks, BlockType.code_block),
        table_count=_count(blocks, BlockType.table),
        list_item_count=sum(1 for b in blocks if b.is_list_item),
    )


def count_html_tables(html: str) -> int:
    """Count <table> open tags in raw HTML."""
    return len(HTML_TABLE_RE.findall(html))
