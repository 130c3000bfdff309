"""Intermediate data models for the lexing, parsing, and rendering pipeline"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


class BlockType(str, Enum):
    """Structural units recognized by the Markdown block lexer"""
    heading = "heading"
    paragraph = "paragraph"
    code_block = "code-block"
    table = "table"
    blockquote = "blockquote"
    unordered_list_item = "unordered-list-item"
    ordered_list_item = "ordered-list-item"
    task_list_item = "task-list-item"
    hr = "hr"
    empty_line = "empty-line"


LIST_ITEM_TYPES = frozenset({
    BlockType.unordered_list_item,
    BlockType.ordered_list_item,
    BlockType.task_list_item,
})


class BlockElement(BaseModel):
    """A single typed block produced by one lexing pass."""
    model_config = ConfigDict(frozen=True)

    type: BlockType
    content: str = ""
    level: Optional[int] = None         # heading level (1-6); None for non-headings
    language: Optional[str] = None      # fence info string for code blocks
    checked: Optional[bool] = None      # task list items only
    href: Optional[str] = None
    alt: Optional[str] = None
    title: Optional[str] = None

    @property
    def is_list_item(self) -> bool:
        return self.type in LIST_ITEM_TYPES


@dataclass(frozen=True)
class TextNode:
    """Character data between tags."""
    content: str


@dataclass(frozen=True)
class ElementNode:
    """An HTML element; attributes keep source order, first occurrence wins."""
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: tuple["ParsedNode", ...] = ()

    def classes(self) -> list[str]:
        return self.attributes.get("class", "").split()


ParsedNode = Union[TextNode, ElementNode]


class TocEntry(BaseModel):
    """Table-of-contents entry recorded in heading encounter order."""
    level: int
    title: str
    slug: str


class ConversionStats(BaseModel):
    """Size and structure counts computed from the original input."""
    original_size: int
    processed_size: int
    word_count: int
    character_count: int
    line_count: int
    heading_count: int
    link_count: int
    image_count: int
    code_block_count: int
    table_count: int
    list_item_count: int


class ConversionSuccess(BaseModel):
    success: Literal[True] = True
    output: str
    stats: ConversionStats


class ConversionFailure(BaseModel):
    success: Literal[False] = False
    error: str


ConversionResult = Union[ConversionSuccess, ConversionFailure]
