"""Unit tests for core/convert.py"""

import threading

import pytest

from mdbridge.config import ConversionConfig, HTML_TO_MARKDOWN, Settings
from mdbridge.core.convert import FALLBACK_ERROR, Converter, convert, make_converter
from mdbridge.core.errors import EMPTY_INPUT_MESSAGE
from mdbridge.core.escape import escape_entities
from mdbridge.core.html_tree import LineTreeBuilder
from mdbridge.core.lexer import lex
from mdbridge.core.models import BlockType, ConversionFailure, ConversionSuccess
from mdbridge.core.render_html import split_row


class _ExplodingBuilder:
    name = "exploding"

    def __init__(self, error: Exception):
        self.error = error

    def build(self, html):
        raise self.error


@pytest.mark.parametrize("content", ["", "   ", "\n\t\n"])
@pytest.mark.parametrize("mode", ["markdown-to-html", "html-to-markdown"])
def test_blank_input_rejected(content, mode):
    """Blank input fails with the fixed message and no output field."""
    result = convert(content, ConversionConfig(mode=mode))
    assert isinstance(result, ConversionFailure)
    assert result.success is False
    assert result.error == EMPTY_INPUT_MESSAGE
    assert "output" not in result.model_dump()


def test_hello_world_heading():
    result = convert("# Hello World")
    assert isinstance(result, ConversionSuccess)
    assert result.output == '<h1 id="hello-world">Hello World</h1>'


def test_bold_and_italic():
    assert convert("**bold** and *italic*").output == "<p><strong>bold</strong> and <em>italic</em></p>"


def test_full_html_output():
    result = convert("# T", ConversionConfig(output_format="full-html"))
    assert result.output.startswith("<!DOCTYPE html>")
    assert '<h1 id="t">T</h1>' in result.output


def test_markdown_output_format_returns_fragment():
    assert convert("# T", ConversionConfig(output_format="markdown")).output == '<h1 id="t">T</h1>'


def test_reserved_flags_have_no_effect(sample_md):
    plain = convert(sample_md).output
    flagged = convert(sample_md, ConversionConfig(
        sanitize_html=False, include_metadata=True, add_line_numbers=True, enable_syntax_highlighting=False,
    )).output
    assert plain == flagged


def test_deterministic(sample_md):
    config = ConversionConfig(generate_toc=True)
    assert convert(sample_md, config) == convert(sample_md, config)


def test_unexpected_failure_message_passed_through():
    converter = Converter(tree_builder=_ExplodingBuilder(RuntimeError("boom")))
    result = converter.convert("<p>x</p>", ConversionConfig(mode=HTML_TO_MARKDOWN))
    assert result == ConversionFailure(error="boom")


def test_unexpected_failure_without_message():
    converter = Converter(tree_builder=_ExplodingBuilder(RuntimeError()))
    result = converter.convert("<p>x</p>", ConversionConfig(mode=HTML_TO_MARKDOWN))
    assert result.error == FALLBACK_ERROR


def test_character_count_is_original_length(sample_md, sample_html):
    assert convert(sample_md).stats.character_count == len(sample_md)
    reverse = convert(sample_html, ConversionConfig(mode=HTML_TO_MARKDOWN))
    assert reverse.stats.character_count == len(sample_html)


def test_reverse_table_count_from_html():
    result = convert("<table><tr><td>a</td></tr></table><table></table>", ConversionConfig(mode=HTML_TO_MARKDOWN))
    assert result.stats.table_count == 2


def test_reverse_two_item_list():
    result = convert("<ul>\n  <li>One</li>\n  <li>Two</li>\n</ul>", ConversionConfig(mode=HTML_TO_MARKDOWN))
    assert result.output == "- One\n- Two"


def test_table_forward_and_back():
    """A 3x2 table survives to a pipe table with a 3-cell dash separator."""
    md = "| A | B | C |\n|---|---|---|\n| 1 | 2 | 3 |\n| 4 | 5 | 6 |"
    html = convert(md).output
    assert html.count("<thead>") == 1
    assert html.split("<tbody>")[1].count("<tr>") == 2

    back = convert(html, ConversionConfig(mode=HTML_TO_MARKDOWN)).output
    lines = back.splitlines()
    assert lines[0] == "| A | B | C |"
    assert lines[1] == "| --- | --- | --- |"
    assert len(lines) == 4


def test_pipe_in_cell_survives_round_trip():
    """A literal | inside a cell is escaped on the way out and keeps the column count."""
    html = ("<table><thead><tr><th>expr</th><th>kind</th></tr></thead>"
            "<tbody><tr><td>a|b</td><td>union</td></tr></tbody></table>")
    md = convert(html, ConversionConfig(mode=HTML_TO_MARKDOWN)).output
    assert md.splitlines()[2] == r"| a\|b | union |"

    again = convert(md).output
    assert "<td>a|b</td>" in again
    assert again.count("<td>") == 2


@pytest.mark.parametrize("content", ["`\x000\x00`", "abc\x005\x00 def", "\x00\x00"])
def test_nul_characters_do_not_break_inline_rewriting(content):
    """NUL bytes in the input come back as U+FFFD instead of failing or hanging."""
    result = convert(content)
    assert isinstance(result, ConversionSuccess), result
    assert "\x00" not in result.output
    assert "\ufffd" in result.output


def test_round_trip_preserves_headings_links_and_cells(sample_md):
    """forward -> reverse -> forward keeps heading text, link targets, table cells."""
    reverse = ConversionConfig(mode=HTML_TO_MARKDOWN)
    html = convert(sample_md).output
    md = convert(html, reverse).output
    html_again = convert(md).output

    def headings(text):
        return [b.content for b in lex(text) if b.type == BlockType.heading]

    def cells(text):
        tables = [b for b in lex(text) if b.type == BlockType.table]
        return [split_row(r) for t in tables for r in t.content.split("\n") if set(r.strip()) - set("|-: ")]

    assert headings(md) == headings(sample_md)
    assert cells(md) == cells(sample_md)
    assert 'href="https://example.com"' in html_again
    assert html_again.count("<th>") == html.count("<th>")
    assert html_again.count("<td>") == html.count("<td>")


def test_make_converter_uses_settings():
    converter = make_converter(Settings(markup_parser="line", escape="entities"))
    assert isinstance(converter.tree_builder, LineTreeBuilder)
    assert converter.escape is escape_entities


def test_line_parser_reverse_conversion():
    converter = Converter(tree_builder=LineTreeBuilder())
    result = converter.convert("<h1>T</h1>\n<p>x</p>", ConversionConfig(mode=HTML_TO_MARKDOWN))
    assert result.output == "# T\n\nx"


def test_concurrent_calls_independent(sample_md):
    """Shared converters give identical results across threads."""
    expected = convert(sample_md).output
    results = []

    def worker():
        results.append(convert(sample_md).output)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == [expected] * 8
