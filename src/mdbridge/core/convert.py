"""Conversion entry point: direction selection, validation, and error boundary"""

import logging

from mdbridge.config import HTML_TO_MARKDOWN, ConversionConfig, Settings
from mdbridge.core.errors import ConversionError, EmptyInputError
from mdbridge.core.escape import DEFAULT_ESCAPER, Escaper, get_escaper
from mdbridge.core.html_tree import StandardTreeBuilder, TreeBuilder, get_tree_builder, parse_html
from mdbridge.core.lexer import lex
from mdbridge.core.models import ConversionFailure, ConversionResult, ConversionSuccess
from mdbridge.core.render_html import render_html, wrap_document
from mdbridge.core.render_md import render_markdown
from mdbridge.core.stats import collect_stats, count_html_tables


log = logging.getLogger(__name__)

FALLBACK_ERROR = "Failed to convert content"


class Converter:
    """Bidirectional Markdown/HTML converter.

    The tree builder and escaper are fixed at construction; a Converter holds
    no per-call state and may be shared across threads.
    """

    def __init__(self, tree_builder: TreeBuilder = None, escape: Escaper = None):
        self.tree_builder = tree_builder or StandardTreeBuilder()
        self.escape = escape or get_escaper(DEFAULT_ESCAPER)

    def convert(self, content: str, config: ConversionConfig = None) -> ConversionResult:
        """Convert content in the direction given by config.mode.

        Never raises: every failure comes back as a ConversionFailure.
        """
        config = config or ConversionConfig()
        try:
            if not content or not content.strip():
                raise EmptyInputError()
            if config.mode == HTML_TO_MARKDOWN:
                return self.to_markdown(content, config)
            return self.to_html(content, config)
        except ConversionError as e:
            log.debug("Conversion rejected: %s", e)
            return ConversionFailure(error=str(e))
        except Exception as e:
            log.exception("Unexpected conversion failure")
            return ConversionFailure(error=str(e) or FALLBACK_ERROR)

    def to_html(self, content: str, config: ConversionConfig) -> ConversionSuccess:
        blocks = lex(content)
        rendered = render_html(blocks, config, self.escape)
        output = wrap_document(rendered.html) if config.output_format == "full-html" else rendered.html
        log.debug("Rendered %d block(s) to HTML (%d TOC entries)", len(blocks), len(rendered.toc))
        return ConversionSuccess(output=output, stats=collect_stats(content, output, blocks))

    def to_markdown(self, content: str, config: ConversionConfig) -> ConversionSuccess:
        nodes = parse_html(content, self.tree_builder)
        output = render_markdown(nodes, config)
        stats = collect_stats(content, output, lex(output)).model_copy(
            update={"table_count": count_html_tables(content)})
        log.debug("Rendered %d top-level node(s) to Markdown", len(nodes))
        return ConversionSuccess(output=output, stats=stats)


def make_converter(settings: Settings) -> Converter:
    """Build a Converter with the tree builder and escaper named in settings."""
    return Converter(
        tree_builder=get_tree_builder(settings.markup_parser),
        escape=get_escaper(settings.escape),
    )


_default = Converter()


def convert(content: str, config: ConversionConfig = None) -> ConversionResult:
    """Convert content with the default stdlib tree builder and markdown-it escaper."""
    return _default.convert(content, config)
