"""CLI command implementations"""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdbridge.config import HTML_TO_MARKDOWN, MARKDOWN_TO_HTML, Settings, load_config
from mdbridge.core.convert import make_converter
from mdbridge.core.models import ConversionFailure, ConversionSuccess


VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")]
OutOpt = Annotated[Optional[Path], typer.Option("--out", "-o", help="Write output to this file instead of stdout")]
PathArg = Annotated[str, typer.Argument(help="Input file, or '-' for stdin")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, verbose: bool = False) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return settings


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot read {path}", e)


def _run(path: str, settings: Settings) -> ConversionSuccess:
    result = make_converter(settings).convert(_read(path), settings)
    if isinstance(result, ConversionFailure):
        _fail(result.error)
    return result


def _emit(text: str, out: Optional[Path]) -> None:
    if out is None:
        typer.echo(text)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text + "\n", encoding="utf-8")
    typer.echo(f"Wrote {out}", err=True)


def html_cmd(
    path: PathArg,
    out: OutOpt = None,
    full: Annotated[bool, typer.Option("--full", help="Wrap output in a standalone HTML document")] = False,
    toc: Annotated[Optional[bool], typer.Option("--toc/--no-toc", help="Prepend a table of contents")] = None,
    offset: Annotated[Optional[int], typer.Option("--heading-offset", help="Shift heading levels")] = None,
    tables: Annotated[Optional[bool], typer.Option("--tables/--no-tables")] = None,
    tasks: Annotated[Optional[bool], typer.Option("--task-lists/--no-task-lists")] = None,
    strike: Annotated[Optional[bool], typer.Option("--strikethrough/--no-strikethrough")] = None,
    autolinks: Annotated[Optional[bool], typer.Option("--autolinks/--no-autolinks")] = None,
    verbose: VerboseOpt = False,
    ):
    """Convert Markdown to HTML."""
    settings = _settings(overrides={
        "mode": MARKDOWN_TO_HTML, "output_format": "full-html" if full else None,
        "generate_toc": toc, "heading_offset": offset, "enable_tables": tables,
        "enable_task_lists": tasks, "enable_strikethrough": strike, "enable_autolinks": autolinks,
    }, verbose=verbose)
    _emit(_run(path, settings).output, out)


def markdown_cmd(
    path: PathArg,
    out: OutOpt = None,
    parser: Annotated[Optional[str], typer.Option("--parser", help="Markup parser: html.parser or line")] = None,
    tables: Annotated[Optional[bool], typer.Option("--tables/--no-tables")] = None,
    tasks: Annotated[Optional[bool], typer.Option("--task-lists/--no-task-lists")] = None,
    strike: Annotated[Optional[bool], typer.Option("--strikethrough/--no-strikethrough")] = None,
    verbose: VerboseOpt = False,
    ):
    """Convert HTML to Markdown."""
    settings = _settings(overrides={
        "mode": HTML_TO_MARKDOWN, "markup_parser": parser, "enable_tables": tables,
        "enable_task_lists": tasks, "enable_strikethrough": strike,
    }, verbose=verbose)
    _emit(_run(path, settings).output, out)


def stats_cmd(
    path: PathArg,
    mode: Annotated[Optional[str], typer.Option("--mode", help="markdown-to-html or html-to-markdown")] = None,
    verbose: VerboseOpt = False,
    ):
    """Print document statistics as JSON."""
    settings = _settings(overrides={"mode": mode}, verbose=verbose)
    typer.echo(json.dumps(_run(path, settings).stats.model_dump(), indent=2))
