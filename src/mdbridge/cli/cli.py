"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdbridge.cli.commands import html_cmd, markdown_cmd, stats_cmd


app = typer.Typer(name="mdbridge", no_args_is_help=True, help="Bidirectional Markdown <-> HTML converter")

app.command(name="html")(html_cmd)
app.command(name="markdown")(markdown_cmd)
app.command(name="stats")(stats_cmd)
