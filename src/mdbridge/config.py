"""Conversion options, application settings, and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDBRIDGE_"

MARKDOWN_TO_HTML = "markdown-to-html"
HTML_TO_MARKDOWN = "html-to-markdown"


class ConversionConfig(BaseModel):
    mode:                 str  = Field(default=MARKDOWN_TO_HTML, pattern="^(markdown-to-html|html-to-markdown)$")
    enable_tables:        bool = True
    enable_strikethrough: bool = True
    enable_task_lists:    bool = True
    enable_autolinks:     bool = True
    generate_toc:         bool = False
    heading_offset:       int  = Field(default=0, description="Added to every heading level before clamping to 1-6")
    output_format:        str  = Field(default="html-fragment", pattern="^(full-html|html-fragment|markdown)$")
    # Reserved: accepted and validated, no effect on output.
    enable_syntax_highlighting: bool = True
    sanitize_html:              bool = True
    include_metadata:           bool = False
    add_line_numbers:           bool = False


class Settings(ConversionConfig):
    app_name:      str = "mdbridge"
    markup_parser: str = Field(default="html.parser", pattern="^(html.parser|line)$", description="HTML tree builder")
    escape:        str = Field(default="markdown-it", pattern="^(markdown-it|entities)$", description="Code block escaper")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDBRIDGE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
