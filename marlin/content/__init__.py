"""Utilities for parsing page content and site-wide commons."""

from .parsers import (
    ContentParseError,
    load_content,
    parse_blocks,
    parse_content,
    parse_json,
    parse_loaded,
)

__all__ = [
    "ContentParseError",
    "load_content",
    "parse_blocks",
    "parse_content",
    "parse_json",
    "parse_loaded",
]
