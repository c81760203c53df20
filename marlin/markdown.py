"""Markdown preprocessing for content blocks."""

from __future__ import annotations

from functools import lru_cache

from markdown_it import MarkdownIt
from markupsafe import Markup
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin


@lru_cache(maxsize=1)
def _renderer() -> MarkdownIt:
    """Configure and cache the CommonMark renderer shared by every page."""
    md = MarkdownIt("commonmark", {"html": True, "typographer": True})
    md.enable("table").enable("strikethrough")
    md.use(deflist_plugin)
    md.use(footnote_plugin)
    md.use(tasklists_plugin, label=True)
    return md


def render_markdown(text: str) -> Markup:
    """Render a markdown block to HTML that templates emit without escaping."""
    if not text.strip():
        return Markup("")
    return Markup(_renderer().render(text))
