"""Parse content files into property documents."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable

import anyio

from ..issues import BuildIssue, IssueKind, IssueSeverity, record
from ..markdown import render_markdown
from ..mime import JSON, MARKDOWN, PLAIN_TEXT

logger = logging.getLogger(__name__)

Preprocessor = Callable[[str], Any]

HEADING_PATTERN = re.compile(r"^(?P<label>[^:\s](?:[^:]*[^:\s])?):$")


class ContentParseError(ValueError):
    """Raised when a content file cannot be turned into a document."""


def identity(text: str) -> str:
    return text


def find_headings(lines: list[str]) -> list[tuple[int, str]]:
    """Return ``(line index, label)`` for every heading line."""
    headings: list[tuple[int, str]] = []
    for index, line in enumerate(lines):
        match = HEADING_PATTERN.match(line)
        if match:
            headings.append((index, match.group("label")))
    return headings


def parse_blocks(
    text: str,
    preprocess: Preprocessor = identity,
    separator: str = "",
) -> dict[str, Any]:
    """Split ``text`` into heading-delimited properties.

    A heading is a line holding only a label followed by ``:``. Each property
    captures the lines after its heading up to the next heading (or the end of
    input), joined with ``separator`` and passed through ``preprocess``.
    Lines before the first heading are dropped and a repeated label replaces
    the earlier value.
    """
    lines = text.splitlines()
    headings = find_headings(lines)

    properties: dict[str, Any] = {}
    for position, (index, label) in enumerate(headings):
        end = headings[position + 1][0] if position + 1 < len(headings) else len(lines)
        properties[label] = preprocess(separator.join(lines[index + 1 : end]))
    return properties


def parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ContentParseError(f"Invalid JSON: {exc}") from exc


PREPROCESSORS: dict[str, Preprocessor] = {
    PLAIN_TEXT: identity,
    MARKDOWN: render_markdown,
}


def parse_content(text: str, mime: str | None, separator: str = "") -> dict[str, Any]:
    """Parse ``text`` with the strategy registered for ``mime``."""
    if mime == JSON:
        value = parse_json(text)
        if not isinstance(value, dict):
            raise ContentParseError(
                f"JSON content must be an object, got {type(value).__name__}"
            )
        return value

    preprocess = PREPROCESSORS.get(mime or "")
    if preprocess is None:
        raise ContentParseError(f"Unsupported content type: {mime}")
    return parse_blocks(text, preprocess, separator)


async def load_content(
    path: str | Path,
    mime: str | None,
    *,
    separator: str = "",
    issues: list[BuildIssue] | None = None,
    route: str | None = None,
) -> dict[str, Any]:
    """Read and parse one content file.

    Read, decode and parse failures are recorded in ``issues`` and yield an
    empty document.
    """
    try:
        text = await anyio.Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        record(
            issues,
            logger,
            IssueKind.UNREADABLE_FILE,
            f"Cannot read content file: {exc}",
            severity=IssueSeverity.ERROR,
            path=path,
            route=route,
            mime=mime,
        )
        return {}
    return parse_loaded(text, mime, path=path, separator=separator, issues=issues, route=route)


def parse_loaded(
    text: str,
    mime: str | None,
    *,
    path: str | Path | None = None,
    separator: str = "",
    issues: list[BuildIssue] | None = None,
    route: str | None = None,
) -> dict[str, Any]:
    try:
        return parse_content(text, mime, separator)
    except ContentParseError as exc:
        record(
            issues,
            logger,
            IssueKind.INVALID_JSON if mime == JSON else IssueKind.UNKNOWN_MIME,
            str(exc),
            path=path,
            route=route,
            mime=mime,
        )
        return {}
