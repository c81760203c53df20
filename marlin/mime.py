"""MIME lookup table and file-role classification."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath

MARKDOWN = "text/markdown"
JSON = "application/json"
PLAIN_TEXT = "text/plain"
CSS = "text/css"
HTML = "text/html"
JINJA = "text/x-jinja"
JAVASCRIPT = "application/javascript"

MIME_TYPES: dict[str, str] = {
    ".md": MARKDOWN,
    ".markdown": MARKDOWN,
    ".json": JSON,
    ".txt": PLAIN_TEXT,
    ".css": CSS,
    ".html": HTML,
    ".htm": HTML,
    ".j2": JINJA,
    ".jinja": JINJA,
    ".js": JAVASCRIPT,
    ".mjs": JAVASCRIPT,
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".ico": "image/x-icon",
}


class FileRole(str, Enum):
    """Role a file plays inside a content or template tree."""

    CONTENT = "content"
    STYLESHEET = "stylesheet"
    IMAGE = "image"
    SCRIPT = "script"
    TEMPLATE = "template"
    UNKNOWN = "unknown"


CONTENT_TYPES = frozenset({MARKDOWN, JSON, PLAIN_TEXT})

ROLES: dict[str, FileRole] = {
    MARKDOWN: FileRole.CONTENT,
    JSON: FileRole.CONTENT,
    PLAIN_TEXT: FileRole.CONTENT,
    CSS: FileRole.STYLESHEET,
    JAVASCRIPT: FileRole.SCRIPT,
    HTML: FileRole.TEMPLATE,
    JINJA: FileRole.TEMPLATE,
}


def lookup(filename: str | PurePath) -> str | None:
    """Return the MIME type for ``filename`` based on its final extension."""
    suffix = PurePath(filename).suffix.lower()
    if not suffix:
        return None
    return MIME_TYPES.get(suffix)


def role_for(mime: str | None) -> FileRole:
    if mime is None:
        return FileRole.UNKNOWN
    role = ROLES.get(mime)
    if role is not None:
        return role
    if mime.startswith("image/"):
        return FileRole.IMAGE
    return FileRole.UNKNOWN


def classify(filename: str | PurePath) -> FileRole:
    """Classify ``filename`` into a :class:`FileRole`."""
    return role_for(lookup(filename))
