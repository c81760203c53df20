from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

import pytest

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


def write_tree(root: Path, files: Mapping[str, str | bytes | None]) -> Path:
    """Create ``files`` under ``root``; a ``None`` value creates an empty directory."""
    for relative, content in files.items():
        path = root / relative
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


SITE_FILES: dict[str, str | bytes | None] = {
    "home/home.en.md": "Title:\nWelcome\nBody:\nHello **world**\n",
    "home/style.css": "body { margin: 0; }\n",
    "home/logo.png": PNG_BYTES,
    "home/about/about.en.txt": "Title:\nAbout us\n",
    "home/about/about.se.txt": "Title:\nOm oss\n",
    "home/about/team/photo.png": PNG_BYTES,
    "home/blog": None,
    "templates/home.html": '{% include "header" %}<main>{{ Body }}</main>',
    "templates/about.html": "<h1>{{ Title }}</h1><p>{{ site.name }}</p>",
    "templates/about.css": "h1 { color: {{ site.color }}; }",
    "partials/header.html": '<header>{{ site.name }} / {{ view["$page"] }}</header>',
    "commons/site.json": json.dumps({"name": "Marlin", "color": "navy"}),
}


@pytest.fixture
def site(tmp_path: Path) -> Path:
    return write_tree(tmp_path / "site", SITE_FILES)
