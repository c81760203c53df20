"""Load flat directories of templates, partials and commons."""

from __future__ import annotations

import logging
from pathlib import Path

import anyio

from .issues import BuildIssue, IssueKind, IssueSeverity, record
from .mime import lookup
from .routes import MissingDirectoryError

logger = logging.getLogger(__name__)

FileSet = dict[str, dict[str, str]]


async def load_file_set(directory: str | Path, issues: list[BuildIssue] | None = None) -> FileSet:
    """Read every file in ``directory`` into ``{name: {mime: content}}``.

    The logical name is the filename up to its first dot, so ``about.html``
    and ``about.css`` become two MIME variants of ``about``. A missing
    directory raises :class:`MissingDirectoryError`; an empty one yields ``{}``.
    """
    root = anyio.Path(directory)
    if not await root.is_dir():
        raise MissingDirectoryError(directory)

    files: FileSet = {}

    async def _load(entry: anyio.Path, mime_type: str) -> None:
        try:
            text = await entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            record(
                issues,
                logger,
                IssueKind.UNREADABLE_FILE,
                f"Cannot read file: {exc}",
                severity=IssueSeverity.ERROR,
                path=entry,
                mime=mime_type,
            )
            return
        files.setdefault(entry.name.split(".")[0], {})[mime_type] = text

    async with anyio.create_task_group() as tg:
        async for entry in root.iterdir():
            if await entry.is_dir():
                continue
            if not await entry.is_file():
                record(
                    issues,
                    logger,
                    IssueKind.UNKNOWN_MIME,
                    "Not a regular file; skipping.",
                    path=entry,
                )
                continue
            mime_type = lookup(entry.name)
            if mime_type is None:
                record(
                    issues,
                    logger,
                    IssueKind.UNKNOWN_MIME,
                    "Unrecognized file type; skipping.",
                    path=entry,
                )
                continue
            tg.start_soon(_load, entry, mime_type)

    logger.debug("Loaded %d file(s) from %s", len(files), directory)
    return files
