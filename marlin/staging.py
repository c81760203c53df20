"""Copy static assets next to rendered pages, skipping unchanged files."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import anyio

from .issues import BuildIssue, IssueKind, IssueSeverity, record

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Summary of one batch of asset synchronizations."""

    copied: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.copied) + len(self.unchanged) + len(self.failed)


def is_current(source: os.stat_result, destination: Path) -> bool:
    """Whether ``destination`` carries the same modification time as the source."""
    try:
        return destination.stat().st_mtime_ns == source.st_mtime_ns
    except FileNotFoundError:
        return False


def _copy_stamped(source: Path, destination: Path) -> bool:
    stat = source.stat()
    if is_current(stat, destination):
        return False
    shutil.copyfile(source, destination)
    # Stamp the source times so the next build sees the asset as unchanged.
    os.utime(destination, ns=(stat.st_atime_ns, stat.st_mtime_ns))
    return True


async def sync_asset(source: str | Path, destination: str | Path) -> bool:
    """Copy ``source`` to ``destination`` unless their timestamps already match.

    Returns ``True`` when a copy was made.
    """
    copied = await anyio.to_thread.run_sync(_copy_stamped, Path(source), Path(destination))
    if copied:
        logger.debug("Copied asset %s -> %s", source, destination)
    return copied


async def sync_assets(
    sources: Iterable[Path],
    destination_dir: str | Path,
    *,
    issues: list[BuildIssue] | None = None,
    route: str | None = None,
) -> SyncResult:
    """Synchronize ``sources`` into ``destination_dir`` concurrently."""
    result = SyncResult()
    target_dir = Path(destination_dir)

    async def _sync(source: Path) -> None:
        destination = target_dir / source.name
        try:
            copied = await sync_asset(source, destination)
        except OSError as exc:
            record(
                issues,
                logger,
                IssueKind.WRITE_FAILED,
                f"Failed to copy asset: {exc}",
                severity=IssueSeverity.ERROR,
                path=source,
                route=route,
            )
            result.failed.append(destination)
            return
        (result.copied if copied else result.unchanged).append(destination)

    async with anyio.create_task_group() as tg:
        for source in sources:
            tg.start_soon(_sync, source)

    return result


def reset_directory(path: Path) -> None:
    """Leave ``path`` as an empty directory, whatever was there before."""
    remove_path(path)
    path.mkdir(parents=True, exist_ok=True)


def remove_path(path: Path) -> bool:
    if path.is_dir():
        shutil.rmtree(path, ignore_errors=True)
        return True
    if path.exists():
        path.unlink(missing_ok=True)
        return True
    return False
