"""Build the route tree mirrored by the rendered site."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

import anyio

from .issues import BuildIssue, IssueKind, IssueSeverity, record
from .mime import FileRole, lookup, role_for

logger = logging.getLogger(__name__)

BUCKETS = (FileRole.CONTENT, FileRole.STYLESHEET, FileRole.IMAGE, FileRole.SCRIPT)


class MissingDirectoryError(FileNotFoundError):
    """Raised when a directory the build requires does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Missing directory: {self.path}")


@dataclass(frozen=True, slots=True)
class FileRef:
    """A file in the content tree plus the metadata derived from its name."""

    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def components(self) -> list[str]:
        return self.filename.split(".")

    @property
    def name(self) -> str:
        return self.components[0]

    @property
    def extension(self) -> str:
        return self.path.suffix.lstrip(".").lower()

    @property
    def mime(self) -> str | None:
        return lookup(self.filename)

    def language(self, default: str) -> str:
        """Language tag from ``name.lang.ext``; two-part names use ``default``."""
        components = self.components
        if len(components) == 3:
            return components[1]
        return default


@dataclass(frozen=True, slots=True)
class RouteNode:
    """One directory of the content tree with its files bucketed by role."""

    children: Mapping[str, "RouteNode"] = field(default_factory=dict)
    content: tuple[FileRef, ...] = ()
    stylesheets: tuple[FileRef, ...] = ()
    images: tuple[FileRef, ...] = ()
    scripts: tuple[FileRef, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", MappingProxyType(dict(self.children)))

    @property
    def assets(self) -> tuple[FileRef, ...]:
        return self.stylesheets + self.images + self.scripts

    @property
    def is_dead_branch(self) -> bool:
        return not self.content and not self.children

    def sorted_children(self) -> list[tuple[str, "RouteNode"]]:
        return sorted(self.children.items())

    def walk(self, name: str = "home") -> Iterator[tuple[str, "RouteNode"]]:
        """Yield ``(route, node)`` pairs depth-first in sorted order."""
        yield name, self
        for child_name, child in self.sorted_children():
            yield from child.walk(f"{name}/{child_name}")


async def build_route_tree(
    root: str | Path,
    issues: list[BuildIssue] | None = None,
    *,
    name: str | None = None,
) -> RouteNode:
    """Scan ``root`` into a :class:`RouteNode` tree.

    Sibling directories are scanned concurrently. Files with an unknown MIME
    type are skipped with a warning; an unreadable subdirectory is reported
    and left out without affecting its siblings.
    """
    directory = anyio.Path(root)
    if not await directory.is_dir():
        raise MissingDirectoryError(root)
    return await _scan(directory, name or Path(root).name, issues)


async def _scan(directory: anyio.Path, route: str, issues: list[BuildIssue] | None) -> RouteNode:
    buckets: dict[FileRole, list[FileRef]] = {role: [] for role in BUCKETS}
    subdirectories: list[anyio.Path] = []

    async for entry in directory.iterdir():
        if await entry.is_dir():
            subdirectories.append(entry)
            continue
        if not await entry.is_file():
            record(
                issues,
                logger,
                IssueKind.UNKNOWN_MIME,
                "Not a regular file; skipping.",
                path=entry,
                route=route,
            )
            continue
        ref = FileRef(Path(entry))
        mime_type = ref.mime
        role = role_for(mime_type)
        if role not in buckets:
            record(
                issues,
                logger,
                IssueKind.UNKNOWN_MIME,
                f"Unrecognized file type ({mime_type or 'unknown'}); skipping.",
                path=ref.path,
                route=route,
                mime=mime_type,
            )
            continue
        buckets[role].append(ref)

    children: dict[str, RouteNode] = {}

    async def _child(entry: anyio.Path) -> None:
        child_route = f"{route}/{entry.name}"
        try:
            children[entry.name] = await _scan(entry, child_route, issues)
        except OSError as exc:
            record(
                issues,
                logger,
                IssueKind.UNREADABLE_DIRECTORY,
                f"Cannot read directory: {exc}",
                severity=IssueSeverity.ERROR,
                path=entry,
                route=child_route,
            )

    async with anyio.create_task_group() as tg:
        for entry in subdirectories:
            tg.start_soon(_child, entry)

    def _ordered(role: FileRole) -> tuple[FileRef, ...]:
        return tuple(sorted(buckets[role], key=lambda ref: ref.filename))

    return RouteNode(
        children=children,
        content=_ordered(FileRole.CONTENT),
        stylesheets=_ordered(FileRole.STYLESHEET),
        images=_ordered(FileRole.IMAGE),
        scripts=_ordered(FileRole.SCRIPT),
    )
