"""Drive a full site build: load inputs once, then render every route to disk."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any

import anyio

from .config import Config
from .content import parse_loaded
from .engines import EngineRegistry
from .issues import BuildIssue, IssueKind, IssueSeverity, count, record
from .loader import FileSet, load_file_set
from .mime import CONTENT_TYPES
from .render import (
    PageOutcome,
    RenderContext,
    check_template_bindings,
    partials_for,
    render_page,
)
from .routes import RouteNode, build_route_tree
from .staging import sync_assets
from .templating import default_registry

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.html"


@dataclass
class BuildResult:
    """Counters, written files and issues gathered during one build."""

    languages: list[str] = field(default_factory=list)
    routes_visited: int = 0
    pages_rendered: int = 0
    pages_empty: int = 0
    pages_failed: int = 0
    stylesheets_written: int = 0
    written: list[Path] = field(default_factory=list)
    assets_copied: list[Path] = field(default_factory=list)
    assets_unchanged: list[Path] = field(default_factory=list)
    issues: list[BuildIssue] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def error_count(self) -> int:
        return count(self.issues, IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return count(self.issues, IssueSeverity.WARNING)

    def issues_of(self, kind: IssueKind) -> list[BuildIssue]:
        return [issue for issue in self.issues if issue.kind is kind]


def register_partials(registry: EngineRegistry, partials: FileSet) -> int:
    """Hand every partial to the engines that accept pre-registration."""
    registered = 0
    for mime_type, engine in registry.items():
        if engine.register_partial is None:
            continue
        for name, source in partials_for(mime_type, partials).items():
            engine.register_partial(name, source)
            registered += 1
    return registered


def merge_commons(
    commons: FileSet,
    *,
    directory: Path | None = None,
    separator: str = "",
    issues: list[BuildIssue] | None = None,
) -> dict[str, Any]:
    """Parse each commons entry like page content into ``{name: document}``."""
    shared: dict[str, Any] = {}
    for name, variants in sorted(commons.items()):
        document: dict[str, Any] = {}
        for mime_type, text in sorted(variants.items()):
            path = directory / name if directory is not None else name
            if mime_type not in CONTENT_TYPES:
                record(
                    issues,
                    logger,
                    IssueKind.UNKNOWN_MIME,
                    "Commons entry is not content; skipping.",
                    path=path,
                    mime=mime_type,
                )
                continue
            document.update(parse_loaded(text, mime_type, path=path, separator=separator, issues=issues))
        shared[name] = document
    return shared


class SiteCompiler:
    """Compile the source tree described by ``config`` into its output directory."""

    def __init__(self, config: Config, registry: EngineRegistry | None = None) -> None:
        self.config = config
        self.registry = registry if registry is not None else default_registry()
        self.result = BuildResult(languages=list(config.languages))

    @property
    def root_name(self) -> str:
        return self.config.content_subdir

    async def compile(self) -> BuildResult:
        start = time.perf_counter()
        self.registry.freeze()

        context = await self.prepare()
        tree = await build_route_tree(self.config.content_dir, self.result.issues, name=self.root_name)
        for route, node in tree.walk(self.root_name):
            check_template_bindings(node, context.templates, route)

        for language in self.config.languages:
            prefix = "" if language == self.config.default_language else f"{language}/"
            await self.emit(
                tree,
                self.root_name,
                self.config.language_root(language),
                language,
                context,
                route=f"{prefix}{self.root_name}",
            )

        self.result.duration_seconds = time.perf_counter() - start
        logger.info(
            "Built %d page(s) across %d route(s) in %.2fs",
            self.result.pages_rendered,
            self.result.routes_visited,
            self.result.duration_seconds,
        )
        return self.result

    async def prepare(self) -> RenderContext:
        """Load templates, partials and commons; all of them finish before rendering."""
        config = self.config
        issues = self.result.issues
        templates = await load_file_set(config.templates_dir, issues)
        partials = await load_file_set(config.partials_dir, issues)
        commons = await load_file_set(config.commons_dir, issues)

        register_partials(self.registry, partials)
        shared = merge_commons(
            commons,
            directory=config.commons_dir,
            separator=config.block_separator,
            issues=issues,
        )
        return RenderContext(
            templates=templates,
            partials=partials,
            registry=self.registry,
            shared=shared,
            default_language=config.default_language,
            fallback=config.language_fallback,
            separator=config.block_separator,
        )

    async def emit(
        self,
        node: RouteNode,
        name: str,
        parent_dir: Path,
        language: str,
        context: RenderContext,
        *,
        route: str,
    ) -> None:
        """Write ``node`` under ``parent_dir / name``, then its children."""
        destination = Path(parent_dir) / name
        self.result.routes_visited += 1
        try:
            await anyio.Path(destination).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            record(
                self.result.issues,
                logger,
                IssueKind.WRITE_FAILED,
                f"Cannot create output directory: {exc}",
                severity=IssueSeverity.ERROR,
                path=destination,
                route=route,
            )
            return

        await self._emit_page(node, name, destination, language, context, route)

        synced = await sync_assets(
            [ref.path for ref in node.assets], destination, issues=self.result.issues, route=route
        )
        self.result.assets_copied.extend(synced.copied)
        self.result.assets_unchanged.extend(synced.unchanged)

        async with anyio.create_task_group() as tg:
            for child_name, child in node.sorted_children():
                tg.start_soon(
                    partial(
                        self.emit,
                        child,
                        child_name,
                        destination,
                        language,
                        context,
                        route=f"{route}/{child_name}",
                    )
                )

    async def _emit_page(
        self,
        node: RouteNode,
        name: str,
        destination: Path,
        language: str,
        context: RenderContext,
        route: str,
    ) -> None:
        try:
            with anyio.fail_after(self.config.render_timeout):
                page = await render_page(node, name, language, context, route=route)
        except TimeoutError:
            record(
                self.result.issues,
                logger,
                IssueKind.TIMEOUT,
                f"Rendering exceeded {self.config.render_timeout}s; skipping page.",
                severity=IssueSeverity.ERROR,
                route=route,
            )
            self.result.pages_failed += 1
            return

        self.result.issues.extend(page.issues)
        outcome = page.outcome
        if outcome is PageOutcome.RENDERED:
            self.result.pages_rendered += 1
        elif outcome is PageOutcome.EMPTY:
            self.result.pages_empty += 1
        else:
            self.result.pages_failed += 1

        html = page.artifacts.get("html")
        if html is not None:
            await self._write(destination / INDEX_FILENAME, html, route)
        css = page.artifacts.get("css")
        if css is not None and await self._write(destination / f"{name}.css", css, route):
            self.result.stylesheets_written += 1

    async def _write(self, path: Path, text: str, route: str) -> bool:
        try:
            await anyio.Path(path).write_text(text, encoding="utf-8")
        except OSError as exc:
            record(
                self.result.issues,
                logger,
                IssueKind.WRITE_FAILED,
                f"Failed to write output: {exc}",
                severity=IssueSeverity.ERROR,
                path=path,
                route=route,
            )
            return False
        logger.debug("Wrote %s", path)
        self.result.written.append(path)
        return True


async def compile_site(config: Config, registry: EngineRegistry | None = None) -> BuildResult:
    """Compile ``config.source_dir`` into ``config.output_dir``."""
    return await SiteCompiler(config, registry).compile()


def build(
    source: str | Path,
    destination: str | Path,
    *,
    registry: EngineRegistry | None = None,
    **options: Any,
) -> BuildResult:
    """Build the site rooted at ``source`` into ``destination``.

    ``source`` must hold ``home``, ``commons``, ``templates`` and ``partials``
    directories. Extra keyword arguments become :class:`Config` fields.
    """
    config = Config(source_dir=Path(source), output_dir=Path(destination), **options)
    return anyio.run(partial(compile_site, config, registry))

