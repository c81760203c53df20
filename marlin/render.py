"""Render a single route node into its output artifacts."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .content import load_content
from .engines import EngineRegistry
from .issues import BuildIssue, IssueKind, IssueSeverity, record
from .mime import CONTENT_TYPES
from .routes import FileRef, RouteNode

logger = logging.getLogger(__name__)

PAGE_KEY = "$page"

Variants = Mapping[str, str]


class MissingTemplateError(LookupError):
    """Raised when a content file's base name has no template."""

    def __init__(self, name: str, route: str | None = None) -> None:
        self.name = name
        self.route = route
        location = f" (route '{route}')" if route else ""
        super().__init__(f"Missing template: {name}{location}")


class LanguageFallback(str, Enum):
    """Which content file to use when none matches the requested language."""

    FIRST = "first"
    DEFAULT = "default"


class PageOutcome(str, Enum):
    RENDERED = "rendered"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Build-wide inputs shared read-only by every page render."""

    templates: Mapping[str, Variants]
    partials: Mapping[str, Variants]
    registry: EngineRegistry
    shared: Mapping[str, Any] = field(default_factory=dict)
    default_language: str = "en"
    fallback: LanguageFallback = LanguageFallback.FIRST
    separator: str = ""


@dataclass(slots=True)
class PageResult:
    """Artifacts keyed by output extension plus what went wrong on the way."""

    artifacts: dict[str, str] = field(default_factory=dict)
    issues: list[BuildIssue] = field(default_factory=list)
    source: FileRef | None = None

    @property
    def outcome(self) -> PageOutcome:
        if self.artifacts:
            return PageOutcome.RENDERED
        if self.source is None:
            return PageOutcome.EMPTY
        return PageOutcome.FAILED


def supported_content(node: RouteNode) -> list[FileRef]:
    return [ref for ref in node.content if ref.mime in CONTENT_TYPES]


def select_content(
    node: RouteNode,
    language: str,
    default_language: str,
    fallback: LanguageFallback = LanguageFallback.FIRST,
) -> FileRef | None:
    """Pick the content file for ``language``.

    With ``FIRST`` a missing translation falls back to the first content file
    in filename order, whatever its language. ``DEFAULT`` tries the default
    language before doing the same.
    """
    candidates = supported_content(node)
    for ref in candidates:
        if ref.language(default_language) == language:
            return ref
    if fallback is LanguageFallback.DEFAULT and language != default_language:
        for ref in candidates:
            if ref.language(default_language) == default_language:
                return ref
    return candidates[0] if candidates else None


def check_template_bindings(
    node: RouteNode,
    templates: Mapping[str, Variants],
    route: str | None = None,
) -> None:
    for ref in supported_content(node):
        if ref.name not in templates:
            raise MissingTemplateError(ref.name, route)


def partials_for(mime_type: str, partials: Mapping[str, Variants]) -> dict[str, str]:
    """Flatten the partials table to the sources available for ``mime_type``."""
    return {name: variants[mime_type] for name, variants in partials.items() if mime_type in variants}


def build_view(document: Mapping[str, Any], shared: Mapping[str, Any], name: str) -> dict[str, Any]:
    view: dict[str, Any] = dict(document)
    view.update(shared)
    view[PAGE_KEY] = name
    return view


async def render_page(
    node: RouteNode,
    name: str,
    language: str,
    context: RenderContext,
    *,
    route: str | None = None,
) -> PageResult:
    """Render ``node`` with the template bound to its selected content file."""
    route = route or name
    result = PageResult()

    check_template_bindings(node, context.templates, route)

    source = select_content(node, language, context.default_language, context.fallback)
    if source is None:
        record(
            result.issues,
            logger,
            IssueKind.MISSING_CONTENT,
            f"Missing content file for language '{language}'.",
            route=route,
        )
        return result
    result.source = source

    document = await load_content(
        source.path,
        source.mime,
        separator=context.separator,
        issues=result.issues,
        route=route,
    )
    view = build_view(document, context.shared, name)

    template = context.templates[source.name]
    for mime_type, segment in sorted(template.items()):
        engine = context.registry.lookup(mime_type)
        if engine is None:
            record(
                result.issues,
                logger,
                IssueKind.MISSING_ENGINE,
                f"No render engine registered for template '{source.name}'.",
                route=route,
                mime=mime_type,
            )
            continue
        try:
            rendered = engine.render(segment, view, partials_for(mime_type, context.partials))
            if inspect.isawaitable(rendered):
                rendered = await rendered
        except Exception as exc:
            record(
                result.issues,
                logger,
                IssueKind.RENDER_FAILED,
                f"Rendering template '{source.name}' failed: {exc}",
                severity=IssueSeverity.ERROR,
                path=source.path,
                route=route,
                mime=mime_type,
            )
            continue
        result.artifacts[engine.output_extension] = rendered

    return result
