"""Jinja-backed render engines registered by default."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from jinja2 import ChoiceLoader, DictLoader, Environment, StrictUndefined, Undefined

from .engines import EngineRegistry

logger = logging.getLogger(__name__)

MARKUP_EXTENSIONS = ("html", "htm", "j2", "jinja")
STYLESHEET_EXTENSIONS = ("css",)


class JinjaEngine:
    """Render template sources with Jinja, resolving includes from partials."""

    def __init__(self, *, autoescape: bool = True, strict: bool = False) -> None:
        self._partials: dict[str, str] = {}
        self._environment = Environment(
            loader=DictLoader(self._partials),
            autoescape=autoescape,
            undefined=StrictUndefined if strict else Undefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def partials(self) -> Mapping[str, str]:
        return self._partials

    def register_partial(self, name: str, content: str) -> None:
        logger.debug("Registered partial '%s'", name)
        self._partials[name] = content

    def render(
        self,
        content: str,
        view: Mapping[str, Any],
        partials: Mapping[str, str] | None = None,
    ) -> str:
        environment = self._environment_for(partials or {})
        template = environment.from_string(content)
        context = {key: value for key, value in view.items() if key.isidentifier()}
        return template.render(context, view=view)

    def _environment_for(self, partials: Mapping[str, str]) -> Environment:
        extra = {name: source for name, source in partials.items() if name not in self._partials}
        if not extra:
            return self._environment
        return self._environment.overlay(
            loader=ChoiceLoader([DictLoader(self._partials), DictLoader(extra)])
        )


def register_default_engines(registry: EngineRegistry, *, strict: bool = False) -> EngineRegistry:
    """Bind Jinja for markup (``html``) and stylesheet (``css``) templates."""
    markup = JinjaEngine(autoescape=True, strict=strict)
    registry.register(markup.render, markup.register_partial, MARKUP_EXTENSIONS, "html")
    stylesheet = JinjaEngine(autoescape=False, strict=strict)
    registry.register(stylesheet.render, stylesheet.register_partial, STYLESHEET_EXTENSIONS, "css")
    return registry


def default_registry(*, strict: bool = False) -> EngineRegistry:
    """Return a fresh registry holding the default Jinja engines."""
    return register_default_engines(EngineRegistry(), strict=strict)
