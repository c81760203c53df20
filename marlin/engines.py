"""Registry of render engines keyed by the MIME type of their input."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Iterator, Mapping

from . import mime

RenderFn = Callable[[str, Mapping[str, Any], Mapping[str, str]], "str | Awaitable[str]"]
PartialFn = Callable[[str, str], None]
LookupFn = Callable[[str], "str | None"]


class RegistryFrozenError(RuntimeError):
    """Raised when an engine is registered after a build has started."""


@dataclass(frozen=True, slots=True)
class Engine:
    """A render function plus its optional partial hook and output extension."""

    render: RenderFn
    register_partial: PartialFn | None
    output_extension: str


class EngineRegistry:
    """MIME type to :class:`Engine` table shared by one build session.

    Registrations overwrite: the last engine registered for a MIME type wins.
    The compiler freezes the registry before rendering so concurrent pages
    only ever read it.
    """

    def __init__(self, lookup: LookupFn = mime.lookup) -> None:
        self._lookup = lookup
        self._engines: dict[str, Engine] = {}
        self._frozen = False

    def register(
        self,
        render: RenderFn,
        register_partial: PartialFn | None,
        extensions: Iterable[str],
        output_extension: str,
    ) -> list[str]:
        """Register ``render`` for every input extension; return the MIME types bound."""
        if self._frozen:
            raise RegistryFrozenError("Cannot register engines once a build has started.")
        engine = Engine(
            render=render,
            register_partial=register_partial,
            output_extension=output_extension.lstrip("."),
        )
        bound: list[str] = []
        for extension in extensions:
            suffix = extension if extension.startswith(".") else f".{extension}"
            mime_type = self._lookup(f"engine{suffix}")
            if mime_type is None:
                raise ValueError(f"No MIME type known for extension '{extension}'")
            self._engines[mime_type] = engine
            bound.append(mime_type)
        return bound

    def lookup(self, mime_type: str | None) -> Engine | None:
        if mime_type is None:
            return None
        return self._engines.get(mime_type)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def items(self) -> Iterator[tuple[str, Engine]]:
        return iter(sorted(self._engines.items()))

    def __contains__(self, mime_type: object) -> bool:
        return mime_type in self._engines

    def __len__(self) -> int:
        return len(self._engines)
