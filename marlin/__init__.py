"""Marlin compiles a content tree of pages, templates and assets into a static site."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .compiler import BuildResult, SiteCompiler, build, compile_site
from .engines import Engine, EngineRegistry
from .templating import default_registry

__all__ = [
    "BuildResult",
    "Engine",
    "EngineRegistry",
    "SiteCompiler",
    "__version__",
    "build",
    "compile_site",
    "default_registry",
]


def _discover_version() -> str:
    """Installed distribution version, else the one declared in a source checkout."""
    try:
        return load_pkg_version("marlin")
    except PackageNotFoundError:
        pass
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    if not pyproject.is_file():
        return "0.0.0"
    with pyproject.open("rb") as handle:
        project = tomllib.load(handle).get("project", {})
    return str(project.get("version", "0.0.0"))


__version__ = _discover_version()
