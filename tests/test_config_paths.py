from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from marlin.config import Config, load_config
from marlin.render import LanguageFallback


def _write_project_config(root: Path) -> Path:
    config_text = (
        "project_name: External Project\n"
        "source_dir: src\n"
        "output_dir: public\n"
        "default_language: se\n"
        "languages: [en, se, de]\n"
        "language_fallback: default\n"
        "report_path: reports/build.json\n"
    )
    cfg_path = root / "marlin.yml"
    cfg_path.write_text(config_text, encoding="utf-8")
    return cfg_path


def test_load_config_resolves_paths_relative_to_config_directory(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    _write_project_config(project)

    # Pass a directory path; loader should find marlin.yml inside it.
    cfg = load_config(project)

    assert cfg.source_dir == (project / "src").resolve()
    assert cfg.output_dir == (project / "public").resolve()
    assert cfg.report_path == (project / "reports" / "build.json").resolve()
    assert cfg.content_dir == (project / "src" / "home").resolve()
    assert cfg.templates_dir == (project / "src" / "templates").resolve()
    assert cfg.partials_dir == (project / "src" / "partials").resolve()
    assert cfg.commons_dir == (project / "src" / "commons").resolve()
    assert cfg.language_fallback is LanguageFallback.DEFAULT


def test_load_config_accepts_config_file_path(tmp_path: Path) -> None:
    project = tmp_path / "siteproj"
    project.mkdir()
    config_file = _write_project_config(project)

    cfg = load_config(config_file)
    assert cfg.output_dir == (project / "public").resolve()


def test_load_config_uses_defaults_when_directory_has_no_config(tmp_path: Path) -> None:
    project = tmp_path / "emptyproj"
    project.mkdir()

    cfg = load_config(project)

    assert cfg.source_dir == project.resolve()
    assert cfg.output_dir == (project / "build").resolve()
    assert cfg.default_language == "en"
    assert cfg.languages == ["en"]
    assert cfg.language_fallback is LanguageFallback.FIRST
    assert cfg.block_separator == ""
    assert cfg.render_timeout is None


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yml")


def test_default_language_leads_language_list() -> None:
    cfg = Config(default_language="se", languages=["en", "se", "de", "en"])
    assert cfg.languages == ["se", "en", "de"]

    from_text = Config(languages="de, fr")
    assert from_text.languages == ["en", "de", "fr"]


def test_language_roots() -> None:
    cfg = Config(output_dir="out", languages=["se"])
    assert cfg.language_root("en") == Path("out")
    assert cfg.language_root("se") == Path("out") / "se"


def test_render_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Config(render_timeout=0)
