from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .render import LanguageFallback

CONFIG_FILENAME = "marlin.yml"


class Config(BaseModel):
    project_name: str = Field(default="Marlin Site")
    source_dir: Path = Field(default=Path("."))
    output_dir: Path = Field(default=Path("build"))
    content_subdir: str = Field(default="home", description="Content tree, rendered as the 'home' route.")
    commons_subdir: str = Field(default="commons", description="Site-wide data merged into every page.")
    templates_subdir: str = Field(default="templates")
    partials_subdir: str = Field(default="partials")
    default_language: str = Field(default="en", min_length=1)
    languages: list[str] = Field(
        default_factory=list,
        description="Languages to emit; the default language is written at the output root.",
    )
    language_fallback: LanguageFallback = Field(
        default=LanguageFallback.FIRST,
        description="'first' uses the first content file when a translation is missing; "
        "'default' tries the default language first.",
    )
    block_separator: str = Field(
        default="",
        description="String placed between the lines of a content block.",
    )
    render_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds allowed to render one route before it is skipped.",
    )
    report_path: Path | None = Field(default=None)

    @field_validator("source_dir", "output_dir", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("report_path", mode="before")
    def _ensure_optional_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    @field_validator("languages", mode="before")
    def _split_languages(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @model_validator(mode="after")
    def _default_language_first(self) -> "Config":
        ordered = [self.default_language]
        for language in self.languages:
            if language not in ordered:
                ordered.append(language)
        self.languages = ordered
        return self

    @property
    def content_dir(self) -> Path:
        return self.source_dir / self.content_subdir

    @property
    def commons_dir(self) -> Path:
        return self.source_dir / self.commons_subdir

    @property
    def templates_dir(self) -> Path:
        return self.source_dir / self.templates_subdir

    @property
    def partials_dir(self) -> Path:
        return self.source_dir / self.partials_subdir

    def language_root(self, language: str) -> Path:
        """Output directory for ``language``; the default language uses the root."""
        if language == self.default_language:
            return self.output_dir
        return self.output_dir / language


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/site/marlin.yml``) or a
    directory containing that file. All relative paths inside the configuration
    are interpreted relative to the directory holding the config file.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    base_dir: Path
    if candidate.is_dir():
        # A project directory without a config file builds with defaults.
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            with config_file.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        with candidate.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        base_dir = candidate.parent.resolve()

    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {candidate} must be a mapping.")

    cfg = Config(**data)

    def _abs_required(value: Path) -> Path:
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.source_dir = _abs_required(cfg.source_dir)
    cfg.output_dir = _abs_required(cfg.output_dir)
    if cfg.report_path is not None:
        cfg.report_path = _abs_required(cfg.report_path)

    return cfg
