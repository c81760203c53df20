"""Build reporting helpers for Marlin."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

from .compiler import BuildResult
from .issues import BuildIssue

REPORT_FILENAME = "build-report.json"


class PageStats(BaseModel):
    routes: int
    rendered: int
    empty: int
    failed: int
    stylesheets: int


class AssetStats(BaseModel):
    copied: int
    unchanged: int


class IssueEntry(BaseModel):
    kind: str
    severity: str
    message: str
    path: str | None = None
    route: str | None = None
    mime: str | None = None


class BuildReport(BaseModel):
    project: str
    generated_at: datetime
    duration_seconds: float
    languages: list[str] = Field(default_factory=list)
    pages: PageStats
    assets: AssetStats
    errors: int = 0
    warnings: int = 0
    issues: list[IssueEntry] = Field(default_factory=list)


def build_page_stats(result: BuildResult) -> PageStats:
    return PageStats(
        routes=result.routes_visited,
        rendered=result.pages_rendered,
        empty=result.pages_empty,
        failed=result.pages_failed,
        stylesheets=result.stylesheets_written,
    )


def build_asset_stats(result: BuildResult) -> AssetStats:
    return AssetStats(copied=len(result.assets_copied), unchanged=len(result.assets_unchanged))


def _issue_entry(issue: BuildIssue) -> IssueEntry:
    return IssueEntry(
        kind=issue.kind.value,
        severity=issue.severity.name.lower(),
        message=issue.message,
        path=issue.path,
        route=issue.route,
        mime=issue.mime,
    )


def assemble_report(*, project: str, result: BuildResult) -> BuildReport:
    # Concurrent branches finish in any order; sort so reports are reproducible.
    ordered = sorted(
        result.issues,
        key=lambda issue: (issue.route or "", issue.path or "", issue.kind.value),
    )
    return BuildReport(
        project=project,
        generated_at=datetime.now(timezone.utc),
        duration_seconds=result.duration_seconds,
        languages=list(result.languages),
        pages=build_page_stats(result),
        assets=build_asset_stats(result),
        errors=result.error_count,
        warnings=result.warning_count,
        issues=[_issue_entry(issue) for issue in ordered],
    )


def write_report(report: BuildReport, target: Path) -> Path:
    """Write ``report`` to ``target``; a directory receives ``build-report.json``."""
    if target.suffix.lower() != ".json":
        target = target / REPORT_FILENAME
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        json.dump(report.model_dump(mode="json"), handle, ensure_ascii=False, indent=2)
    return target
