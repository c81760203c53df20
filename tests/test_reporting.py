import json
from pathlib import Path

from marlin.compiler import BuildResult
from marlin.issues import BuildIssue, IssueKind, IssueSeverity
from marlin.reporting import assemble_report, build_asset_stats, build_page_stats, write_report


def _result() -> BuildResult:
    return BuildResult(
        languages=["en"],
        routes_visited=3,
        pages_rendered=2,
        pages_empty=1,
        stylesheets_written=1,
        assets_copied=[Path("out/home/logo.png")],
        assets_unchanged=[Path("out/home/style.css"), Path("out/home/app.js")],
        issues=[
            BuildIssue(IssueKind.MISSING_CONTENT, IssueSeverity.WARNING, "no content", route="home/blog"),
            BuildIssue(
                IssueKind.RENDER_FAILED,
                IssueSeverity.ERROR,
                "boom",
                path="home/about/about.en.md",
                route="home/about",
                mime="text/css",
            ),
        ],
        duration_seconds=0.25,
    )


def test_page_and_asset_stats() -> None:
    result = _result()

    pages = build_page_stats(result)
    assets = build_asset_stats(result)

    assert (pages.routes, pages.rendered, pages.empty, pages.failed) == (3, 2, 1, 0)
    assert pages.stylesheets == 1
    assert (assets.copied, assets.unchanged) == (1, 2)


def test_report_orders_issues_by_route() -> None:
    report = assemble_report(project="Marlin", result=_result())

    assert report.errors == 1
    assert report.warnings == 1
    assert [issue.route for issue in report.issues] == ["home/about", "home/blog"]
    assert report.issues[0].kind == "render-failed"
    assert report.issues[0].severity == "error"


def test_write_report_writes_json(tmp_path: Path) -> None:
    report = assemble_report(project="Marlin", result=_result())

    path = write_report(report, tmp_path)

    assert path == tmp_path / "build-report.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["project"] == "Marlin"
    assert data["pages"]["rendered"] == 2
    assert data["issues"][0]["mime"] == "text/css"


def test_write_report_accepts_file_path(tmp_path: Path) -> None:
    report = assemble_report(project="Marlin", result=_result())

    path = write_report(report, tmp_path / "reports" / "site.json")

    assert path.exists()
    assert path.parent.name == "reports"
