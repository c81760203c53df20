from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from conftest import write_tree
from marlin.cli import app


def test_build_writes_site(site: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    out = tmp_path / "public_html"

    result = runner.invoke(app, ["build", "--source", str(site), "--output", str(out)])

    assert result.exit_code == 0, result.output
    assert (out / "home" / "index.html").exists()
    assert "2 rendered" in result.output


def test_build_uses_project_config(site: Path, tmp_path: Path) -> None:
    (site / "marlin.yml").write_text("output_dir: dist\nlanguages: [se]\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["build", "--config", str(site / "marlin.yml")])

    assert result.exit_code == 0, result.output
    assert (site / "dist" / "home" / "about" / "index.html").exists()
    assert (site / "dist" / "se" / "home" / "about" / "index.html").exists()


def test_strict_build_fails_on_warnings(site: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["build", "--source", str(site), "--output", str(tmp_path / "out"), "--strict"],
    )

    assert result.exit_code == 1
    assert "missing-content" in result.output


def test_missing_template_exits_with_error(site: Path, tmp_path: Path) -> None:
    write_tree(site, {"home/faq/faq.en.md": "Title:\nFAQ\n"})
    runner = CliRunner()

    result = runner.invoke(app, ["build", "--source", str(site), "--output", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "Missing template: faq" in result.output


def test_build_report_option(site: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    report = tmp_path / "report.json"

    result = runner.invoke(
        app,
        ["build", "--source", str(site), "--output", str(tmp_path / "out"), "--report", str(report)],
    )

    assert result.exit_code == 0, result.output
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["pages"]["rendered"] == 2
    assert data["assets"]["copied"] == 3


def test_routes_lists_tree(site: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["routes", "--source", str(site)])

    assert result.exit_code == 0, result.output
    assert "about" in result.output
    assert "logo.png" in result.output


def test_clean_removes_output(site: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    out = tmp_path / "out"
    runner.invoke(app, ["build", "--source", str(site), "--output", str(out)])

    result = runner.invoke(app, ["clean", "--output", str(out)])

    assert result.exit_code == 0, result.output
    assert not out.exists()


def test_force_clears_stale_output(site: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    out = tmp_path / "out"
    write_tree(out, {"stale.html": "old"})

    result = runner.invoke(app, ["build", "--source", str(site), "--output", str(out), "--force"])

    assert result.exit_code == 0, result.output
    assert not (out / "stale.html").exists()
    assert (out / "home" / "index.html").exists()


def test_unreadable_page_fails_the_build_without_aborting(site: Path, tmp_path: Path) -> None:
    write_tree(
        site,
        {
            "home/broken/broken.en.md": b"Title:\n\xff\xfe bad\n",
            "templates/broken.html": "<p>{{ Title }}</p>",
        },
    )
    runner = CliRunner()
    out = tmp_path / "out"

    result = runner.invoke(app, ["build", "--source", str(site), "--output", str(out)])

    assert result.exit_code == 1
    assert "unreadable-file" in result.output
    assert (out / "home" / "about" / "index.html").exists()
