"""CLI entrypoints for Marlin build tooling."""

from functools import partial
from pathlib import Path
from typing import Annotated, Any

import anyio
import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from .compiler import BuildResult, compile_site
from .config import Config, load_config
from .issues import BuildIssue, IssueSeverity
from .render import MissingTemplateError
from .reporting import assemble_report, write_report
from .routes import MissingDirectoryError, RouteNode, build_route_tree
from .staging import remove_path, reset_directory

console = Console()
app = typer.Typer(help="Marlin static site compiler.")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file or project directory."),
]
SourceOption = Annotated[
    Path | None,
    typer.Option("--source", "-s", help="Override the source directory (home/templates/partials/commons)."),
]
OutputOption = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Override the output directory."),
]


@app.command()
def build(
    config_path: ConfigPathOption = ".",
    source: SourceOption = None,
    output: OutputOption = None,
    languages: Annotated[
        list[str] | None,
        typer.Option("--language", "-l", help="Language to emit (repeatable)."),
    ] = None,
    report_path: Annotated[
        Path | None,
        typer.Option("--report", help="Write a JSON build report to this file or directory."),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Clear the output directory before building."),
    ] = False,
) -> None:
    """Compile the content tree into the output directory."""
    config = _load(config_path, source=source, output=output, languages=languages, report_path=report_path)

    if force:
        console.print("[bold yellow]Force rebuild[/]: clearing output directory before building.")
        reset_directory(config.output_dir)

    try:
        result = anyio.run(partial(compile_site, config))
    except (OSError, MissingTemplateError) as exc:
        console.print(f"[bold red]Build failed[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    _print_build_summary(config, result)
    _print_issues(result.issues)

    if config.report_path is not None:
        report = assemble_report(project=config.project_name, result=result)
        target = write_report(report, config.report_path)
        console.print(f"[bold green]Report[/]: {target}")

    exit_code = 0
    if result.error_count > 0 or (strict and result.warning_count > 0):
        exit_code = 1
    raise typer.Exit(code=exit_code)


@app.command()
def routes(
    config_path: ConfigPathOption = ".",
    source: SourceOption = None,
) -> None:
    """Show how the content tree is classified into routes."""
    config = _load(config_path, source=source)
    issues: list[BuildIssue] = []
    try:
        tree = anyio.run(partial(build_route_tree, config.content_dir, issues, name=config.content_subdir))
    except MissingDirectoryError as exc:
        console.print(f"[bold red]Content not found[/]: {exc.path}")
        raise typer.Exit(code=1) from exc

    console.print(_route_tree(config.content_subdir, tree))
    _print_issues(issues)


@app.command()
def clean(
    config_path: ConfigPathOption = ".",
    output: OutputOption = None,
) -> None:
    """Remove the generated site."""
    config = _load(config_path, output=output)
    if remove_path(config.output_dir):
        console.print(f"[bold green]Removed[/]: {config.output_dir}")
    else:
        console.print(f"[bold yellow]Skipping[/]: {config.output_dir} not found")


def _load(path: str, **overrides: Any) -> Config:
    try:
        config = load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    updates = {key: value for key, value in overrides.items() if value}
    for key in ("source", "output"):
        if key in updates:
            updates[f"{key}_dir"] = Path(updates.pop(key)).resolve()
    if "report_path" in updates:
        updates["report_path"] = Path(updates["report_path"]).resolve()
    if not updates:
        return config
    return Config(**(config.model_dump() | updates))


def _print_build_summary(config: Config, result: BuildResult) -> None:
    console.print(
        "[bold green]Pages[/]: "
        f"{result.pages_rendered} rendered across {result.routes_visited} route(s) "
        f"(empty {result.pages_empty}, failed {result.pages_failed}); "
        f"{result.stylesheets_written} stylesheet(s)"
    )
    console.print(
        "[bold green]Assets[/]: "
        f"{len(result.assets_copied)} copied, {len(result.assets_unchanged)} unchanged"
    )
    console.print(
        "[bold green]Output[/]: "
        f"{config.output_dir} ({', '.join(result.languages)}) "
        f"in {result.duration_seconds:.2f}s"
    )


def _print_issues(issues: list[BuildIssue]) -> None:
    if not issues:
        return
    for issue in sorted(issues, key=lambda item: (item.route or "", item.path or "")):
        style = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        console.print(f"[bold {style}]{issue.severity.name}[/] {issue.kind.value} {escape(str(issue))}")


def _route_tree(name: str, node: RouteNode) -> Tree:
    label = f"[bold]{name}[/]"
    if node.is_dead_branch:
        label += " [dim](empty)[/]"
    branch = Tree(label)
    for ref in node.content:
        branch.add(f"[green]{ref.filename}[/]")
    for ref in node.assets:
        branch.add(f"[blue]{ref.filename}[/]")
    for child_name, child in node.sorted_children():
        branch.add(_route_tree(child_name, child))
    return branch


def main() -> None:  # pragma: no cover - console script
    app()


if __name__ == "__main__":  # pragma: no cover
    app()
