"""
repodrift CLI

Command-line interface for the drift engine.
Provides commands for inspecting normalized trees, capturing snapshots,
detecting drift against the latest snapshot and browsing drift history.

Commands:
    repodrift tree <path>         Print the normalized tree of a directory or listing
    repodrift snapshot <path>     Store a snapshot of a tree plus its documentation
    repodrift drift <path>        Compare against the latest snapshot and record drift
    repodrift diff <old> <new>    Compare two documentation files
    repodrift history             Show completed drift records for a project
    repodrift show <record_id>    Show one drift record in full

Usage:
    $ repodrift snapshot ./my-repo --project web --docs ARCHITECTURE.md
    $ repodrift drift ./my-repo --project web --docs ARCHITECTURE.md
    $ repodrift history --project web
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from repodrift import __version__
from repodrift.config import RepoDriftConfig, load_config
from repodrift.drift import DriftDetector, compare_architecture_markdown, describe_changes
from repodrift.drift.scoring import score_components
from repodrift.exceptions import NoBaselineError, RepoDriftError
from repodrift.graph import TreeGraph, summarize_by_directory, tree_paths
from repodrift.models import DriftRecord, DriftSeverity, FileNode, ListingEntry
from repodrift.storage import Database
from repodrift.structure import (
    IgnorePolicy,
    entries_from_github_tree,
    listing_from_directory,
    normalize_structure,
)

app = typer.Typer(
    name="repodrift",
    help="repodrift: track how a repository's structure and docs drift apart",
    add_completion=False,
)
console = Console()

SEVERITY_COLORS = {
    DriftSeverity.LOW: "green",
    DriftSeverity.MEDIUM: "yellow",
    DriftSeverity.HIGH: "red",
}


def _config(ctx: typer.Context) -> RepoDriftConfig:
    return ctx.obj


def _open_db(ctx: typer.Context) -> Database:
    return Database(_config(ctx).db_path)


def _load_tree(ctx: typer.Context, path: Path) -> FileNode:
    """Normalize a local directory, or a JSON listing file, into a tree."""
    policy = IgnorePolicy(_config(ctx).extra_ignore_patterns)

    if path.is_dir():
        return normalize_structure(listing_from_directory(path, policy), policy)

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Error:[/bold red] cannot read listing {path}: {e}")
        raise typer.Exit(1)

    if isinstance(payload, dict):
        entries = list(entries_from_github_tree(payload))
    else:
        entries = [ListingEntry.from_dict(item) for item in payload]
    return normalize_structure(entries, policy)


def _read_docs(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] cannot read {path}: {e}")
        raise typer.Exit(1)


@app.command()
def tree(
    ctx: typer.Context,
    path: Path = typer.Argument(
        ...,
        help="Directory to list, or a JSON listing file",
        exists=True,
        resolve_path=True,
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Verify the tree's uniqueness and connectivity invariants",
    ),
) -> None:
    """
    Print the normalized tree of a directory or listing.
    """
    root = _load_tree(ctx, path)

    display = Tree(f"[bold blue]{path.name}[/bold blue]")
    _add_to_rich_tree(display, root)
    console.print(display)
    console.print(f"[dim]{sum(1 for p in tree_paths(root) if p)} entries[/dim]")

    if check:
        problems = TreeGraph.from_tree(root).check_invariants()
        if problems:
            console.print(f"\n[bold red]{len(problems)} invariant violation(s):[/bold red]")
            for problem in problems:
                console.print(f"   • {problem}")
            raise typer.Exit(1)
        console.print("\n[green]✓ Tree invariants hold[/green]")


@app.command()
def snapshot(
    ctx: typer.Context,
    path: Path = typer.Argument(
        ...,
        help="Directory to capture, or a JSON listing file",
        exists=True,
        resolve_path=True,
    ),
    project: str = typer.Option(..., "--project", "-p", help="Project identifier"),
    docs: Path = typer.Option(
        ...,
        "--docs",
        help="Architecture documentation generated for this tree",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Store a snapshot: the normalized tree plus its documentation.
    """
    root = _load_tree(ctx, path)
    db = _open_db(ctx)
    record = db.save_snapshot(project, root, _read_docs(docs))

    file_count = sum(1 for _ in root.iter_files())
    console.print(
        Panel(
            f"Snapshot [cyan]{record.id}[/cyan]\n"
            f"Project: {project}\nFiles: {file_count}\nDatabase: {db.path}",
            title="[bold green]✓ Snapshot Saved[/bold green]",
            border_style="green",
        )
    )


@app.command()
def drift(
    ctx: typer.Context,
    path: Path = typer.Argument(
        ...,
        help="Directory to compare, or a JSON listing file",
        exists=True,
        resolve_path=True,
    ),
    project: str = typer.Option(..., "--project", "-p", help="Project identifier"),
    docs: Path = typer.Option(
        ...,
        "--docs",
        help="Architecture documentation generated for the current tree",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Compare the current tree and docs against the latest snapshot.

    The comparison is recorded as a drift record; a failed comparison is
    recorded with error status and can simply be re-run.
    """
    db = _open_db(ctx)
    baseline = db.get_latest_snapshot(project)
    if baseline is None:
        console.print(f"[yellow]{NoBaselineError(project)}[/yellow]")
        console.print(f"Run [bold]repodrift snapshot {path} --project {project}[/bold] first.")
        raise typer.Exit(1)

    root = _load_tree(ctx, path)
    detector = DriftDetector(db)
    try:
        record = detector.detect_against_snapshot(project, root, _read_docs(docs), baseline)
    except RepoDriftError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[bold red]Drift detection failed:[/bold red] {e}")
        console.print("The drift record was marked as error. Re-run detection to try again.")
        raise typer.Exit(1)

    _print_record(record)
    _print_file_changes(record)
    _print_directory_summary(record)


@app.command()
def diff(
    old: Path = typer.Argument(..., exists=True, dir_okay=False, help="Previous documentation"),
    new: Path = typer.Argument(..., exists=True, dir_okay=False, help="Current documentation"),
) -> None:
    """
    Compare two documentation files without recording anything.
    """
    report = compare_architecture_markdown(_read_docs(new), _read_docs(old))
    console.print(Markdown(report))


@app.command()
def history(
    ctx: typer.Context,
    project: str = typer.Option(..., "--project", "-p", help="Project identifier"),
    limit: int = typer.Option(
        10,
        "--limit",
        "-n",
        help="Number of records to show",
    ),
) -> None:
    """
    Show completed drift records, most recent first.
    """
    db_path = Path(_config(ctx).db_path)
    if not db_path.exists():
        console.print("[yellow]No drift history found.[/yellow]")
        raise typer.Exit(0)

    records = Database(db_path).list_drift_records(project, limit=limit)
    if not records:
        console.print("[yellow]No drift records.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Drift History: {project}", box=box.ROUNDED)
    table.add_column("Completed", style="cyan")
    table.add_column("Record")
    table.add_column("Score", justify="right")
    table.add_column("Added", justify="right")
    table.add_column("Removed", justify="right")
    table.add_column("Modified", justify="right")

    for record in records:
        color = SEVERITY_COLORS[record.severity]
        changes = record.file_changes
        table.add_row(
            record.completed_at.strftime("%Y-%m-%d %H:%M:%S") if record.completed_at else "-",
            record.id[:8],
            f"[{color}]{record.drift_score}[/{color}]",
            str(len(changes.added)),
            str(len(changes.removed)),
            str(len(changes.modified)),
        )

    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Drift record identifier"),
) -> None:
    """
    Show one drift record with both reports.
    """
    record = _open_db(ctx).get_drift_record(record_id)
    if record is None:
        console.print(f"[red]Drift record '{record_id}' not found.[/red]")
        raise typer.Exit(1)
    _print_record(record)


# Helper functions for output formatting

def _add_to_rich_tree(branch: Tree, node: FileNode) -> None:
    for child in node.children or ():
        if child.is_dir:
            _add_to_rich_tree(branch.add(f"[bold]{child.name}/[/bold]"), child)
        else:
            size = f" [dim]({child.size} B)[/dim]" if child.size is not None else ""
            branch.add(f"{child.name}{size}")


def _print_record(record: DriftRecord) -> None:
    """Print the score summary and both reports for a record."""
    color = SEVERITY_COLORS[record.severity]

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Label", style="dim")
    table.add_column("Value", style="bold")
    table.add_row("Record", record.id)
    table.add_row("Snapshot", record.snapshot_id)
    table.add_row("Status", record.status.value)
    table.add_row(
        "Drift score",
        f"[{color}]{record.drift_score}/100 ({record.severity.value})[/{color}]",
    )

    components = score_components(record.file_changes, record.architecture_diff)
    table.add_row(
        "Components",
        ", ".join(f"{name} {points}" for name, points in components.items()),
    )
    console.print(Panel(table, title="[bold]Drift Result[/bold]", border_style=color))

    console.print(Markdown(record.structure_diff))
    console.print(Markdown(record.architecture_diff))


def _print_file_changes(record: DriftRecord) -> None:
    """Print changed files with the size recorded on each side."""
    if record.current_structure is None or record.file_changes.is_empty:
        return

    table = Table(title="File Changes", box=box.ROUNDED)
    table.add_column("Change")
    table.add_column("Path", style="cyan")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")

    styles = {"added": "green", "removed": "red", "modified": "yellow"}
    for change in describe_changes(record.current_structure, record.previous_structure):
        style = styles[change.change]
        table.add_row(
            f"[{style}]{change.change}[/{style}]",
            change.path,
            "-" if change.previous_size is None else str(change.previous_size),
            "-" if change.current_size is None else str(change.current_size),
        )

    console.print(table)


def _print_directory_summary(record: DriftRecord) -> None:
    changes = record.file_changes
    counts = summarize_by_directory(changes.added + changes.removed + changes.modified)
    if not counts:
        return
    console.print("\n[bold]Changes by directory:[/bold]")
    for directory, count in list(counts.items())[:10]:
        console.print(f"   • {directory or '(root)'}: {count}")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to the database file (default: .repodrift/repodrift.db)",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a repodrift.toml file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
    ),
) -> None:
    """
    repodrift: track how a repository's structure and docs drift apart.
    """
    if version:
        console.print(f"[bold]repodrift[/bold] version {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()

    try:
        config = load_config(
            config_file,
            db_path=db_path,
            log_level="DEBUG" if verbose else None,
        )
    except RepoDriftError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(2)

    logging.basicConfig(
        level=config.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    ctx.obj = config


if __name__ == "__main__":
    app()
