"""
CLI for toggle-handler.

Creates and deletes feature toggles across Toggle.kt, ToggleDoc.kt,
ServiceExtensions.kt and RemoteSettingsDefaults.kt.
"""

import sys
import logging
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from togglehandler import __version__
from togglehandler.config import ToggleHandlerConfig
from togglehandler.definitions import DATE_FORMAT, TARGET_FILES, TargetFileKind
from togglehandler.errors import ToggleEditError
from togglehandler.form import ToggleForm, prompt_toggle_form
from togglehandler.modifier import EditStatus, FileEditOutcome, ToggleFileModifier
from togglehandler.workspace import Document


console = Console()
logger = logging.getLogger(__name__)

_DATE = click.DateTime(formats=[DATE_FORMAT, "%Y-%m-%d"])


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def get_config(ctx: click.Context) -> ToggleHandlerConfig:
    """Load configuration, exiting with a message when it is invalid."""
    try:
        return ToggleHandlerConfig.from_env(ctx.obj.get("project"))
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        console.print("\nPass --project or set TOGGLE_HANDLER_PROJECT_DIR=<project-root>")
        sys.exit(1)


def _relative(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def _print_diff(lines: List[str]):
    for line in lines:
        text = escape(line.rstrip("\r\n"))
        if line.startswith("+") and not line.startswith("+++"):
            console.print(f"[green]{text}[/green]")
        elif line.startswith("-") and not line.startswith("---"):
            console.print(f"[red]{text}[/red]")
        else:
            console.print(text)


def _report(outcomes: List[FileEditOutcome], root: Path, dry_run: bool = False) -> int:
    """Print one line per file and return the number of failures."""
    failures = 0
    for outcome in outcomes:
        where = escape(_relative(outcome.target.path, root))
        message = escape(outcome.message)
        if outcome.status is EditStatus.MODIFIED:
            if dry_run:
                console.print(f"[cyan][DRY][/cyan] Would update {where}")
                _print_diff(outcome.diff)
            else:
                console.print(f"[green][OK][/green] Updated {where}")
        elif outcome.status is EditStatus.OPENED:
            console.print(f"[green][OK][/green] Opened {where} for review: {message}")
        elif outcome.status is EditStatus.FAILED:
            failures += 1
            kind = outcome.error.kind if outcome.error else "error"
            console.print(f"[red][FAIL][/red] {where}: {message} [dim]({kind})[/dim]")
        else:
            console.print(f"[yellow][-][/yellow] {where} {outcome.status.value}: {message}")
    return failures


def _fail(error: ToggleEditError):
    console.print(f"[red][FAIL][/red] {escape(str(error))}")
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--project", "-p",
    type=click.Path(file_okay=False),
    help="Project root (defaults to TOGGLE_HANDLER_PROJECT_DIR or the current directory)",
)
@click.version_option(__version__, prog_name="toggle-handler")
@click.pass_context
def main(ctx: click.Context, verbose: bool, project: Optional[str]):
    """Toggle Handler - create and delete feature toggles in a Kotlin project."""
    setup_logging(verbose)
    ctx.ensure_object(dict)["project"] = project


@main.command()
@click.option("--name", "-n", help="Toggle name in PascalCase (prompts for all fields if omitted)")
@click.option("--jira", "-j", default="", help="Jira task, e.g. IMASD-45809")
@click.option("--description", "-d", default="", help="What the toggle is for")
@click.option("--remote/--no-remote", default=False, help="Toggle is remotely configurable")
@click.option("--activation-date", type=_DATE, help="Activation date (dd/mm/yyyy)")
@click.option("--activation-version", default="", help="Activation version, e.g. 13.6.0")
@click.option("--deprecation-date", type=_DATE, help="Deprecation date (dd/mm/yyyy)")
@click.option("--dry-run", is_flag=True, help="Show the changes without writing them")
@click.pass_context
def create(ctx, name, jira, description, remote, activation_date, activation_version,
           deprecation_date, dry_run):
    """Create a toggle in every target file found in the project."""
    config = get_config(ctx)

    form = ToggleForm(
        name=name or "",
        jira_task=jira,
        description=description,
        remotely_configurable=remote,
        activation_date=activation_date.date() if activation_date else None,
        activation_version=activation_version,
        deprecation_date=deprecation_date.date() if deprecation_date else None,
    )
    if not form.name.strip():
        form = prompt_toggle_form(form)
    record = form.to_record()

    modifier = ToggleFileModifier(config)
    try:
        outcomes = modifier.create_toggle(record, dry_run=dry_run)
    except ToggleEditError as e:
        _fail(e)

    if not outcomes:
        console.print("[red]Error:[/red] No files found to modify")
        console.print(f"[dim]Looked for {', '.join(TARGET_FILES.values())} under {escape(str(config.project_root))}[/dim]")
        sys.exit(1)

    failures = _report(outcomes, config.project_root, dry_run)
    if failures:
        console.print(f"\n[red]{failures} file(s) could not be updated[/red] - fix them manually and retry")
        sys.exit(1)
    if not dry_run:
        console.print(f"\n[green][OK][/green] Toggle {escape(record.name)} created")


@main.command()
@click.argument("name", required=False)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show the changes without writing them")
@click.option("--no-open", is_flag=True, help="Don't open ServiceExtensions.kt for review")
@click.pass_context
def delete(ctx, name: Optional[str], yes: bool, dry_run: bool, no_open: bool):
    """Delete a toggle from Toggle.kt and RemoteSettingsDefaults.kt.

    ServiceExtensions.kt is opened for manual review instead of being edited.
    """
    config = get_config(ctx)
    modifier = ToggleFileModifier(config)

    if not name:
        try:
            names = modifier.list_toggles()
        except ToggleEditError as e:
            _fail(e)
        if not names:
            console.print("[yellow]No toggles found[/yellow]")
            return
        for i, toggle in enumerate(names, 1):
            console.print(f"  {i}. {escape(toggle)}")
        name = click.prompt("Select a toggle", type=click.Choice(names), show_choices=False)

    console.print(
        "[dim]This removes it from Toggle.kt and RemoteSettingsDefaults.kt, "
        "but not from ServiceExtensions.kt[/dim]"
    )
    if not yes and not dry_run:
        if not click.confirm(f"Delete toggle {name}?"):
            console.print("Cancelled")
            return

    try:
        outcomes = modifier.delete_toggle(name, dry_run=dry_run, open_extensions=not no_open)
    except ToggleEditError as e:
        _fail(e)

    failures = _report(outcomes, config.project_root, dry_run)
    if failures:
        console.print(f"\n[red]{failures} file(s) could not be updated[/red] - fix them manually and retry")
        sys.exit(1)
    if not dry_run:
        console.print(f"\n[green][OK][/green] Toggle {escape(name)} deleted")


@main.command(name="list")
@click.pass_context
def list_toggles(ctx):
    """List toggles declared in Toggle.kt."""
    config = get_config(ctx)
    try:
        names = ToggleFileModifier(config).list_toggles()
    except ToggleEditError as e:
        _fail(e)

    if not names:
        console.print("[yellow]No toggles found[/yellow]")
        return

    table = Table(title="Toggles")
    table.add_column("#", style="dim", width=4)
    table.add_column("Toggle", style="cyan")
    for i, toggle in enumerate(names, 1):
        table.add_row(str(i), toggle)
    console.print(table)


@main.command()
@click.pass_context
def files(ctx):
    """Show the target files found in the project."""
    config = get_config(ctx)
    targets = ToggleFileModifier(config).find_toggle_files()

    table = Table(title="Target files")
    table.add_column("Kind", style="cyan")
    table.add_column("File")
    for kind in TargetFileKind:
        matches = [t for t in targets if t.kind is kind]
        if not matches:
            table.add_row(kind.value, f"[yellow]{kind.file_name} not found[/yellow]")
        for target in matches:
            table.add_row(kind.value, escape(_relative(target.path, config.project_root)))
    console.print(table)


@main.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def undo(ctx, yes: bool):
    """Restore target files to their state before the last edit."""
    config = get_config(ctx)
    targets = ToggleFileModifier(config).find_toggle_files()
    documents = [d for d in (Document(t.path) for t in targets) if d.has_undo()]
    if not documents:
        console.print("[yellow]Nothing to undo[/yellow]")
        return

    if not yes and not click.confirm(f"Restore {len(documents)} file(s)?"):
        console.print("Cancelled")
        return

    failures = 0
    for document in documents:
        where = escape(_relative(document.path, config.project_root))
        try:
            document.undo()
        except ToggleEditError as e:
            failures += 1
            console.print(f"[red][FAIL][/red] {where}: {escape(e.message)}")
            continue
        console.print(f"[green][OK][/green] Restored {where}")
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
