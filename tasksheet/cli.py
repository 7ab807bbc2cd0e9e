"""
CLI entry point for tasksheet.
"""

import logging
import sys
from contextlib import nullcontext
from functools import wraps
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tasksheet.config import CONFIG_FILENAME, load_config, write_default_config
from tasksheet.exceptions import ConfigurationError, TaskSheetError, format_error_for_cli
from tasksheet.export import render_document
from tasksheet.flatten import flatten
from tasksheet.inputs import load_package, resolve_input
from tasksheet.models import SequenceSource
from tasksheet.render.options import RenderOptions, validate_options
from tasksheet.util.logging import configure_logging
from tasksheet.util.progress import show_summary, track_progress

app = typer.Typer(
    name="tasksheet",
    help="Document task sequences as formatted spreadsheets",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)


def handle_errors(func):
    """Decorator to handle exceptions in CLI commands with nice formatting."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TaskSheetError as e:
            console.print(format_error_for_cli(e))
            raise typer.Exit(1)
        except typer.Exit:
            raise
        except Exception as e:
            console.print(f"[red]Unexpected error:[/red] {str(e)}")
            console.print("\n[yellow]This may be a bug. Re-run with --verbose for details.[/yellow]")
            logger.debug("Unexpected error", exc_info=True)
            raise typer.Exit(1)

    return wrapper


def _load_source(
    source: Path | None, package: Path | None, stdin: bool, name: str | None, config: dict
) -> SequenceSource:
    given = sum([source is not None, package is not None, stdin])
    if given != 1:
        raise ConfigurationError(
            "Exactly one input is required.",
            "Pass an XML file, --package <file> or --stdin:\n"
            "  tasksheet export sequence.xml --out sequence.xlsx",
        )

    default_title = config["sheet"]["default_title"]
    if package is not None:
        return resolve_input(task_sequence=load_package(package), name=name)
    if stdin:
        return resolve_input(xml=sys.stdin.read(), name=name, default_title=default_title)
    return resolve_input(path=source, name=name or source.stem, default_title=default_title)


@app.command()
@handle_errors
def export(
    source: Path | None = typer.Argument(None, help="Task sequence XML file"),
    package: Path | None = typer.Option(
        None, "--package", help="YAML/JSON export of a task sequence object"
    ),
    stdin: bool = typer.Option(False, "--stdin", help="Read task sequence XML from stdin"),
    name: str | None = typer.Option(None, "--name", help="Display name (ignored with --package)"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Output workbook (.xlsx or .xlsm)"),
    show: bool = typer.Option(False, "--show", help="Open the workbook when done"),
    expand_controls: bool = typer.Option(
        False, "--expand-controls", help="Add expand/collapse controls (requires .xlsm)"
    ),
    group_rows: bool = typer.Option(False, "--group-rows", help="Outline rows under each group"),
    no_progress: bool = typer.Option(False, "--no-progress", help="Hide the progress bar"),
    config_file: Path | None = typer.Option(None, "--config", help="Path to tasksheet.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Export a task sequence to a spreadsheet."""
    configure_logging(verbose)
    config = load_config(config_file)

    options = validate_options(
        RenderOptions(
            export_path=out,
            show=show,
            add_expand_controls=expand_controls,
            use_row_grouping=group_rows,
            hide_progress=no_progress,
        )
    )
    sequence = _load_source(source, package, stdin, name, config)

    console.print(f"[bold blue]Exporting task sequence:[/bold blue] {sequence.title}")
    tracker = nullcontext(None) if options.hide_progress else track_progress("Rendering rows")
    with tracker as report:
        result = render_document(sequence, options, config, progress=report)

    if result.path:
        console.print(f"[green]✓ Workbook written to {result.path}[/green]")
        if expand_controls:
            console.print(
                f"[green]✓ Toggle macro module: {result.path.with_suffix('.bas')}[/green]"
            )
    if result.visible:
        console.print("[green]✓ Opened workbook for review[/green]")

    show_summary(
        "Export summary",
        {
            "Rows": result.rows,
            "Groups": result.groups,
            "Steps": result.steps,
            "Output": str(result.path) if result.path else "(not saved)",
        },
    )


@app.command()
@handle_errors
def preview(
    source: Path | None = typer.Argument(None, help="Task sequence XML file"),
    package: Path | None = typer.Option(
        None, "--package", help="YAML/JSON export of a task sequence object"
    ),
    config_file: Path | None = typer.Option(None, "--config", help="Path to tasksheet.yaml"),
):
    """Print the flattened rows without creating a workbook."""
    config = load_config(config_file)
    sequence = _load_source(source, package, False, None, config)
    flattened = flatten(sequence.root)

    table = Table(title=sequence.title, show_lines=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name")
    table.add_column("Type", style="cyan")
    table.add_column("Conditions")
    table.add_column("Settings", style="dim")

    for index, row in enumerate(flattened.rows, start=1):
        name = "  " * row.depth + escape(row.name)
        if row.is_group:
            name = f"[bold]{name}[/bold]"
        if row.disabled:
            name = f"[strike]{name}[/strike]"
        table.add_row(
            str(index), name, row.type_label, escape(row.condition_text), escape(row.settings_text)
        )

    console.print(table)
    console.print(
        f"[dim]{flattened.group_count} group(s), {flattened.step_count} step(s), "
        f"{flattened.disabled_count} disabled[/dim]"
    )


@app.command(name="init-config")
def init_config(
    path: Path = typer.Argument(Path(CONFIG_FILENAME), help="Where to write the configuration"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Write the default configuration file."""
    if path.exists() and not force:
        console.print(f"[yellow]⚠ {path} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)

    write_default_config(path)
    console.print(f"[green]✓ Wrote default configuration to {path}[/green]")


if __name__ == "__main__":
    app()
