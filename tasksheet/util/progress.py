"""
Progress tracking and reporting utilities using rich.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

console = Console()


def create_progress_bar() -> Progress:
    """
    Create a rich Progress bar with custom formatting.

    Returns:
        Configured Progress instance
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    )


@contextmanager
def track_progress(description: str) -> Iterator[Callable[[int, str], None]]:
    """
    Context manager yielding a (percent, status) callback bound to a progress bar.

    Usage:
        with track_progress("Rendering rows") as report:
            report(50, "Writing Install Windows")
            report(100, "Complete")

    Args:
        description: Description shown until the first status arrives

    Yields:
        Callback accepting percent complete (0-100) and a status line
    """
    progress = create_progress_bar()
    with progress:
        task = progress.add_task(description, total=100)

        def report(percent: int, status: str) -> None:
            progress.update(task, completed=percent, description=status)

        yield report


def show_summary(title: str, items: dict[str, str | int]):
    """
    Show a formatted summary box.

    Args:
        title: Summary title
        items: Dictionary of items to show (key: value pairs)
    """
    from rich.panel import Panel
    from rich.table import Table

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in items.items():
        table.add_row(key, str(value))

    panel = Panel(table, title=f"[bold]{title}[/bold]", border_style="blue")
    console.print(panel)
