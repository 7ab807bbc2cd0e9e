"""
Export orchestration: input -> rows -> document.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tasksheet.config import default_config
from tasksheet.engine import DocumentEngine, document_session, get_engine
from tasksheet.flatten import flatten
from tasksheet.inputs import resolve_input
from tasksheet.models import SequenceSource
from tasksheet.render.options import RenderOptions, validate_options
from tasksheet.render.sheet import ProgressCallback, SheetRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """Outcome of a successful export."""

    path: Path | None
    rows: int
    groups: int
    steps: int
    visible: bool


def export_sequence(
    source: SequenceSource,
    options: RenderOptions,
    config: dict | None = None,
    engine: DocumentEngine | None = None,
    progress: ProgressCallback | None = None,
) -> ExportResult:
    """
    Render a resolved task sequence into a spreadsheet document.

    Options are validated before the document is created; the document is
    released on every exit path.

    Args:
        source: Resolved input
        options: Render options (validated here)
        config: Configuration dict (defaults when None)
        engine: Document engine (built from config when None)
        progress: Optional (percent, status) callback

    Returns:
        ExportResult describing what was produced

    Raises:
        ConfigurationError: If the options are inconsistent
        ExternalEngineError: If the document engine fails
    """
    config = config or default_config()
    options = validate_options(options)
    return render_document(source, options, config, engine, progress)


def render_document(
    source: SequenceSource,
    options: RenderOptions,
    config: dict,
    engine: DocumentEngine | None = None,
    progress: ProgressCallback | None = None,
) -> ExportResult:
    """Render with options that validate_options() has already checked."""
    engine = engine or get_engine(config)

    renderer = SheetRenderer(engine, options, config)
    flattened = flatten(source.root, base_depth=renderer.base_depth)
    logger.info(
        f"Flattened '{source.title}': {flattened.group_count} group(s), "
        f"{flattened.step_count} step(s)"
    )

    saved_path = None
    with document_session(engine, config["sheet"]["worksheet_name"]) as document:
        renderer.render(source, flattened, progress=progress)
        if options.export_path is not None:
            saved_path = document.save(options.export_path)
        if options.show:
            document.set_visible(True)

    return ExportResult(
        path=saved_path,
        rows=len(flattened.rows),
        groups=flattened.group_count,
        steps=flattened.step_count,
        visible=options.show,
    )


def generate(
    xml: str | bytes | None = None,
    path: str | Path | None = None,
    task_sequence: Any = None,
    name: str | None = None,
    export_path: str | Path | None = None,
    show: bool = False,
    expand_controls: bool = False,
    row_grouping: bool = False,
    hide_progress: bool = False,
    config: dict | None = None,
    engine: DocumentEngine | None = None,
    progress: Callable[[int, str], None] | None = None,
) -> ExportResult:
    """
    Convert a task sequence into a spreadsheet in one call.

    Exactly one of ``xml``, ``path`` or ``task_sequence`` must be given.

    Example:
        >>> generate(path="sequence.xml", export_path="sequence.xlsx")
    """
    config = config or default_config()
    options = validate_options(
        RenderOptions(
            export_path=Path(export_path) if export_path is not None else None,
            show=show,
            add_expand_controls=expand_controls,
            use_row_grouping=row_grouping,
            hide_progress=hide_progress,
        )
    )
    source = resolve_input(
        xml=xml,
        path=path,
        task_sequence=task_sequence,
        name=name,
        default_title=config["sheet"]["default_title"],
    )
    return render_document(source, options, config, engine, progress)
