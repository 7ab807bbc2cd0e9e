"""
Presentation renderer: lays flattened rows out on a worksheet.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from tasksheet.engine.base import CellRange, CellStyle, DocumentEngine, ToggleAction
from tasksheet.flatten import FlattenResult
from tasksheet.models import Row, SequenceSource
from tasksheet.render.options import RenderOptions

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

TITLE_ROW = 1
HEADER_ROW = 2
FIRST_DATA_ROW = 3

TITLE_FONT_SIZE = 14
CONTROL_COLUMN_WIDTH = 3.5
# Approximate character widths taken up by one Excel indent level
INDENT_WIDTH = 3
CELL_PADDING = 2


@dataclass(frozen=True)
class Column:
    """A worksheet column and how its values are produced."""

    key: str
    header: str
    wrap: bool = False
    max_width_setting: str | None = None


CONTROL = Column("control", "")
NAME = Column("name", "Name")
TYPE = Column("type", "Type")
DESCRIPTION = Column("description", "Description", wrap=True, max_width_setting="max_text_width")
CONDITIONS = Column("conditions", "Conditions", wrap=True, max_width_setting="max_text_width")
CONTINUE_ON_ERROR = Column("continue_on_error", "Continue on Error")
SETTINGS = Column("settings", "Settings", wrap=True, max_width_setting="max_settings_width")


def cell_value(row: Row, column: Column) -> Any:
    """Value written for a row in the given column (None leaves the cell empty)."""
    if column.key == "name":
        return row.name
    if column.key == "type":
        return row.type_label
    if column.key == "description":
        return row.description or None
    if column.key == "conditions":
        return row.condition_text or None
    if column.key == "continue_on_error":
        return "Yes" if row.continue_on_error else None
    if column.key == "settings":
        return row.settings_text or None
    return None


class SheetRenderer:
    """
    Writes the title, headers and one styled row per flattened node.

    Example:
        >>> renderer = SheetRenderer(engine, options, config)
        >>> flattened = flatten(source.root, base_depth=renderer.base_depth)
        >>> renderer.render(source, flattened)
    """

    def __init__(self, engine: DocumentEngine, options: RenderOptions, config: dict):
        self.engine = engine
        self.options = options
        self.sheet_config = config["sheet"]
        self.colors = config["colors"]
        self.layout = config["layout"]
        self.columns = self._build_columns()

    @property
    def base_depth(self) -> int:
        """Depth of top-level rows; controls reserve one indent level."""
        return 1 if self.options.add_expand_controls else 0

    def _build_columns(self) -> list[Column]:
        columns = []
        if self.options.add_expand_controls:
            columns.append(CONTROL)
        columns.extend([NAME, TYPE, DESCRIPTION, CONDITIONS])
        if self.sheet_config.get("include_continue_on_error", True):
            columns.append(CONTINUE_ON_ERROR)
        if self.options.include_variable_column:
            columns.append(SETTINGS)
        return columns

    def column_index(self, key: str) -> int:
        """1-based position of a column."""
        for position, column in enumerate(self.columns, start=1):
            if column.key == key:
                return position
        raise KeyError(key)

    def render(
        self,
        source: SequenceSource,
        flattened: FlattenResult,
        progress: ProgressCallback | None = None,
    ) -> None:
        """
        Populate and style the open document.

        Args:
            source: Title and timestamp of the sequence
            flattened: Rows and group spans to render
            progress: Optional (percent, status) callback, once per row plus a final event
        """
        if self.options.hide_progress:
            progress = None

        self._write_title(source)
        self._write_headers()

        rows = flattened.rows
        total = len(rows)
        for index, row in enumerate(rows):
            self._write_row(FIRST_DATA_ROW + index, row)
            if progress:
                progress(int((index + 1) * 100 / total), f"Writing {row.name}")

        if self.options.add_expand_controls:
            self._add_controls(flattened)
        if self.options.use_row_grouping:
            self._group_rows(flattened)

        widths = self._size_columns(rows)
        self._size_rows(rows, widths)

        last_row = HEADER_ROW + total
        self.engine.draw_borders(
            CellRange(HEADER_ROW, 1, last_row, len(self.columns)), self.colors["border"]
        )
        self.engine.freeze_panes(FIRST_DATA_ROW, 1)

        logger.debug(f"Rendered {total} row(s) across {len(self.columns)} column(s)")
        if progress:
            progress(100, "Complete")

    def _write_title(self, source: SequenceSource) -> None:
        stamp = source.last_updated.strftime(self.sheet_config["timestamp_format"])
        self.engine.write_cell(TITLE_ROW, 1, f"{source.title} (Last updated: {stamp})")
        title_range = CellRange(TITLE_ROW, 1, TITLE_ROW, len(self.columns))
        self.engine.merge_cells(title_range)
        self.engine.set_style(CellRange.cell(TITLE_ROW, 1), CellStyle(bold=True, size=TITLE_FONT_SIZE))

    def _write_headers(self) -> None:
        for position, column in enumerate(self.columns, start=1):
            if column.header:
                self.engine.write_cell(HEADER_ROW, position, column.header)
        self.engine.set_style(
            CellRange(HEADER_ROW, 1, HEADER_ROW, len(self.columns)),
            CellStyle(bold=True, vertical="center"),
        )

    def _write_row(self, sheet_row: int, row: Row) -> None:
        for position, column in enumerate(self.columns, start=1):
            value = cell_value(row, column)
            if value is not None:
                self.engine.write_cell(sheet_row, position, value)

        if row.is_group:
            fill = self.colors["group_disabled"] if row.disabled else self.colors["group"]
        else:
            fill = self.colors["step_disabled"] if row.disabled else self.colors["step"]

        full_row = CellRange(sheet_row, 1, sheet_row, len(self.columns))
        self.engine.set_style(full_row, CellStyle(fill=fill, vertical="top"))

        for position, column in enumerate(self.columns, start=1):
            if column.wrap:
                self.engine.set_style(CellRange.cell(sheet_row, position), CellStyle(wrap=True))

        name_col = self.column_index("name")
        self.engine.set_style(CellRange.cell(sheet_row, name_col), CellStyle(indent=row.depth))

        if row.is_group:
            type_col = self.column_index("type")
            self.engine.set_style(
                CellRange(sheet_row, name_col, sheet_row, type_col), CellStyle(bold=True)
            )
        elif row.disabled:
            self.engine.set_style(
                full_row, CellStyle(strike=True, font_color=self.colors["disabled_font"])
            )

    def _add_controls(self, flattened: FlattenResult) -> None:
        control_col = self.column_index("control")
        for index, span in sorted(flattened.group_spans.items()):
            if span.is_empty:
                continue
            action = ToggleAction(
                first_row=FIRST_DATA_ROW + span.first_child,
                last_row=FIRST_DATA_ROW + span.last,
            )
            self.engine.add_interactive_control(FIRST_DATA_ROW + index, control_col, action)

    def _group_rows(self, flattened: FlattenResult) -> None:
        for span in flattened.group_spans.values():
            if not span.is_empty:
                self.engine.group_rows(FIRST_DATA_ROW + span.first_child, FIRST_DATA_ROW + span.last)

    def _size_columns(self, rows: list[Row]) -> dict[str, float]:
        """Auto-size columns from their content, then clamp the wide ones."""
        minimum = self.layout["min_column_width"]
        widths = {}
        for position, column in enumerate(self.columns, start=1):
            if column.key == "control":
                width = CONTROL_COLUMN_WIDTH
            else:
                width = max(minimum, len(column.header) + CELL_PADDING)
                for row in rows:
                    value = cell_value(row, column)
                    if value is None:
                        continue
                    longest = max(len(line) for line in str(value).split("\n"))
                    if column.key == "name":
                        longest += row.depth * INDENT_WIDTH
                    width = max(width, longest + CELL_PADDING)
                if column.max_width_setting:
                    width = min(width, self.layout[column.max_width_setting])
            widths[column.key] = width
            self.engine.set_column_width(position, width)
        return widths

    def _size_rows(self, rows: list[Row], widths: dict[str, float]) -> None:
        line_height = self.layout["line_height"]
        max_height = self.layout["max_row_height"]
        for index, row in enumerate(rows):
            lines = 1
            for column in self.columns:
                if not column.wrap:
                    continue
                value = cell_value(row, column)
                if value is None:
                    continue
                lines = max(lines, wrapped_line_count(str(value), widths[column.key]))
            self.engine.set_row_height(FIRST_DATA_ROW + index, min(lines * line_height, max_height))


def wrapped_line_count(text: str, width: float) -> int:
    """Estimate how many lines text occupies in a wrapping cell of the given width."""
    usable = max(int(width) - CELL_PADDING, 1)
    return sum(max(1, math.ceil(len(line) / usable)) for line in text.split("\n"))
