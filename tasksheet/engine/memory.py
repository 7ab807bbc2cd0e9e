"""
In-memory document engine (no files written).
"""

from pathlib import Path
from typing import Any

from tasksheet.engine.base import CellRange, CellStyle, DocumentEngine, ToggleAction
from tasksheet.exceptions import ExternalEngineError


class InMemoryEngine(DocumentEngine):
    """
    Document engine that records every operation in dictionaries.
    Useful for previews and for testing the renderer without a workbook.
    """

    def __init__(self, config: dict | None = None):
        super().__init__(config or {})
        self.sheet_name: str | None = None
        self.cells: dict[tuple[int, int], Any] = {}
        self.styles: dict[tuple[int, int], dict[str, Any]] = {}
        self.borders: dict[tuple[int, int], str] = {}
        self.merged: list[CellRange] = []
        self.column_widths: dict[int, float] = {}
        self.row_heights: dict[int, float] = {}
        self.outline_levels: dict[int, int] = {}
        self.controls: list[tuple[int, int, ToggleAction]] = []
        self.frozen: tuple[int, int] | None = None
        self.saved_paths: list[Path] = []
        self.closed = False
        self.shown = False

    def _require_document(self, operation: str) -> None:
        if self.sheet_name is None or self.closed:
            raise ExternalEngineError(operation, "no open document")

    def create_document(self, sheet_name: str) -> None:
        self.sheet_name = sheet_name

    def write_cell(self, row: int, column: int, value: Any) -> None:
        self._require_document("write cell")
        self.cells[(row, column)] = value

    def merge_cells(self, cell_range: CellRange) -> None:
        self._require_document("merge cells")
        self.merged.append(cell_range)

    def set_style(self, cell_range: CellRange, style: CellStyle) -> None:
        self._require_document("set style")
        for key in cell_range.cells():
            self.styles.setdefault(key, {}).update(style.changes())

    def draw_borders(self, cell_range: CellRange, color: str) -> None:
        self._require_document("draw borders")
        for key in cell_range.cells():
            self.borders[key] = color

    def set_column_width(self, column: int, width: float) -> None:
        self.column_widths[column] = width

    def set_row_height(self, row: int, height: float) -> None:
        self.row_heights[row] = height

    def freeze_panes(self, row: int, column: int) -> None:
        self.frozen = (row, column)

    def group_rows(self, first_row: int, last_row: int) -> None:
        self._require_document("group rows")
        for row in range(first_row, last_row + 1):
            self.outline_levels[row] = self.outline_levels.get(row, 0) + 1

    def add_interactive_control(self, row: int, column: int, action: ToggleAction) -> None:
        self._require_document("add control")
        self.controls.append((row, column, action))

    def save(self, path: Path) -> Path:
        self._require_document("save")
        self.saved_paths.append(Path(path))
        return Path(path)

    def close(self) -> None:
        self.shown = self.visible
        self.closed = True

    def style_of(self, row: int, column: int) -> dict[str, Any]:
        """Accumulated style changes for a cell."""
        return self.styles.get((row, column), {})

    def row_values(self, row: int) -> list[Any]:
        """Values of a row from column 1 to the right-most written column."""
        columns = [col for (r, col) in self.cells if r == row]
        if not columns:
            return []
        return [self.cells.get((row, col)) for col in range(1, max(columns) + 1)]
