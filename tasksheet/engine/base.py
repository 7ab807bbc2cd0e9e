"""
Abstract base class for document engines.

A document engine is the only thing that knows how a spreadsheet is
authored. The renderer talks to it in 1-based row/column coordinates and
never touches a workbook library directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class CellRange:
    """Inclusive, 1-based rectangle of cells."""

    min_row: int
    min_col: int
    max_row: int
    max_col: int

    @classmethod
    def cell(cls, row: int, column: int) -> "CellRange":
        return cls(row, column, row, column)

    def cells(self):
        """Yield (row, column) pairs row by row."""
        for row in range(self.min_row, self.max_row + 1):
            for column in range(self.min_col, self.max_col + 1):
                yield row, column


@dataclass(frozen=True)
class CellStyle:
    """Style changes to apply; None leaves the attribute untouched."""

    bold: bool | None = None
    size: float | None = None
    strike: bool | None = None
    font_color: str | None = None
    fill: str | None = None
    indent: int | None = None
    wrap: bool | None = None
    vertical: str | None = None
    horizontal: str | None = None

    def changes(self) -> dict[str, Any]:
        return {key: value for key, value in self.__dict__.items() if value is not None}


@dataclass(frozen=True)
class ToggleAction:
    """
    Expand/collapse behaviour wired to an interactive control.

    Toggling flips the visibility of rows ``first_row..last_row`` and turns
    the indicator between its expanded and collapsed orientation.
    """

    first_row: int
    last_row: int


class DocumentEngine(ABC):
    """Abstract base class for spreadsheet authoring backends."""

    def __init__(self, config: dict):
        """
        Initialize document engine.

        Args:
            config: Engine configuration dict ('backend', 'macro_template')
        """
        self.config = config
        self.visible = False

    @abstractmethod
    def create_document(self, sheet_name: str) -> None:
        """Start a new workbook with a single worksheet."""
        pass

    @abstractmethod
    def write_cell(self, row: int, column: int, value: Any) -> None:
        pass

    @abstractmethod
    def merge_cells(self, cell_range: CellRange) -> None:
        pass

    @abstractmethod
    def set_style(self, cell_range: CellRange, style: CellStyle) -> None:
        """Apply style changes to every cell in the range."""
        pass

    @abstractmethod
    def draw_borders(self, cell_range: CellRange, color: str) -> None:
        """Draw thin borders around and inside the range."""
        pass

    @abstractmethod
    def set_column_width(self, column: int, width: float) -> None:
        pass

    @abstractmethod
    def set_row_height(self, row: int, height: float) -> None:
        pass

    @abstractmethod
    def freeze_panes(self, row: int, column: int) -> None:
        """Freeze everything above and left of the given cell."""
        pass

    @abstractmethod
    def group_rows(self, first_row: int, last_row: int) -> None:
        """Outline rows one level deeper than they currently are."""
        pass

    @abstractmethod
    def add_interactive_control(self, row: int, column: int, action: ToggleAction) -> None:
        """Place an expand/collapse control at the given cell."""
        pass

    @abstractmethod
    def save(self, path: Path) -> Path:
        """
        Persist the document.

        Raises:
            ExternalEngineError: If the document cannot be written
        """
        pass

    def set_visible(self, visible: bool) -> None:
        """Request that the document be shown to the user."""
        self.visible = visible

    @abstractmethod
    def close(self) -> None:
        """Release the document; shows it first if it was made visible."""
        pass
