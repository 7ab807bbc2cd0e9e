"""
Document engine backed by openpyxl.
"""

import logging
import tempfile
from collections.abc import Callable
from copy import copy
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import openpyxl
import typer
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.defined_name import DefinedName
from openpyxl.worksheet.hyperlink import Hyperlink
from openpyxl.xml.constants import XLSM

from tasksheet.engine.base import CellRange, CellStyle, DocumentEngine, ToggleAction
from tasksheet.engine.macros import EXPANDED_GLYPH, control_name, render_toggle_macro
from tasksheet.exceptions import ExternalEngineError

logger = logging.getLogger(__name__)

# Excel supports at most seven outline levels
MAX_OUTLINE_LEVEL = 7

FONT_ATTRIBUTES = {"bold": "bold", "size": "size", "strike": "strike", "font_color": "color"}
ALIGNMENT_ATTRIBUTES = {
    "indent": "indent",
    "wrap": "wrap_text",
    "vertical": "vertical",
    "horizontal": "horizontal",
}


def quote_sheet_title(title: str) -> str:
    """Quote a worksheet title for use in a cell reference."""
    return "'" + title.replace("'", "''") + "'"


class TaskSheetWorkbook(openpyxl.Workbook):
    """Workbook whose content type follows the extension it is saved under."""

    macro_enabled = False

    @property
    def mime_type(self):
        if self.macro_enabled and not self.vba_archive:
            return XLSM
        return super().mime_type


class OpenpyxlEngine(DocumentEngine):
    """
    Author .xlsx/.xlsm workbooks with openpyxl.

    Showing a document means opening the saved file with the system's
    default spreadsheet application when the session closes.
    """

    def __init__(self, config: dict, opener: Callable[[str], Any] | None = None):
        super().__init__(config)
        self.opener = opener or typer.launch
        self.macro_template = config.get("macro_template")
        self.workbook: openpyxl.Workbook | None = None
        self.sheet = None
        self.saved_path: Path | None = None
        self.controls: list[tuple[int, int, ToggleAction]] = []

    @property
    def _ws(self):
        if self.sheet is None:
            raise ExternalEngineError("access worksheet", "no open document")
        return self.sheet

    def create_document(self, sheet_name: str) -> None:
        if self.macro_template:
            template = Path(self.macro_template)
            if not template.is_file():
                raise ExternalEngineError(
                    "load macro template", f"template workbook not found: {template}"
                )
            try:
                self.workbook = openpyxl.load_workbook(template, keep_vba=True)
            except (OSError, KeyError, ValueError, BadZipFile, InvalidFileException) as e:
                raise ExternalEngineError("load macro template", str(e)) from e
            logger.debug(f"Using macro template {template}")
        else:
            self.workbook = TaskSheetWorkbook()

        self.controls = []
        self.saved_path = None
        self.sheet = self.workbook.active
        self.sheet.title = sheet_name
        # Group rows sit above their children
        self.sheet.sheet_properties.outlinePr.summaryBelow = False

    def write_cell(self, row: int, column: int, value: Any) -> None:
        if isinstance(value, str):
            value = ILLEGAL_CHARACTERS_RE.sub("", value)
        cell = self._ws.cell(row=row, column=column, value=value)
        if isinstance(value, str) and value.startswith("="):
            cell.data_type = "s"

    def merge_cells(self, cell_range: CellRange) -> None:
        self._ws.merge_cells(
            start_row=cell_range.min_row,
            start_column=cell_range.min_col,
            end_row=cell_range.max_row,
            end_column=cell_range.max_col,
        )

    def set_style(self, cell_range: CellRange, style: CellStyle) -> None:
        changes = style.changes()
        font_changes = {FONT_ATTRIBUTES[k]: v for k, v in changes.items() if k in FONT_ATTRIBUTES}
        align_changes = {
            ALIGNMENT_ATTRIBUTES[k]: v for k, v in changes.items() if k in ALIGNMENT_ATTRIBUTES
        }
        fill = None
        if "fill" in changes:
            fill = PatternFill(fill_type="solid", start_color=changes["fill"], end_color=changes["fill"])

        for row, column in cell_range.cells():
            cell = self._ws.cell(row=row, column=column)
            if font_changes:
                font: Font = copy(cell.font)
                for attr, value in font_changes.items():
                    setattr(font, attr, value)
                cell.font = font
            if align_changes:
                alignment: Alignment = copy(cell.alignment)
                for attr, value in align_changes.items():
                    setattr(alignment, attr, value)
                cell.alignment = alignment
            if fill is not None:
                cell.fill = fill

    def draw_borders(self, cell_range: CellRange, color: str) -> None:
        side = Side(style="thin", color=color)
        border = Border(left=side, right=side, top=side, bottom=side)
        for row, column in cell_range.cells():
            self._ws.cell(row=row, column=column).border = border

    def set_column_width(self, column: int, width: float) -> None:
        self._ws.column_dimensions[get_column_letter(column)].width = width

    def set_row_height(self, row: int, height: float) -> None:
        self._ws.row_dimensions[row].height = height

    def freeze_panes(self, row: int, column: int) -> None:
        self._ws.freeze_panes = self._ws.cell(row=row, column=column).coordinate

    def group_rows(self, first_row: int, last_row: int) -> None:
        for row in range(first_row, last_row + 1):
            dimension = self._ws.row_dimensions[row]
            dimension.outline_level = min((dimension.outline_level or 0) + 1, MAX_OUTLINE_LEVEL)

    def add_interactive_control(self, row: int, column: int, action: ToggleAction) -> None:
        ws = self._ws
        sheet_ref = quote_sheet_title(ws.title)
        cell = ws.cell(row=row, column=column, value=EXPANDED_GLYPH)
        cell.hyperlink = Hyperlink(
            ref=cell.coordinate,
            location=f"{sheet_ref}!{cell.coordinate}",
            tooltip="Expand or collapse this group",
        )
        cell.font = Font(bold=True, color="1F4E78")
        cell.alignment = Alignment(horizontal="center", vertical="top")

        self.workbook.defined_names.add(
            DefinedName(
                control_name(row),
                attr_text=f"{sheet_ref}!${action.first_row}:${action.last_row}",
            )
        )
        self.controls.append((row, column, action))

    def save(self, path: Path) -> Path:
        if self.workbook is None:
            raise ExternalEngineError("save", "no open document")

        path = Path(path)
        is_macro_enabled = path.suffix.lower() == ".xlsm"
        self.workbook.macro_enabled = is_macro_enabled
        if is_macro_enabled and self.workbook.vba_archive is None:
            logger.warning(
                f"{path.name} has no embedded VBA project; import the .bas module or set "
                "engine.macro_template to a macro-enabled workbook"
            )

        # An .xlsx must not carry the template's VBA project or its content type
        vba_archive = self.workbook.vba_archive
        if not is_macro_enabled and vba_archive is not None:
            logger.warning(
                f"{path.name} is not macro-enabled; the template's VBA project is left out"
            )
            self.workbook.vba_archive = None

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self.workbook.save(path)
        except (OSError, ValueError, TypeError) as e:
            raise ExternalEngineError("save", f"{path}: {e}") from e
        finally:
            self.workbook.vba_archive = vba_archive

        if is_macro_enabled and self.controls:
            self._write_macro_module(path.with_suffix(".bas"))

        self.saved_path = path
        logger.info(f"Saved workbook to {path}")
        return path

    def _write_macro_module(self, module_path: Path) -> None:
        column = get_column_letter(self.controls[0][1])
        triples = [(row, action.first_row, action.last_row) for row, _, action in self.controls]
        source = render_toggle_macro(self._ws.title, column, triples)
        try:
            # VBA modules are read as ANSI text with CRLF line endings
            module_path.write_text(
                source, encoding="cp1252", errors="replace", newline="\r\n"
            )
        except OSError as e:
            raise ExternalEngineError("write macro module", f"{module_path}: {e}") from e
        logger.info(f"Wrote toggle macro module to {module_path}")

    def close(self) -> None:
        if self.workbook is None:
            return
        try:
            if self.visible:
                path = self.saved_path
                if path is None:
                    suffix = ".xlsm" if self.workbook.vba_archive is not None else ".xlsx"
                    scratch_dir = Path(tempfile.mkdtemp(prefix="tasksheet-"))
                    path = self.save(scratch_dir / f"{self._ws.title}{suffix}")
                logger.info(f"Opening {path}")
                self.opener(str(path))
        finally:
            self.workbook.close()
            self.workbook = None
            self.sheet = None
