"""
Toggle macro source for expand/collapse controls, rendered with Jinja2.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
MACRO_TEMPLATE = "toggle_groups.bas.j2"

# Indicator glyphs: pointing down while the group is expanded, right once collapsed
EXPANDED_GLYPH = "▼"
COLLAPSED_GLYPH = "▶"
NAME_PREFIX = "TS_Toggle_R"


def control_name(row: int) -> str:
    """Workbook defined name holding the rows toggled by the control on ``row``."""
    return f"{NAME_PREFIX}{row}"


def _vba_char(glyph: str) -> str:
    return f"ChrW(&H{ord(glyph):04X})"


def render_toggle_macro(sheet_name: str, control_column: str, controls: list[tuple[int, int, int]]) -> str:
    """
    Render the VBA module that flips group visibility.

    Args:
        sheet_name: Worksheet holding the controls
        control_column: Column letter of the indicator cells
        controls: (indicator row, first toggled row, last toggled row) triples

    Returns:
        VBA module source text
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    template = env.get_template(MACRO_TEMPLATE)
    return template.render(
        sheet_name=sheet_name,
        control_column=control_column,
        controls=controls,
        name_prefix=NAME_PREFIX,
        expanded=_vba_char(EXPANDED_GLYPH),
        collapsed=_vba_char(COLLAPSED_GLYPH),
    )
