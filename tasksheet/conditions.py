"""
Render condition trees as indented, human-readable text.

Each operator contributes a header line ("All are true:" and friends) and
each expression contributes exactly one line, so the output of
``render_condition`` has one line per node in the condition tree.
"""

import re
from datetime import datetime

from tasksheet.models import Condition, Expression, ExpressionKind, Operator

INDENT = "    "

OPERATOR_HEADERS = {
    "and": "All are true:",
    "or": "Any are true:",
    "not": "None are true:",
}

COMPARISON_SYMBOLS = {
    "equals": "=",
    "notEquals": "!=",
    "notExists": "does not exist",
    "greater": ">",
    "greaterEqual": ">=",
    "less": "<",
    "lessEqual": "<=",
}

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S.%f"
TIMESTAMP_WIDTH = 18
DISPLAY_FORMAT = "%x %X"
UNKNOWN_EXPRESSION = "Unknown condition"

_LINE_BREAK = re.compile(r"\s*[\r\n]+\s*")


def format_operator(op: str) -> str:
    """Map a comparison keyword to its symbol; unknown keywords pass through."""
    return COMPARISON_SYMBOLS.get(op, op)


def parse_timestamp(raw: str) -> datetime | None:
    """
    Parse a fixed-width ``yyyyMMddHHmmss.fff`` timestamp.

    Only the first 18 characters are significant, so WMI datetimes with
    microseconds and a UTC offset are accepted too.
    """
    if not raw:
        return None
    try:
        return datetime.strptime(raw.strip()[:TIMESTAMP_WIDTH], TIMESTAMP_FORMAT)
    except ValueError:
        return None


def format_timestamp(raw: str, display_format: str = DISPLAY_FORMAT) -> str:
    """Render a raw timestamp as short date plus long time; unparsable text is kept."""
    parsed = parse_timestamp(raw)
    if parsed is None:
        return raw
    return parsed.strftime(display_format)


def render_condition(condition: Condition | None, indent: int = 0) -> str:
    """
    Render a condition tree as multi-line text.

    Args:
        condition: Root of the condition tree, or None
        indent: Nesting level of the root (4 spaces per level)

    Returns:
        Rendered text with trailing whitespace removed
    """
    if condition is None:
        return ""
    return "\n".join(_render_lines(condition, indent)).rstrip()


def _render_lines(condition: Condition, indent: int) -> list[str]:
    prefix = INDENT * indent
    if isinstance(condition, Operator):
        header = OPERATOR_HEADERS.get(condition.kind.lower(), condition.kind)
        lines = [prefix + header]
        for child in condition.children:
            lines.extend(_render_lines(child, indent + 1))
        return lines
    return [prefix + render_expression(condition)]


def render_expression(expression: Expression) -> str:
    """Render a single expression as one line of text (embedded line breaks become spaces)."""
    return _LINE_BREAK.sub(" ", _expression_text(expression)).strip() or UNKNOWN_EXPRESSION


def _expression_text(expression: Expression) -> str:
    kind = expression.kind

    if kind is ExpressionKind.VARIABLE:
        parts = ["Variable", expression.get("Variable"), format_operator(expression.get("Operator"))]
        text = " ".join(part for part in parts if part)
        value = expression.get("Value")
        if value:
            text += f' "{value}"'
        return text

    if kind is ExpressionKind.FOLDER:
        text = f'Folder "{expression.get("Path")}" exists'
        timestamp = expression.get("DateTime")
        if timestamp:
            op = format_operator(expression.get("DateTimeOperator"))
            text += f" and timestamp {op} {format_timestamp(timestamp)}"
        return text

    if kind is ExpressionKind.FILE:
        text = f'File "{expression.get("Path")}" exists'
        timestamp = expression.get("DateTime")
        if timestamp:
            op = format_operator(expression.get("DateTimeOperator"))
            text += f", timestamp {op} {format_timestamp(timestamp)}"
        version = expression.get("Version")
        if version:
            op = format_operator(expression.get("VersionOperator"))
            text += f", version {op} {version}"
        return text

    if kind is ExpressionKind.WMI:
        return (
            f'WMI Namespace: "{expression.get("Namespace")}" '
            f'Query: "{expression.get("Query")}"'
        )

    if kind is ExpressionKind.REGISTRY:
        key = expression.get("KeyPath")
        value_name = expression.get("Value")
        if value_name:
            key = f"{key}\\{value_name}"
        text = f'Registry "{key}"'
        reg_type = expression.get("Type")
        if reg_type:
            text += f" ({reg_type})"
        op = expression.get("Operator")
        if op:
            text += f" {format_operator(op)}"
        data = expression.get("Data")
        if data:
            text += f' "{data}"'
        return text

    return expression.raw_type
