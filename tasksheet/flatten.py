"""
Flatten a task sequence tree into renderable rows.
"""

from dataclasses import dataclass, field

from tasksheet.conditions import render_condition
from tasksheet.models import Group, GroupSpan, Node, Row, Step
from tasksheet.naming import friendly_name

GROUP_LABEL = "Group"


@dataclass
class FlattenResult:
    """Rows in preorder plus the descendant range of every group row."""

    rows: list[Row] = field(default_factory=list)
    group_spans: dict[int, GroupSpan] = field(default_factory=dict)

    @property
    def group_count(self) -> int:
        return sum(1 for row in self.rows if row.is_group)

    @property
    def step_count(self) -> int:
        return sum(1 for row in self.rows if not row.is_group)

    @property
    def disabled_count(self) -> int:
        return sum(1 for row in self.rows if row.disabled)


def flatten(root: Group, base_depth: int = 0) -> FlattenResult:
    """
    Walk the tree depth-first and emit one Row per group or step.

    The root itself is not emitted. Disabled groups disable everything
    beneath them; an explicitly disabled node stays disabled under an
    enabled parent.

    Args:
        root: Root group whose children are rendered
        base_depth: Depth of top-level rows (1 reserves an indent level
            for expand/collapse controls)

    Returns:
        FlattenResult with rows and group spans keyed by row index
    """
    result = FlattenResult()
    for child in root.children:
        _visit(child, base_depth, root.disabled, result)
    return result


def _visit(node: Node, depth: int, inherited_disabled: bool, result: FlattenResult) -> None:
    disabled = node.disabled or inherited_disabled
    index = len(result.rows)
    result.rows.append(build_row(node, depth, disabled))

    if isinstance(node, Group):
        for child in node.children:
            _visit(child, depth + 1, disabled, result)
        result.group_spans[index] = GroupSpan(first_child=index + 1, last=len(result.rows) - 1)


def build_row(node: Node, depth: int, disabled: bool) -> Row:
    """Compute the display fields of a single node."""
    if isinstance(node, Step):
        return Row(
            depth=depth,
            name=node.name,
            type_label=friendly_name(node.action_type),
            description=node.description,
            condition_text=render_condition(node.condition, 0),
            continue_on_error=node.continue_on_error,
            settings_text=format_settings(node),
            disabled=disabled,
            is_group=False,
        )
    return Row(
        depth=depth,
        name=node.name,
        type_label=GROUP_LABEL,
        description=node.description,
        condition_text=render_condition(node.condition, 0),
        continue_on_error=False,
        settings_text="",
        disabled=disabled,
        is_group=True,
    )


def format_settings(step: Step) -> str:
    return "\n".join(f"{var.name} = {var.value}" for var in step.variables)
