"""
Data model for task sequences, conditions and flattened rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ExpressionKind(Enum):
    """Closed set of condition expression types."""

    VARIABLE = "SMS_TaskSequence_VariableConditionExpression"
    FOLDER = "SMS_TaskSequence_FolderConditionExpression"
    FILE = "SMS_TaskSequence_FileConditionExpression"
    WMI = "SMS_TaskSequence_WMIConditionExpression"
    REGISTRY = "SMS_TaskSequence_RegistryConditionExpression"
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, raw_type: str) -> "ExpressionKind":
        for kind in cls:
            if kind.value == raw_type:
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class Expression:
    """A single condition test such as a variable comparison or a WMI query."""

    kind: ExpressionKind
    raw_type: str
    fields: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str:
        """Return a field value, empty string when absent."""
        return self.fields.get(key) or ""


@dataclass(frozen=True)
class Operator:
    """Boolean combinator (and/or/not) over child conditions."""

    kind: str
    children: tuple["Condition", ...] = ()


Condition = Operator | Expression


@dataclass(frozen=True)
class Variable:
    """A step setting, rendered as ``{name} = {value}``."""

    name: str
    value: str


@dataclass(frozen=True)
class Step:
    """A leaf action in the task sequence."""

    name: str
    action_type: str = ""
    description: str = ""
    disabled: bool = False
    continue_on_error: bool = False
    condition: Condition | None = None
    variables: tuple[Variable, ...] = ()


@dataclass(frozen=True)
class Group:
    """A labeled section containing steps and nested groups."""

    name: str
    description: str = ""
    disabled: bool = False
    condition: Condition | None = None
    children: tuple["Node", ...] = ()


Node = Group | Step


@dataclass(frozen=True)
class Row:
    """Renderable projection of a single node."""

    depth: int
    name: str
    type_label: str
    description: str
    condition_text: str
    continue_on_error: bool
    settings_text: str
    disabled: bool
    is_group: bool


@dataclass(frozen=True)
class GroupSpan:
    """Row indices covered by a group's descendants (inclusive)."""

    first_child: int
    last: int

    @property
    def is_empty(self) -> bool:
        return self.last < self.first_child


@dataclass(frozen=True)
class SequenceSource:
    """Resolved input: what to title the sheet and which tree to render."""

    title: str
    last_updated: datetime
    root: Group
