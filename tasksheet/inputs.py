"""
Input resolution: raw XML, an XML file, or a task sequence object.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from tasksheet.conditions import parse_timestamp
from tasksheet.exceptions import ConfigurationError, MalformedInputError, NotFoundError
from tasksheet.models import SequenceSource
from tasksheet.parse import parse_sequence

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Task Sequence"


@dataclass(frozen=True)
class TaskSequencePackage:
    """
    Task sequence object as exported from the management console.

    Any object exposing ``name``, ``last_refresh_time`` and ``sequence``
    (or their PascalCase spellings) can be passed to ``resolve_input``;
    this dataclass is what ``load_package`` produces from an export file.
    """

    name: str
    last_refresh_time: datetime | str | None
    sequence: str


def resolve_input(
    xml: str | bytes | None = None,
    path: str | Path | None = None,
    task_sequence: Any = None,
    name: str | None = None,
    default_title: str = DEFAULT_TITLE,
) -> SequenceSource:
    """
    Resolve exactly one input shape into a SequenceSource.

    Args:
        xml: Task sequence XML already in memory
        path: Path to a file containing task sequence XML
        task_sequence: Object exposing name, last_refresh_time and sequence
        name: Display name override (ignored for task sequence objects)
        default_title: Title used when raw XML comes without a name

    Returns:
        SequenceSource with title, last-updated time and parsed root

    Raises:
        ConfigurationError: If zero or several inputs are given
        NotFoundError: If the path does not exist
        MalformedInputError: If the XML is invalid
    """
    given = [value is not None for value in (xml, path, task_sequence)]
    if sum(given) != 1:
        raise ConfigurationError(
            "Exactly one input is required: XML text, an XML file, or a task sequence object.",
            "Pass one of xml=..., path=... or task_sequence=...",
        )

    if task_sequence is not None:
        return _from_task_sequence(task_sequence, name)

    if path is not None:
        file_path = Path(path)
        if not file_path.is_file():
            raise NotFoundError(str(file_path))
        logger.debug(f"Reading task sequence XML from {file_path}")
        xml = file_path.read_bytes()
        source = str(file_path)
    else:
        source = None

    title = name or default_title
    root = parse_sequence(xml, name=title, source=source)
    return SequenceSource(title=title, last_updated=datetime.now(), root=root)


def _from_task_sequence(task_sequence: Any, name: str | None) -> SequenceSource:
    title = _attribute(task_sequence, "name", "Name")
    refreshed = _attribute(task_sequence, "last_refresh_time", "LastRefreshTime")
    sequence = _attribute(task_sequence, "sequence", "Sequence")

    if name:
        logger.debug(f"Ignoring display name '{name}' for task sequence object '{title}'")
    if not sequence:
        raise MalformedInputError("task sequence object has no sequence XML", str(title))

    title = str(title or DEFAULT_TITLE)
    root = parse_sequence(sequence, name=title, source=title)
    return SequenceSource(title=title, last_updated=_coerce_time(refreshed), root=root)


def _attribute(obj: Any, *names: str) -> Any:
    for attr in names:
        if isinstance(obj, dict) and attr in obj:
            return obj[attr]
        if hasattr(obj, attr):
            return getattr(obj, attr)
    return None


def _coerce_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        parsed = parse_timestamp(value)
        if parsed is not None:
            return parsed
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.warning(f"Unrecognized refresh time '{value}', using current time")
    return datetime.now()


def load_package(path: str | Path) -> TaskSequencePackage:
    """
    Load a task sequence object exported as YAML or JSON.

    Raises:
        NotFoundError: If the file does not exist
        MalformedInputError: If the file is unreadable or misses required keys
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise NotFoundError(str(file_path))

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise MalformedInputError(f"cannot read package file: {e}", str(file_path)) from e

    if not isinstance(data, dict):
        raise MalformedInputError(
            f"expected a mapping, got {type(data).__name__}", str(file_path)
        )

    sequence = _attribute(data, "sequence", "Sequence")
    if not sequence:
        raise MalformedInputError("package has no 'Sequence' key", str(file_path))

    return TaskSequencePackage(
        name=str(_attribute(data, "name", "Name") or DEFAULT_TITLE),
        last_refresh_time=_attribute(data, "last_refresh_time", "LastRefreshTime"),
        sequence=sequence,
    )
