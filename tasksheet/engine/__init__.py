"""
Document engine abstraction layer.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from tasksheet.engine.base import CellRange, CellStyle, DocumentEngine, ToggleAction
from tasksheet.engine.memory import InMemoryEngine
from tasksheet.engine.openpyxl_engine import OpenpyxlEngine


def get_engine(config: dict, opener: Callable[[str], Any] | None = None) -> DocumentEngine:
    """
    Factory function to get a document engine based on config.

    Args:
        config: Configuration dict with 'engine' section
        opener: Callable used to show a saved document (openpyxl backend only)

    Returns:
        DocumentEngine instance

    Raises:
        ValueError: If backend is not supported
    """
    engine_config = config.get("engine", {})
    backend = (engine_config.get("backend") or "openpyxl").lower()

    if backend == "openpyxl":
        return OpenpyxlEngine(engine_config, opener=opener)
    if backend == "memory":
        return InMemoryEngine(engine_config)

    raise ValueError(f"Unsupported engine backend: {backend}. Must be one of: ['openpyxl', 'memory']")


@contextmanager
def document_session(engine: DocumentEngine, sheet_name: str) -> Iterator[DocumentEngine]:
    """
    Open a document and guarantee it is released on every exit path.

    Usage:
        with document_session(engine, "Task Sequence") as doc:
            doc.write_cell(1, 1, "Name")
    """
    try:
        engine.create_document(sheet_name)
        yield engine
    finally:
        engine.close()


__all__ = [
    "CellRange",
    "CellStyle",
    "DocumentEngine",
    "InMemoryEngine",
    "OpenpyxlEngine",
    "ToggleAction",
    "document_session",
    "get_engine",
]
