"""
Render options and their up-front validation.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from tasksheet.exceptions import ExtensionMismatchError

logger = logging.getLogger(__name__)

WORKBOOK_SUFFIX = ".xlsx"
MACRO_WORKBOOK_SUFFIX = ".xlsm"
SUPPORTED_SUFFIXES = (WORKBOOK_SUFFIX, MACRO_WORKBOOK_SUFFIX)


@dataclass(frozen=True)
class RenderOptions:
    """How the sheet is produced and delivered."""

    export_path: Path | None = None
    show: bool = False
    add_expand_controls: bool = False
    use_row_grouping: bool = False
    hide_progress: bool = False
    include_variable_column: bool = True

    @property
    def is_macro_enabled(self) -> bool:
        return (
            self.export_path is not None
            and self.export_path.suffix.lower() == MACRO_WORKBOOK_SUFFIX
        )


def validate_options(options: RenderOptions) -> RenderOptions:
    """
    Check options before any document exists and auto-correct what can be.

    Returns:
        Options to render with (show forced on when nothing would be saved)

    Raises:
        ExtensionMismatchError: If the export path has an unsupported
            extension, or controls were requested without an .xlsm path
    """
    export_path = Path(options.export_path) if options.export_path is not None else None
    options = replace(options, export_path=export_path)

    if export_path is not None and export_path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ExtensionMismatchError(str(export_path), expand_controls=False)

    if options.add_expand_controls and not options.is_macro_enabled:
        raise ExtensionMismatchError(str(export_path), expand_controls=True)

    if options.is_macro_enabled and not options.add_expand_controls:
        logger.warning(
            f"{export_path.name} is macro-enabled but expand controls were not requested; "
            "the workbook will contain no controls"
        )

    if export_path is None and not options.show:
        logger.warning("No export path given; showing the document so it can be saved manually")
        options = replace(options, show=True)

    return options
