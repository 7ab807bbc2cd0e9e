"""
Presentation layer: render options, validation and the worksheet renderer.
"""

from tasksheet.render.options import RenderOptions, validate_options
from tasksheet.render.sheet import SheetRenderer

__all__ = ["RenderOptions", "SheetRenderer", "validate_options"]
