"""
tasksheet: task sequence documentation tool.

Converts task sequence XML exports (nested groups and steps with
conditions and settings) into formatted spreadsheets for review.

Main features:
- Preorder flattening with inherited disabled state
- Readable condition text (variables, files, folders, WMI, registry)
- Styled .xlsx output with optional row outlining
- Expand/collapse controls for macro-enabled .xlsm workbooks
"""

from tasksheet.export import ExportResult, export_sequence, generate

__all__ = ["ExportResult", "export_sequence", "generate"]
