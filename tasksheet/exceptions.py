"""
Custom exceptions for tasksheet with helpful error messages.
"""


class TaskSheetError(Exception):
    """Base exception for tasksheet errors."""

    def __init__(self, message: str, suggestion: str = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.message)

    def __str__(self):
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class NotFoundError(TaskSheetError):
    """Input file not found."""

    def __init__(self, file_path: str):
        message = f"File not found: {file_path}"
        suggestion = (
            "Check that the file path is correct and the file exists:\n" f"  ls -l {file_path}"
        )
        super().__init__(message, suggestion)


class MalformedInputError(TaskSheetError):
    """Task sequence XML (or package file) could not be understood."""

    def __init__(self, error_details: str, source: str = None):
        message = f"Invalid task sequence: {error_details}"
        if source:
            message = f"Invalid task sequence in {source}: {error_details}"

        suggestion = (
            "The input must be a task sequence XML export, for example:\n"
            "  <sequence>\n"
            '    <group name="Setup">\n'
            '      <step name="Restart" type="SMS_TaskSequence_RebootAction"/>\n'
            "    </group>\n"
            "  </sequence>"
        )
        super().__init__(message, suggestion)


class ConfigurationError(TaskSheetError):
    """Requested options cannot be satisfied."""

    pass


class ExtensionMismatchError(ConfigurationError):
    """Export path extension does not fit the requested output mode."""

    def __init__(self, export_path: str, expand_controls: bool):
        if expand_controls:
            message = f"Expand/collapse controls need a macro-enabled workbook, got: {export_path}"
            suggestion = (
                "Export to an .xlsm file or drop the controls:\n"
                "  tasksheet export sequence.xml --out sequence.xlsm --expand-controls\n"
                "  tasksheet export sequence.xml --out sequence.xlsx"
            )
        else:
            message = f"Unsupported export format: {export_path}"
            suggestion = "The export path must end in .xlsx or .xlsm"
        super().__init__(message, suggestion)


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid."""

    def __init__(self, error_details: str):
        message = f"Invalid configuration file: {error_details}"

        suggestion = (
            "Fix the tasksheet.yaml file.\n"
            "You can regenerate the default configuration:\n"
            "  mv tasksheet.yaml tasksheet.yaml.backup\n"
            "  tasksheet init-config\n\n"
            "Then merge your settings back from the backup."
        )
        super().__init__(message, suggestion)


class ExternalEngineError(TaskSheetError):
    """The document engine rejected an operation."""

    def __init__(self, operation: str, error_message: str):
        message = f"Document engine failed to {operation}: {error_message}"

        suggestion = (
            "This could be due to:\n"
            "  - The target file being open in another application\n"
            "  - Missing write permission on the output directory\n"
            "  - A damaged macro template workbook"
        )
        super().__init__(message, suggestion)


def format_error_for_cli(error: Exception) -> str:
    """
    Format an exception for CLI display with helpful information.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, TaskSheetError):
        output = f"[red]Error:[/red] {error.message}"
        if error.suggestion:
            output += f"\n\n[yellow]{error.suggestion}[/yellow]"
        return output
    else:
        return f"[red]Error:[/red] {str(error)}"
