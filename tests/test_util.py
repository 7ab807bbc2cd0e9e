"""
Tests for progress and logging utilities.
"""

import logging

from rich.logging import RichHandler

from tasksheet.util.logging import configure_logging
from tasksheet.util.progress import create_progress_bar, show_summary, track_progress


class TestProgress:
    """Tests for progress helpers."""

    def test_create_progress_bar(self):
        progress = create_progress_bar()
        assert len(progress.columns) == 5

    def test_track_progress_updates_task(self):
        with track_progress("Rendering rows") as report:
            report(50, "Writing Restart")
            report(100, "Complete")

    def test_show_summary(self, capsys):
        show_summary("Export summary", {"Rows": 8, "Output": "deploy.xlsx"})

        output = capsys.readouterr().out
        assert "Export summary" in output
        assert "deploy.xlsx" in output


class TestConfigureLogging:
    """Tests for log routing."""

    def test_default_level(self):
        configure_logging()

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert any(isinstance(handler, RichHandler) for handler in root.handlers)

    def test_verbose_level(self):
        configure_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG
        configure_logging()
