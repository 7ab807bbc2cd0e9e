"""
Tests for export orchestration and the one-call generate() API.
"""

from datetime import datetime
from unittest.mock import Mock, patch

import pytest
from openpyxl import load_workbook

from tasksheet import generate
from tasksheet.engine import InMemoryEngine, OpenpyxlEngine
from tasksheet.exceptions import ConfigurationError, MalformedInputError, NotFoundError
from tasksheet.export import export_sequence
from tasksheet.inputs import TaskSequencePackage, resolve_input
from tasksheet.render import RenderOptions


class TestExportSequence:
    """Tests for rendering a resolved source."""

    def test_export_to_xlsx(self, sequence_file, tmp_path):
        source = resolve_input(path=sequence_file, name="Deploy")
        out = tmp_path / "deploy.xlsx"

        result = export_sequence(source, RenderOptions(export_path=out))

        assert result.path == out
        assert result.rows == 8
        assert result.groups == 3
        assert result.steps == 5
        assert result.visible is False

        ws = load_workbook(out)["Task Sequence"]
        assert ws["A1"].value.startswith("Deploy (Last updated: ")
        assert ws["A2"].value == "Name"
        assert ws["A4"].value == "Restart in Windows PE"
        assert ws["B4"].value == "Reboot"
        assert ws["A3"].font.bold

    def test_step_names_in_first_column(self, sequence_file, tmp_path):
        source = resolve_input(path=sequence_file)
        out = tmp_path / "deploy.xlsx"
        export_sequence(source, RenderOptions(export_path=out))

        ws = load_workbook(out).active
        names = [ws.cell(row=row, column=1).value for row in range(3, 11)]
        assert names[1] == "Restart in Windows PE"
        assert names[7] == "Enable BitLocker"

    def test_controls_require_xlsm_before_any_write(self, simple_xml, tmp_path):
        engine = InMemoryEngine()
        source = resolve_input(xml=simple_xml)

        with pytest.raises(ConfigurationError):
            export_sequence(
                source,
                RenderOptions(export_path=tmp_path / "out.xlsx", add_expand_controls=True),
                engine=engine,
            )

        assert engine.cells == {}
        assert engine.sheet_name is None
        assert not (tmp_path / "out.xlsx").exists()

    def test_no_path_forces_show(self, simple_xml):
        engine = InMemoryEngine()

        result = export_sequence(resolve_input(xml=simple_xml), RenderOptions(), engine=engine)

        assert result.visible is True
        assert result.path is None
        assert engine.shown
        assert engine.saved_paths == []

    def test_document_released_on_failure(self, simple_xml):
        engine = InMemoryEngine()
        engine.save = Mock(side_effect=RuntimeError("disk full"))

        with pytest.raises(RuntimeError):
            export_sequence(
                resolve_input(xml=simple_xml),
                RenderOptions(export_path="out.xlsx"),
                engine=engine,
            )

        assert engine.closed

    def test_engine_from_config(self, simple_xml, memory_config):
        with patch("tasksheet.export.get_engine", return_value=InMemoryEngine()) as factory:
            export_sequence(
                resolve_input(xml=simple_xml), RenderOptions(show=True), config=memory_config
            )

        factory.assert_called_once_with(memory_config)

    def test_worksheet_name_from_config(self, simple_xml, config):
        config["sheet"]["worksheet_name"] = "Build Steps"
        engine = InMemoryEngine()

        export_sequence(resolve_input(xml=simple_xml), RenderOptions(show=True), config, engine)

        assert engine.sheet_name == "Build Steps"

    def test_progress_callback(self, simple_xml):
        events = []
        export_sequence(
            resolve_input(xml=simple_xml),
            RenderOptions(show=True),
            engine=InMemoryEngine(),
            progress=lambda percent, status: events.append((percent, status)),
        )

        assert events[-1] == (100, "Complete")

    def test_expand_controls_workbook(self, sequence_file, tmp_path):
        out = tmp_path / "deploy.xlsm"

        result = export_sequence(
            resolve_input(path=sequence_file),
            RenderOptions(export_path=out, add_expand_controls=True, use_row_grouping=True),
        )

        assert result.path == out
        assert (tmp_path / "deploy.bas").exists()
        ws = load_workbook(out).active
        assert ws["A3"].value == "▼"
        assert ws["B3"].value == "Install Operating System"
        assert ws["B4"].value == "Restart in Windows PE"
        assert ws.row_dimensions[7].outline_level == 2


class TestGenerate:
    """Tests for the one-call API."""

    def test_generate_from_xml(self, simple_xml, tmp_path):
        out = tmp_path / "simple.xlsx"

        result = generate(xml=simple_xml, name="Simple", export_path=out)

        assert result.rows == 3
        assert load_workbook(out).active["A3"].value == "Setup"

    def test_generate_from_task_sequence(self, simple_xml):
        engine = InMemoryEngine()
        package = TaskSequencePackage("Servers", datetime(2024, 1, 2, 3, 4, 5), simple_xml)

        generate(task_sequence=package, show=True, engine=engine)

        assert engine.cells[(1, 1)].startswith("Servers (Last updated: ")

    def test_generate_uses_configured_title(self, simple_xml, config):
        config["sheet"]["default_title"] = "Build"
        engine = InMemoryEngine()

        generate(xml=simple_xml, show=True, config=config, engine=engine)

        assert engine.cells[(1, 1)].startswith("Build (Last updated: ")

    def test_generate_validates_before_reading_input(self, tmp_path):
        with pytest.raises(ConfigurationError):
            generate(
                path=tmp_path / "missing.xml",
                export_path=tmp_path / "out.xlsx",
                expand_controls=True,
            )

    def test_generate_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            generate(path=tmp_path / "missing.xml", export_path=tmp_path / "out.xlsx")

    def test_generate_malformed_xml(self, tmp_path):
        with pytest.raises(MalformedInputError):
            generate(xml="<sequence>", export_path=tmp_path / "out.xlsx")

    def test_generate_show_opens_document(self, simple_xml, tmp_path):
        opener = Mock()
        out = tmp_path / "simple.xlsx"

        result = generate(
            xml=simple_xml, export_path=out, show=True, engine=OpenpyxlEngine({}, opener=opener)
        )

        assert result.visible
        opener.assert_called_once_with(str(out))
