"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path

import pytest

from tasksheet.config import default_config
from tasksheet.engine import InMemoryEngine


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sequence_file(fixtures_dir):
    """Return path to the deployment sequence fixture."""
    return fixtures_dir / "sequences" / "deploy.xml"


@pytest.fixture
def sequence_xml(sequence_file):
    """Return the deployment sequence fixture as text."""
    return sequence_file.read_text(encoding="utf-8")


@pytest.fixture
def package_file(fixtures_dir):
    """Return path to the exported task sequence package fixture."""
    return fixtures_dir / "packages" / "deploy.yaml"


@pytest.fixture
def simple_xml():
    """A minimal sequence: one group holding one step, plus a top-level step."""
    return """
    <sequence>
      <group name="Setup">
        <step name="Restart" type="SMS_TaskSequence_RebootAction"/>
      </group>
      <step name="Run Command" type="SMS_TaskSequence_RunCommandLineAction"/>
    </sequence>
    """


@pytest.fixture
def config():
    """Return a fresh default configuration."""
    return default_config()


@pytest.fixture
def memory_config():
    """Return configuration selecting the in-memory engine."""
    config = default_config()
    config["engine"]["backend"] = "memory"
    return config


@pytest.fixture
def memory_engine():
    """Return an in-memory document engine."""
    return InMemoryEngine()
