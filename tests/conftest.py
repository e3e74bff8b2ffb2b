"""
Test Configuration File

Unified setup for Python path, avoiding sys.path.insert in each test file.
Keeps ConfigService isolated from the real user configuration.
"""

import sys
from pathlib import Path

import pytest

# Add the src directory to the Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

# Shared fakes live next to the tests
tests_path = Path(__file__).parent
if str(tests_path) not in sys.path:
    sys.path.insert(0, str(tests_path))


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Point the per-user configuration at a temporary file and reset the singleton."""
    from services.config_service import ConfigService

    monkeypatch.setenv("LOOP_QUEUE_PLAYER_CONFIG", str(tmp_path / "user-config.yaml"))
    ConfigService.reset_instance()
    yield
    ConfigService.reset_instance()


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "config.yaml")


@pytest.fixture(scope="session")
def qapp():
    """
    Create QCoreApplication for all tests.

    Uses session scope to avoid creating multiple application instances.
    """
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app
