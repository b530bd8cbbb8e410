"""Shared fixtures for CLI tests."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

import orm_study.cli as cli


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CliRunner for testing commands."""
    return CliRunner()


@pytest.fixture
def mock_config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Set cli.CONFIG_PATH to a temp directory and return it."""
    monkeypatch.setattr(cli, "CONFIG_PATH", tmp_path)
    return tmp_path


@pytest.fixture
def mock_db_config() -> dict[str, str | int]:
    """Return mock database configuration values."""
    return {
        "host": "localhost",
        "port": 5432,
        "user": "test_user",
        "password": "test_pass",
        "database": "test_db",
    }


@pytest.fixture
def test_session_factory(session_factory):
    """Route every CLI command to the test database."""
    with patch("orm_study.cli.utils.get_session_factory", return_value=session_factory):
        yield session_factory
