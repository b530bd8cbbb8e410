"""Tests for orm_study.cli.utils module."""

from unittest.mock import MagicMock, patch

import pytest
import typer

from orm_study.cli.utils import get_session_factory


@patch("orm_study.orm.connection.DBConnection.from_config")
def test_get_session_factory(mock_from_config: MagicMock) -> None:
    get_session_factory()

    mock_from_config.return_value.get_session_factory.assert_called_once()


@patch("orm_study.orm.connection.DBConnection.from_config", side_effect=FileNotFoundError)
def test_missing_config_exits(_: MagicMock) -> None:
    with pytest.raises(typer.Exit) as exc_info:
        get_session_factory()

    assert exc_info.value.exit_code == 1


@patch("orm_study.orm.connection.DBConnection.from_config", side_effect=ValueError("no password"))
def test_invalid_config_exits(_: MagicMock) -> None:
    with pytest.raises(typer.Exit) as exc_info:
        get_session_factory()

    assert exc_info.value.exit_code == 1
