"""Shared helpers for CLI commands."""

import logging

import typer
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger("orm-study")


def get_session_factory() -> sessionmaker[Session]:
    """Build a session factory from configs/db.yaml, exiting with an error message when it is missing."""
    from orm_study.orm.connection import DBConnection

    try:
        return DBConnection.from_config().get_session_factory()
    except FileNotFoundError:
        typer.echo("Config file not found. Run 'orm-study init' first.", err=True)
        raise typer.Exit(1) from None
    except (TypeError, ValueError) as e:
        typer.echo(f"Invalid database config: {e}", err=True)
        raise typer.Exit(1) from None
