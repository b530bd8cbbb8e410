"""Root Typer application of the `orm-study` command."""

import logging
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated

import typer

import orm_study.cli as cli
from orm_study.cli.commands.db import db_app
from orm_study.cli.commands.init import init
from orm_study.cli.commands.items import items_app
from orm_study.cli.commands.members import members_app

# Plain messages, no level or logger prefix
logging.basicConfig(level=logging.INFO, format="%(message)s")

app = typer.Typer(
    name="orm-study",
    help="ORM mapping and query-building sandbox on SQLAlchemy.",
    no_args_is_help=True,
    add_completion=False,
)
app.command(name="init")(init)
app.add_typer(db_app, name="db")
app.add_typer(members_app, name="members")
app.add_typer(items_app, name="items")


def _print_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"orm-study {get_version('orm-study')}")
    raise typer.Exit()


@app.callback()
def main_callback(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config-path",
            "-cp",
            help="Directory holding db.yaml (default: ./configs)",
            envvar="ORM_STUDY_CONFIG_PATH",
        ),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", help="Show version and exit", callback=_print_version, is_eager=True),
    ] = None,
) -> None:
    """ORM mapping and query-building sandbox on SQLAlchemy."""
    cli.CONFIG_PATH = (config_path or Path.cwd() / "configs").resolve()


def main() -> None:
    app()
