"""db commands - Create, drop, seed and inspect the study database."""

import logging
from typing import Annotated

import psycopg
import typer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from orm_study.exceptions import MissingDBNameError

logger = logging.getLogger("orm-study")

SYSTEM_DATABASES = {"postgres", "template0", "template1"}

db_app = typer.Typer(
    name="db",
    help="Create, drop, seed and inspect the study database.",
    no_args_is_help=True,
)


def _load_connection():
    from orm_study.orm.connection import DBConnection

    try:
        return DBConnection.from_config()
    except FileNotFoundError:
        typer.echo("Config file not found. Run 'orm-study init' first.", err=True)
        raise typer.Exit(1) from None


@db_app.command(name="create")
def create_database_cmd() -> None:
    """Create the configured database and its tables.

    Examples:
        orm-study db create
    """
    db_conn = _load_connection()
    try:
        db_conn.create_database()
    except (MissingDBNameError, psycopg.Error, SQLAlchemyError) as e:
        typer.echo(f"Create failed: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Database '{db_conn.database}' is ready.")


@db_app.command(name="drop")
def drop_database_cmd(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompts"),
    ] = False,
) -> None:
    """Drop the configured database.

    Examples:
        orm-study db drop
        orm-study db drop --yes
    """
    db_conn = _load_connection()
    if db_conn.database is None or db_conn.database in SYSTEM_DATABASES:
        typer.echo(f"Refusing to drop protected system database '{db_conn.database}'.", err=True)
        raise typer.Exit(1)

    if not yes and not typer.confirm(f"This will permanently DROP database '{db_conn.database}'. Continue?"):
        typer.echo("Aborted.")
        raise typer.Exit(0)

    try:
        db_conn.terminate_connections()
        db_conn.drop_database()
    except (MissingDBNameError, psycopg.Error, SQLAlchemyError) as e:
        typer.echo(f"Drop failed: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Database '{db_conn.database}' dropped successfully.")


@db_app.command(name="info")
def info_cmd() -> None:
    """Show the row count of every table."""
    db_conn = _load_connection()
    for table, count in db_conn.get_table_counts().items():
        typer.echo(f"  {table:<12} {count}")


def seed_sample_data(session_factory: sessionmaker[Session]) -> dict[str, int]:
    """Load the sample data set: two teams, four members, two items and one order.

    Returns:
        Number of created rows per entity.
    """
    from orm_study.orm.service import CatalogService, MemberSearchService, OrderService

    members = MemberSearchService(session_factory)
    member_ids = [
        members.register_member("member1", 10, "teamA"),
        members.register_member("member2", 20, "teamA"),
        members.register_member("member3", 30, "teamB"),
        members.register_member("member4", 40, "teamB"),
    ]

    catalog = CatalogService(session_factory)
    book_id = catalog.add_book("JPA Book", price=10000, stock_quantity=100, author="kim", isbn="1111")
    movie_id = catalog.add_movie("Spring Movie", price=20000, stock_quantity=50, artist="lee")

    OrderService(session_factory).place_order(
        member_ids[0], {book_id: 2, movie_id: 1}, city="Seoul", street="Teheran-ro", zipcode="06234"
    )
    logger.info("Sample data loaded")
    return {"team": 2, "member": len(member_ids), "item": 2, "orders": 1}


@db_app.command(name="seed")
def seed_cmd() -> None:
    """Insert the sample teams, members, items and order."""
    from orm_study.cli.utils import get_session_factory

    created = seed_sample_data(get_session_factory())
    summary = ", ".join(f"{count} {table}" for table, count in created.items())
    typer.echo(f"Seeded {summary}.")
