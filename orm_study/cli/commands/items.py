"""items commands - List catalog items."""

from typing import Annotated, Literal

import typer

items_app = typer.Typer(
    name="items",
    help="List catalog items.",
    no_args_is_help=True,
)

ItemKind = Literal["all", "book", "movie"]

DTYPES: dict[str, str | None] = {"all": None, "book": "B", "movie": "M"}


@items_app.command(name="list")
def list_cmd(
    kind: Annotated[ItemKind, typer.Argument(help="Item kind: all, book or movie")] = "all",
) -> None:
    """List catalog items with their price and stock."""
    from orm_study.cli.utils import get_session_factory
    from orm_study.orm.service import CatalogService

    for item in CatalogService(get_session_factory()).list_items(DTYPES[kind]):
        typer.echo(f"{item.item_id}\t{item.dtype}\t{item.name}\t{item.price}\t{item.stock_quantity}")
