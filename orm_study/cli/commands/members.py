"""members commands - Search members with dynamic filters and pagination."""

import json
from typing import Annotated

import typer

from orm_study.exceptions import EntityNotFoundError, InvalidPageableError, QueryFailedError
from orm_study.orm.service.member_search import CountStrategy

members_app = typer.Typer(
    name="members",
    help="Search members and teams.",
    no_args_is_help=True,
)


@members_app.command(name="search")
def search_cmd(
    username: Annotated[str | None, typer.Option("--username", help="Exact username")] = None,
    team_name: Annotated[str | None, typer.Option("--team-name", help="Exact team name")] = None,
    age_goe: Annotated[int | None, typer.Option("--age-goe", help="Minimum age (inclusive)")] = None,
    age_loe: Annotated[int | None, typer.Option("--age-loe", help="Maximum age (inclusive)")] = None,
    page: Annotated[int, typer.Option("--page", help="Zero-based page number")] = 0,
    size: Annotated[int, typer.Option("--size", help="Page size")] = 20,
    strategy: Annotated[
        CountStrategy,
        typer.Option("--strategy", help="Count strategy: simple or optimized"),
    ] = "optimized",
) -> None:
    """Search members and print one page as JSON.

    Examples:
      orm-study members search --team-name teamA
      orm-study members search --age-goe 25 --page 0 --size 2 --strategy simple
    """
    from orm_study.cli.utils import get_session_factory
    from orm_study.orm.search import MemberSearchCondition, Pageable
    from orm_study.orm.service import MemberSearchService

    try:
        pageable = Pageable.of(page, size)
    except InvalidPageableError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from None

    condition = MemberSearchCondition(username=username, team_name=team_name, age_goe=age_goe, age_loe=age_loe)
    service = MemberSearchService(get_session_factory())
    try:
        result = service.search_page(condition, pageable, strategy=strategy)
    except QueryFailedError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from None

    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@members_app.command(name="show")
def show_cmd(username: Annotated[str, typer.Argument(help="Username to look up")]) -> None:
    """Show one member and its team."""
    from orm_study.cli.utils import get_session_factory
    from orm_study.orm.service import MemberSearchService

    try:
        member = MemberSearchService(get_session_factory()).find_member(username)
    except (EntityNotFoundError, QueryFailedError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from None
    typer.echo(f"{member.member_id}\t{member.username}\t{member.age}\t{member.team_name or '-'}")


@members_app.command(name="teams")
def teams_cmd() -> None:
    """Show the average member age of every team."""
    from orm_study.cli.utils import get_session_factory
    from orm_study.orm.service import MemberSearchService

    try:
        averages = MemberSearchService(get_session_factory()).team_average_ages()
    except QueryFailedError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from None
    for team_name, avg_age in averages:
        typer.echo(f"{team_name}\t{avg_age:.1f}")
