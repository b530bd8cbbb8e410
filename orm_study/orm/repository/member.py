"""Member repository for orm-study.

Besides the paginated member search, this repository carries the query
building catalogue of the study project: sorting, paging, aggregation,
joins, subqueries, CASE expressions, projections, dynamic filters and bulk
statements, all expressed with SQLAlchemy's `select()` construct.
"""

import logging

from sqlalchemy import Select, String, case, cast, delete, func, literal, select, update
from sqlalchemy.orm import Session, aliased, contains_eager

from orm_study.orm.repository.base import GenericRepository
from orm_study.orm.schema import Member, Team
from orm_study.orm.search import (
    AgeStatistics,
    MemberDTO,
    MemberSearchCondition,
    MemberTeamDTO,
    Page,
    Pageable,
    UserDTO,
    age_eq,
    conjunction,
    get_page,
    member_search_predicates,
    username_eq,
)

logger = logging.getLogger("orm-study")


class MemberRepository(GenericRepository[Member]):
    """Repository for Member entity with search and query-building capabilities."""

    def __init__(self, session: Session):
        super().__init__(session, Member)

    # ==================== Search ====================

    @staticmethod
    def _member_team_select() -> Select:
        return (
            select(
                Member.id.label("member_id"),
                Member.username,
                Member.age,
                Team.id.label("team_id"),
                Team.name.label("team_name"),
            )
            .select_from(Member)
            .outerjoin(Member.team)
        )

    def _fetch_member_teams(self, stmt: Select) -> list[MemberTeamDTO]:
        return [MemberTeamDTO(**row._mapping) for row in self.session.execute(stmt)]

    def _count_members(self, condition: MemberSearchCondition) -> int:
        stmt = (
            select(func.count(Member.id))
            .select_from(Member)
            .outerjoin(Member.team)
            .where(*member_search_predicates(condition))
        )
        return self.session.execute(stmt).scalar_one()

    def _page_content(self, condition: MemberSearchCondition, pageable: Pageable) -> list[MemberTeamDTO]:
        stmt = (
            self._member_team_select()
            .where(*member_search_predicates(condition))
            .order_by(Member.id)
            .offset(pageable.offset)
            .limit(pageable.page_size)
        )
        return self._fetch_member_teams(stmt)

    def search(self, condition: MemberSearchCondition) -> list[MemberTeamDTO]:
        """Return every member matching the condition, with its team, in insertion order."""
        stmt = self._member_team_select().where(*member_search_predicates(condition)).order_by(Member.id)
        return self._fetch_member_teams(stmt)

    def search_page_simple(self, condition: MemberSearchCondition, pageable: Pageable) -> Page[MemberTeamDTO]:
        """Fetch one page of matching members and always run the count query.

        Args:
            condition: Search condition; None fields are ignored.
            pageable: Validated offset and page size.

        Returns:
            Page of MemberTeamDTO rows ordered by member id.
        """
        content = self._page_content(condition, pageable)
        return Page(content, self._count_members(condition), pageable)

    def search_page_complex(self, condition: MemberSearchCondition, pageable: Pageable) -> Page[MemberTeamDTO]:
        """Fetch one page of matching members, counting only when the total is unknown.

        A page shorter than the page size already tells the total, so the
        count query is skipped. The result is the same as `search_page_simple`.
        """
        content = self._page_content(condition, pageable)

        def count() -> int:
            logger.debug(f"Running count query for page at offset {pageable.offset}")
            return self._count_members(condition)

        return get_page(content, pageable, count)

    # ==================== Basic fetches ====================

    def get_by_username(self, username: str) -> Member | None:
        stmt = select(Member).where(Member.username == username)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_one_by_username(self, username: str) -> Member:
        """Fetch exactly one member by username.

        Raises:
            EntityNotFoundError: If no member has this username.
        """
        stmt = select(Member).where(Member.username == username)
        return self._fetch_one(stmt, username)

    def get_first(self) -> Member | None:
        stmt = select(Member).order_by(Member.id).limit(1)
        return self.session.execute(stmt).scalars().first()

    def fetch_results(self, offset: int = 0, limit: int | None = None) -> tuple[list[Member], int]:
        """Return a slice of members together with the total member count."""
        stmt = select(Member).order_by(Member.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._scalars(stmt), self.count()

    # ==================== Sorting & paging ====================

    def get_by_age_sorted(self, age: int) -> list[Member]:
        """Members of the given age, by age descending then username ascending, NULL usernames last."""
        stmt = (
            select(Member)
            .where(Member.age == age)
            .order_by(Member.age.desc(), Member.username.asc().nulls_last())
        )
        return self._scalars(stmt)

    def get_page_by_username_desc(self, offset: int, limit: int) -> list[Member]:
        stmt = select(Member).order_by(Member.username.desc()).offset(offset).limit(limit)
        return self._scalars(stmt)

    # ==================== Aggregation ====================

    def age_statistics(self) -> AgeStatistics:
        stmt = select(
            func.count(Member.id),
            func.sum(Member.age),
            func.avg(Member.age),
            func.max(Member.age),
            func.min(Member.age),
        )
        count, total, avg, max_age, min_age = self.session.execute(stmt).one()
        return AgeStatistics(
            count=count,
            sum=total,
            avg=None if avg is None else float(avg),
            max=max_age,
            min=min_age,
        )

    def average_age_by_team(self) -> list[tuple[str, float]]:
        """Average member age per team, ordered by team name."""
        stmt = (
            select(Team.name, func.avg(Member.age))
            .select_from(Member)
            .join(Member.team)
            .group_by(Team.name)
            .order_by(Team.name)
        )
        return [(name, float(avg)) for name, avg in self.session.execute(stmt)]

    # ==================== Joins ====================

    def get_by_team_name(self, team_name: str) -> list[Member]:
        stmt = select(Member).join(Member.team).where(Team.name == team_name).order_by(Member.id)
        return self._scalars(stmt)

    def get_with_team_name_on_filter(self, team_name: str) -> list[tuple[Member, Team | None]]:
        """Every member, joined to its team only when the team has the given name.

        The team filter sits in the ON clause, so members of other teams come
        back with None instead of being dropped.
        """
        stmt = (
            select(Member, Team)
            .outerjoin(Member.team.and_(Team.name == team_name))
            .order_by(Member.id)
        )
        return [(member, team) for member, team in self.session.execute(stmt)]

    def get_theta_join_by_team_name(self) -> list[Member]:
        """Members whose username equals some team name (join without a relationship)."""
        stmt = select(Member).where(Member.username == Team.name).order_by(Member.id)
        return self._scalars(stmt)

    def get_outer_join_unrelated(self) -> list[tuple[Member, Team | None]]:
        """Every member, outer joined to the team whose name equals the username."""
        stmt = select(Member, Team).outerjoin_from(Member, Team, Member.username == Team.name).order_by(Member.id)
        return [(member, team) for member, team in self.session.execute(stmt)]

    def get_with_team(self, username: str) -> Member | None:
        """Fetch a member and its team in a single joined SELECT."""
        stmt = (
            select(Member)
            .join(Member.team)
            .options(contains_eager(Member.team))
            .where(Member.username == username)
        )
        return self.session.execute(stmt).unique().scalar_one_or_none()

    # ==================== Subqueries ====================

    def get_oldest(self) -> list[Member]:
        member_sub = aliased(Member)
        stmt = (
            select(Member)
            .where(Member.age == select(func.max(member_sub.age)).scalar_subquery())
            .order_by(Member.id)
        )
        return self._scalars(stmt)

    def get_at_or_above_average_age(self) -> list[Member]:
        member_sub = aliased(Member)
        stmt = (
            select(Member)
            .where(Member.age >= select(func.avg(member_sub.age)).scalar_subquery())
            .order_by(Member.id)
        )
        return self._scalars(stmt)

    def get_older_than(self, age: int) -> list[Member]:
        member_sub = aliased(Member)
        stmt = (
            select(Member)
            .where(Member.age.in_(select(member_sub.age).where(member_sub.age > age)))
            .order_by(Member.id)
        )
        return self._scalars(stmt)

    def get_usernames_with_average_age(self) -> list[tuple[str | None, float]]:
        member_sub = aliased(Member)
        stmt = select(Member.username, select(func.avg(member_sub.age)).scalar_subquery()).order_by(Member.id)
        return [(username, float(avg)) for username, avg in self.session.execute(stmt)]

    # ==================== CASE, constants, concat ====================

    def get_age_labels(self) -> list[str]:
        label = case({10: "ten", 20: "twenty"}, value=Member.age, else_="other")
        stmt = select(label).order_by(Member.id)
        return self._scalars(stmt)

    def get_age_range_labels(self) -> list[str]:
        label = case(
            (Member.age.between(0, 20), "0-20"),
            (Member.age.between(21, 30), "21-30"),
            else_="other",
        )
        stmt = select(label).order_by(Member.id)
        return self._scalars(stmt)

    def get_usernames_with_constant(self, constant: str = "A") -> list[tuple[str | None, str]]:
        stmt = select(Member.username, cast(literal(constant), String)).order_by(Member.id)
        return [(username, value) for username, value in self.session.execute(stmt)]

    def get_username_age_strings(self, username: str) -> list[str]:
        """`username_age` strings for the given username."""
        stmt = select(Member.username + "_" + cast(Member.age, String)).where(Member.username == username)
        return self._scalars(stmt)

    # ==================== Projections ====================

    def get_usernames(self) -> list[str | None]:
        stmt = select(Member.username).order_by(Member.id)
        return self._scalars(stmt)

    def get_username_age_tuples(self) -> list[tuple[str | None, int]]:
        stmt = select(Member.username, Member.age).order_by(Member.id)
        return [(username, age) for username, age in self.session.execute(stmt)]

    def get_member_dtos(self) -> list[MemberDTO]:
        stmt = select(Member.username, Member.age).order_by(Member.id)
        return [MemberDTO(**row._mapping) for row in self.session.execute(stmt)]

    def get_user_dtos(self) -> list[UserDTO]:
        """Usernames projected as `name`, each paired with the oldest member's age."""
        member_sub = aliased(Member)
        stmt = select(
            Member.username.label("name"),
            select(func.max(member_sub.age)).scalar_subquery().label("age"),
        ).order_by(Member.id)
        return [UserDTO(**row._mapping) for row in self.session.execute(stmt)]

    # ==================== Dynamic filters ====================

    def search_by_username_age(self, username: str | None, age: int | None) -> list[Member]:
        """Dynamic filter built by accumulating terms."""
        terms = []
        if username is not None:
            terms.append(Member.username == username)
        if age is not None:
            terms.append(Member.age == age)
        stmt = select(Member).where(*terms).order_by(Member.id)
        return self._scalars(stmt)

    def search_by_where_params(self, username: str | None, age: int | None) -> list[Member]:
        """Dynamic filter built from optional single-field predicates."""
        stmt = select(Member).order_by(Member.id)
        criteria = conjunction(username_eq(username), age_eq(age))
        if criteria is not None:
            stmt = stmt.where(criteria)
        return self._scalars(stmt)

    # ==================== Bulk statements ====================

    def bulk_update_username_for_age_lt(self, age: int, username: str) -> int:
        """Rename every member younger than `age` in one UPDATE.

        The statement bypasses the identity map, so every loaded instance is
        expired afterwards and reloads from the database on next access.

        Returns:
            Number of updated rows.
        """
        stmt = (
            update(Member)
            .where(Member.age < age)
            .values(username=username)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self.session.expire_all()
        return result.rowcount

    def bulk_delete_age_lt(self, age: int) -> int:
        """Delete every member younger than `age` in one DELETE.

        Returns:
            Number of deleted rows.
        """
        stmt = delete(Member).where(Member.age < age).execution_options(synchronize_session=False)
        result = self.session.execute(stmt)
        self.session.expire_all()
        return result.rowcount
