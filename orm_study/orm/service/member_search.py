"""Member search service for orm-study.

Runs member and team use cases inside a MemberUnitOfWork. Every call opens its
own session and releases it when done, whether it succeeds or fails.
"""

import logging
from typing import Literal

from orm_study.orm.schema import Member, Team
from orm_study.orm.search import MemberSearchCondition, MemberTeamDTO, Page, Pageable
from orm_study.orm.service.base import BaseService
from orm_study.orm.uow.member_uow import MemberUnitOfWork

logger = logging.getLogger("orm-study")

CountStrategy = Literal["simple", "optimized"]


class MemberSearchService(BaseService):
    """Service for registering members and searching them with pagination."""

    def _create_uow(self) -> MemberUnitOfWork:
        return MemberUnitOfWork(self.session_factory)

    def register_team(self, name: str) -> int:
        """Create a team, or return the id of the existing team with this name."""
        with self._create_uow() as uow:
            team = uow.teams.get_by_name(name)
            if team is None:
                team = uow.teams.add(Team(name=name))
                uow.flush()
                logger.info(f"Registered team '{name}'")
            team_id = team.id
            uow.commit()
            return team_id

    def register_member(self, username: str | None, age: int, team_name: str | None = None) -> int:
        """Create a member, creating its team first when it does not exist yet.

        Returns:
            The new member id.
        """
        with self._create_uow() as uow:
            team = None
            if team_name is not None:
                team = uow.teams.get_by_name(team_name) or uow.teams.add(Team(name=team_name))
            member = uow.members.add(Member(username, age, team))
            uow.flush()
            member_id = member.id
            uow.commit()
            return member_id

    def search(self, condition: MemberSearchCondition) -> list[MemberTeamDTO]:
        with self._create_uow() as uow, self._query_errors("member search"):
            return uow.members.search(condition)

    def search_page_simple(self, condition: MemberSearchCondition, pageable: Pageable) -> Page[MemberTeamDTO]:
        """Search one page, always counting the total with a second query."""
        with self._create_uow() as uow, self._query_errors("member page search"):
            return uow.members.search_page_simple(condition, pageable)

    def search_page_complex(self, condition: MemberSearchCondition, pageable: Pageable) -> Page[MemberTeamDTO]:
        """Search one page, skipping the count query when the page is short."""
        with self._create_uow() as uow, self._query_errors("member page search"):
            return uow.members.search_page_complex(condition, pageable)

    def search_page(
        self,
        condition: MemberSearchCondition,
        pageable: Pageable,
        strategy: CountStrategy = "optimized",
    ) -> Page[MemberTeamDTO]:
        if strategy == "simple":
            return self.search_page_simple(condition, pageable)
        return self.search_page_complex(condition, pageable)

    def find_member(self, username: str) -> MemberTeamDTO:
        """Fetch one member with its team.

        Raises:
            EntityNotFoundError: If no member has this username.
        """
        with self._create_uow() as uow, self._query_errors("member lookup"):
            member = uow.members.find_one_by_username(username)
            team = member.team
            return MemberTeamDTO(
                member_id=member.id,
                username=member.username,
                age=member.age,
                team_id=None if team is None else team.id,
                team_name=None if team is None else team.name,
            )

    def team_average_ages(self) -> list[tuple[str, float]]:
        with self._create_uow() as uow, self._query_errors("team average age"):
            return uow.members.average_age_by_team()

    def rename_members_younger_than(self, age: int, username: str) -> int:
        """Bulk rename members younger than `age` and commit. Returns the row count."""
        with self._create_uow() as uow:
            updated = uow.members.bulk_update_username_for_age_lt(age, username)
            uow.commit()
        logger.info(f"Renamed {updated} members younger than {age}")
        return updated
