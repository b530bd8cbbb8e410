"""Team repository for orm-study."""

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from orm_study.orm.repository.base import GenericRepository
from orm_study.orm.schema import Team


class TeamRepository(GenericRepository[Team]):
    """Repository for Team entity."""

    def __init__(self, session: Session):
        super().__init__(session, Team)

    def get_by_name(self, name: str) -> Team | None:
        stmt = select(Team).where(Team.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_with_members(self, team_id: int) -> Team | None:
        """Retrieve a team with its members eagerly loaded.

        Args:
            team_id: The team ID.

        Returns:
            The team with members loaded, None if not found.
        """
        stmt = select(Team).where(Team.id == team_id).options(selectinload(Team.members))
        return self.session.execute(stmt).scalar_one_or_none()
