"""Member Unit of Work for orm-study.

Groups the Member and Team repositories for the member search use cases.
"""

from sqlalchemy.orm import Session, sessionmaker

from orm_study.orm.repository.member import MemberRepository
from orm_study.orm.repository.team import TeamRepository
from orm_study.orm.uow.base import BaseUnitOfWork


class MemberUnitOfWork(BaseUnitOfWork):
    """Unit of Work for members and teams."""

    REPOSITORIES = {"members": MemberRepository, "teams": TeamRepository}

    def __init__(self, session_factory: sessionmaker[Session]):
        super().__init__(session_factory)
        self._member_repo: MemberRepository | None = None
        self._team_repo: TeamRepository | None = None

    def _reset_repositories(self) -> None:
        self._member_repo = None
        self._team_repo = None

    @property
    def members(self) -> MemberRepository:
        """Get the Member repository.

        Raises:
            SessionNotSetError: If session is not initialized.
        """
        return self._get_repository("_member_repo", MemberRepository)

    @property
    def teams(self) -> TeamRepository:
        """Get the Team repository.

        Raises:
            SessionNotSetError: If session is not initialized.
        """
        return self._get_repository("_team_repo", TeamRepository)
