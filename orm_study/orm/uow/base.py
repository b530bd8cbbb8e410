"""Transaction scopes for orm-study.

`with uow:` opens one session. A block that raises is rolled back, and the
session is closed on the way out either way. Nothing is committed unless the
block calls `commit()`.
"""

from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.orm import Session, sessionmaker
from typing_extensions import Self

from orm_study.exceptions import SessionNotSetError


class UnitOfWork:
    """One session and its transaction, opened by `with`."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self) -> Self:
        self.session = self.session_factory()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.session is None:
            return
        if exc_type is not None:
            self.session.rollback()
        self.session.close()
        self.session = None

    # Outside `with` there is no session and these do nothing
    def commit(self) -> None:
        if self.session:
            self.session.commit()

    def rollback(self) -> None:
        if self.session:
            self.session.rollback()

    def flush(self) -> None:
        """Send pending INSERT/UPDATE/DELETE statements without committing."""
        if self.session:
            self.session.flush()


class BaseUnitOfWork(UnitOfWork, ABC):
    """Unit of Work that hands out repositories bound to its session.

    Subclasses list their repositories in `REPOSITORIES` (property name to
    repository class) and expose each through a property that calls
    `_get_repository()`. A repository is built on first access, reused for
    the rest of the block and dropped on exit.
    """

    REPOSITORIES: dict[str, type] = {}

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        super().__exit__(exc_type, exc_val, exc_tb)
        self._reset_repositories()

    @abstractmethod
    def _reset_repositories(self) -> None:
        """Set every cached repository attribute back to None."""
        ...

    def _get_repository(self, repo_attr: str, repo_class: type) -> Any:
        """Return the repository cached in `repo_attr`, building it on first use.

        Args:
            repo_attr: Private attribute holding the cache, e.g. "_member_repo".
            repo_class: Repository class, instantiated with the current session.

        Raises:
            SessionNotSetError: If called outside the `with` block.
        """
        if self.session is None:
            raise SessionNotSetError

        repo = getattr(self, repo_attr, None)
        if repo is None:
            repo = repo_class(self.session)
            setattr(self, repo_attr, repo)
        return repo

    @classmethod
    def available_repositories(cls) -> list[str]:
        """Names of the repository properties, sorted."""
        return sorted(cls.REPOSITORIES)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(repositories={self.available_repositories()})"
