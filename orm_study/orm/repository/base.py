"""Generic repository shared by every entity repository of orm-study.

A repository only uses the session it is handed. Transactions belong to the
Unit of Work in `orm_study.orm.uow`.
"""

from collections.abc import Iterable
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session

from orm_study.exceptions import EntityNotFoundError, NoSessionError

T = TypeVar("T")


class GenericRepository(Generic[T]):
    """CRUD over one mapped class.

    Entity repositories subclass it and add their own `select()` queries.
    """

    def __init__(self, session: Session, model_cls: type[T]):
        self.session = session
        self.model_cls = model_cls

    @property
    def entity_name(self) -> str:
        return self.model_cls.__name__

    def add(self, entity: T) -> T:
        """Stage a new entity; it is inserted on the next flush."""
        self.session.add(entity)
        return entity

    def add_all(self, entities: Iterable[T]) -> list[T]:
        staged = list(entities)
        self.session.add_all(staged)
        return staged

    def get_by_id(self, entity_id: Any) -> T | None:
        return self.session.get(self.model_cls, entity_id)

    def find_by_id(self, entity_id: Any) -> T:
        """Like `get_by_id`, but a missing row is an error.

        Raises:
            EntityNotFoundError: If no row has this primary key.
        """
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.entity_name, entity_id)
        return entity

    def get_all(self, limit: int | None = None, offset: int | None = None) -> list[T]:
        """Every row, in primary key order, optionally sliced."""
        stmt = select(self.model_cls).order_by(*self.model_cls.__mapper__.primary_key)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        return self._scalars(stmt)

    def update(self, entity: T) -> T:
        """Copy a detached entity's state onto the persistent one and return the latter."""
        return self.session.merge(entity)

    def delete(self, entity: T) -> None:
        self.session.delete(entity)

    def delete_by_id(self, entity_id: Any) -> bool:
        """Returns False when there was nothing to delete."""
        entity = self.get_by_id(entity_id)
        if entity is None:
            return False
        self.delete(entity)
        return True

    def count(self) -> int:
        return self.session.execute(select(func.count()).select_from(self.model_cls)).scalar_one()

    def exists(self, entity_id: Any) -> bool:
        return self.get_by_id(entity_id) is not None

    def _scalars(self, stmt: Select) -> list[Any]:
        return list(self.session.execute(stmt).scalars().all())

    def _fetch_one(self, stmt: Select, key: Any) -> T:
        """Run a single-result statement; "no row" becomes EntityNotFoundError."""
        try:
            return self.session.execute(stmt).unique().scalar_one()
        except NoResultFound as e:
            raise EntityNotFoundError(self.entity_name, key) from e


@contextmanager
def repository_context(session_factory, model_cls: type[T]):
    """Open a Unit of Work and yield `(GenericRepository, uow)` for one model.

    For one-off work on a single table. Nothing is committed unless the
    caller calls `uow.commit()`.

    Example:
        >>> with repository_context(SessionFactory, Team) as (repo, uow):
        ...     repo.add(Team(name="teamA"))
        ...     uow.commit()
    """
    from orm_study.orm.uow.base import UnitOfWork

    with UnitOfWork(session_factory) as uow:
        if uow.session is None:
            raise NoSessionError
        yield GenericRepository(uow.session, model_cls), uow
