import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from orm_study.exceptions import QueryFailedError

logger = logging.getLogger("orm-study")


class BaseService(ABC):
    """Abstract base class for all service implementations.

    Provides common patterns for all services:
    - Session factory management
    - Abstract method for UoW creation
    - Translation of query execution failures into QueryFailedError
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        """Initialize the service.

        Args:
            session_factory: SQLAlchemy sessionmaker for database connections.
        """
        self.session_factory = session_factory

    @abstractmethod
    def _create_uow(self) -> Any:
        """Create a new Unit of Work instance.

        Subclasses must implement this to return their specific UoW type.
        """
        ...

    @contextmanager
    def _query_errors(self, operation: str) -> Iterator[None]:
        """Surface database failures of `operation` to the caller.

        Constraint violations (IntegrityError) propagate untranslated. Any other
        SQLAlchemy error becomes QueryFailedError, chained to the original.
        """
        try:
            yield
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.exception(f"{operation} failed")
            raise QueryFailedError(operation) from e
