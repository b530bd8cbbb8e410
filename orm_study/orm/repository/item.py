"""Item repository for orm-study.

Items are stored in one table; `Book` and `Movie` rows are told apart by the
`dtype` discriminator and come back as their concrete classes.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from orm_study.orm.repository.base import GenericRepository
from orm_study.orm.schema import ITEM_TYPES, Book, Item, Movie


class ItemRepository(GenericRepository[Item]):
    """Repository for the polymorphic Item entity."""

    def __init__(self, session: Session):
        super().__init__(session, Item)

    def get_by_name(self, name: str) -> Item | None:
        stmt = select(Item).where(Item.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_dtype(self, dtype: str) -> list[Item]:
        """Retrieve every item of one variant.

        Args:
            dtype: Discriminator value, "B" or "M".

        Raises:
            KeyError: If `dtype` is not a known variant.
        """
        model_cls = ITEM_TYPES[dtype]
        stmt = select(model_cls).order_by(model_cls.id)
        return self._scalars(stmt)

    def get_books(self) -> list[Book]:
        stmt = select(Book).order_by(Book.id)
        return self._scalars(stmt)

    def get_movies(self) -> list[Movie]:
        stmt = select(Movie).order_by(Movie.id)
        return self._scalars(stmt)

    def get_books_by_author(self, author: str) -> list[Book]:
        stmt = select(Book).where(Book.author == author).order_by(Book.id)
        return self._scalars(stmt)
