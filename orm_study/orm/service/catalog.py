"""Catalog service for orm-study: registers and lists Book and Movie items."""

import logging
from dataclasses import dataclass

from orm_study.orm.schema import Book, Item, Movie
from orm_study.orm.service.base import BaseService
from orm_study.orm.uow.order_uow import OrderUnitOfWork

logger = logging.getLogger("orm-study")


@dataclass(frozen=True)
class ItemSummary:
    item_id: int
    dtype: str
    name: str
    price: int
    stock_quantity: int


class CatalogService(BaseService):
    def _create_uow(self) -> OrderUnitOfWork:
        return OrderUnitOfWork(self.session_factory)

    def _register(self, item: Item) -> int:
        with self._create_uow() as uow:
            uow.items.add(item)
            uow.flush()
            item_id, name = item.id, item.name
            uow.commit()
        logger.info(f"Registered {type(item).__name__} '{name}'")
        return item_id

    def add_book(self, name: str, price: int, stock_quantity: int, author: str | None = None, isbn: str | None = None) -> int:
        return self._register(Book(name=name, price=price, stock_quantity=stock_quantity, author=author, isbn=isbn))

    def add_movie(self, name: str, price: int, stock_quantity: int, artist: str | None = None, etc: str | None = None) -> int:
        return self._register(Movie(name=name, price=price, stock_quantity=stock_quantity, artist=artist, etc=etc))

    def list_items(self, dtype: str | None = None) -> list[ItemSummary]:
        """List catalog items, optionally only one variant ("B" or "M")."""
        with self._create_uow() as uow, self._query_errors("item listing"):
            items = uow.items.get_all() if dtype is None else uow.items.get_by_dtype(dtype)
            return [ItemSummary(item.id, item.dtype, item.name, item.price, item.stock_quantity) for item in items]
