"""Order repository for orm-study.

Order relationships carry no implicit save-update cascade. `save()` is the
one place where an order and everything it owns gets added to the session.
"""

import logging

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session, selectinload

from orm_study.orm.repository.base import GenericRepository
from orm_study.orm.schema import Delivery, Order, OrderItem, OrderStatus

logger = logging.getLogger("orm-study")


class OrderRepository(GenericRepository[Order]):
    """Repository for Order entity with explicit child persistence."""

    def __init__(self, session: Session):
        super().__init__(session, Order)

    def _add_if_transient(self, entity: object | None) -> None:
        if entity is not None and inspect(entity).transient:
            self.session.add(entity)

    def save(self, order: Order) -> Order:
        """Add an order together with the entities it owns.

        Steps, in order: the owner member and ordered items when they are new,
        the delivery, the order itself, then its order items. Nothing is
        flushed here.

        Args:
            order: Order built with `Order.create()`.

        Returns:
            The same order, now pending in the session.
        """
        self._add_if_transient(order.member)
        for order_item in order.order_items:
            self._add_if_transient(order_item.item)
        self._add_if_transient(order.delivery)
        self.session.add(order)
        self.session.add_all(order.order_items)
        logger.debug(f"Order added with {len(order.order_items)} order items")
        return order

    def get_with_order_items(self, order_id: int) -> Order | None:
        """Retrieve an order with its order items and their catalog items loaded.

        Args:
            order_id: The order ID.

        Returns:
            The order with relations loaded, None if not found.
        """
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.order_items).selectinload(OrderItem.item),
                selectinload(Order.delivery),
                selectinload(Order.member),
            )
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def find_one(self, order_id: int) -> Order:
        """Fetch exactly one order with its relations.

        Raises:
            EntityNotFoundError: If the order does not exist.
        """
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.order_items).selectinload(OrderItem.item), selectinload(Order.delivery))
        )
        return self._fetch_one(stmt, order_id)

    def get_by_member(self, member_id: int) -> list[Order]:
        stmt = select(Order).where(Order.member_id == member_id).order_by(Order.id)
        return self._scalars(stmt)

    def get_by_status(self, status: OrderStatus) -> list[Order]:
        stmt = select(Order).where(Order.status == status).order_by(Order.id)
        return self._scalars(stmt)

    def search(self, member_id: int | None = None, status: OrderStatus | None = None) -> list[Order]:
        """Orders matching every given filter, in id order. None filters are skipped."""
        terms = []
        if member_id is not None:
            terms.append(Order.member_id == member_id)
        if status is not None:
            terms.append(Order.status == status)
        stmt = select(Order).where(*terms).order_by(Order.id)
        return self._scalars(stmt)


class OrderItemRepository(GenericRepository[OrderItem]):
    """Repository for OrderItem entity."""

    def __init__(self, session: Session):
        super().__init__(session, OrderItem)

    def get_by_order(self, order_id: int) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        return self._scalars(stmt)


class DeliveryRepository(GenericRepository[Delivery]):
    """Repository for Delivery entity."""

    def __init__(self, session: Session):
        super().__init__(session, Delivery)
