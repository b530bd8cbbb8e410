"""Order service for orm-study.

Places and cancels orders inside an OrderUnitOfWork. Persisting a new order's
delivery and lines is an explicit repository step (`OrderRepository.save`).
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from orm_study.orm.schema import Delivery, Order, OrderItem, OrderStatus
from orm_study.orm.service.base import BaseService
from orm_study.orm.uow.order_uow import OrderUnitOfWork

logger = logging.getLogger("orm-study")


@dataclass(frozen=True)
class OrderLine:
    item_name: str
    order_price: int
    count: int


@dataclass(frozen=True)
class OrderSummary:
    order_id: int
    member_id: int
    status: OrderStatus
    order_date: datetime
    total_price: int
    lines: list[OrderLine]

    @classmethod
    def from_order(cls, order: Order) -> "OrderSummary":
        return cls(
            order_id=order.id,
            member_id=order.member_id,
            status=order.status,
            order_date=order.order_date,
            total_price=order.total_price,
            lines=[OrderLine(oi.item.name, oi.order_price, oi.count) for oi in order.order_items],
        )


class OrderService(BaseService):
    """Service for placing, cancelling and looking up orders."""

    def _create_uow(self) -> OrderUnitOfWork:
        return OrderUnitOfWork(self.session_factory)

    def place_order(
        self,
        member_id: int,
        item_counts: dict[int, int],
        city: str | None = None,
        street: str | None = None,
        zipcode: str | None = None,
    ) -> int:
        """Place an order for a member.

        Args:
            member_id: Ordering member.
            item_counts: Mapping of item id to ordered quantity. Each line is
                priced at the item's current price.
            city: Delivery city.
            street: Delivery street.
            zipcode: Delivery zipcode.

        Returns:
            The new order id.

        Raises:
            EntityNotFoundError: If the member or an item does not exist.
            InvalidQuantityError: If a quantity is below 1.
            NotEnoughStockError: If an item has less stock than ordered.
        """
        with self._create_uow() as uow:
            member = uow.members.find_by_id(member_id)
            order_items = []
            for item_id, count in item_counts.items():
                item = uow.items.find_by_id(item_id)
                order_items.append(OrderItem.create(item, item.price, count))

            delivery = Delivery(city=city, street=street, zipcode=zipcode)
            order = uow.orders.save(Order.create(member, delivery, *order_items))
            uow.flush()
            order_id = order.id
            uow.commit()

        logger.info(f"Order {order_id} placed by member {member_id} with {len(item_counts)} lines")
        return order_id

    def cancel_order(self, order_id: int) -> None:
        """Cancel an order and return its quantities to stock.

        Raises:
            EntityNotFoundError: If the order does not exist.
            OrderAlreadyCancelledError: If the order is already cancelled.
            OrderAlreadyDeliveredError: If the delivery has completed.
        """
        with self._create_uow() as uow:
            order = uow.orders.find_one(order_id)
            order.cancel()
            uow.commit()
        logger.info(f"Order {order_id} cancelled")

    def get_order(self, order_id: int) -> OrderSummary:
        """Raises EntityNotFoundError if the order does not exist."""
        with self._create_uow() as uow, self._query_errors("order lookup"):
            return OrderSummary.from_order(uow.orders.find_one(order_id))

    def find_orders(self, member_id: int | None = None, status: OrderStatus | None = None) -> list[OrderSummary]:
        """Orders of one member, in one status, or both; every order when both are None."""
        with self._create_uow() as uow, self._query_errors("order search"):
            orders = uow.orders.search(member_id=member_id, status=status)
            return [OrderSummary.from_order(order) for order in orders]
