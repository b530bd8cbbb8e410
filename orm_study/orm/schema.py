"""ORM Schema definitions for orm-study.

Two small domains share one declarative base:

- Member / Team: the query-building sandbox.
- Order / OrderItem / Delivery / Item (Book, Movie): the order and catalog model.

Relationships owned by Order carry no implicit save-update cascade.
Persisting an order and its children is an explicit step, see
`OrderRepository.save()`.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from orm_study.exceptions import (
    InvalidQuantityError,
    NotEnoughStockError,
    OrderAlreadyCancelledError,
    OrderAlreadyDeliveredError,
)

# SQLite only auto-increments INTEGER PRIMARY KEY columns
IdType = BigInteger().with_variant(Integer(), "sqlite")

# Relationships that are persisted explicitly by the caller
EXPLICIT_CASCADE = "merge"


class Base(DeclarativeBase):
    pass


class OrderStatus(enum.Enum):
    ORDERED = "ORDERED"
    CANCELLED = "CANCELLED"


class DeliveryStatus(enum.Enum):
    READY = "READY"
    COMP = "COMP"


class Team(Base):
    """Team table. Members are looked up through the back-reference only."""

    __tablename__ = "team"

    id: Mapped[int] = mapped_column("team_id", IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    members: Mapped[list["Member"]] = relationship(back_populates="team", order_by="Member.id")

    def __repr__(self) -> str:
        return f"Team(id={self.id!r}, name={self.name!r})"


class Member(Base):
    """Member table"""

    __tablename__ = "member"

    id: Mapped[int] = mapped_column("member_id", IdType, primary_key=True, autoincrement=True)
    username: Mapped[str | None] = mapped_column(String(255))
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    team_id: Mapped[int | None] = mapped_column(IdType, ForeignKey("team.team_id"))

    # Relationships
    team: Mapped[Optional["Team"]] = relationship(back_populates="members")

    def __init__(self, username: str | None = None, age: int = 0, team: Optional["Team"] = None):
        self.username = username
        self.age = age
        if team is not None:
            self.change_team(team)

    def change_team(self, team: "Team") -> None:
        """Move the member to another team, keeping `team.members` in sync."""
        self.team = team

    def __repr__(self) -> str:
        return f"Member(id={self.id!r}, username={self.username!r}, age={self.age!r})"


class Item(Base):
    """Catalog item table.

    Single-table inheritance over a closed set of variants, told apart by the
    `dtype` discriminator column ("B" for Book, "M" for Movie).
    """

    __tablename__ = "item"

    id: Mapped[int] = mapped_column("item_id", IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dtype: Mapped[str] = mapped_column(String(31), nullable=False)

    __mapper_args__ = {
        "polymorphic_on": "dtype",
        "polymorphic_abstract": True,
    }

    def add_stock(self, quantity: int) -> None:
        self.stock_quantity += quantity

    def remove_stock(self, quantity: int) -> None:
        """Take `quantity` units out of stock.

        Raises:
            InvalidQuantityError: If `quantity` is below 1.
            NotEnoughStockError: If the remaining stock would become negative.
        """
        if quantity < 1:
            raise InvalidQuantityError(self.name, quantity)
        rest = self.stock_quantity - quantity
        if rest < 0:
            raise NotEnoughStockError(self.name, quantity, self.stock_quantity)
        self.stock_quantity = rest


class Book(Item):
    author: Mapped[str | None] = mapped_column(String(255))
    isbn: Mapped[str | None] = mapped_column(String(255))

    __mapper_args__ = {"polymorphic_identity": "B"}


class Movie(Item):
    artist: Mapped[str | None] = mapped_column(String(255))
    etc: Mapped[str | None] = mapped_column(String(255))

    __mapper_args__ = {"polymorphic_identity": "M"}


ITEM_TYPES: dict[str, type[Item]] = {"B": Book, "M": Movie}


class Delivery(Base):
    """Delivery table, one per order"""

    __tablename__ = "delivery"

    id: Mapped[int] = mapped_column("delivery_id", IdType, primary_key=True, autoincrement=True)
    city: Mapped[str | None] = mapped_column(String(255))
    street: Mapped[str | None] = mapped_column(String(255))
    zipcode: Mapped[str | None] = mapped_column(String(31))
    status: Mapped[DeliveryStatus] = mapped_column(
        Enum(DeliveryStatus, native_enum=False, length=20), nullable=False, default=DeliveryStatus.READY
    )

    # Relationships
    order: Mapped[Optional["Order"]] = relationship(back_populates="delivery", cascade=EXPLICIT_CASCADE)


class Order(Base):
    """Order table (`orders`, since ORDER is a reserved word)"""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column("order_id", IdType, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(IdType, ForeignKey("member.member_id"), nullable=False)
    delivery_id: Mapped[int | None] = mapped_column(IdType, ForeignKey("delivery.delivery_id"), unique=True)
    order_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    status: Mapped[OrderStatus] = mapped_column(Enum(OrderStatus, native_enum=False, length=20), nullable=False)

    # Relationships
    member: Mapped["Member"] = relationship(cascade=EXPLICIT_CASCADE)
    delivery: Mapped[Optional["Delivery"]] = relationship(back_populates="order", cascade=EXPLICIT_CASCADE)
    order_items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", cascade=EXPLICIT_CASCADE, order_by="OrderItem.id"
    )

    @classmethod
    def create(cls, member: Member, delivery: Delivery, *order_items: "OrderItem") -> "Order":
        """Build a new ORDERED order. Nothing is added to a session here."""
        order = cls(member=member, delivery=delivery, status=OrderStatus.ORDERED, order_date=datetime.now())
        for order_item in order_items:
            order.add_order_item(order_item)
        return order

    def add_order_item(self, order_item: "OrderItem") -> None:
        # back_populates sets order_item.order
        self.order_items.append(order_item)

    def cancel(self) -> None:
        """Cancel the order and put the ordered quantities back into stock.

        Raises:
            OrderAlreadyCancelledError: If the order is already cancelled.
            OrderAlreadyDeliveredError: If the delivery has already completed.
        """
        if self.status == OrderStatus.CANCELLED:
            raise OrderAlreadyCancelledError(self.id)
        if self.delivery is not None and self.delivery.status == DeliveryStatus.COMP:
            raise OrderAlreadyDeliveredError(self.id)
        self.status = OrderStatus.CANCELLED
        for order_item in self.order_items:
            order_item.cancel()

    @property
    def total_price(self) -> int:
        return sum(order_item.total_price for order_item in self.order_items)


class OrderItem(Base):
    """Order line table. Every line belongs to exactly one order."""

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column("order_item_id", IdType, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(IdType, ForeignKey("orders.order_id"), nullable=False)
    item_id: Mapped[int] = mapped_column(IdType, ForeignKey("item.item_id"), nullable=False)
    order_price: Mapped[int] = mapped_column(Integer, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="order_items", cascade=EXPLICIT_CASCADE)
    item: Mapped["Item"] = relationship(cascade=EXPLICIT_CASCADE)

    @classmethod
    def create(cls, item: Item, order_price: int, count: int) -> "OrderItem":
        """Build an order line and take `count` units out of the item's stock."""
        item.remove_stock(count)
        return cls(item=item, order_price=order_price, count=count)

    def cancel(self) -> None:
        self.item.add_stock(self.count)

    @property
    def total_price(self) -> int:
        return self.order_price * self.count


__all__ = [
    "ITEM_TYPES",
    "Base",
    "Book",
    "Delivery",
    "DeliveryStatus",
    "Item",
    "Member",
    "Movie",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Team",
]
