"""Order Unit of Work for orm-study.

Groups the repositories touched when placing or cancelling an order:
members, items, deliveries, orders and order items.
"""

from sqlalchemy.orm import Session, sessionmaker

from orm_study.orm.repository.item import ItemRepository
from orm_study.orm.repository.member import MemberRepository
from orm_study.orm.repository.order import DeliveryRepository, OrderItemRepository, OrderRepository
from orm_study.orm.uow.base import BaseUnitOfWork


class OrderUnitOfWork(BaseUnitOfWork):
    """Unit of Work for the order and catalog model."""

    REPOSITORIES = {
        "deliveries": DeliveryRepository,
        "items": ItemRepository,
        "members": MemberRepository,
        "order_items": OrderItemRepository,
        "orders": OrderRepository,
    }

    def __init__(self, session_factory: sessionmaker[Session]):
        super().__init__(session_factory)
        self._delivery_repo: DeliveryRepository | None = None
        self._item_repo: ItemRepository | None = None
        self._member_repo: MemberRepository | None = None
        self._order_item_repo: OrderItemRepository | None = None
        self._order_repo: OrderRepository | None = None

    def _reset_repositories(self) -> None:
        self._delivery_repo = None
        self._item_repo = None
        self._member_repo = None
        self._order_item_repo = None
        self._order_repo = None

    @property
    def deliveries(self) -> DeliveryRepository:
        return self._get_repository("_delivery_repo", DeliveryRepository)

    @property
    def items(self) -> ItemRepository:
        return self._get_repository("_item_repo", ItemRepository)

    @property
    def members(self) -> MemberRepository:
        return self._get_repository("_member_repo", MemberRepository)

    @property
    def order_items(self) -> OrderItemRepository:
        return self._get_repository("_order_item_repo", OrderItemRepository)

    @property
    def orders(self) -> OrderRepository:
        """Get the Order repository.

        Raises:
            SessionNotSetError: If session is not initialized.
        """
        return self._get_repository("_order_repo", OrderRepository)
