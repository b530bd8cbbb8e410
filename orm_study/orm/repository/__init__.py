"""Repository module for orm-study.

This module provides repository classes for data access layer operations.
"""

from orm_study.orm.repository.base import GenericRepository, repository_context
from orm_study.orm.repository.item import ItemRepository
from orm_study.orm.repository.member import MemberRepository
from orm_study.orm.repository.order import DeliveryRepository, OrderItemRepository, OrderRepository
from orm_study.orm.repository.team import TeamRepository

__all__ = [
    "DeliveryRepository",
    "GenericRepository",
    "ItemRepository",
    "MemberRepository",
    "OrderItemRepository",
    "OrderRepository",
    "TeamRepository",
    "repository_context",
]
