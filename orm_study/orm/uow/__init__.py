"""Unit of Work (UoW) pattern implementations for orm-study.

Provides transaction management and repository coordination:
- UnitOfWork: Plain session and transaction scope
- BaseUnitOfWork: Abstract base class with lazy repository caching
- MemberUnitOfWork: For member search and team management
- OrderUnitOfWork: For placing and cancelling orders
"""

from orm_study.orm.uow.base import BaseUnitOfWork, UnitOfWork
from orm_study.orm.uow.member_uow import MemberUnitOfWork
from orm_study.orm.uow.order_uow import OrderUnitOfWork

__all__ = [
    "BaseUnitOfWork",
    "MemberUnitOfWork",
    "OrderUnitOfWork",
    "UnitOfWork",
]
