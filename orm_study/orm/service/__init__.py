from .catalog import CatalogService
from .member_search import MemberSearchService
from .order import OrderService

__all__ = [
    "CatalogService",
    "MemberSearchService",
    "OrderService",
]
