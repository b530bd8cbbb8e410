"""Search values for member queries.

Holds the search condition, its mapping to filter terms, the pagination
descriptor, the page result and the projection value objects returned by
`MemberRepository`.

A condition field left as None removes its term from the filter; it never
matches NULL columns.
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, and_

from orm_study.exceptions import InvalidPageableError
from orm_study.orm.schema import Member, Team

T = TypeVar("T")


@dataclass(frozen=True)
class MemberSearchCondition:
    username: str | None = None
    team_name: str | None = None
    age_goe: int | None = None
    age_loe: int | None = None


# ==================== Projections ====================


@dataclass(frozen=True)
class MemberDTO:
    username: str | None
    age: int


@dataclass(frozen=True)
class UserDTO:
    name: str | None
    age: int | None


@dataclass(frozen=True)
class MemberTeamDTO:
    member_id: int
    username: str | None
    age: int
    team_id: int | None
    team_name: str | None


@dataclass(frozen=True)
class AgeStatistics:
    count: int
    sum: int | None
    avg: float | None
    max: int | None
    min: int | None


# ==================== Predicates ====================


def username_eq(username: str | None) -> ColumnElement[bool] | None:
    return None if username is None else Member.username == username


def team_name_eq(team_name: str | None) -> ColumnElement[bool] | None:
    return None if team_name is None else Team.name == team_name


def age_eq(age: int | None) -> ColumnElement[bool] | None:
    return None if age is None else Member.age == age


def age_goe(age: int | None) -> ColumnElement[bool] | None:
    return None if age is None else Member.age >= age


def age_loe(age: int | None) -> ColumnElement[bool] | None:
    return None if age is None else Member.age <= age


def member_search_predicates(condition: MemberSearchCondition) -> list[ColumnElement[bool]]:
    """Translate a search condition into independent filter terms.

    Args:
        condition: Search condition whose fields are all optional.

    Returns:
        One term per field that is not None. The terms are meant to be
        AND-combined; an empty list matches every row.

    Note:
        `team_name` filters on the `team` table, so the statement must join it.
    """
    terms = (
        username_eq(condition.username),
        team_name_eq(condition.team_name),
        age_goe(condition.age_goe),
        age_loe(condition.age_loe),
    )
    return [term for term in terms if term is not None]


def conjunction(*terms: ColumnElement[bool] | None) -> ColumnElement[bool] | None:
    """AND-combine the given terms, skipping None. Returns None when nothing is left."""
    present = [term for term in terms if term is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return and_(*present)


# ==================== Pagination ====================


@dataclass(frozen=True)
class Pageable:
    """Offset/size pagination descriptor.

    Raises:
        InvalidPageableError: On a negative offset or a page size below 1.
    """

    offset: int = 0
    page_size: int = 20

    def __post_init__(self):
        if self.offset < 0:
            raise InvalidPageableError("offset", self.offset)
        if self.page_size < 1:
            raise InvalidPageableError("page_size", self.page_size)

    @classmethod
    def of(cls, page: int, size: int) -> "Pageable":
        """Build a pageable from a zero-based page number."""
        if page < 0:
            raise InvalidPageableError("page", page)
        if size < 1:
            raise InvalidPageableError("page_size", size)
        return cls(offset=page * size, page_size=size)

    @property
    def page_number(self) -> int:
        return self.offset // self.page_size

    def next(self) -> "Pageable":
        return Pageable(offset=self.offset + self.page_size, page_size=self.page_size)

    def to_dict(self) -> dict[str, int]:
        return {"offset": self.offset, "pageSize": self.page_size}


@dataclass(frozen=True)
class Page(Generic[T]):
    """A slice of an ordered result set plus the total matching count."""

    content: list[T]
    total_elements: int
    pageable: Pageable

    @property
    def number(self) -> int:
        return self.pageable.page_number

    @property
    def size(self) -> int:
        return self.pageable.page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.pageable.page_size)

    @property
    def is_first(self) -> bool:
        return self.pageable.offset == 0

    @property
    def has_next(self) -> bool:
        return self.pageable.offset + len(self.content) < self.total_elements

    @property
    def is_last(self) -> bool:
        return not self.has_next

    def to_dict(self) -> dict[str, Any]:
        """Return the external page shape with camelCase keys."""
        return {
            "content": [asdict(row) if is_dataclass(row) else row for row in self.content],
            "totalElements": self.total_elements,
            "pageable": self.pageable.to_dict(),
        }


def get_page(content: Sequence[T], pageable: Pageable, total_supplier: Callable[[], int]) -> Page[T]:
    """Build a page, calling `total_supplier` only when the total is unknown.

    A short page tells the total without counting: on the first page it is
    the number of fetched rows, on a later page it is offset + fetched rows.
    An empty page past the first one still counts, since the offset may lie
    beyond the end of the result set.
    """
    fetched = len(content)
    if fetched < pageable.page_size and (pageable.offset == 0 or fetched > 0):
        return Page(list(content), pageable.offset + fetched, pageable)
    return Page(list(content), total_supplier(), pageable)
