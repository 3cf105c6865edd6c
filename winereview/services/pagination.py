"""
Paginated Query Service - filter/sort/paginate list reads.

Callers build a filtered SELECT; paginate() counts it, applies the
requested (whitelisted) sort plus a stable tiebreaker, and slices out one
page. Sort strings follow the "field,direction" convention used by the
mobile client, e.g. "rating,desc" or "createdAt".
"""
import math
from dataclasses import dataclass
from typing import Any, Generic, List, Mapping, Optional, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from winereview.core.exceptions import ValidationError

T = TypeVar("T")

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# Row offsets are bound as signed 64-bit integers
MAX_OFFSET = 2 ** 63 - 1

_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class SortOrder:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class PageRequest:
    """
    Which page to read.

    Raises ValidationError on construction for a negative page, a size
    outside 1..MAX_PAGE_SIZE, or a page whose row offset exceeds MAX_OFFSET.
    """
    page: int = DEFAULT_PAGE
    size: int = DEFAULT_PAGE_SIZE
    sort: Optional[SortOrder] = None

    def __post_init__(self):
        if self.page < 0:
            raise ValidationError(f"page must be >= 0 (got {self.page})", field="page")
        if not 1 <= self.size <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"size must be between 1 and {MAX_PAGE_SIZE} (got {self.size})",
                field="size"
            )
        if self.page * self.size > MAX_OFFSET:
            raise ValidationError(
                f"page is too large (got {self.page}); page * size must not exceed {MAX_OFFSET}",
                field="page"
            )

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class PageResult(Generic[T]):
    items: List[T]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size else 0


def parse_sort(sort: Optional[str], allowed_fields: Sequence[str]) -> Optional[SortOrder]:
    """
    Parse "field" or "field,asc|desc".

    Returns None for an empty value so the listing's default applies.

    Raises:
        ValidationError: Unknown field or direction
    """
    if sort is None or not sort.strip():
        return None

    parts = [part.strip() for part in sort.split(",")]
    if len(parts) > 2:
        raise ValidationError(f"Invalid sort '{sort}'. Use 'field' or 'field,asc|desc'", field="sort")

    field_name = parts[0]
    direction = parts[1].lower() if len(parts) == 2 else "asc"

    if field_name not in allowed_fields:
        raise ValidationError(
            f"Cannot sort by '{field_name}'. Allowed fields: {', '.join(sorted(allowed_fields))}",
            field="sort"
        )
    if direction not in _DIRECTIONS:
        raise ValidationError(
            f"Invalid sort direction '{direction}'. Allowed: asc, desc",
            field="sort"
        )
    return SortOrder(field=field_name, descending=direction == "desc")


def page_request(page: int, size: int, sort: Optional[str], allowed_fields: Sequence[str]) -> PageRequest:
    """Build a PageRequest from raw query parameters."""
    return PageRequest(page=page, size=size, sort=parse_sort(sort, allowed_fields))


def paginate(
    session: Session,
    statement: Select,
    request: PageRequest,
    sort_fields: Mapping[str, ColumnElement],
    default_sort: SortOrder,
    tiebreaker: ColumnElement,
) -> PageResult[Any]:
    """
    Execute one page of `statement`.

    Args:
        session: Open session
        statement: Filtered SELECT of a single ORM entity
        request: Page, size and optional sort
        sort_fields: Public sort name -> column
        default_sort: Used when the request carries no sort
        tiebreaker: Unique column appended to every ORDER BY so pages are
            stable when sort values repeat

    Returns:
        PageResult whose items are the selected entities
    """
    total = session.scalar(
        select(func.count()).select_from(statement.order_by(None).subquery())
    ) or 0

    order = request.sort or default_sort
    column = sort_fields[order.field]
    ordered = statement.order_by(
        column.desc() if order.descending else column.asc(),
        tiebreaker.asc(),
    )

    items = list(session.scalars(ordered.offset(request.offset).limit(request.size)).all())

    return PageResult(items=items, page=request.page, size=request.size, total_elements=total)
