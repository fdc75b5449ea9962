"""
Filter query builder for product listings.

Turns a user ID plus any subset of the optional product filters into one
parameterized PostgreSQL statement. Placeholders are numbered by presence:
``$1`` is always the user ID and every predicate that is actually supplied
takes the next free number, in the order min price, max price, name. An
omitted predicate never reserves a slot, so ``len(args)`` always equals the
number of placeholders in ``sql``.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from shared.errors import InvalidArgumentError, InvalidRangeError

from ..catalog.models import ProductFilter


PRODUCT_COLUMNS = (
    "id, user_id, product_name, product_description, product_price, "
    "product_images, compressed_product_images"
)

BASE_QUERY = f"SELECT {PRODUCT_COLUMNS} FROM products"

_PLACEHOLDER = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class FilterQuery:
    """A built statement and its positional arguments."""
    sql: str
    args: Tuple[Any, ...] = field(default_factory=tuple)

    @property
    def placeholder_count(self) -> int:
        """Number of distinct positional placeholders in the statement."""
        return len(set(_PLACEHOLDER.findall(self.sql)))


class _ClauseSet:
    """Accumulates ``AND`` clauses and binds their arguments in order."""

    def __init__(self):
        self.clauses: List[str] = []
        self.args: List[Any] = []

    def add(self, template: str, value: Any) -> None:
        self.args.append(value)
        self.clauses.append(template.format(param=f"${len(self.args)}"))


def build_product_query(user_id: int, filters: Optional[ProductFilter] = None) -> FilterQuery:
    """Build the listing query for ``user_id`` restricted by ``filters``.

    Raises:
        InvalidArgumentError: ``user_id`` is not a positive integer.
        InvalidRangeError: both price bounds are given and min exceeds max.
    """
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        raise InvalidArgumentError(
            "user_id must be a positive integer",
            details={"user_id": user_id}
        )

    filters = filters or ProductFilter()
    min_price = filters.min_price
    max_price = filters.max_price

    if min_price is not None and max_price is not None and Decimal(min_price) > Decimal(max_price):
        raise InvalidRangeError(
            "min_price should be less than or equal to max_price",
            details={"min_price": str(min_price), "max_price": str(max_price)}
        )

    clauses = _ClauseSet()
    clauses.add("user_id = {param}", user_id)

    if min_price is not None:
        clauses.add("product_price >= {param}", min_price)

    if max_price is not None:
        clauses.add("product_price <= {param}", max_price)

    if filters.name:
        clauses.add("product_name ILIKE {param}", f"%{filters.name}%")

    sql = f"{BASE_QUERY} WHERE {' AND '.join(clauses.clauses)} ORDER BY id"
    return FilterQuery(sql=sql, args=tuple(clauses.args))
