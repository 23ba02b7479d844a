"""
Sorting and pagination helpers shared by the listing endpoints.

Sortable fields are fixed mappings from a public field name to a SQLAlchemy
column expression. Unknown fields or orders fall back to the defaults
instead of raising.
"""

import math
from typing import Any, Dict, List, Mapping, Tuple

from sqlalchemy.orm import Query

SORT_ORDERS = ("asc", "desc")

# Keeps (page - 1) * limit inside a 64-bit integer
MAX_PAGE = 1_000_000

LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """LIKE pattern matching the term literally anywhere in the value."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def resolve_sort(
    sort_by: str,
    sort_order: str,
    allowed: Mapping[str, Any],
    default_field: str,
    default_order: str = "asc",
) -> Tuple[str, str]:
    """Return an allow-listed (field, order) pair for the requested sort."""
    field = sort_by if sort_by in allowed else default_field
    order = (sort_order or "").lower()
    if order not in SORT_ORDERS:
        order = default_order
    return field, order


def order_clauses(
    sort_by: str,
    sort_order: str,
    allowed: Mapping[str, Any],
    default_field: str,
    default_order: str = "asc",
    tiebreaker: Any = None,
) -> List[Any]:
    """Build ORDER BY clauses; the tiebreaker keeps page boundaries stable."""
    field, order = resolve_sort(sort_by, sort_order, allowed, default_field, default_order)
    column = allowed[field]
    clauses = [column.desc() if order == "desc" else column.asc()]
    if tiebreaker is not None:
        clauses.append(tiebreaker.asc())
    return clauses


def page_metadata(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "current_page": page,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "total": total,
        "limit": limit,
    }


def paginate(query: Query, page: int, limit: int, total: int) -> Tuple[List[Any], Dict[str, int]]:
    """Apply offset pagination to an already ordered query."""
    offset = (page - 1) * limit
    rows = query.offset(offset).limit(limit).all()
    return rows, page_metadata(page, limit, total)
