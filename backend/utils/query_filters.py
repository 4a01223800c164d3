# backend/utils/query_filters.py
from functools import reduce
from typing import Iterable, Optional, Tuple

from sqlalchemy import and_, true
from sqlalchemy.sql.elements import ColumnElement


def build_contains_predicate(
    filters: Iterable[Tuple[ColumnElement, Optional[str]]],
) -> ColumnElement[bool]:
    """Fold ordered (column, value) pairs into one WHERE predicate.

    Every pair with a non-empty value becomes a case-insensitive "contains"
    clause, joined with AND in the order given. Values are bound as
    parameters with LIKE wildcards escaped. No usable pair yields an
    unconditional predicate.
    """
    clauses = [
        column.icontains(value, autoescape=True)
        for column, value in filters
        if value
    ]
    if not clauses:
        return true()
    return reduce(and_, clauses)
