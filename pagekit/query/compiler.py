"""Compile query descriptions to PostgreSQL with asyncpg `$n` placeholders."""

import re
from typing import Any, List, Tuple

from .builder import AllOf, AnyOf, Condition, Operator, Predicate, Query, SortOrder

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_identifier(name: str) -> str:
    """Validate and double-quote a (possibly schema-qualified) identifier.

    Raises:
        ValueError: If any part is not a plain SQL identifier
    """
    parts = name.split(".")
    for part in parts:
        if not _IDENTIFIER_RE.match(part):
            raise ValueError(f"Invalid SQL identifier: {name!r}")
    return ".".join(f'"{part}"' for part in parts)


def _compile_predicate(predicate: Predicate, params: List[Any]) -> str:
    if isinstance(predicate, Condition):
        column = quote_identifier(predicate.column)
        params.append(predicate.value)
        placeholder = f"${len(params)}"
        if predicate.cast is not None:
            if not _IDENTIFIER_RE.match(predicate.cast):
                raise ValueError(f"Invalid SQL type: {predicate.cast!r}")
            placeholder = f"{placeholder}::{predicate.cast}"
        if predicate.operator is Operator.IN:
            return f"{column} = ANY({placeholder})"
        return f"{column} {predicate.operator.value} {placeholder}"

    if isinstance(predicate, AllOf):
        if not predicate.predicates:
            return "TRUE"
        return "(" + " AND ".join(_compile_predicate(p, params) for p in predicate.predicates) + ")"

    if isinstance(predicate, AnyOf):
        if not predicate.predicates:
            return "FALSE"
        return "(" + " OR ".join(_compile_predicate(p, params) for p in predicate.predicates) + ")"

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")


def build_where_clause(query: Query, params: List[Any]) -> str:
    """Build the WHERE clause for a query, appending bind values to `params`.

    Returns:
        The clause including the WHERE keyword, or an empty string
    """
    if not query.predicates:
        return ""
    conditions = [_compile_predicate(p, params) for p in query.predicates]
    return "WHERE " + " AND ".join(conditions)


def build_order_clause(query: Query) -> str:
    """Build the ORDER BY clause for a query."""
    if not query.ordering:
        return ""
    terms = [
        f"{quote_identifier(clause.column)} {'DESC' if clause.order is SortOrder.DESC else 'ASC'}"
        for clause in query.ordering
    ]
    return "ORDER BY " + ", ".join(terms)


def compile_select(query: Query) -> Tuple[str, List[Any]]:
    """Compile a query to a SELECT statement.

    Returns:
        Tuple of (sql, parameters)
    """
    params: List[Any] = []

    if query.columns == ("*",):
        projection = "*"
    else:
        projection = ", ".join(quote_identifier(c) for c in query.columns)

    parts = [f"SELECT {projection} FROM {quote_identifier(query.table)}"]

    where_clause = build_where_clause(query, params)
    if where_clause:
        parts.append(where_clause)

    order_clause = build_order_clause(query)
    if order_clause:
        parts.append(order_clause)

    if query.limit is not None:
        params.append(query.limit)
        parts.append(f"LIMIT ${len(params)}")

    if query.offset is not None:
        params.append(query.offset)
        parts.append(f"OFFSET ${len(params)}")

    return " ".join(parts), params


def compile_count(query: Query) -> Tuple[str, List[Any]]:
    """Compile a query to a COUNT(*) over its filters.

    Ordering and bounds on `query` are ignored.
    """
    params: List[Any] = []
    parts = [f"SELECT COUNT(*) AS count FROM {quote_identifier(query.table)}"]

    where_clause = build_where_clause(query, params)
    if where_clause:
        parts.append(where_clause)

    return " ".join(parts), params
