"""Query description and SQL compilation."""

from .builder import (
    AllOf,
    AnyOf,
    Condition,
    Operator,
    OrderClause,
    Predicate,
    Query,
    SortOrder
)
from .compiler import compile_count, compile_select, quote_identifier

__all__ = [
    "AllOf",
    "AnyOf",
    "Condition",
    "Operator",
    "OrderClause",
    "Predicate",
    "Query",
    "SortOrder",
    "compile_count",
    "compile_select",
    "quote_identifier"
]
