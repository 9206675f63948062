"""Immutable relational query description consumed by the paginators.

Every builder method returns a new `Query`; nothing is mutated in place, so a
count query derived from a base query can never pick up the ordering or
bounds applied to the data query.
"""

from enum import Enum
from typing import Any, Iterable, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Operator(str, Enum):
    """Comparison operators usable in a condition."""

    EQ = "="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    IN = "in"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class Condition(BaseModel):
    """Single `column <operator> value` comparison."""

    model_config = ConfigDict(frozen=True)

    column: str
    operator: Operator
    value: Any
    cast: Optional[str] = Field(default=None, description="SQL type the bound value is cast to")


class AllOf(BaseModel):
    """AND group of predicates."""

    model_config = ConfigDict(frozen=True)

    predicates: Tuple["Predicate", ...] = ()


class AnyOf(BaseModel):
    """OR group of predicates."""

    model_config = ConfigDict(frozen=True)

    predicates: Tuple["Predicate", ...] = ()


Predicate = Union[Condition, AllOf, AnyOf]

AllOf.model_rebuild()
AnyOf.model_rebuild()


class OrderClause(BaseModel):
    """One ORDER BY term."""

    model_config = ConfigDict(frozen=True)

    column: str
    order: SortOrder = SortOrder.ASC


class Query(BaseModel):
    """Query against a single table.

    Top-level predicates are combined with AND.
    """

    model_config = ConfigDict(frozen=True)

    table: str = Field(description="Table (optionally schema-qualified) to read from")
    columns: Tuple[str, ...] = Field(default=("*",), description="Projected columns")
    predicates: Tuple[Predicate, ...] = ()
    ordering: Tuple[OrderClause, ...] = ()
    limit: Optional[int] = None
    offset: Optional[int] = None

    def clone(self) -> "Query":
        """Return a structural copy of this query."""
        return self.model_copy()

    def where(self, column: str, operator: Operator, value: Any, cast: Optional[str] = None) -> "Query":
        """Add a comparison predicate."""
        condition = Condition(column=column, operator=operator, value=value, cast=cast)
        return self.model_copy(update={"predicates": self.predicates + (condition,)})

    def where_in(self, column: str, values: Iterable[Any]) -> "Query":
        """Add an inclusion predicate."""
        return self.where(column, Operator.IN, list(values))

    def where_any(self, *predicates: Predicate) -> "Query":
        """Add an OR group of predicates."""
        group = AnyOf(predicates=tuple(predicates))
        return self.model_copy(update={"predicates": self.predicates + (group,)})

    def where_all(self, *predicates: Predicate) -> "Query":
        """Add an AND group of predicates."""
        group = AllOf(predicates=tuple(predicates))
        return self.model_copy(update={"predicates": self.predicates + (group,)})

    def order_by(self, column: str, order: SortOrder = SortOrder.ASC) -> "Query":
        """Append an ORDER BY term."""
        clause = OrderClause(column=column, order=SortOrder(order))
        return self.model_copy(update={"ordering": self.ordering + (clause,)})

    def with_limit(self, limit: Optional[int]) -> "Query":
        return self.model_copy(update={"limit": limit})

    def with_offset(self, offset: Optional[int]) -> "Query":
        return self.model_copy(update={"offset": offset})

    def for_count(self) -> "Query":
        """Copy keeping only the filters, suitable for a count aggregate."""
        return self.model_copy(update={"ordering": (), "limit": None, "offset": None})
