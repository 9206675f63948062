"""Pydantic models for page requests, sort keys and page results."""

from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..config import get_settings
from ..errors.problem_details import ContractViolationError
from ..query import SortOrder


class SortKeyType(str, Enum):
    """Value types a cursor can carry."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    STRING = "string"


class SortKey(BaseModel):
    """One column of the total order used for cursor comparison."""

    model_config = ConfigDict(frozen=True)

    prop: str = Field(description="Record property / column name")
    type: SortKeyType = Field(description="Type used to encode and parse cursor values")


SortKeySpec = Tuple[SortKey, ...]


def validate_sort_key_spec(sort_key_spec: SortKeySpec) -> SortKeySpec:
    """Check a sort key spec has one or two keys.

    Raises:
        ContractViolationError: If the sort key spec is empty or longer than two keys
    """
    if len(sort_key_spec) not in (1, 2):
        raise ContractViolationError(
            f"Sort key spec must have 1 or 2 keys, got {len(sort_key_spec)}"
        )
    return tuple(sort_key_spec)


def build_sort_key_spec(order_by: SortKey, tie_breaker: Optional[SortKey] = None) -> SortKeySpec:
    """Build a sort key spec from the requested order key and a unique tie-breaker.

    The tie-breaker is skipped when it is the order key itself.
    """
    if tie_breaker is None or tie_breaker.prop == order_by.prop:
        return (order_by,)
    return (order_by, tie_breaker)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _default_page_size() -> int:
    return get_settings().default_page_size


class _PageRequest(_CamelModel):
    """Page size bounded by the configured maximum."""

    nb_results_per_page: int = Field(default_factory=_default_page_size, ge=1)

    @field_validator("nb_results_per_page")
    @classmethod
    def validate_nb_results_per_page(cls, v):
        max_page_size = get_settings().max_page_size
        if v > max_page_size:
            raise ValueError(f"nb_results_per_page must be at most {max_page_size}")
        return v


class OffsetPageRequest(_PageRequest):
    """Validated offset pagination parameters."""

    page: int = Field(default=1, ge=1)
    order_by: str = Field(default="createdDate")
    order: SortOrder = SortOrder.DESC


class CursorPageRequest(_PageRequest):
    """Validated cursor pagination parameters."""

    starting_after: Optional[str] = None
    ending_before: Optional[str] = None
    from_end: bool = Field(default=False, description="Fetch the last page when no cursor is given")
    order: SortOrder = SortOrder.DESC
    sort_key_spec: Tuple[SortKey, ...] = Field(min_length=1, max_length=2)

    @model_validator(mode="after")
    def check_anchors(self):
        """`starting_after`, `ending_before` and `from_end` are mutually exclusive."""
        if self.starting_after is not None and self.ending_before is not None:
            raise ValueError("starting_after and ending_before are mutually exclusive")
        if self.from_end and (self.starting_after is not None or self.ending_before is not None):
            raise ValueError("from_end cannot be combined with a cursor")
        return self


class OffsetPage(_CamelModel):
    """Page of results with offset pagination metadata."""

    results: List[Any] = Field(description="Records in the requested order")
    nb_results: int = Field(description="Total number of records matching the filters")
    nb_pages: int = Field(description="Total number of pages")
    page: int = Field(description="Current page number, starting at 1")
    nb_results_per_page: int


class CursorPage(_CamelModel):
    """Page of results with cursor pagination metadata."""

    results: List[Any] = Field(description="Records in the requested order")
    has_previous_page: bool
    has_next_page: bool
    nb_results_per_page: int
    start_cursor: Optional[str] = Field(default=None, description="Cursor of the first result")
    end_cursor: Optional[str] = Field(default=None, description="Cursor of the last result")
