"""Helpers shared by the cursor paginator: direction reversal and anchor handling."""

from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence

from ..query import Operator, SortOrder
from .cursor import normalize_cursor_value


def reverse_order(order: SortOrder) -> SortOrder:
    """Mirror a sort direction."""
    if order is SortOrder.ASC:
        return SortOrder.DESC
    return SortOrder.ASC


def reverse_operator(operator: Operator) -> Operator:
    """Mirror a range operator to traverse the other way.

    This reverses direction, it does not negate: the mirror of `>` is `<`,
    whereas its negation would be `<=`.

    Raises:
        ValueError: For operators with no direction
    """
    if operator is Operator.GT:
        return Operator.LT
    if operator is Operator.GTE:
        return Operator.LTE
    if operator is Operator.LT:
        return Operator.GT
    if operator is Operator.LTE:
        return Operator.GTE
    raise ValueError(f"Operator {operator.value!r} has no direction to reverse")


def _record_value(record: Any, prop: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(prop)
    return getattr(record, prop, None)


def match_cursor_result(decoded_cursor: Dict[str, Any], record: Any) -> bool:
    """Whether `record` holds exactly the anchor values on every sort key."""
    return all(
        normalize_cursor_value(_record_value(record, prop)) == normalize_cursor_value(value)
        for prop, value in decoded_cursor.items()
    )


class OverfetchOutcome(NamedTuple):
    """Page carved out of an over-fetched row set."""

    results: List[Any]
    has_previous_page: bool
    has_next_page: bool


def resolve_overfetched_rows(
    rows: Sequence[Any],
    decoded_cursor: Optional[Dict[str, Any]],
    nb_results_per_page: int,
    backward: bool
) -> OverfetchOutcome:
    """Detect page boundaries, drop the anchor and trim an over-fetched row set.

    `rows` comes from a query limited to `nb_results_per_page + 2`, ordered in
    traversal order (mirrored when `backward`), and inclusive of the anchor.
    One extra slot proves a further page exists; the other absorbs the anchor.

    Args:
        rows: Fetched rows, untrimmed
        decoded_cursor: Anchor values, or None when there is no anchor
        nb_results_per_page: Page size
        backward: True for `ending_before` (or fetching from the end)

    Returns:
        Results in logical order plus both boundary flags
    """
    has_previous_page = False
    has_next_page = False

    if decoded_cursor is not None:
        others = [row for row in rows if not match_cursor_result(decoded_cursor, row)]
        anchor_present = len(others) != len(rows)
        overflow = len(others) > nb_results_per_page

        if backward:
            has_previous_page = overflow
            has_next_page = anchor_present
        else:
            has_previous_page = anchor_present
            has_next_page = overflow
    else:
        others = list(rows)
        if backward:
            has_previous_page = len(others) > nb_results_per_page
        else:
            has_next_page = len(others) > nb_results_per_page

    results = others[:nb_results_per_page]
    if backward:
        results.reverse()

    return OverfetchOutcome(results, has_previous_page, has_next_page)
