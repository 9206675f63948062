"""Cursor (keyset) pagination."""

import logging
from typing import Any, Dict, Optional

from ..config import get_settings
from ..db.executor import QueryExecutor
from ..errors.problem_details import ContractViolationError
from ..query import AllOf, Condition, Operator, Query, SortOrder
from .cursor import CursorCodec, get_cursor_codec
from .models import CursorPage, SortKey, SortKeySpec, SortKeyType, validate_sort_key_spec
from .ordering import resolve_overfetched_rows, reverse_operator, reverse_order


logger = logging.getLogger(__name__)


def _value_cast(key: SortKey) -> Optional[str]:
    # Decoded dates are aware; the cast lets timestamp columns compare too
    return "timestamptz" if key.type is SortKeyType.DATE else None


def apply_cursor_predicate(
    query: Query,
    sort_key_spec: SortKeySpec,
    decoded_cursor: Dict[str, Any],
    order: SortOrder,
    reverse: bool = False
) -> Query:
    """Restrict `query` to rows from the anchor onwards in traversal order.

    The anchor row itself stays in the result set: the paginator uses its
    presence to tell whether a page exists on the other side of the anchor.
    With two keys the primary comparison is strict and the secondary one
    inclusive, so rows tied with the anchor on the primary key are kept.
    """
    operator = Operator.GT if order is SortOrder.ASC else Operator.LT
    operator_with_equal = Operator.GTE if order is SortOrder.ASC else Operator.LTE

    if reverse:
        operator = reverse_operator(operator)
        operator_with_equal = reverse_operator(operator_with_equal)

    first, first_value = sort_key_spec[0], decoded_cursor[sort_key_spec[0].prop]
    if len(sort_key_spec) == 1:
        return query.where(first.prop, operator_with_equal, first_value, cast=_value_cast(first))

    secondary, secondary_value = sort_key_spec[1], decoded_cursor[sort_key_spec[1].prop]
    return query.where_any(
        Condition(column=first.prop, operator=operator, value=first_value, cast=_value_cast(first)),
        AllOf(predicates=(
            Condition(column=first.prop, operator=Operator.EQ, value=first_value, cast=_value_cast(first)),
            Condition(
                column=secondary.prop,
                operator=operator_with_equal,
                value=secondary_value,
                cast=_value_cast(secondary)
            ),
        ))
    )


def _check_contract(
    starting_after: Optional[str],
    ending_before: Optional[str],
    from_end: bool,
    nb_results_per_page: int
) -> None:
    if starting_after is not None and ending_before is not None:
        raise ContractViolationError("starting_after and ending_before are mutually exclusive")
    if from_end and (starting_after is not None or ending_before is not None):
        raise ContractViolationError("from_end cannot be combined with a cursor")

    max_page_size = get_settings().max_page_size
    if not 1 <= nb_results_per_page <= max_page_size:
        raise ContractViolationError(
            f"nb_results_per_page must be between 1 and {max_page_size}, got {nb_results_per_page}"
        )


async def cursor_paginate(
    executor: QueryExecutor,
    query: Query,
    *,
    nb_results_per_page: int,
    sort_key_spec: SortKeySpec,
    order: SortOrder,
    starting_after: Optional[str] = None,
    ending_before: Optional[str] = None,
    from_end: bool = False,
    codec: Optional[CursorCodec] = None
) -> CursorPage:
    """Fetch one page relative to an anchor cursor.

    `starting_after` and `ending_before` are mutually exclusive. Without
    either, the first page is returned, or the last one when `from_end` is set.

    Args:
        executor: Runs the page query
        query: Filtered query, without ordering or bounds
        nb_results_per_page: Page size
        sort_key_spec: One or two sort keys; the last should be unique
        order: Requested sort direction
        starting_after: Fetch results after this cursor
        ending_before: Fetch results before this cursor
        from_end: Fetch the last page when no cursor is given
        codec: Cursor codec, defaults to the configured one

    Returns:
        The page of results in requested order, with boundary flags and cursors

    Raises:
        InvalidCursorError: If the cursor cannot be decoded for `sort_key_spec`
        ContractViolationError: If the arguments break the pagination contract
    """
    _check_contract(starting_after, ending_before, from_end, nb_results_per_page)
    sort_key_spec = validate_sort_key_spec(sort_key_spec)
    order = SortOrder(order)
    codec = codec or get_cursor_codec()

    # Fetching before a cursor queries in the mirrored order, then reverses
    # the page back into the requested order
    should_reverse_order = ending_before is not None or from_end

    cursor = starting_after if starting_after is not None else ending_before
    decoded_cursor = None

    if cursor is not None:
        decoded_cursor = codec.decode(cursor, sort_key_spec)
        query = apply_cursor_predicate(
            query,
            sort_key_spec,
            decoded_cursor,
            order,
            reverse=should_reverse_order
        )

    query_order = reverse_order(order) if should_reverse_order else order
    for key in sort_key_spec:
        query = query.order_by(key.prop, query_order)

    # One extra row to detect a further page, one for the anchor row
    rows = await executor.fetch(query.with_limit(nb_results_per_page + 2))

    outcome = resolve_overfetched_rows(
        rows,
        decoded_cursor,
        nb_results_per_page,
        backward=should_reverse_order
    )
    results = outcome.results

    logger.debug(
        f"Cursor page of {query.table}: {len(results)} results from {len(rows)} rows "
        f"(previous={outcome.has_previous_page}, next={outcome.has_next_page})"
    )

    return CursorPage(
        results=results,
        has_previous_page=outcome.has_previous_page,
        has_next_page=outcome.has_next_page,
        nb_results_per_page=nb_results_per_page,
        start_cursor=codec.encode(results[0], sort_key_spec) if results else None,
        end_cursor=codec.encode(results[-1], sort_key_spec) if results else None
    )
