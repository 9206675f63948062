"""Offset (page number) pagination."""

import asyncio
import logging
from typing import Any, Dict

from ..db.executor import QueryExecutor
from ..query import Query, SortOrder
from .models import OffsetPage


logger = logging.getLogger(__name__)


def get_offset_pagination_meta(nb_results: int, page: int, nb_results_per_page: int) -> Dict[str, Any]:
    """Compute offset pagination metadata.

    The page count is a ceiling division done in integers, so it stays exact
    for counts beyond float precision. An empty result set has zero pages.
    """
    nb_pages = nb_results // nb_results_per_page
    if nb_results % nb_results_per_page != 0:
        nb_pages += 1

    return {
        "nb_results": nb_results,
        "nb_pages": nb_pages,
        "page": page,
        "nb_results_per_page": nb_results_per_page
    }


async def offset_paginate(
    executor: QueryExecutor,
    query: Query,
    *,
    order_by: str,
    order: SortOrder,
    page: int,
    nb_results_per_page: int,
    apply_order: bool = True
) -> OffsetPage:
    """Fetch one page by page number, along with the total count.

    Args:
        executor: Runs the data and count queries
        query: Filtered query, without ordering or bounds
        order_by: Column to order by
        order: Sort direction
        page: Page number, starting at 1
        nb_results_per_page: Page size
        apply_order: Whether to add `order_by` to the query; pass False when
            the query is already ordered

    Returns:
        The page of results with count metadata
    """
    # Counts every row matching the filters, before pagination
    count_query = query.for_count()

    if apply_order:
        query = query.order_by(order_by, SortOrder(order))

    query = (
        query
        .with_offset((page - 1) * nb_results_per_page)
        .with_limit(nb_results_per_page)
    )

    results, nb_results = await asyncio.gather(
        executor.fetch(query),
        executor.count(count_query)
    )

    meta = get_offset_pagination_meta(
        nb_results=nb_results,
        page=page,
        nb_results_per_page=nb_results_per_page
    )
    logger.debug(
        f"Offset page {page}/{meta['nb_pages']} of {query.table}: "
        f"{len(results)} of {nb_results} results"
    )

    return OffsetPage(results=results, **meta)
