"""Entry point choosing the pagination strategy from the request shape."""

from typing import Optional, Union

from ..db.executor import QueryExecutor
from ..errors.problem_details import ContractViolationError
from ..query import Query
from .cursor import CursorCodec
from .keyset import cursor_paginate
from .models import CursorPage, CursorPageRequest, OffsetPage, OffsetPageRequest
from .offset import offset_paginate


PageRequest = Union[OffsetPageRequest, CursorPageRequest]


async def paginate(
    executor: QueryExecutor,
    query: Query,
    request: PageRequest,
    *,
    apply_order: bool = True,
    codec: Optional[CursorCodec] = None
) -> Union[OffsetPage, CursorPage]:
    """Paginate `query` according to a validated page request.

    Args:
        executor: Runs the queries
        query: Filtered query, without ordering or bounds
        request: Offset or cursor page request
        apply_order: Offset mode only, see `offset_paginate`
        codec: Cursor mode only, see `cursor_paginate`

    Raises:
        ContractViolationError: If `request` is neither request type
    """
    if isinstance(request, OffsetPageRequest):
        return await offset_paginate(
            executor,
            query,
            order_by=request.order_by,
            order=request.order,
            page=request.page,
            nb_results_per_page=request.nb_results_per_page,
            apply_order=apply_order
        )

    if isinstance(request, CursorPageRequest):
        return await cursor_paginate(
            executor,
            query,
            nb_results_per_page=request.nb_results_per_page,
            sort_key_spec=request.sort_key_spec,
            order=request.order,
            starting_after=request.starting_after,
            ending_before=request.ending_before,
            from_end=request.from_end,
            codec=codec
        )

    raise ContractViolationError(f"Unsupported page request: {type(request).__name__}")
