"""pagekit: offset and cursor pagination over composable queries."""

from .pagination import (
    CursorPage,
    CursorPageRequest,
    OffsetPage,
    OffsetPageRequest,
    SortKey,
    SortKeyType,
    cursor_paginate,
    offset_paginate,
    paginate
)
from .query import Operator, Query, SortOrder

__version__ = "1.0.0"

__all__ = [
    "CursorPage",
    "CursorPageRequest",
    "OffsetPage",
    "OffsetPageRequest",
    "SortKey",
    "SortKeyType",
    "cursor_paginate",
    "offset_paginate",
    "paginate",
    "Operator",
    "Query",
    "SortOrder"
]
