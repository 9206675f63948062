"""Pagination module for offset and cursor-based pagination."""

from .models import (
    CursorPage,
    CursorPageRequest,
    OffsetPage,
    OffsetPageRequest,
    SortKey,
    SortKeySpec,
    SortKeyType,
    build_sort_key_spec
)
from .cursor import (
    CursorCodec,
    decode_cursor,
    encode_cursor,
    get_cursor_codec,
    normalize_cursor_value
)
from .ordering import (
    match_cursor_result,
    resolve_overfetched_rows,
    reverse_operator,
    reverse_order
)
from .offset import get_offset_pagination_meta, offset_paginate
from .keyset import apply_cursor_predicate, cursor_paginate
from .service import paginate

__all__ = [
    "CursorPage",
    "CursorPageRequest",
    "OffsetPage",
    "OffsetPageRequest",
    "SortKey",
    "SortKeySpec",
    "SortKeyType",
    "build_sort_key_spec",
    "CursorCodec",
    "decode_cursor",
    "encode_cursor",
    "get_cursor_codec",
    "normalize_cursor_value",
    "match_cursor_result",
    "resolve_overfetched_rows",
    "reverse_operator",
    "reverse_order",
    "get_offset_pagination_meta",
    "offset_paginate",
    "apply_cursor_predicate",
    "cursor_paginate",
    "paginate"
]
