"""Opaque cursor encoding for keyset pagination.

A cursor is the URL-safe base64 (unpadded) encoding of a compact JSON object
mapping each sort key property to the anchor record's value. When a secret is
configured, an HMAC-SHA256 signature is appended after a dot:

    <payload>[.<signature>]

Values are typed per sort key with pydantic: one model per sort key spec,
lax enough to accept what the database returns when encoding and strict JSON
when decoding a cursor received from a client.
"""

import base64
import binascii
import hashlib
import hmac
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from functools import lru_cache
from typing import Annotated, Any, Dict, Mapping, Optional, Type, Union
from uuid import UUID

from pydantic import (
    AfterValidator,
    AllowInfNan,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    Strict,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    create_model
)

from ..config import get_settings
from ..errors.problem_details import ContractViolationError, InvalidCursorError
from .models import SortKeySpec, SortKeyType


logger = logging.getLogger(__name__)

_SIGNATURE_SEPARATOR = "."


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(data: str) -> bytes:
    # Restore base64 padding stripped on encode
    padded = data + "=" * (-len(data) % 4)
    return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)


def _date_as_datetime(value: Any) -> Any:
    # Epoch numbers are not taken as dates
    if isinstance(value, (datetime, str)):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise ValueError(f"Input should be a date, datetime or ISO-8601 string, got {type(value).__name__}")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _isoformat(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def _uuid_as_str(value: Any) -> Any:
    return str(value) if isinstance(value, UUID) else value


_FiniteFloat = Annotated[float, AllowInfNan(False)]
_FiniteDecimal = Annotated[Decimal, AllowInfNan(False)]

# Record values, as returned by the database
_UtcDatetime = Annotated[
    datetime,
    BeforeValidator(_date_as_datetime),
    AfterValidator(_as_utc),
    PlainSerializer(_isoformat, return_type=str)
]

_RECORD_VALUE_TYPES = {
    SortKeyType.NUMBER: Annotated[
        Union[StrictInt, Annotated[_FiniteDecimal, Strict()], Annotated[_FiniteFloat, Strict()]],
        Field(union_mode="left_to_right")
    ],
    SortKeyType.BOOLEAN: StrictBool,
    SortKeyType.DATE: _UtcDatetime,
    SortKeyType.STRING: Annotated[StrictStr, BeforeValidator(_uuid_as_str)],
}

# Cursor values, validated from JSON in strict mode. Decimals travel as strings.
_CURSOR_VALUE_TYPES = {
    SortKeyType.NUMBER: Annotated[
        Union[int, _FiniteFloat, _FiniteDecimal],
        Field(union_mode="left_to_right")
    ],
    SortKeyType.BOOLEAN: bool,
    SortKeyType.DATE: Annotated[datetime, AfterValidator(_as_utc)],
    SortKeyType.STRING: str,
}

_utc_datetime_adapter = TypeAdapter(_UtcDatetime)


@lru_cache(maxsize=256)
def _values_model(sort_key_spec: SortKeySpec, from_cursor: bool) -> Type[BaseModel]:
    """Model with one field per sort key, aliased to the key's property."""
    value_types = _CURSOR_VALUE_TYPES if from_cursor else _RECORD_VALUE_TYPES
    fields = {
        f"value_{i}": (value_types[key.type], Field(alias=key.prop))
        for i, key in enumerate(sort_key_spec)
    }
    return create_model(
        "CursorValues",
        __config__=ConfigDict(strict=from_cursor),
        **fields
    )


def canonical_datetime(value: Any) -> datetime:
    """Coerce a date value to an aware UTC datetime.

    Naive datetimes are taken to be UTC, `date` objects become midnight UTC and
    strings are parsed as ISO-8601.

    Raises:
        ValueError: If the value is not a date
    """
    # pydantic's ValidationError is a ValueError
    return _utc_datetime_adapter.validate_python(value)


def format_datetime(value: Any) -> str:
    """Canonical string form of a date value (UTC, microsecond precision)."""
    return _isoformat(canonical_datetime(value))


def normalize_cursor_value(value: Any) -> Any:
    """Normalize a value for equality checks between cursors and records."""
    if isinstance(value, (datetime, date)):
        return format_datetime(value)
    if isinstance(value, UUID):
        return str(value)
    return value


def _get_record_value(record: Any, prop: str) -> Any:
    if isinstance(record, Mapping):
        if prop not in record:
            raise ContractViolationError(f"Record has no value for sort key '{prop}'")
        return record[prop]
    if not hasattr(record, prop):
        raise ContractViolationError(f"Record has no value for sort key '{prop}'")
    return getattr(record, prop)


def _error_prop(error: Dict[str, Any]) -> Optional[str]:
    return str(error["loc"][0]) if error["loc"] else None


class CursorCodec:
    """Encode and decode cursors for a sort key spec."""

    def __init__(self, secret: Optional[str] = None):
        self._secret = secret.encode("utf-8") if secret else None

    def _sign(self, payload: str) -> str:
        digest = hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).digest()
        return _b64encode(digest)

    def encode(self, record: Any, sort_key_spec: SortKeySpec) -> str:
        """Encode the sort key values of `record` into a cursor.

        Args:
            record: Mapping or object holding every sort key property
            sort_key_spec: Sort keys to snapshot

        Returns:
            URL-safe cursor string

        Raises:
            ContractViolationError: If a sort key is missing, null or mistyped
        """
        sort_key_spec = tuple(sort_key_spec)
        values = {}
        for key in sort_key_spec:
            value = _get_record_value(record, key.prop)
            if value is None:
                raise ContractViolationError(f"Sort key '{key.prop}' must not be null")
            values[key.prop] = value

        try:
            cursor_values = _values_model(sort_key_spec, False).model_validate(values)
        except ValidationError as e:
            error = e.errors()[0]
            key_types = {key.prop: key.type.value for key in sort_key_spec}
            prop = _error_prop(error)
            raise ContractViolationError(
                f"Sort key '{prop}' is not a valid {key_types.get(prop, 'value')}: {error['msg']}"
            )

        cursor_json = cursor_values.model_dump_json(by_alias=True)
        payload = _b64encode(cursor_json.encode("utf-8"))

        if self._secret is None:
            return payload
        return f"{payload}{_SIGNATURE_SEPARATOR}{self._sign(payload)}"

    def decode(self, cursor: str, sort_key_spec: SortKeySpec) -> Dict[str, Any]:
        """Decode a cursor into typed sort key values.

        Returns:
            Mapping of sort key property to value, in sort key order

        Raises:
            InvalidCursorError: If the cursor is malformed, badly signed, or
                does not hold a valid value for every sort key
        """
        if not cursor:
            raise InvalidCursorError("Empty cursor provided")

        payload, _, signature = cursor.partition(_SIGNATURE_SEPARATOR)

        if self._secret is not None:
            expected = self._sign(payload)
            if not signature or not hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii")):
                logger.warning("Rejected cursor with missing or invalid signature")
                raise InvalidCursorError("Invalid cursor signature")

        try:
            cursor_json = _b64decode(payload).decode("utf-8")
        except (ValueError, binascii.Error) as e:
            # UnicodeError is a ValueError
            logger.warning(f"Rejected malformed cursor: {e}")
            raise InvalidCursorError(f"Invalid cursor format: {e}")

        sort_key_spec = tuple(sort_key_spec)
        try:
            cursor_values = _values_model(sort_key_spec, True).model_validate_json(cursor_json)
        except ValidationError as e:
            error = e.errors()[0]
            prop = _error_prop(error)
            if prop is None:
                detail = f"Invalid cursor format: {error['msg']}"
            elif error["type"] == "missing":
                detail = f"Cursor is missing sort key '{prop}'"
            else:
                detail = f"Invalid cursor value for '{prop}': {error['msg']}"
            logger.warning(f"Rejected cursor: {detail}")
            raise InvalidCursorError(detail)

        return {
            key.prop: getattr(cursor_values, f"value_{i}")
            for i, key in enumerate(sort_key_spec)
        }


def get_cursor_codec() -> CursorCodec:
    """Codec configured from settings."""
    return CursorCodec(secret=get_settings().cursor_secret)


def encode_cursor(record: Any, sort_key_spec: SortKeySpec) -> str:
    """Encode a cursor with the configured codec."""
    return get_cursor_codec().encode(record, sort_key_spec)


def decode_cursor(cursor: str, sort_key_spec: SortKeySpec) -> Dict[str, Any]:
    """Decode a cursor with the configured codec."""
    return get_cursor_codec().decode(cursor, sort_key_spec)
