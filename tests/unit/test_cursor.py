"""Tests for cursor encoding and decoding."""

import base64
import json
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from pagekit.errors import ContractViolationError, InvalidCursorError
from pagekit.pagination import (
    CursorCodec, SortKey, SortKeyType, decode_cursor, encode_cursor, normalize_cursor_value
)


def _raw_cursor(payload) -> str:
    data = json.dumps(payload).encode("utf-8")
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


class TestCursorRoundTrip:
    """Decoding an encoded cursor gives back the typed values."""

    @pytest.mark.parametrize("value", [0, -7, 42, 2 ** 63 + 1, 3.5, -0.125, Decimal("1234.50")])
    def test_number(self, codec, value):
        spec = (SortKey(prop="amount", type=SortKeyType.NUMBER),)
        decoded = codec.decode(codec.encode({"amount": value}, spec), spec)
        assert decoded == {"amount": value}
        assert type(decoded["amount"]) is type(value)

    @pytest.mark.parametrize("value", [True, False])
    def test_boolean(self, codec, value):
        spec = (SortKey(prop="active", type=SortKeyType.BOOLEAN),)
        assert codec.decode(codec.encode({"active": value}, spec), spec) == {"active": value}

    @pytest.mark.parametrize("value", ["", "whlg_001", "émoji 🚀", "a.b/c?d=e&f"])
    def test_string(self, codec, value):
        spec = (SortKey(prop="name", type=SortKeyType.STRING),)
        assert codec.decode(codec.encode({"name": value}, spec), spec) == {"name": value}

    def test_date_aware(self, codec):
        spec = (SortKey(prop="createdDate", type=SortKeyType.DATE),)
        value = datetime(2020, 7, 20, 10, 15, 30, 123456, tzinfo=timezone(timedelta(hours=2)))

        decoded = codec.decode(codec.encode({"createdDate": value}, spec), spec)

        assert decoded["createdDate"] == value
        assert decoded["createdDate"].tzinfo == timezone.utc

    def test_date_naive_is_utc(self, codec):
        spec = (SortKey(prop="createdDate", type=SortKeyType.DATE),)
        value = datetime(2020, 7, 20, 10, 15, 30)

        decoded = codec.decode(codec.encode({"createdDate": value}, spec), spec)

        assert decoded["createdDate"] == value.replace(tzinfo=timezone.utc)

    def test_date_string_record_value(self, codec):
        """ISO strings in records are canonicalized."""
        spec = (SortKey(prop="createdDate", type=SortKeyType.DATE),)

        decoded = codec.decode(codec.encode({"createdDate": "2020-07-20T10:15:30.100Z"}, spec), spec)

        assert decoded["createdDate"] == datetime(2020, 7, 20, 10, 15, 30, 100000, tzinfo=timezone.utc)

    def test_two_keys_keep_spec_order(self, codec, date_id_spec):
        record = {"id": "whlg_007", "createdDate": datetime(2020, 1, 1, tzinfo=timezone.utc), "other": 1}

        decoded = codec.decode(codec.encode(record, date_id_spec), date_id_spec)

        assert list(decoded) == ["createdDate", "id"]
        assert decoded == {"createdDate": record["createdDate"], "id": "whlg_007"}

    def test_uuid_string_key(self, codec, date_id_spec):
        """UUID ids, as returned by asyncpg, encode as their string form."""
        record_id = uuid4()
        record = {"createdDate": datetime(2020, 1, 1, tzinfo=timezone.utc), "id": record_id}

        decoded = codec.decode(codec.encode(record, date_id_spec), date_id_spec)

        assert decoded["id"] == str(record_id)

    def test_object_records(self, codec):
        """Records may be plain objects."""
        class Row:
            id = "whlg_001"

        spec = (SortKey(prop="id", type=SortKeyType.STRING),)
        assert codec.decode(codec.encode(Row(), spec), spec) == {"id": "whlg_001"}

    def test_cursor_is_url_safe(self, codec, date_id_spec):
        record = {"id": "???>>>~~~", "createdDate": datetime(2020, 1, 1, tzinfo=timezone.utc)}
        cursor = codec.encode(record, date_id_spec)
        assert set(cursor) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")

    def test_module_helpers_use_settings(self, mock_settings, date_id_spec):
        record = {"id": "whlg_001", "createdDate": datetime(2020, 1, 1, tzinfo=timezone.utc)}
        mock_settings.cursor_secret = "s3cr3t"

        cursor = encode_cursor(record, date_id_spec)

        assert "." in cursor
        assert decode_cursor(cursor, date_id_spec)["id"] == "whlg_001"


class TestCursorDecodeErrors:
    """Malformed or mismatched cursors raise InvalidCursorError."""

    @pytest.mark.parametrize("cursor", ["", "%%%", "not base64!", "YQ", "@@@@"])
    def test_malformed_tokens(self, codec, date_id_spec, cursor):
        with pytest.raises(InvalidCursorError):
            codec.decode(cursor, date_id_spec)

    def test_not_an_object(self, codec, date_id_spec):
        with pytest.raises(InvalidCursorError):
            codec.decode(_raw_cursor(["2020-01-01", "x"]), date_id_spec)

    def test_missing_key(self, codec, date_id_spec):
        cursor = _raw_cursor({"createdDate": "2020-01-01T00:00:00+00:00"})
        with pytest.raises(InvalidCursorError) as exc_info:
            codec.decode(cursor, date_id_spec)
        assert "id" in exc_info.value.detail

    def test_cursor_for_another_spec(self, codec, date_id_spec):
        """A cursor built for other sort keys is rejected."""
        name_spec = (SortKey(prop="name", type=SortKeyType.STRING),)
        cursor = codec.encode({"name": "x"}, name_spec)
        with pytest.raises(InvalidCursorError):
            codec.decode(cursor, date_id_spec)

    @pytest.mark.parametrize("key_type,raw", [
        (SortKeyType.NUMBER, "twelve"),
        (SortKeyType.NUMBER, True),
        (SortKeyType.NUMBER, None),
        (SortKeyType.BOOLEAN, "true"),
        (SortKeyType.BOOLEAN, 1),
        (SortKeyType.DATE, "yesterday"),
        (SortKeyType.DATE, 1595240130),
        (SortKeyType.STRING, 12),
        (SortKeyType.STRING, None),
    ])
    def test_values_of_wrong_type(self, codec, key_type, raw):
        spec = (SortKey(prop="value", type=key_type),)
        with pytest.raises(InvalidCursorError):
            codec.decode(_raw_cursor({"value": raw}), spec)

    @pytest.mark.parametrize("raw", [float("nan"), float("inf"), float("-inf"), "NaN", "Infinity", "-inf"])
    def test_non_finite_numbers(self, codec, raw):
        spec = (SortKey(prop="amount", type=SortKeyType.NUMBER),)
        with pytest.raises(InvalidCursorError):
            codec.decode(_raw_cursor({"amount": raw}), spec)

    def test_decimal_string_number(self, codec):
        spec = (SortKey(prop="amount", type=SortKeyType.NUMBER),)
        assert codec.decode(_raw_cursor({"amount": "12.50"}), spec) == {"amount": Decimal("12.50")}

    def test_error_is_unprocessable(self, codec, date_id_spec):
        with pytest.raises(InvalidCursorError) as exc_info:
            codec.decode("%%%", date_id_spec)
        assert exc_info.value.status == 422
        assert exc_info.value.title == "Invalid Cursor"


class TestSignedCursors:
    """Cursors signed with a secret."""

    @pytest.fixture
    def signed_codec(self):
        return CursorCodec(secret="s3cr3t")

    @pytest.fixture
    def record(self):
        return {"id": "whlg_001", "createdDate": datetime(2020, 1, 1, tzinfo=timezone.utc)}

    def test_round_trip(self, signed_codec, record, date_id_spec):
        cursor = signed_codec.encode(record, date_id_spec)
        assert signed_codec.decode(cursor, date_id_spec)["id"] == "whlg_001"

    def test_unsigned_cursor_rejected(self, signed_codec, codec, record, date_id_spec):
        with pytest.raises(InvalidCursorError):
            signed_codec.decode(codec.encode(record, date_id_spec), date_id_spec)

    def test_tampered_payload_rejected(self, signed_codec, record, date_id_spec):
        cursor = signed_codec.encode(record, date_id_spec)
        _, signature = cursor.split(".")
        forged = _raw_cursor({"createdDate": "2030-01-01T00:00:00+00:00", "id": "whlg_001"})

        with pytest.raises(InvalidCursorError):
            signed_codec.decode(f"{forged}.{signature}", date_id_spec)

    def test_other_secret_rejected(self, signed_codec, record, date_id_spec):
        cursor = CursorCodec(secret="other").encode(record, date_id_spec)
        with pytest.raises(InvalidCursorError):
            signed_codec.decode(cursor, date_id_spec)

    def test_non_ascii_signature_rejected(self, signed_codec, record, date_id_spec):
        cursor = signed_codec.encode(record, date_id_spec)
        payload, _ = cursor.split(".")
        with pytest.raises(InvalidCursorError):
            signed_codec.decode(f"{payload}.é", date_id_spec)


class TestCursorEncodeErrors:
    """Records that do not fit the sort key spec are a contract violation."""

    def test_missing_property(self, codec, date_id_spec):
        with pytest.raises(ContractViolationError):
            codec.encode({"id": "whlg_001"}, date_id_spec)

    def test_null_value(self, codec, date_id_spec):
        with pytest.raises(ContractViolationError):
            codec.encode({"id": "whlg_001", "createdDate": None}, date_id_spec)

    @pytest.mark.parametrize("key_type,value", [
        (SortKeyType.NUMBER, "12"),
        (SortKeyType.NUMBER, True),
        (SortKeyType.NUMBER, float("nan")),
        (SortKeyType.NUMBER, float("inf")),
        (SortKeyType.NUMBER, Decimal("NaN")),
        (SortKeyType.BOOLEAN, 0),
        (SortKeyType.DATE, "not a date"),
        (SortKeyType.DATE, 12),
        (SortKeyType.STRING, 12),
    ])
    def test_mistyped_value(self, codec, key_type, value):
        with pytest.raises(ContractViolationError):
            codec.encode({"value": value}, (SortKey(prop="value", type=key_type),))


class TestNormalizeCursorValue:
    """Date normalization for equality checks."""

    def test_equal_instants_normalize_equal(self):
        utc = datetime(2020, 7, 20, 8, 0, tzinfo=timezone.utc)
        paris = datetime(2020, 7, 20, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        assert normalize_cursor_value(utc) == normalize_cursor_value(paris)

    def test_date_is_midnight_utc(self):
        assert normalize_cursor_value(date(2020, 7, 20)) == "2020-07-20T00:00:00.000000+00:00"

    def test_uuid_is_string(self):
        value = UUID("b780ecd0-52f4-4d6a-9a4e-4a1d3c1f2e10")
        assert normalize_cursor_value(value) == "b780ecd0-52f4-4d6a-9a4e-4a1d3c1f2e10"

    def test_other_values_untouched(self):
        assert normalize_cursor_value("abc") == "abc"
        assert normalize_cursor_value(3) == 3
