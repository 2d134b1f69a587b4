"""Tests against the real engine library; skipped when it cannot be loaded."""

import datetime
import decimal
import uuid

import pytest

from typed_chunks.config import EngineConfig
from typed_chunks.errors import EngineError, UnsupportedTypeError
from typed_chunks.native import NativeEngine
from typed_chunks.types import LogicalType, TimestampUnit, TypeTag
from typed_chunks.values import Interval, Timestamp


@pytest.fixture(scope="module")
def engine():
    try:
        return NativeEngine(EngineConfig.from_env())
    except EngineError as e:
        pytest.skip(str(e))


@pytest.fixture
def conn(engine):
    with engine.open() as db, db.connect() as conn:
        yield conn


def fetch_all(conn, sql):
    with conn.query(sql) as result:
        return result.column_names(), list(result.rows())


class TestNativeEngine:
    """Tests for the ctypes binding."""

    def test_version(self, engine):
        assert engine.library_version()
        assert engine.vector_size() > 0

    def test_scalars_and_nulls(self, conn):
        names, rows = fetch_all(
            conn,
            "SELECT * FROM (VALUES (true, 1::INTEGER, 'a long string value here'), "
            "(NULL, NULL, 'short'), (false, -7::INTEGER, NULL)) t(flag, n, s)",
        )
        assert names == ["flag", "n", "s"]
        assert rows == [
            (True, 1, "a long string value here"),
            (None, None, "short"),
            (False, -7, None),
        ]

    def test_rows_across_chunks(self, conn, engine):
        """Every row of a multi-chunk result arrives exactly once, in order."""
        with conn.query("SELECT range::INTEGER FROM range(10005)") as result:
            producer = result.rows()
            values = [row[0] for row in producer]
        assert values == list(range(10005))
        assert producer.chunks_fetched >= -(-10005 // engine.vector_size())

    def test_decimal_and_hugeint(self, conn):
        _, rows = fetch_all(
            conn,
            "SELECT 3.14::DECIMAL(9,2), -1::HUGEINT, 12345678901234567890.123::DECIMAL(38,3)",
        )
        (small, huge, wide) = rows[0]
        assert small.to_decimal() == decimal.Decimal("3.14")
        assert huge.value == -1
        assert wide.to_decimal() == decimal.Decimal("12345678901234567890.123")

    def test_temporal(self, conn):
        _, rows = fetch_all(
            conn,
            "SELECT DATE '1970-01-02', TIMESTAMP_MS '1970-01-01 00:00:01', "
            "INTERVAL '2 months 5 days 1 hour', 'infinity'::DATE",
        )
        (date, ts, interval, infinite) = rows[0]
        assert date.to_date() == datetime.date(1970, 1, 2)
        assert ts == Timestamp(1_000, TimestampUnit.MILLISECONDS)
        assert interval == Interval(2, 5, 3_600_000_000)
        assert not infinite.is_finite

    def test_uuid(self, conn):
        value = "550e8400-e29b-41d4-a716-446655440000"
        _, rows = fetch_all(conn, f"SELECT '{value}'::UUID")
        assert rows == [(uuid.UUID(value),)]

    def test_list_column_unsupported(self, conn):
        with conn.query("SELECT [1, 2, 3] AS xs") as result:
            with pytest.raises(UnsupportedTypeError) as exc_info:
                list(result.rows())
        assert exc_info.value.column == 0

    def test_query_error(self, conn):
        with pytest.raises(EngineError):
            conn.query("SELECT * FROM no_such_table")

    def test_column_types(self, conn):
        """The result reports each column's type before any chunk is fetched."""
        with conn.query("SELECT 1::INTEGER AS a, 3.14::DECIMAL(9,2) AS b, 'x' AS c") as result:
            assert result.column_types() == [
                LogicalType(TypeTag.INTEGER),
                LogicalType.decimal(9, 2),
                LogicalType(TypeTag.VARCHAR),
            ]
            assert list(result.rows())[0][2] == "x"
