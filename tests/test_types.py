"""Tests for type tags and logical type descriptors."""

import pytest

from typed_chunks.errors import InvalidDecimalWidthError
from typed_chunks.types import (
    COMPOSITE_TAGS,
    TIMESTAMP_UNITS,
    LogicalType,
    StructMember,
    TimestampUnit,
    TypeTag,
)


class TestTypeTag:
    """Tests for TypeTag."""

    def test_abi_ids(self):
        """Tags keep the engine's numbering."""
        assert TypeTag.BOOLEAN.value == 1
        assert TypeTag.VARCHAR.value == 17
        assert TypeTag.DECIMAL.value == 19
        assert TypeTag.TIME_TZ.value == 30
        assert TypeTag.SQLNULL.value == 36

    def test_from_id(self):
        """Ids map back to tags, unknown ids are rejected."""
        assert TypeTag.from_id(4) is TypeTag.INTEGER
        with pytest.raises(ValueError, match="Unknown native type id: 99"):
            TypeTag.from_id(99)

    @pytest.mark.parametrize(
        "tag, size",
        [
            (TypeTag.BOOLEAN, 1),
            (TypeTag.SMALLINT, 2),
            (TypeTag.FLOAT, 4),
            (TypeTag.DATE, 4),
            (TypeTag.TIME, 8),
            (TypeTag.TIMESTAMP_NS, 8),
            (TypeTag.INTERVAL, 16),
            (TypeTag.UUID, 16),
            (TypeTag.VARCHAR, 16),
        ],
    )
    def test_fixed_sizes(self, tag, size):
        """Fixed-width tags report their per-row storage size."""
        assert tag.size_bytes == size

    def test_no_fixed_size(self):
        """DECIMAL and container tags have no intrinsic width."""
        assert TypeTag.DECIMAL.size_bytes is None
        assert TypeTag.LIST.size_bytes is None

    def test_type_names(self):
        """Type names use the SQL spelling."""
        assert TypeTag.TIMESTAMP_TZ.type_name == "TIMESTAMP WITH TIME ZONE"
        assert TypeTag.TIME_TZ.type_name == "TIME WITH TIME ZONE"
        assert TypeTag.SQLNULL.type_name == "NULL"
        assert TypeTag.BIGINT.type_name == "BIGINT"

    def test_composite_tags(self):
        """Containers, enums, ANY and VARINT are flagged composite."""
        assert all(tag.is_composite for tag in COMPOSITE_TAGS)
        assert not TypeTag.VARCHAR.is_composite
        assert not TypeTag.DECIMAL.is_composite


class TestTimestampUnits:
    """Tests for timestamp unit selection."""

    def test_tag_units(self):
        """Each timestamp tag counts in its own unit; TZ counts microseconds."""
        assert TIMESTAMP_UNITS[TypeTag.TIMESTAMP_S] is TimestampUnit.SECONDS
        assert TIMESTAMP_UNITS[TypeTag.TIMESTAMP_MS] is TimestampUnit.MILLISECONDS
        assert TIMESTAMP_UNITS[TypeTag.TIMESTAMP] is TimestampUnit.MICROSECONDS
        assert TIMESTAMP_UNITS[TypeTag.TIMESTAMP_TZ] is TimestampUnit.MICROSECONDS
        assert TIMESTAMP_UNITS[TypeTag.TIMESTAMP_NS] is TimestampUnit.NANOSECONDS

    def test_per_second(self):
        assert TimestampUnit.MILLISECONDS.per_second == 1_000
        assert TimestampUnit.NANOSECONDS.per_second == 1_000_000_000


class TestLogicalType:
    """Tests for LogicalType."""

    def test_decimal_storage(self):
        """DECIMAL storage follows its declared width."""
        assert LogicalType.decimal(4, 1).storage_size == 2
        assert LogicalType.decimal(18, 3).storage_size == 8

    def test_decimal_without_width(self):
        """A DECIMAL without a width has no valid storage."""
        with pytest.raises(InvalidDecimalWidthError):
            LogicalType(TypeTag.DECIMAL).storage_size

    def test_str(self):
        """Descriptors render as SQL type strings."""
        integer = LogicalType(TypeTag.INTEGER)
        assert str(LogicalType.decimal(9, 2)) == "DECIMAL(9,2)"
        assert str(LogicalType.list_of(integer)) == "INTEGER[]"
        assert (
            str(LogicalType(TypeTag.ARRAY, children=(StructMember("child", integer),), array_size=3))
            == "INTEGER[3]"
        )
        assert (
            str(
                LogicalType(
                    TypeTag.MAP,
                    children=(
                        StructMember("key", LogicalType(TypeTag.VARCHAR)),
                        StructMember("value", integer),
                    ),
                )
            )
            == "MAP(VARCHAR, INTEGER)"
        )
        assert (
            str(LogicalType(TypeTag.STRUCT, children=(StructMember("a", integer),)))
            == "STRUCT(a INTEGER)"
        )

    def test_equality(self):
        """Descriptors compare by value."""
        assert LogicalType.decimal(9, 2) == LogicalType(TypeTag.DECIMAL, width=9, scale=2)
        assert LogicalType.decimal(9, 2) != LogicalType.decimal(9, 3)
