"""Tests for container and other undecoded types."""

import pytest

from typed_chunks.chunks import decode_chunk
from typed_chunks.composite import decode_composite
from typed_chunks.errors import UnsupportedTypeError
from typed_chunks.types import LogicalType, StructMember, TypeTag

UNSUPPORTED = [
    TypeTag.LIST,
    TypeTag.STRUCT,
    TypeTag.MAP,
    TypeTag.ARRAY,
    TypeTag.UNION,
    TypeTag.ENUM,
    TypeTag.ANY,
    TypeTag.VARINT,
]


class TestCompositeStub:
    """Tests for decode_composite."""

    @pytest.mark.parametrize("tag", UNSUPPORTED)
    def test_raises_with_type_name(self, tag):
        """Every container/enum/any/varint tag fails naming the type."""
        with pytest.raises(UnsupportedTypeError) as exc_info:
            decode_composite(LogicalType(tag))
        assert exc_info.value.type_name == tag.type_name
        assert tag.type_name in str(exc_info.value)

    def test_message_includes_full_type(self):
        """The message spells out child types to help diagnose schemas."""
        struct_type = LogicalType(
            TypeTag.STRUCT,
            children=(StructMember("a", LogicalType(TypeTag.INTEGER)),),
        )
        with pytest.raises(UnsupportedTypeError, match=r"STRUCT\(a INTEGER\)"):
            decode_composite(struct_type)

    def test_is_type_error(self):
        """UnsupportedTypeError can be caught as TypeError or ValueError."""
        with pytest.raises(TypeError):
            decode_composite(LogicalType(TypeTag.LIST))
        with pytest.raises(ValueError):
            decode_composite(LogicalType(TypeTag.MAP))


class TestUnsupportedColumns:
    """Tests for unsupported columns inside a chunk."""

    @pytest.mark.parametrize("tag", UNSUPPORTED)
    def test_column_raises_with_location(self, builder, tag):
        """Decoding a valid cell of an unsupported column raises with row and column."""
        chunk = builder.chunk(
            [
                (LogicalType(TypeTag.INTEGER), [1, 2]),
                (LogicalType(tag), [object(), object()]),
            ]
        )
        with pytest.raises(UnsupportedTypeError) as exc_info:
            decode_chunk(chunk, builder.arena)
        assert exc_info.value.type_name == tag.type_name
        assert exc_info.value.row == 0
        assert exc_info.value.column == 1

    def test_null_cells_do_not_decode(self, builder):
        """A null cell of an unsupported column is never decoded."""
        chunk = builder.chunk([(LogicalType(TypeTag.LIST), [None, None])])
        assert decode_chunk(chunk, builder.arena) == [(None,), (None,)]

    def test_invalid_type_raises(self, builder):
        """The INVALID tag is never silently decoded."""
        chunk = builder.chunk([(LogicalType(TypeTag.INVALID), [object()])])
        with pytest.raises(UnsupportedTypeError):
            decode_chunk(chunk, builder.arena)
