"""Fixed-width primitive decoding."""

from __future__ import annotations

import struct

from typed_chunks.errors import UnsupportedTypeError
from typed_chunks.memory import (
    BOOL,
    FLOAT32,
    FLOAT64,
    INT8,
    INT16,
    INT32,
    INT64,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    BufferView,
)
from typed_chunks.types import TypeTag

SCALAR_FORMATS: dict[TypeTag, struct.Struct] = {
    TypeTag.BOOLEAN: BOOL,
    TypeTag.TINYINT: INT8,
    TypeTag.SMALLINT: INT16,
    TypeTag.INTEGER: INT32,
    TypeTag.BIGINT: INT64,
    TypeTag.UTINYINT: UINT8,
    TypeTag.USMALLINT: UINT16,
    TypeTag.UINTEGER: UINT32,
    TypeTag.UBIGINT: UINT64,
    TypeTag.FLOAT: FLOAT32,
    TypeTag.DOUBLE: FLOAT64,
}


def decode_scalar(tag: TypeTag, view: BufferView, row: int) -> bool | int | float:
    """Decode the value of ``row`` in a vector of fixed-width primitives."""
    fmt = SCALAR_FORMATS.get(tag)
    if fmt is None:
        raise UnsupportedTypeError(tag.type_name)
    return view.read(fmt, row * fmt.size)
