"""Per-column decode dispatch.

Every ``TypeTag`` maps to exactly one decoder in ``DECODERS``, including the
tags that only fail. The table is checked for completeness at import time, so
adding a tag without deciding how to decode it is an error.
"""

from __future__ import annotations

from typing import Any, Callable

from typed_chunks.composite import decode_composite
from typed_chunks.errors import CorruptValueError, OutOfRangeIndexError, UnsupportedTypeError
from typed_chunks.memory import AddressSpace, BufferView
from typed_chunks.numeric import decode_decimal, decode_hugeint, decode_uhugeint, decode_uuid
from typed_chunks.scalars import SCALAR_FORMATS, decode_scalar
from typed_chunks.strings import decode_bit, decode_blob, decode_varchar
from typed_chunks.temporal import (
    decode_date,
    decode_interval,
    decode_time,
    decode_time_tz,
    decode_timestamp,
)
from typed_chunks.types import COMPOSITE_TAGS, TIMESTAMP_UNITS, LogicalType, TypeTag
from typed_chunks.validity import ValidityMask


class ColumnReader:
    """Decodes the cells of one vector of a fetched chunk.

    Built once per vector; the views it holds are released together with the
    chunk and must not be used afterwards.
    """

    def __init__(
        self,
        logical_type: LogicalType,
        data: BufferView | None,
        validity: ValidityMask,
        memory: AddressSpace,
        row_count: int,
    ) -> None:
        self.logical_type = logical_type
        self.data = data
        self.validity = validity
        self.memory = memory
        self.row_count = row_count
        self._decode = DECODERS[logical_type.tag]

    @classmethod
    def open(
        cls,
        memory: AddressSpace,
        logical_type: LogicalType,
        data_address: int | None,
        validity_address: int | None,
        row_count: int,
    ) -> ColumnReader:
        """Build views over a vector's data and validity buffers."""
        data = None
        if logical_type.tag not in COMPOSITE_TAGS and data_address and row_count:
            width = logical_type.storage_size
            if width is not None:
                data = BufferView.at(memory, data_address, width * row_count)
        validity = ValidityMask.at(memory, validity_address, row_count)
        return cls(logical_type, data, validity, memory, row_count)

    def read(self, row: int) -> Any:
        """Decode ``row``; None for null cells."""
        if row < 0 or row >= self.row_count:
            raise OutOfRangeIndexError(row, self.row_count)
        if not self.validity.is_valid(row):
            return None
        return self._decode(self, row)

    def view(self) -> BufferView:
        if self.data is None:
            raise CorruptValueError(f"Missing data buffer for {self.logical_type} column")
        return self.data

    def release(self) -> None:
        if self.data is not None:
            self.data.release()
        self.validity.release()


def _scalar(column: ColumnReader, row: int) -> Any:
    return decode_scalar(column.logical_type.tag, column.view(), row)


def _decimal(column: ColumnReader, row: int) -> Any:
    lt = column.logical_type
    return decode_decimal(column.view(), row, lt.width, lt.scale)


def _hugeint(column: ColumnReader, row: int) -> Any:
    return decode_hugeint(column.view(), row)


def _uhugeint(column: ColumnReader, row: int) -> Any:
    return decode_uhugeint(column.view(), row)


def _uuid(column: ColumnReader, row: int) -> Any:
    return decode_uuid(column.view(), row)


def _date(column: ColumnReader, row: int) -> Any:
    return decode_date(column.view(), row)


def _time(column: ColumnReader, row: int) -> Any:
    return decode_time(column.view(), row)


def _timestamp(column: ColumnReader, row: int) -> Any:
    tag = column.logical_type.tag
    return decode_timestamp(column.view(), row, TIMESTAMP_UNITS[tag], utc=tag == TypeTag.TIMESTAMP_TZ)


def _interval(column: ColumnReader, row: int) -> Any:
    return decode_interval(column.view(), row)


def _time_tz(column: ColumnReader, row: int) -> Any:
    return decode_time_tz(column.view(), row)


def _varchar(column: ColumnReader, row: int) -> Any:
    return decode_varchar(column.view(), row, column.memory)


def _blob(column: ColumnReader, row: int) -> Any:
    return decode_blob(column.view(), row, column.memory)


def _bit(column: ColumnReader, row: int) -> Any:
    return decode_bit(column.view(), row, column.memory)


def _null(column: ColumnReader, row: int) -> Any:
    return None


def _composite(column: ColumnReader, row: int) -> Any:
    decode_composite(column.logical_type)


def _invalid(column: ColumnReader, row: int) -> Any:
    raise UnsupportedTypeError(column.logical_type.type_name)


DECODERS: dict[TypeTag, Callable[[ColumnReader, int], Any]] = {
    **{tag: _scalar for tag in SCALAR_FORMATS},
    TypeTag.DECIMAL: _decimal,
    TypeTag.HUGEINT: _hugeint,
    TypeTag.UHUGEINT: _uhugeint,
    TypeTag.UUID: _uuid,
    TypeTag.DATE: _date,
    TypeTag.TIME: _time,
    TypeTag.TIMESTAMP: _timestamp,
    TypeTag.TIMESTAMP_S: _timestamp,
    TypeTag.TIMESTAMP_MS: _timestamp,
    TypeTag.TIMESTAMP_NS: _timestamp,
    TypeTag.TIMESTAMP_TZ: _timestamp,
    TypeTag.INTERVAL: _interval,
    TypeTag.TIME_TZ: _time_tz,
    TypeTag.VARCHAR: _varchar,
    TypeTag.BLOB: _blob,
    TypeTag.BIT: _bit,
    TypeTag.SQLNULL: _null,
    TypeTag.INVALID: _invalid,
    **{tag: _composite for tag in COMPOSITE_TAGS},
}

_missing = set(TypeTag) - DECODERS.keys()
if _missing:
    raise RuntimeError(f"No decoder registered for: {sorted(t.name for t in _missing)}")


def decode_value(
    logical_type: LogicalType, view: BufferView, row: int, memory: AddressSpace
) -> Any:
    """Decode a single non-null cell of a vector without a validity mask."""
    column = ColumnReader(logical_type, view, ValidityMask(None), memory, row + 1)
    return DECODERS[logical_type.tag](column, row)
