"""Typed Chunks - Decode columnar native result chunks into typed Python rows."""

from typed_chunks.arena import ArenaChunk, ArenaResult, ArenaVector
from typed_chunks.chunks import (
    DataChunkHandle,
    ResultHandle,
    RowProducer,
    Vector,
    VectorHandle,
    decode_chunk,
    rows,
)
from typed_chunks.config import EngineConfig
from typed_chunks.dispatch import ColumnReader, decode_value
from typed_chunks.errors import (
    CorruptValueError,
    DecodeError,
    EngineError,
    InvalidDecimalWidthError,
    OutOfRangeIndexError,
    UnsupportedTypeError,
)
from typed_chunks.memory import Arena, BufferView, NativeMemory
from typed_chunks.parsing import TypeParser, parse_type
from typed_chunks.types import LogicalType, StructMember, TimestampUnit, TypeTag
from typed_chunks.validity import ValidityMask
from typed_chunks.values import (
    Date,
    Decimal,
    Hugeint,
    Interval,
    Time,
    Timestamp,
    TimeTz,
    Uhugeint,
)

__all__ = [
    # Main API
    "RowProducer",
    "rows",
    "decode_chunk",
    "decode_value",
    "ColumnReader",
    "EngineConfig",
    "TypeParser",
    "parse_type",
    # Collaborator handles
    "ResultHandle",
    "DataChunkHandle",
    "VectorHandle",
    "Vector",
    "ArenaResult",
    "ArenaChunk",
    "ArenaVector",
    # Memory
    "Arena",
    "BufferView",
    "NativeMemory",
    "ValidityMask",
    # Types
    "TypeTag",
    "LogicalType",
    "StructMember",
    "TimestampUnit",
    # Values
    "Decimal",
    "Hugeint",
    "Uhugeint",
    "Date",
    "Time",
    "Timestamp",
    "Interval",
    "TimeTz",
    # Errors
    "DecodeError",
    "UnsupportedTypeError",
    "InvalidDecimalWidthError",
    "OutOfRangeIndexError",
    "CorruptValueError",
    "EngineError",
]

__version__ = "0.1.0"
