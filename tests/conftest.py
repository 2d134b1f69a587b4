"""Fixtures that lay out Python values in the engine's native chunk format."""

from __future__ import annotations

import struct
import uuid
from typing import Any

import pytest

from typed_chunks.arena import ArenaChunk, ArenaResult, ArenaVector
from typed_chunks.memory import Arena
from typed_chunks.types import LogicalType, TypeTag

MASK64 = (1 << 64) - 1

FIXED_FORMATS = {
    TypeTag.BOOLEAN: "=?",
    TypeTag.TINYINT: "=b",
    TypeTag.SMALLINT: "=h",
    TypeTag.INTEGER: "=i",
    TypeTag.BIGINT: "=q",
    TypeTag.UTINYINT: "=B",
    TypeTag.USMALLINT: "=H",
    TypeTag.UINTEGER: "=I",
    TypeTag.UBIGINT: "=Q",
    TypeTag.FLOAT: "=f",
    TypeTag.DOUBLE: "=d",
    TypeTag.DATE: "=i",
    TypeTag.TIME: "=q",
    TypeTag.TIMESTAMP: "=q",
    TypeTag.TIMESTAMP_S: "=q",
    TypeTag.TIMESTAMP_MS: "=q",
    TypeTag.TIMESTAMP_NS: "=q",
    TypeTag.TIMESTAMP_TZ: "=q",
}

STRING_TAGS = (TypeTag.VARCHAR, TypeTag.BLOB, TypeTag.BIT)


def decimal_format(width: int) -> str:
    if width <= 4:
        return "=h"
    if width <= 9:
        return "=i"
    if width <= 18:
        return "=q"
    return "=Qq"


def validity_words(values: list[Any]) -> bytes:
    words = [0] * ((len(values) + 63) // 64)
    for i, value in enumerate(values):
        if value is not None:
            words[i // 64] |= 1 << (i % 64)
    return b"".join(struct.pack("=Q", w) for w in words)


class ChunkBuilder:
    """Encodes column values into arena buffers and wraps them as chunks."""

    def __init__(self, arena: Arena) -> None:
        self.arena = arena
        self._owned: list[int] = []

    def _allocate(self, data: bytes) -> int:
        address = self.arena.allocate(data)
        self._owned.append(address)
        return address

    def string_view(self, payload: bytes) -> bytes:
        if len(payload) <= 12:
            return struct.pack("=i", len(payload)) + payload.ljust(12, b"\x00")
        address = self._allocate(payload)
        return struct.pack("=i4sQ", len(payload), payload[:4], address)

    def encode(self, logical_type: LogicalType, value: Any) -> bytes:
        tag = logical_type.tag
        if tag in FIXED_FORMATS:
            fmt = FIXED_FORMATS[tag]
            return struct.pack(fmt, value if value is not None else 0)
        if tag == TypeTag.DECIMAL:
            fmt = decimal_format(logical_type.width)
            mantissa = value or 0
            if fmt == "=Qq":
                return struct.pack(fmt, mantissa & MASK64, mantissa >> 64)
            return struct.pack(fmt, mantissa)
        if tag == TypeTag.HUGEINT:
            value = value or 0
            return struct.pack("=Qq", value & MASK64, value >> 64)
        if tag == TypeTag.UHUGEINT:
            value = value or 0
            return struct.pack("=QQ", value & MASK64, value >> 64)
        if tag == TypeTag.UUID:
            bits = value.int if value is not None else 0
            return struct.pack("=QQ", bits & MASK64, (bits >> 64) ^ (1 << 63))
        if tag == TypeTag.INTERVAL:
            months, days, micros = value or (0, 0, 0)
            return struct.pack("=iiq", months, days, micros)
        if tag == TypeTag.TIME_TZ:
            micros, offset = value or (0, 0)
            return struct.pack("=Q", ((57599 - offset) << 40) | micros)
        if tag in STRING_TAGS:
            if value is None:
                return b"\x00" * 16
            payload = value.encode("utf-8") if isinstance(value, str) else bytes(value)
            return self.string_view(payload)
        raise TypeError(f"No encoding for {logical_type}")

    def vector(self, logical_type: LogicalType, values: list[Any], with_validity: bool | None = None) -> ArenaVector:
        """Lay out one column; a validity mask is written when any value is None."""
        if logical_type.tag.is_composite or logical_type.tag in (TypeTag.INVALID, TypeTag.SQLNULL):
            data = self._allocate(b"\x00" * 16 * max(len(values), 1))
        else:
            data = self._allocate(b"".join(self.encode(logical_type, v) for v in values) or b"\x00")
        if with_validity is None:
            with_validity = any(v is None for v in values)
        validity = self._allocate(validity_words(values)) if with_validity and values else None
        return ArenaVector(logical_type, data, validity)

    def chunk(self, columns: list[tuple[LogicalType, list[Any]]]) -> ArenaChunk:
        """Build a chunk from (type, values) columns of equal length."""
        row_count = len(columns[0][1]) if columns else 0
        vectors = [self.vector(lt, values) for lt, values in columns]
        owned, self._owned = self._owned, []
        return ArenaChunk(self.arena, vectors, row_count, owned)

    def result(
        self,
        columns: list[tuple[LogicalType, list[Any]]],
        chunk_size: int = 2048,
        names: list[str] | None = None,
    ) -> ArenaResult:
        """Split columns into chunks of at most ``chunk_size`` rows."""
        total = len(columns[0][1]) if columns else 0
        chunks = []
        for start in range(0, total, chunk_size):
            chunks.append(
                self.chunk([(lt, values[start : start + chunk_size]) for lt, values in columns])
            )
        return ArenaResult(chunks, names, [lt for lt, _ in columns])


@pytest.fixture
def arena() -> Arena:
    return Arena()


@pytest.fixture
def builder(arena: Arena) -> ChunkBuilder:
    return ChunkBuilder(arena)
