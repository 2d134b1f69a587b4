"""DECIMAL, HUGEINT, UHUGEINT and UUID decoding."""

from __future__ import annotations

import struct
import uuid

from typed_chunks.errors import InvalidDecimalWidthError
from typed_chunks.memory import HUGEINT, INT16, INT32, INT64, UHUGEINT, BufferView
from typed_chunks.types import MAX_DECIMAL_WIDTH
from typed_chunks.values import Decimal, Hugeint, Uhugeint

# (largest width, storage format) pairs, narrowest first
DECIMAL_STORAGE: list[tuple[int, struct.Struct]] = [
    (4, INT16),
    (9, INT32),
    (18, INT64),
    (MAX_DECIMAL_WIDTH, HUGEINT),
]

UUID_SIGN_FLIP = 1 << 63


def decimal_storage(width: int | None) -> struct.Struct:
    """Return the storage format for a DECIMAL of the given declared width."""
    if width is None or width < 1 or width > MAX_DECIMAL_WIDTH:
        raise InvalidDecimalWidthError(width)
    for max_width, fmt in DECIMAL_STORAGE:
        if width <= max_width:
            return fmt
    raise InvalidDecimalWidthError(width)


def decode_decimal(view: BufferView, row: int, width: int | None, scale: int | None) -> Decimal:
    """Decode a DECIMAL(width, scale) cell, keeping mantissa and scale."""
    fmt = decimal_storage(width)
    parts = view.unpack(fmt, row * fmt.size)
    if fmt is HUGEINT:
        low, high = parts
        mantissa = (high << 64) | low
    else:
        mantissa = parts[0]
    return Decimal(mantissa=mantissa, width=width, scale=scale or 0)  # type: ignore[arg-type]


def decode_hugeint(view: BufferView, row: int) -> Hugeint:
    lower, upper = view.unpack(HUGEINT, row * HUGEINT.size)
    return Hugeint(lower=lower, upper=upper)


def decode_uhugeint(view: BufferView, row: int) -> Uhugeint:
    lower, upper = view.unpack(UHUGEINT, row * UHUGEINT.size)
    return Uhugeint(lower=lower, upper=upper)


def decode_uuid(view: BufferView, row: int) -> uuid.UUID:
    """Decode a UUID, stored as a hugeint with the top bit flipped for ordering."""
    lower, upper = view.unpack(UHUGEINT, row * UHUGEINT.size)
    return uuid.UUID(int=((upper ^ UUID_SIGN_FLIP) << 64) | lower)
