"""Date, time, timestamp, interval and TIME WITH TIME ZONE decoding."""

from __future__ import annotations

import struct

from typed_chunks.memory import INT32, INT64, UINT64, BufferView
from typed_chunks.types import TimestampUnit
from typed_chunks.values import Date, Interval, Time, Timestamp, TimeTz

# months:int32, days:int32, micros:int64
INTERVAL = struct.Struct("=iiq")

# TIME WITH TIME ZONE packs micros into the low 40 bits and an inverted
# offset into the high 24 bits
TIME_TZ_OFFSET_BITS = 24
TIME_TZ_MICROS_BITS = 40
TIME_TZ_MICROS_MASK = (1 << TIME_TZ_MICROS_BITS) - 1
TIME_TZ_MAX_OFFSET = 16 * 60 * 60 - 1  # 15:59:59


def decode_date(view: BufferView, row: int) -> Date:
    return Date(view.read(INT32, row * INT32.size))


def decode_time(view: BufferView, row: int) -> Time:
    return Time(view.read(INT64, row * INT64.size))


def decode_timestamp(view: BufferView, row: int, unit: TimestampUnit, utc: bool = False) -> Timestamp:
    return Timestamp(view.read(INT64, row * INT64.size), unit, utc)


def decode_interval(view: BufferView, row: int) -> Interval:
    months, days, micros = view.unpack(INTERVAL, row * INTERVAL.size)
    return Interval(months=months, days=days, micros=micros)


def unpack_time_tz(bits: int) -> TimeTz:
    """Split a packed TIME WITH TIME ZONE value into micros and UTC offset."""
    encoded_offset = bits >> TIME_TZ_MICROS_BITS
    micros = bits & TIME_TZ_MICROS_MASK
    return TimeTz(micros=micros, offset=TIME_TZ_MAX_OFFSET - encoded_offset)


def decode_time_tz(view: BufferView, row: int) -> TimeTz:
    return unpack_time_tz(view.read(UINT64, row * UINT64.size))
