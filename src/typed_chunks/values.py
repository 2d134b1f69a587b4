"""Runtime representations of decoded cell values.

Booleans, integers up to 64 bits, floats, strings and blobs decode to the
built-in Python types. Everything whose native encoding carries more than a
plain number is represented by one of the frozen dataclasses below, which
keep the encoded parts intact and offer conversions to standard library
types.
"""

from __future__ import annotations

import datetime
import decimal
from dataclasses import dataclass

from typed_chunks.types import TimestampUnit

EPOCH_DATE = datetime.date(1970, 1, 1)
EPOCH = datetime.datetime(1970, 1, 1)

# Sentinels the engine stores for +/- infinity
DATE_INFINITY = 2**31 - 1
DATE_NEGATIVE_INFINITY = -(2**31 - 1)
TIMESTAMP_INFINITY = 2**63 - 1
TIMESTAMP_NEGATIVE_INFINITY = -(2**63 - 1)

MICROS_PER_SECOND = 1_000_000
MICROS_PER_DAY = 86_400 * MICROS_PER_SECOND


@dataclass(frozen=True)
class Decimal:
    """A fixed-point value: ``mantissa / 10**scale``."""

    mantissa: int
    width: int
    scale: int

    def to_decimal(self) -> decimal.Decimal:
        # Built from a tuple so 38-digit mantissas are not rounded by the context
        digits = tuple(int(c) for c in str(abs(self.mantissa)))
        return decimal.Decimal((int(self.mantissa < 0), digits, -self.scale))

    def to_float(self) -> float:
        return self.mantissa / 10**self.scale

    def split(self) -> tuple[int, int]:
        """Return (integer part, fractional part), both truncated toward zero.

        For -3.14 at scale 2 this is (-3, -14).
        """
        whole, frac = divmod(abs(self.mantissa), 10**self.scale)
        if self.mantissa < 0:
            return -whole, -frac
        return whole, frac

    def __str__(self) -> str:
        return str(self.to_decimal())


@dataclass(frozen=True)
class Hugeint:
    """A signed 128-bit integer as its two 64-bit halves."""

    lower: int
    upper: int

    @property
    def value(self) -> int:
        return (self.upper << 64) | self.lower

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Uhugeint:
    """An unsigned 128-bit integer as its two 64-bit halves."""

    lower: int
    upper: int

    @property
    def value(self) -> int:
        return (self.upper << 64) | self.lower

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Date:
    """Days since 1970-01-01."""

    days: int

    @property
    def is_finite(self) -> bool:
        return self.days not in (DATE_INFINITY, DATE_NEGATIVE_INFINITY)

    def to_date(self) -> datetime.date:
        """Convert to a calendar date; raises ValueError outside year 1..9999."""
        if not self.is_finite:
            raise ValueError("Infinite date has no calendar representation")
        try:
            return EPOCH_DATE + datetime.timedelta(days=self.days)
        except OverflowError as e:
            raise ValueError(f"Date out of range: {self.days} days") from e

    def __str__(self) -> str:
        if self.days == DATE_INFINITY:
            return "infinity"
        if self.days == DATE_NEGATIVE_INFINITY:
            return "-infinity"
        return self.to_date().isoformat()


@dataclass(frozen=True)
class Time:
    """Microseconds since 00:00:00."""

    micros: int

    def to_time(self) -> datetime.time:
        # 24:00:00 is storable but has no datetime.time equivalent
        micros = self.micros % MICROS_PER_DAY
        seconds, micro = divmod(micros, MICROS_PER_SECOND)
        minutes, second = divmod(seconds, 60)
        hour, minute = divmod(minutes, 60)
        return datetime.time(hour, minute, second, micro)

    def __str__(self) -> str:
        return self.to_time().isoformat()


@dataclass(frozen=True)
class Timestamp:
    """An offset from the epoch counted in ``unit``.

    The unit is that of the column's declared type; it is never normalized.
    ``utc`` marks values from TIMESTAMP WITH TIME ZONE columns.
    """

    value: int
    unit: TimestampUnit
    utc: bool = False

    @property
    def is_finite(self) -> bool:
        return self.value not in (TIMESTAMP_INFINITY, TIMESTAMP_NEGATIVE_INFINITY)

    def to_datetime(self) -> datetime.datetime:
        """Convert to a datetime; nanoseconds are truncated to microseconds."""
        if not self.is_finite:
            raise ValueError("Infinite timestamp has no calendar representation")
        per_second = self.unit.per_second
        if per_second >= MICROS_PER_SECOND:
            micros = self.value // (per_second // MICROS_PER_SECOND)
        else:
            micros = self.value * (MICROS_PER_SECOND // per_second)
        try:
            result = EPOCH + datetime.timedelta(microseconds=micros)
        except OverflowError as e:
            raise ValueError(f"Timestamp out of range: {self.value}{self.unit.value}") from e
        if self.utc:
            result = result.replace(tzinfo=datetime.timezone.utc)
        return result

    def __str__(self) -> str:
        if not self.is_finite:
            return "infinity" if self.value > 0 else "-infinity"
        return self.to_datetime().isoformat(sep=" ")


@dataclass(frozen=True)
class Interval:
    """A calendar interval: months, days and microseconds are kept separate."""

    months: int
    days: int
    micros: int

    def to_timedelta(self) -> datetime.timedelta:
        """Convert to a timedelta; months have no fixed length and must be zero."""
        if self.months:
            raise ValueError("Interval with months cannot be converted to a timedelta")
        return datetime.timedelta(days=self.days, microseconds=self.micros)

    def __str__(self) -> str:
        return f"{self.months} months {self.days} days {self.micros} micros"


@dataclass(frozen=True)
class TimeTz:
    """Microseconds since midnight plus a UTC offset in seconds."""

    micros: int
    offset: int

    def to_time(self) -> datetime.time:
        tz = datetime.timezone(datetime.timedelta(seconds=self.offset))
        return Time(self.micros).to_time().replace(tzinfo=tz)

    def __str__(self) -> str:
        return self.to_time().isoformat()
