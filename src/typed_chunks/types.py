"""Type descriptors for columns of a native result chunk."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TypeTag(Enum):
    """Native column type ids.

    The values are the engine's ABI type ids and must not be renumbered.
    """

    INVALID = 0
    BOOLEAN = 1
    TINYINT = 2
    SMALLINT = 3
    INTEGER = 4
    BIGINT = 5
    UTINYINT = 6
    USMALLINT = 7
    UINTEGER = 8
    UBIGINT = 9
    FLOAT = 10
    DOUBLE = 11
    TIMESTAMP = 12
    DATE = 13
    TIME = 14
    INTERVAL = 15
    HUGEINT = 16
    VARCHAR = 17
    BLOB = 18
    DECIMAL = 19
    TIMESTAMP_S = 20
    TIMESTAMP_MS = 21
    TIMESTAMP_NS = 22
    ENUM = 23
    LIST = 24
    STRUCT = 25
    MAP = 26
    UUID = 27
    UNION = 28
    BIT = 29
    TIME_TZ = 30
    TIMESTAMP_TZ = 31
    UHUGEINT = 32
    ARRAY = 33
    ANY = 34
    VARINT = 35
    SQLNULL = 36

    @property
    def type_name(self) -> str:
        """Return the SQL spelling of this type."""
        return _TYPE_NAMES.get(self, self.name)

    @property
    def size_bytes(self) -> int | None:
        """Return the per-row storage width, or None if it has no fixed width.

        DECIMAL has no fixed width of its own; see LogicalType.storage_size.
        """
        return _SIZES.get(self)

    @property
    def is_composite(self) -> bool:
        """Return whether this tag is a container/enum type this core does not decode."""
        return self in COMPOSITE_TAGS

    @classmethod
    def from_id(cls, type_id: int) -> TypeTag:
        """Look up a tag by its ABI id."""
        try:
            return cls(type_id)
        except ValueError:
            raise ValueError(f"Unknown native type id: {type_id}") from None


_SIZES: dict[TypeTag, int] = {
    TypeTag.BOOLEAN: 1,
    TypeTag.TINYINT: 1,
    TypeTag.SMALLINT: 2,
    TypeTag.INTEGER: 4,
    TypeTag.BIGINT: 8,
    TypeTag.UTINYINT: 1,
    TypeTag.USMALLINT: 2,
    TypeTag.UINTEGER: 4,
    TypeTag.UBIGINT: 8,
    TypeTag.FLOAT: 4,
    TypeTag.DOUBLE: 8,
    TypeTag.TIMESTAMP: 8,
    TypeTag.TIMESTAMP_S: 8,
    TypeTag.TIMESTAMP_MS: 8,
    TypeTag.TIMESTAMP_NS: 8,
    TypeTag.TIMESTAMP_TZ: 8,
    TypeTag.DATE: 4,
    TypeTag.TIME: 8,
    TypeTag.TIME_TZ: 8,
    TypeTag.INTERVAL: 16,
    TypeTag.HUGEINT: 16,
    TypeTag.UHUGEINT: 16,
    TypeTag.UUID: 16,
    # String views: 4-byte length + 12 inline bytes or prefix + pointer
    TypeTag.VARCHAR: 16,
    TypeTag.BLOB: 16,
    TypeTag.BIT: 16,
}

_TYPE_NAMES: dict[TypeTag, str] = {
    TypeTag.TIMESTAMP_TZ: "TIMESTAMP WITH TIME ZONE",
    TypeTag.TIME_TZ: "TIME WITH TIME ZONE",
    TypeTag.SQLNULL: "NULL",
}

# Tags that are recognized but deliberately not decoded
COMPOSITE_TAGS: frozenset[TypeTag] = frozenset(
    {
        TypeTag.LIST,
        TypeTag.STRUCT,
        TypeTag.MAP,
        TypeTag.ARRAY,
        TypeTag.UNION,
        TypeTag.ENUM,
        TypeTag.ANY,
        TypeTag.VARINT,
    }
)

# Largest declared precision a DECIMAL may carry
MAX_DECIMAL_WIDTH = 38


class TimestampUnit(Enum):
    """Unit a timestamp's epoch offset is counted in."""

    SECONDS = "s"
    MILLISECONDS = "ms"
    MICROSECONDS = "us"
    NANOSECONDS = "ns"

    @property
    def per_second(self) -> int:
        """Return how many units make up one second."""
        return {
            TimestampUnit.SECONDS: 1,
            TimestampUnit.MILLISECONDS: 1_000,
            TimestampUnit.MICROSECONDS: 1_000_000,
            TimestampUnit.NANOSECONDS: 1_000_000_000,
        }[self]


TIMESTAMP_UNITS: dict[TypeTag, TimestampUnit] = {
    TypeTag.TIMESTAMP_S: TimestampUnit.SECONDS,
    TypeTag.TIMESTAMP_MS: TimestampUnit.MILLISECONDS,
    TypeTag.TIMESTAMP: TimestampUnit.MICROSECONDS,
    TypeTag.TIMESTAMP_TZ: TimestampUnit.MICROSECONDS,
    TypeTag.TIMESTAMP_NS: TimestampUnit.NANOSECONDS,
}


@dataclass(frozen=True)
class StructMember:
    """A named child of a STRUCT or UNION type."""

    name: str
    type: LogicalType


@dataclass(frozen=True)
class LogicalType:
    """Type descriptor for a column.

    Only the tag and, for DECIMAL, width/scale are consumed by the decoders.
    The remaining parameters are carried so schemas can be reported faithfully.
    """

    tag: TypeTag
    width: int | None = None
    scale: int | None = None
    dictionary_size: int | None = None
    children: tuple[StructMember, ...] = ()
    array_size: int | None = None

    @classmethod
    def decimal(cls, width: int, scale: int) -> LogicalType:
        """Create a DECIMAL(width, scale) type."""
        return cls(TypeTag.DECIMAL, width=width, scale=scale)

    @classmethod
    def list_of(cls, child: LogicalType) -> LogicalType:
        """Create a LIST type with the given element type."""
        return cls(TypeTag.LIST, children=(StructMember("child", child),))

    @property
    def type_name(self) -> str:
        return self.tag.type_name

    @property
    def storage_size(self) -> int | None:
        """Return the per-row storage width of this column.

        DECIMAL width is chosen solely by the declared precision.
        """
        if self.tag == TypeTag.DECIMAL:
            # Imported lazily to keep the type module free of decoder imports
            from typed_chunks.numeric import decimal_storage

            return decimal_storage(self.width).size
        return self.tag.size_bytes

    def __str__(self) -> str:
        tag = self.tag
        if tag == TypeTag.DECIMAL:
            return f"DECIMAL({self.width},{self.scale})"
        if tag == TypeTag.LIST and self.children:
            return f"{self.children[0].type}[]"
        if tag == TypeTag.ARRAY and self.children:
            return f"{self.children[0].type}[{self.array_size}]"
        if tag == TypeTag.MAP and len(self.children) == 2:
            return f"MAP({self.children[0].type}, {self.children[1].type})"
        if tag in (TypeTag.STRUCT, TypeTag.UNION) and self.children:
            members = ", ".join(f"{m.name} {m.type}" for m in self.children)
            return f"{tag.type_name}({members})"
        return tag.type_name
