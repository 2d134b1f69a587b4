"""Container, enum and other types that are recognized but not decoded."""

from __future__ import annotations

from typing import NoReturn

from typed_chunks.errors import UnsupportedTypeError
from typed_chunks.types import LogicalType


def decode_composite(logical_type: LogicalType, *args: object) -> NoReturn:
    """Fail for a type this decoder deliberately does not handle.

    The error names the full logical type so schema mismatches can be
    diagnosed from the message alone.
    """
    raise UnsupportedTypeError(logical_type.type_name, detail=str(logical_type))
