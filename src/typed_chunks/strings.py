"""Decoding of 16-byte string views (VARCHAR, BLOB, BIT).

View layout::

    [0, 4)   int32 length
    length <= 12:  [4, 16) inline bytes
    length  > 12:  [4, 8) prefix (ignored), [8, 16) pointer to ``length`` bytes

The branch is chosen by the length field alone. Decoders always return owned
copies, never references into native memory.
"""

from __future__ import annotations

from typed_chunks.errors import CorruptValueError
from typed_chunks.memory import INT32, UINT64, AddressSpace, BufferView

STRING_VIEW_SIZE = 16
INLINE_LIMIT = 12
INLINE_OFFSET = 4
POINTER_OFFSET = 8


def decode_string_view(raw: bytes | memoryview, memory: AddressSpace) -> bytes:
    """Decode one 16-byte string view into an owned byte string."""
    length = INT32.unpack_from(raw, 0)[0]
    if length < 0:
        raise CorruptValueError(f"Negative string length: {length}")
    if length <= INLINE_LIMIT:
        return bytes(raw[INLINE_OFFSET : INLINE_OFFSET + length])
    address = UINT64.unpack_from(raw, POINTER_OFFSET)[0]
    if not address:
        raise CorruptValueError(f"Null data pointer for string of length {length}")
    return memory.read(address, length)


def read_string_view(view: BufferView, row: int, memory: AddressSpace) -> bytes:
    """Decode the string view of ``row`` in a vector."""
    return decode_string_view(view.slice(row * STRING_VIEW_SIZE, STRING_VIEW_SIZE), memory)


def decode_varchar(view: BufferView, row: int, memory: AddressSpace) -> str:
    return read_string_view(view, row, memory).decode("utf-8")


def decode_blob(view: BufferView, row: int, memory: AddressSpace) -> bytes:
    return read_string_view(view, row, memory)


def decode_bit(view: BufferView, row: int, memory: AddressSpace) -> str:
    """Decode a BIT value into a string of '0' and '1' characters.

    The payload's first byte holds the number of padding bits at the start of
    the second byte; bits are stored most significant first.
    """
    payload = read_string_view(view, row, memory)
    if not payload:
        raise CorruptValueError("Empty bit string payload")
    padding = payload[0]
    bits = "".join(format(b, "08b") for b in payload[1:])
    if padding > len(bits):
        raise CorruptValueError(f"Bit string padding {padding} exceeds payload")
    return bits[padding:]
