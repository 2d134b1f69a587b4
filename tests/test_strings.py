"""Tests for string view decoding."""

import struct

import pytest

from typed_chunks.errors import CorruptValueError
from typed_chunks.memory import Arena, BufferView
from typed_chunks.strings import decode_bit, decode_blob, decode_string_view, decode_varchar


def inline_view(payload: bytes) -> bytes:
    return struct.pack("=i", len(payload)) + payload.ljust(12, b"\x00")


def pointer_view(arena: Arena, payload: bytes) -> bytes:
    address = arena.allocate(payload)
    return struct.pack("=i4sQ", len(payload), payload[:4], address)


class TestStringView:
    """Tests for decode_string_view."""

    def test_empty_string_is_inline(self):
        """Length 0 decodes to empty bytes without touching memory."""
        arena = Arena()
        assert decode_string_view(inline_view(b""), arena) == b""

    def test_twelve_bytes_inline(self):
        """Length 12 is the largest inline string."""
        arena = Arena()
        assert decode_string_view(inline_view(b"abcdefghijkl"), arena) == b"abcdefghijkl"
        assert arena.block_count == 0

    def test_thirteen_bytes_uses_pointer(self):
        """Length 13 is read through the pointer."""
        arena = Arena()
        raw = pointer_view(arena, b"abcdefghijklm")
        assert decode_string_view(raw, arena) == b"abcdefghijklm"

    def test_inline_ignores_trailing_bytes(self):
        """Only `length` inline bytes are returned."""
        raw = struct.pack("=i", 3) + b"abcXXXXXXXXX"
        assert decode_string_view(raw, Arena()) == b"abc"

    def test_pointer_path_ignores_prefix(self):
        """The 4-byte prefix is not used to build the result."""
        arena = Arena()
        address = arena.allocate(b"the real payload")
        raw = struct.pack("=i4sQ", 16, b"ZZZZ", address)
        assert decode_string_view(raw, arena) == b"the real payload"

    def test_result_is_owned_copy(self):
        """The decoded bytes survive freeing the backing buffer."""
        arena = Arena()
        payload = b"a fairly long string value"
        address = arena.allocate(payload)
        raw = struct.pack("=i4sQ", len(payload), payload[:4], address)
        result = decode_string_view(raw, arena)
        arena.free(address)
        assert result == payload
        assert isinstance(result, bytes)

    def test_negative_length_raises(self):
        """A negative length is a corrupt view."""
        raw = struct.pack("=i", -1) + b"\x00" * 12
        with pytest.raises(CorruptValueError):
            decode_string_view(raw, Arena())

    def test_null_pointer_raises(self):
        """An out-of-line view with a null pointer is corrupt."""
        raw = struct.pack("=i4sQ", 20, b"abcd", 0)
        with pytest.raises(CorruptValueError):
            decode_string_view(raw, Arena())


class TestVectorStrings:
    """Tests for per-row string decoding from a vector."""

    def test_varchar_rows(self):
        """Each row reads its own 16-byte view."""
        arena = Arena()
        data = inline_view(b"short") + pointer_view(arena, "naïve café über".encode()) + inline_view(b"")
        view = BufferView(memoryview(bytearray(data)))
        assert decode_varchar(view, 0, arena) == "short"
        assert decode_varchar(view, 1, arena) == "naïve café über"
        assert decode_varchar(view, 2, arena) == ""

    def test_blob_keeps_bytes(self):
        """BLOB values are returned as bytes, including zero bytes."""
        arena = Arena()
        data = inline_view(b"\x00\x01\xff")
        view = BufferView(memoryview(bytearray(data)))
        assert decode_blob(view, 0, arena) == b"\x00\x01\xff"

    def test_bit_string(self):
        """BIT payloads skip the leading padding bits."""
        arena = Arena()
        # '10110' padded with 3 bits to one byte: 111 10110
        data = inline_view(bytes([3, 0b11110110]))
        view = BufferView(memoryview(bytearray(data)))
        assert decode_bit(view, 0, arena) == "10110"

    def test_bit_string_multiple_bytes(self):
        """Bits continue across payload bytes, most significant first."""
        arena = Arena()
        data = inline_view(bytes([0, 0b10000000, 0b00000001]))
        view = BufferView(memoryview(bytearray(data)))
        assert decode_bit(view, 0, arena) == "1000000000000001"
