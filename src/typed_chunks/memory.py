"""Bounds-checked views over native buffers.

A ``BufferView`` is built once per vector and exposes typed accessors at byte
offsets. Views never outlive the chunk they were built from: releasing the
chunk releases its views, after which any read raises ``ValueError``.
"""

from __future__ import annotations

import bisect
import ctypes
import struct
from typing import Any, Protocol

from typed_chunks.errors import OutOfRangeIndexError

# Native byte order, standard sizes
BOOL = struct.Struct("=?")
INT8 = struct.Struct("=b")
INT16 = struct.Struct("=h")
INT32 = struct.Struct("=i")
INT64 = struct.Struct("=q")
UINT8 = struct.Struct("=B")
UINT16 = struct.Struct("=H")
UINT32 = struct.Struct("=I")
UINT64 = struct.Struct("=Q")
FLOAT32 = struct.Struct("=f")
FLOAT64 = struct.Struct("=d")

# 128-bit integers: low 64 bits first, then high 64 bits
HUGEINT = struct.Struct("=Qq")
UHUGEINT = struct.Struct("=QQ")

POINTER_SIZE = 8


class AddressSpace(Protocol):
    """Memory that raw addresses handed out by the engine point into."""

    def view(self, address: int, size: int) -> memoryview:
        """Return a byte view of ``size`` bytes starting at ``address``."""
        ...

    def read(self, address: int, length: int) -> bytes:
        """Return an owned copy of ``length`` bytes starting at ``address``."""
        ...


class BufferView:
    """Typed, bounds-checked accessors over one native buffer."""

    def __init__(self, buffer: memoryview, address: int = 0) -> None:
        self._buffer = buffer
        self.address = address

    @classmethod
    def at(cls, memory: AddressSpace, address: int, size: int) -> BufferView:
        """Build a view of ``size`` bytes at ``address`` in ``memory``."""
        return cls(memory.view(address, size), address)

    @property
    def size(self) -> int:
        return self._buffer.nbytes

    def _check(self, offset: int, length: int) -> None:
        if offset < 0 or offset + length > self._buffer.nbytes:
            raise OutOfRangeIndexError(offset, self._buffer.nbytes, "byte offset")

    def unpack(self, fmt: struct.Struct, offset: int) -> tuple:
        """Unpack ``fmt`` at ``offset``."""
        self._check(offset, fmt.size)
        return fmt.unpack_from(self._buffer, offset)

    def read(self, fmt: struct.Struct, offset: int) -> Any:
        """Unpack a single value of ``fmt`` at ``offset``."""
        return self.unpack(fmt, offset)[0]

    def read_bool(self, offset: int) -> bool:
        return self.read(BOOL, offset)

    def read_i8(self, offset: int) -> int:
        return self.read(INT8, offset)

    def read_i16(self, offset: int) -> int:
        return self.read(INT16, offset)

    def read_i32(self, offset: int) -> int:
        return self.read(INT32, offset)

    def read_i64(self, offset: int) -> int:
        return self.read(INT64, offset)

    def read_u8(self, offset: int) -> int:
        return self.read(UINT8, offset)

    def read_u16(self, offset: int) -> int:
        return self.read(UINT16, offset)

    def read_u32(self, offset: int) -> int:
        return self.read(UINT32, offset)

    def read_u64(self, offset: int) -> int:
        return self.read(UINT64, offset)

    def read_f32(self, offset: int) -> float:
        return self.read(FLOAT32, offset)

    def read_f64(self, offset: int) -> float:
        return self.read(FLOAT64, offset)

    def read_pointer(self, offset: int) -> int:
        return self.read(UINT64, offset)

    def slice(self, offset: int, length: int) -> memoryview:
        """Return a borrowed sub-view; copy it before the chunk is released."""
        self._check(offset, length)
        return self._buffer[offset : offset + length]

    def copy(self, offset: int, length: int) -> bytes:
        """Return an owned copy of ``length`` bytes at ``offset``."""
        return bytes(self.slice(offset, length))

    def release(self) -> None:
        """Invalidate the view."""
        self._buffer.release()

    def __enter__(self) -> BufferView:
        return self

    def __exit__(self, *args: object) -> None:
        self.release()


class Arena:
    """An in-process address space.

    Blocks are placed at increasing, 16-byte aligned addresses with a gap
    between them, so address 0 and addresses between blocks are never valid.
    """

    BASE_ADDRESS = 0x1000
    ALIGNMENT = 16

    def __init__(self) -> None:
        self._starts: list[int] = []
        self._blocks: dict[int, bytearray] = {}
        self._next = self.BASE_ADDRESS

    def allocate(self, data: bytes | bytearray | int) -> int:
        """Place a copy of ``data`` (or ``data`` zero bytes) and return its address."""
        block = bytearray(data)
        address = self._next
        self._starts.append(address)
        self._blocks[address] = block
        span = max(len(block), 1) + self.ALIGNMENT
        self._next = address + (span + self.ALIGNMENT - 1) // self.ALIGNMENT * self.ALIGNMENT
        return address

    def free(self, address: int) -> None:
        """Free the block starting at ``address``."""
        if address not in self._blocks:
            raise KeyError(f"No block at address 0x{address:x}")
        del self._blocks[address]
        self._starts.remove(address)

    def _locate(self, address: int, size: int) -> tuple[bytearray, int]:
        i = bisect.bisect_right(self._starts, address) - 1
        if i >= 0:
            start = self._starts[i]
            block = self._blocks[start]
            offset = address - start
            if offset + size <= len(block):
                return block, offset
        raise ValueError(f"Invalid access of {size} bytes at address 0x{address:x}")

    def view(self, address: int, size: int) -> memoryview:
        block, offset = self._locate(address, size)
        return memoryview(block)[offset : offset + size]

    def read(self, address: int, length: int) -> bytes:
        block, offset = self._locate(address, length)
        return bytes(block[offset : offset + length])

    @property
    def block_count(self) -> int:
        return len(self._blocks)


class NativeMemory:
    """The process address space, accessed through ctypes."""

    def view(self, address: int, size: int) -> memoryview:
        if not address:
            raise ValueError("Null pointer dereference")
        if size == 0:
            return memoryview(b"")
        array = (ctypes.c_ubyte * size).from_address(address)
        return memoryview(array).cast("B")

    def read(self, address: int, length: int) -> bytes:
        if not address:
            raise ValueError("Null pointer dereference")
        return ctypes.string_at(address, length)
