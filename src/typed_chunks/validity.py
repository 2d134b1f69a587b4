"""Validity bitmaps marking which rows of a vector are non-null."""

from __future__ import annotations

from typed_chunks.memory import AddressSpace, BufferView

WORD_BITS = 64
WORD_SIZE = 8


def mask_size(row_count: int) -> int:
    """Return the number of bytes a mask covering ``row_count`` rows occupies."""
    return (row_count + WORD_BITS - 1) // WORD_BITS * WORD_SIZE


class ValidityMask:
    """Validity of each row in a vector.

    Bit ``i % 64`` of uint64 word ``i // 64`` is set iff row ``i`` is valid.
    A mask without a buffer means every row is valid.
    """

    def __init__(self, view: BufferView | None = None) -> None:
        self._view = view

    @classmethod
    def at(cls, memory: AddressSpace, address: int | None, row_count: int) -> ValidityMask:
        """Build the mask for ``row_count`` rows at ``address`` (None/0: all valid)."""
        if not address:
            return cls(None)
        return cls(BufferView.at(memory, address, mask_size(row_count)))

    @property
    def all_valid(self) -> bool:
        return self._view is None

    def is_valid(self, row: int) -> bool:
        if self._view is None:
            return True
        word = self._view.read_u64((row // WORD_BITS) * WORD_SIZE)
        return bool((word >> (row % WORD_BITS)) & 1)

    def release(self) -> None:
        if self._view is not None:
            self._view.release()
