"""Result chunks whose buffers live in an in-process ``Arena``.

Implements the result, chunk and vector handles for callers that already hold
raw column buffers (and for tests). Releasing a chunk frees every arena block
it owns, exactly as destroying a native chunk frees its buffers.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from typed_chunks.errors import OutOfRangeIndexError
from typed_chunks.memory import Arena
from typed_chunks.types import LogicalType


@dataclass(frozen=True)
class ArenaVector:
    """A column vector whose buffers are arena addresses."""

    type: LogicalType
    data: int | None
    validity: int | None = None

    def logical_type(self) -> LogicalType:
        return self.type

    def data_address(self) -> int | None:
        return self.data

    def validity_address(self) -> int | None:
        return self.validity


class ArenaChunk:
    """A batch of vectors plus a row count."""

    def __init__(
        self,
        arena: Arena,
        vectors: list[ArenaVector],
        row_count: int,
        owned: Iterable[int] = (),
    ) -> None:
        self.arena = arena
        self._vectors = vectors
        self._row_count = row_count
        self._owned = list(owned)
        self.released = False

    def _check_live(self) -> None:
        if self.released:
            raise RuntimeError("Chunk used after release")

    def column_count(self) -> int:
        self._check_live()
        return len(self._vectors)

    def row_count(self) -> int:
        self._check_live()
        return self._row_count

    def vector(self, index: int) -> ArenaVector:
        self._check_live()
        if index < 0 or index >= len(self._vectors):
            raise OutOfRangeIndexError(index, len(self._vectors), "column")
        return self._vectors[index]

    def release(self) -> None:
        """Free the chunk's buffers; further use of the chunk is an error."""
        if self.released:
            return
        for address in self._owned:
            self.arena.free(address)
        self._owned.clear()
        self.released = True


class ArenaResult:
    """A result that hands out a fixed sequence of chunks, then None."""

    def __init__(
        self,
        chunks: Iterable[ArenaChunk],
        column_names: list[str] | None = None,
        column_types: list[LogicalType] | None = None,
    ) -> None:
        self._chunks = iter(chunks)
        self._column_names = column_names
        self._column_types = column_types

    def fetch_chunk(self) -> ArenaChunk | None:
        return next(self._chunks, None)

    def column_names(self) -> list[str]:
        return list(self._column_names or [])

    def column_types(self) -> list[LogicalType]:
        return list(self._column_types or [])
