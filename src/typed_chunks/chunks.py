"""Chunk iteration: turns a stream of native result chunks into rows."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Protocol

from typed_chunks.config import DEFAULT_VECTOR_SIZE
from typed_chunks.dispatch import ColumnReader
from typed_chunks.errors import CorruptValueError, DecodeError, OutOfRangeIndexError
from typed_chunks.memory import AddressSpace
from typed_chunks.types import LogicalType

logger = logging.getLogger(__name__)

Row = tuple[Any, ...]


class VectorHandle(Protocol):
    """One column of a fetched chunk, owned by that chunk."""

    def logical_type(self) -> LogicalType: ...

    def data_address(self) -> int | None: ...

    def validity_address(self) -> int | None: ...


class DataChunkHandle(Protocol):
    """A fetched batch of column vectors, owned by the caller until released."""

    def column_count(self) -> int: ...

    def row_count(self) -> int: ...

    def vector(self, index: int) -> VectorHandle: ...

    def release(self) -> None: ...


class ResultHandle(Protocol):
    """A query result that hands out chunks until exhausted.

    Results may also report their schema through ``column_names()`` and
    ``column_types()``; the producer uses them when present.
    """

    def fetch_chunk(self) -> DataChunkHandle | None: ...


@dataclass(frozen=True)
class Vector:
    """The parts of a vector the decoders need, read once per chunk."""

    logical_type: LogicalType
    data_address: int | None
    validity_address: int | None

    @classmethod
    def from_handle(cls, handle: VectorHandle) -> Vector:
        return cls(handle.logical_type(), handle.data_address(), handle.validity_address())


def read_vectors(chunk: DataChunkHandle) -> list[Vector]:
    """Extract every vector of ``chunk`` in column order."""
    return [Vector.from_handle(chunk.vector(i)) for i in range(chunk.column_count())]


def decode_chunk(chunk: DataChunkHandle, memory: AddressSpace, capacity: int | None = None) -> list[Row]:
    """Decode all rows of ``chunk``; the caller remains responsible for releasing it.

    A chunk reporting more rows than ``capacity`` is rejected before any
    buffer is read. Decode failures are annotated with the row and column
    they occurred at; unreadable payloads (bad pointers, invalid UTF-8)
    surface as ``CorruptValueError``.
    """
    row_count = chunk.row_count()
    if capacity is not None and row_count > capacity:
        raise OutOfRangeIndexError(row_count - 1, capacity)
    vectors = read_vectors(chunk)
    readers: list[ColumnReader] = []
    try:
        for column, vector in enumerate(vectors):
            try:
                readers.append(
                    ColumnReader.open(
                        memory,
                        vector.logical_type,
                        vector.data_address,
                        vector.validity_address,
                        row_count,
                    )
                )
            except DecodeError as e:
                raise e.at(column=column)
            except ValueError as e:
                raise CorruptValueError(f"Unreadable {vector.logical_type} buffers: {e}", column=column) from e
        rows = []
        for row in range(row_count):
            values = []
            for column, reader in enumerate(readers):
                try:
                    values.append(reader.read(row))
                except DecodeError as e:
                    raise e.at(row=row, column=column)
                except ValueError as e:
                    raise CorruptValueError(
                        f"Unreadable {reader.logical_type} value: {e}", row, column
                    ) from e
            rows.append(tuple(values))
        return rows
    finally:
        for reader in readers:
            reader.release()


class ProducerState(Enum):
    START = "start"
    DECODING = "decoding"
    DONE = "done"


class RowProducer:
    """A forward-only, non-restartable stream of rows from a result.

    Each fetched chunk is decoded in full and released before the next fetch,
    so at most one chunk's native buffers are held at a time. Rows are owned
    Python values and stay valid after their chunk is released.
    """

    def __init__(
        self, result: ResultHandle, memory: AddressSpace, vector_size: int = DEFAULT_VECTOR_SIZE
    ) -> None:
        self._result = result
        self._memory = memory
        self.vector_size = vector_size
        self._pending: deque[Row] = deque()
        self._state = ProducerState.START
        self.rows_produced = 0
        self.chunks_fetched = 0

    @property
    def state(self) -> ProducerState:
        return self._state

    @property
    def columns(self) -> list[str]:
        """Column names reported by the result, if it reports any."""
        names = getattr(self._result, "column_names", None)
        return list(names()) if names is not None else []

    @property
    def column_types(self) -> list[LogicalType]:
        """Column types reported by the result, if it reports any."""
        types = getattr(self._result, "column_types", None)
        return list(types()) if types is not None else []

    def _fetch(self) -> bool:
        """Fetch, decode and release the next chunk. False when exhausted."""
        chunk = self._result.fetch_chunk()
        if chunk is None:
            logger.debug("Result exhausted after %d chunks, %d rows", self.chunks_fetched, self.rows_produced)
            self._state = ProducerState.DONE
            return False
        self.chunks_fetched += 1
        try:
            decoded = decode_chunk(chunk, self._memory, self.vector_size)
        except Exception:
            self._state = ProducerState.DONE
            raise
        finally:
            chunk.release()
        logger.debug("Decoded chunk %d: %d rows", self.chunks_fetched, len(decoded))
        self._pending.extend(decoded)
        self._state = ProducerState.DECODING
        return True

    def next_row(self) -> Row | None:
        """Return the next row, or None once the result is exhausted."""
        while not self._pending:
            if self._state is ProducerState.DONE or not self._fetch():
                return None
        self.rows_produced += 1
        return self._pending.popleft()

    def __next__(self) -> Row:
        row = self.next_row()
        if row is None:
            raise StopIteration
        return row

    def __iter__(self) -> Iterator[Row]:
        return self

    def iter_dicts(self) -> Iterator[dict[str, Any]]:
        """Yield the remaining rows keyed by column name."""
        names = self.columns
        for row in self:
            if len(names) != len(row):
                raise ValueError(f"Result reports {len(names)} column names for {len(row)} columns")
            yield dict(zip(names, row))

    def close(self) -> None:
        """Stop producing rows; pending rows are discarded."""
        self._pending.clear()
        self._state = ProducerState.DONE

    def __enter__(self) -> RowProducer:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def rows(result: ResultHandle, memory: AddressSpace, vector_size: int = DEFAULT_VECTOR_SIZE) -> RowProducer:
    """Return a row producer over ``result``."""
    return RowProducer(result, memory, vector_size)
