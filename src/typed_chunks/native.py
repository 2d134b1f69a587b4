"""ctypes binding to the native engine's C API.

A thin passthrough implementing the result, chunk and vector handles over the
engine library. Each ``NativeEngine`` owns its own library handle; nothing is
loaded at import time.
"""

from __future__ import annotations

import ctypes
import logging
from typing import Any

from typed_chunks.chunks import RowProducer
from typed_chunks.config import EngineConfig
from typed_chunks.errors import EngineError, OutOfRangeIndexError
from typed_chunks.memory import NativeMemory
from typed_chunks.types import LogicalType, TypeTag

logger = logging.getLogger(__name__)

idx_t = ctypes.c_uint64
SUCCESS = 0


class ResultStruct(ctypes.Structure):
    """The engine's ``duckdb_result``; only ``internal_data`` is meaningful."""

    _fields_ = [
        ("deprecated_column_count", idx_t),
        ("deprecated_row_count", idx_t),
        ("deprecated_rows_changed", idx_t),
        ("deprecated_columns", ctypes.c_void_p),
        ("deprecated_error_message", ctypes.c_char_p),
        ("internal_data", ctypes.c_void_p),
    ]


# name: (argtypes, restype)
_SIGNATURES: dict[str, tuple[list[Any], Any]] = {
    "duckdb_library_version": ([], ctypes.c_char_p),
    "duckdb_vector_size": ([], idx_t),
    "duckdb_free": ([ctypes.c_void_p], None),
    "duckdb_create_config": ([ctypes.POINTER(ctypes.c_void_p)], ctypes.c_int),
    "duckdb_set_config": ([ctypes.c_void_p, ctypes.c_char_p, ctypes.c_char_p], ctypes.c_int),
    "duckdb_destroy_config": ([ctypes.POINTER(ctypes.c_void_p)], None),
    "duckdb_open_ext": (
        [
            ctypes.c_char_p,
            ctypes.POINTER(ctypes.c_void_p),
            ctypes.c_void_p,
            ctypes.POINTER(ctypes.c_void_p),
        ],
        ctypes.c_int,
    ),
    "duckdb_close": ([ctypes.POINTER(ctypes.c_void_p)], None),
    "duckdb_connect": ([ctypes.c_void_p, ctypes.POINTER(ctypes.c_void_p)], ctypes.c_int),
    "duckdb_disconnect": ([ctypes.POINTER(ctypes.c_void_p)], None),
    "duckdb_query": (
        [ctypes.c_void_p, ctypes.c_char_p, ctypes.POINTER(ResultStruct)],
        ctypes.c_int,
    ),
    "duckdb_result_error": ([ctypes.POINTER(ResultStruct)], ctypes.c_char_p),
    "duckdb_destroy_result": ([ctypes.POINTER(ResultStruct)], None),
    "duckdb_column_count": ([ctypes.POINTER(ResultStruct)], idx_t),
    "duckdb_column_name": ([ctypes.POINTER(ResultStruct), idx_t], ctypes.c_char_p),
    "duckdb_column_logical_type": ([ctypes.POINTER(ResultStruct), idx_t], ctypes.c_void_p),
    "duckdb_fetch_chunk": ([ResultStruct], ctypes.c_void_p),
    "duckdb_data_chunk_get_column_count": ([ctypes.c_void_p], idx_t),
    "duckdb_data_chunk_get_size": ([ctypes.c_void_p], idx_t),
    "duckdb_data_chunk_get_vector": ([ctypes.c_void_p, idx_t], ctypes.c_void_p),
    "duckdb_destroy_data_chunk": ([ctypes.POINTER(ctypes.c_void_p)], None),
    "duckdb_vector_get_column_type": ([ctypes.c_void_p], ctypes.c_void_p),
    "duckdb_vector_get_data": ([ctypes.c_void_p], ctypes.c_void_p),
    "duckdb_vector_get_validity": ([ctypes.c_void_p], ctypes.c_void_p),
    "duckdb_get_type_id": ([ctypes.c_void_p], ctypes.c_int),
    "duckdb_decimal_width": ([ctypes.c_void_p], ctypes.c_uint8),
    "duckdb_decimal_scale": ([ctypes.c_void_p], ctypes.c_uint8),
    "duckdb_enum_dictionary_size": ([ctypes.c_void_p], ctypes.c_uint32),
    "duckdb_destroy_logical_type": ([ctypes.POINTER(ctypes.c_void_p)], None),
}


def read_logical_type(lib: ctypes.CDLL, address: int) -> LogicalType:
    """Describe the logical type handle at ``address``, then destroy the handle."""
    handle = ctypes.c_void_p(address)
    try:
        tag = TypeTag.from_id(lib.duckdb_get_type_id(handle))
        if tag == TypeTag.DECIMAL:
            return LogicalType.decimal(lib.duckdb_decimal_width(handle), lib.duckdb_decimal_scale(handle))
        if tag == TypeTag.ENUM:
            return LogicalType(tag, dictionary_size=lib.duckdb_enum_dictionary_size(handle))
        return LogicalType(tag)
    finally:
        lib.duckdb_destroy_logical_type(ctypes.byref(handle))


class NativeEngine:
    """A loaded engine library.

    Construct once and pass it to whatever opens databases; there is no
    process-wide instance.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig.from_env()
        path = self.config.resolve_library()
        try:
            self.lib = ctypes.CDLL(path)
        except OSError as e:
            raise EngineError(f"Cannot load engine library '{path}': {e}") from e
        for name, (argtypes, restype) in _SIGNATURES.items():
            try:
                func = getattr(self.lib, name)
            except AttributeError as e:
                raise EngineError(f"Engine library '{path}' lacks symbol {name}") from e
            func.argtypes = argtypes
            func.restype = restype
        self.memory = NativeMemory()
        logger.debug("Loaded engine library %s (version %s)", path, self.library_version())
        if self.vector_size() != self.config.vector_size:
            logger.warning(
                "Engine library reports vector size %d, configured %d",
                self.vector_size(),
                self.config.vector_size,
            )

    def library_version(self) -> str:
        version = self.lib.duckdb_library_version()
        return version.decode() if version else ""

    def vector_size(self) -> int:
        return int(self.lib.duckdb_vector_size())

    def open(self, path: str = ":memory:", options: dict[str, str] | None = None) -> Database:
        """Open a database; ``options`` extend the config's options."""
        merged = {**self.config.options, **(options or {})}
        return Database(self, path, merged)


class Database:
    """An open database file (or in-memory database)."""

    def __init__(self, engine: NativeEngine, path: str, options: dict[str, str]) -> None:
        self.engine = engine
        self.path = path
        lib = engine.lib
        config = ctypes.c_void_p()
        if lib.duckdb_create_config(ctypes.byref(config)) != SUCCESS:
            raise EngineError("Failed to create config")
        try:
            for name, value in options.items():
                if lib.duckdb_set_config(config, name.encode(), str(value).encode()) != SUCCESS:
                    raise EngineError(f"Invalid config option {name}={value!r}")
            self._handle = ctypes.c_void_p()
            error = ctypes.c_void_p()
            state = lib.duckdb_open_ext(path.encode(), ctypes.byref(self._handle), config, ctypes.byref(error))
            if state != SUCCESS:
                message = ctypes.string_at(error.value).decode() if error.value else "unknown error"
                if error.value:
                    lib.duckdb_free(error)
                raise EngineError(f"Failed to open {path}: {message}")
        finally:
            lib.duckdb_destroy_config(ctypes.byref(config))
        logger.debug("Opened database %s", path)

    def connect(self) -> Connection:
        return Connection(self)

    def close(self) -> None:
        if self._handle.value:
            self.engine.lib.duckdb_close(ctypes.byref(self._handle))
            self._handle = ctypes.c_void_p()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class Connection:
    """A connection to an open database."""

    def __init__(self, database: Database) -> None:
        self.engine = database.engine
        self._handle = ctypes.c_void_p()
        if self.engine.lib.duckdb_connect(database._handle, ctypes.byref(self._handle)) != SUCCESS:
            raise EngineError(f"Failed to connect to {database.path}")

    def query(self, sql: str) -> NativeResult:
        """Run ``sql`` and return its result; raises EngineError on failure."""
        result = ResultStruct()
        state = self.engine.lib.duckdb_query(self._handle, sql.encode(), ctypes.byref(result))
        if state != SUCCESS:
            message = self.engine.lib.duckdb_result_error(ctypes.byref(result))
            self.engine.lib.duckdb_destroy_result(ctypes.byref(result))
            raise EngineError(message.decode() if message else "Query failed")
        return NativeResult(self.engine, result)

    def close(self) -> None:
        if self._handle.value:
            self.engine.lib.duckdb_disconnect(ctypes.byref(self._handle))
            self._handle = ctypes.c_void_p()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class NativeResult:
    """A materialized or streaming query result."""

    def __init__(self, engine: NativeEngine, result: ResultStruct) -> None:
        self.engine = engine
        self._result = result
        self._closed = False

    def column_count(self) -> int:
        return int(self.engine.lib.duckdb_column_count(ctypes.byref(self._result)))

    def column_names(self) -> list[str]:
        names = []
        for i in range(self.column_count()):
            name = self.engine.lib.duckdb_column_name(ctypes.byref(self._result), i)
            names.append(name.decode() if name else "")
        return names

    def column_types(self) -> list[LogicalType]:
        lib = self.engine.lib
        return [
            read_logical_type(lib, lib.duckdb_column_logical_type(ctypes.byref(self._result), i))
            for i in range(self.column_count())
        ]

    def fetch_chunk(self) -> NativeChunk | None:
        if self._closed:
            return None
        handle = self.engine.lib.duckdb_fetch_chunk(self._result)
        if not handle:
            return None
        return NativeChunk(self.engine, handle)

    def rows(self) -> RowProducer:
        """Return a row producer over this result."""
        return RowProducer(self, self.engine.memory, self.engine.config.vector_size)

    def close(self) -> None:
        if not self._closed:
            self.engine.lib.duckdb_destroy_result(ctypes.byref(self._result))
            self._closed = True

    def __enter__(self) -> NativeResult:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class NativeChunk:
    """A fetched data chunk; must be released exactly once."""

    def __init__(self, engine: NativeEngine, handle: int) -> None:
        self.engine = engine
        self._handle = ctypes.c_void_p(handle)

    def column_count(self) -> int:
        return int(self.engine.lib.duckdb_data_chunk_get_column_count(self._handle))

    def row_count(self) -> int:
        return int(self.engine.lib.duckdb_data_chunk_get_size(self._handle))

    def vector(self, index: int) -> NativeVector:
        count = self.column_count()
        if index < 0 or index >= count:
            raise OutOfRangeIndexError(index, count, "column")
        return NativeVector(self.engine, self.engine.lib.duckdb_data_chunk_get_vector(self._handle, index))

    def release(self) -> None:
        if self._handle.value:
            self.engine.lib.duckdb_destroy_data_chunk(ctypes.byref(self._handle))
            self._handle = ctypes.c_void_p()


class NativeVector:
    """A vector owned by a ``NativeChunk``."""

    def __init__(self, engine: NativeEngine, handle: int) -> None:
        self.engine = engine
        self._handle = handle

    def logical_type(self) -> LogicalType:
        lib = self.engine.lib
        return read_logical_type(lib, lib.duckdb_vector_get_column_type(self._handle))

    def data_address(self) -> int | None:
        return self.engine.lib.duckdb_vector_get_data(self._handle)

    def validity_address(self) -> int | None:
        return self.engine.lib.duckdb_vector_get_validity(self._handle)
