"""Settings for locating and driving the native engine library."""

from __future__ import annotations

import ctypes.util
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

LIBRARY_ENV = "TYPED_CHUNKS_LIBRARY"
VECTOR_SIZE_ENV = "TYPED_CHUNKS_VECTOR_SIZE"

# Rows per chunk the engine is built with by default
DEFAULT_VECTOR_SIZE = 2048


def default_library_name() -> str:
    """Return the platform's file name for the engine's shared library."""
    if sys.platform == "win32":
        return "duckdb.dll"
    if sys.platform == "darwin":
        return "libduckdb.dylib"
    return "libduckdb.so"


@dataclass(frozen=True)
class EngineConfig:
    """Where the engine library lives and the options passed to it on open.

    ``options`` are handed to the engine unparsed.
    """

    library_path: Path | None = None
    vector_size: int = DEFAULT_VECTOR_SIZE
    options: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, **overrides: object) -> EngineConfig:
        """Build a config from environment variables, then apply ``overrides``."""
        values: dict[str, object] = {}
        library = os.environ.get(LIBRARY_ENV)
        if library:
            values["library_path"] = Path(library)
        vector_size = os.environ.get(VECTOR_SIZE_ENV)
        if vector_size:
            try:
                values["vector_size"] = int(vector_size)
            except ValueError:
                raise ValueError(f"{VECTOR_SIZE_ENV} must be an integer, got {vector_size!r}") from None
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def resolve_library(self) -> str:
        """Return the library path to load, falling back to the system search path."""
        if self.library_path is not None:
            return str(self.library_path)
        found = ctypes.util.find_library("duckdb")
        return found or default_library_name()
