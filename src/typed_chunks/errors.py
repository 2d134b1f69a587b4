"""Exceptions raised while decoding result chunks."""

from __future__ import annotations


class DecodeError(ValueError):
    """Base class for failures decoding a cell of a result chunk.

    ``row`` and ``column`` are filled in by the row producer when the failure
    happens while iterating a result, so layout mismatches can be located
    without inspecting raw memory.
    """

    def __init__(self, message: str, row: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.row = row
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.row is not None:
            location.append(f"row {self.row}")
        if self.column is not None:
            location.append(f"column {self.column}")
        if location:
            return f"{self.message} (at {', '.join(location)})"
        return self.message

    def at(self, row: int | None = None, column: int | None = None) -> DecodeError:
        """Attach a cell location and return self."""
        if row is not None:
            self.row = row
        if column is not None:
            self.column = column
        self.args = (self._format(),)
        return self


class UnsupportedTypeError(DecodeError, TypeError):
    """A column's logical type is recognized but not decoded."""

    def __init__(
        self,
        type_name: str,
        row: int | None = None,
        column: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.type_name = type_name
        message = f"Unsupported column type: {type_name}"
        if detail and detail != type_name:
            message += f" ({detail})"
        super().__init__(message, row, column)


class InvalidDecimalWidthError(DecodeError):
    """A DECIMAL column declares a width outside [1, 38]."""

    def __init__(self, width: int | None) -> None:
        self.width = width
        super().__init__(f"Invalid decimal width: {width} (expected 1..38)")


class OutOfRangeIndexError(DecodeError, IndexError):
    """A row or column index beyond the chunk's reported bounds was requested."""

    def __init__(self, index: int, bound: int, what: str = "row") -> None:
        self.index = index
        self.bound = bound
        super().__init__(f"{what.capitalize()} index {index} out of range [0, {bound})")


class CorruptValueError(DecodeError):
    """A stored value violates its binary layout."""


class EngineError(RuntimeError):
    """The native engine reported a failure or could not be loaded."""
