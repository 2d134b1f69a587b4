"""Tool for dumping decoded query results to the console."""

from __future__ import annotations

import argparse
import base64
import datetime
import json
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

from typed_chunks.config import EngineConfig
from typed_chunks.errors import EngineError
from typed_chunks.native import NativeEngine
from typed_chunks.parsing import parse_type
from typed_chunks.types import LogicalType, TypeTag
from typed_chunks.values import (
    Decimal,
    Hugeint,
    Interval,
    TimeTz,
    Uhugeint,
)

NULL_TEXT = "NULL"


def format_value(value: Any) -> str:
    """Format a decoded value for display."""
    if value is None:
        return NULL_TEXT
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.6g}"
    if isinstance(value, bytes):
        return "\\x" + value.hex()
    if isinstance(value, Interval):
        parts = []
        if value.months:
            parts.append(f"{value.months} months")
        if value.days:
            parts.append(f"{value.days} days")
        if value.micros or not parts:
            parts.append(str(datetime.timedelta(microseconds=value.micros)))
        return " ".join(parts)
    return str(value)


def json_value(value: Any) -> Any:
    """Convert a decoded value to a JSON-compatible value."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, (Hugeint, Uhugeint)):
        return value.value
    if isinstance(value, Decimal):
        return str(value.to_decimal())
    if isinstance(value, Interval):
        return {"months": value.months, "days": value.days, "micros": value.micros}
    if isinstance(value, TimeTz):
        return {"micros": value.micros, "offset": value.offset}
    # Date, Time, Timestamp, UUID and BIT strings use their text form
    return str(value)


def type_matches(expected: LogicalType, actual: LogicalType) -> bool:
    """Return whether a column of type ``actual`` satisfies ``expected``.

    Child types are only compared when the result reports them.
    """
    if expected.tag != actual.tag:
        return False
    if expected.tag == TypeTag.DECIMAL:
        return (expected.width, expected.scale) == (actual.width, actual.scale)
    if actual.children:
        return expected.children == actual.children
    return True


def check_schema(expected: list[LogicalType], actual: list[LogicalType]) -> list[str]:
    """Return one message per column whose type differs from ``expected``."""
    if len(expected) != len(actual):
        return [f"Expected {len(expected)} columns, result has {len(actual)}"]
    return [
        f"Column {i}: expected {e}, got {a}"
        for i, (e, a) in enumerate(zip(expected, actual))
        if not type_matches(e, a)
    ]


def dump_schema(columns: list[str], types: list[LogicalType], out: TextIO | None = None) -> None:
    """Print one ``name TYPE`` line per column."""
    out = out or sys.stdout
    names = columns or [f"column{i}" for i in range(len(types))]
    width = max((len(n) for n in names), default=0)
    for name, logical_type in zip(names, types):
        print(f"{name.ljust(width)} {logical_type}", file=out)


def dump_rows_table(
    columns: list[str],
    rows: Iterable[tuple[Any, ...]],
    out: TextIO | None = None,
    limit: int | None = None,
) -> int:
    """Print rows as an aligned text table; returns the number of rows printed."""
    out = out or sys.stdout
    formatted: list[list[str]] = []
    for i, row in enumerate(rows):
        if limit is not None and i >= limit:
            break
        formatted.append([format_value(v) for v in row])

    if not columns:
        width = len(formatted[0]) if formatted else 0
        columns = [f"column{i}" for i in range(width)]

    widths = [len(c) for c in columns]
    for row in formatted:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    print(" | ".join(c.ljust(w) for c, w in zip(columns, widths)).rstrip(), file=out)
    print("-+-".join("-" * w for w in widths), file=out)
    for row in formatted:
        print(" | ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip(), file=out)
    print(f"({len(formatted)} rows)", file=out)
    return len(formatted)


def dump_rows_json(
    columns: list[str],
    rows: Iterable[tuple[Any, ...]],
    out: TextIO | None = None,
    limit: int | None = None,
) -> int:
    """Print rows as a JSON array of objects; returns the number of rows printed."""
    out = out or sys.stdout
    records = []
    for i, row in enumerate(rows):
        if limit is not None and i >= limit:
            break
        names = columns or [f"column{j}" for j in range(len(row))]
        records.append({name: json_value(v) for name, v in zip(names, row)})
    json.dump(records, out, indent=2)
    print(file=out)
    return len(records)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run a query and dump the decoded result rows to the console"
    )
    parser.add_argument("sql", help="Query to run")
    parser.add_argument(
        "-d", "--database",
        default=":memory:",
        help="Database file to open (default: in-memory)",
    )
    parser.add_argument(
        "-l", "--library",
        type=Path,
        default=None,
        help="Path to the engine shared library",
    )
    parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "-n", "--limit",
        type=int,
        default=None,
        help="Limit number of rows to display",
    )
    parser.add_argument(
        "-s", "--schema",
        action="store_true",
        help="Print column names and types instead of rows",
    )
    parser.add_argument(
        "-t", "--expect-type",
        action="append",
        default=[],
        metavar="TYPE",
        help="Expected type of the next column, e.g. 'DECIMAL(18,3)' (repeat per column)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log chunk fetches",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.library is not None:
        overrides["library_path"] = args.library

    try:
        expected = [parse_type(t) for t in args.expect_type]
        engine = NativeEngine(EngineConfig.from_env(**overrides))
        with engine.open(args.database) as db, db.connect() as conn, conn.query(args.sql) as result:
            producer = result.rows()
            if expected:
                mismatches = check_schema(expected, producer.column_types)
                if mismatches:
                    for message in mismatches:
                        print(f"Error: {message}", file=sys.stderr)
                    return 1
            if args.schema:
                dump_schema(producer.columns, producer.column_types)
                return 0
            if args.json:
                dump_rows_json(producer.columns, producer, limit=args.limit)
            else:
                dump_rows_table(producer.columns, producer, limit=args.limit)
    except (EngineError, SyntaxError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
