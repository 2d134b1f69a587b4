"""Parsing of SQL type strings."""

from typed_chunks.parsing.type_parser import TypeParser, parse_type

__all__ = [
    "TypeParser",
    "parse_type",
]
