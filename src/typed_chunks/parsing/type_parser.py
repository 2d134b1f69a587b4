"""Parser turning SQL type strings into ``LogicalType`` descriptors."""

from __future__ import annotations

from typing import Any

import ply.yacc as yacc

from typed_chunks.parsing.type_lexer import TypeLexer
from typed_chunks.types import LogicalType, StructMember, TypeTag

# Spellings accepted for each tag, including the engine's aliases
TYPE_ALIASES: dict[str, TypeTag] = {
    "BOOLEAN": TypeTag.BOOLEAN,
    "BOOL": TypeTag.BOOLEAN,
    "LOGICAL": TypeTag.BOOLEAN,
    "TINYINT": TypeTag.TINYINT,
    "INT1": TypeTag.TINYINT,
    "SMALLINT": TypeTag.SMALLINT,
    "INT2": TypeTag.SMALLINT,
    "SHORT": TypeTag.SMALLINT,
    "INTEGER": TypeTag.INTEGER,
    "INT": TypeTag.INTEGER,
    "INT4": TypeTag.INTEGER,
    "SIGNED": TypeTag.INTEGER,
    "BIGINT": TypeTag.BIGINT,
    "INT8": TypeTag.BIGINT,
    "LONG": TypeTag.BIGINT,
    "UTINYINT": TypeTag.UTINYINT,
    "USMALLINT": TypeTag.USMALLINT,
    "UINTEGER": TypeTag.UINTEGER,
    "UBIGINT": TypeTag.UBIGINT,
    "FLOAT": TypeTag.FLOAT,
    "FLOAT4": TypeTag.FLOAT,
    "REAL": TypeTag.FLOAT,
    "DOUBLE": TypeTag.DOUBLE,
    "FLOAT8": TypeTag.DOUBLE,
    "DOUBLE PRECISION": TypeTag.DOUBLE,
    "HUGEINT": TypeTag.HUGEINT,
    "INT128": TypeTag.HUGEINT,
    "UHUGEINT": TypeTag.UHUGEINT,
    "UINT128": TypeTag.UHUGEINT,
    "DECIMAL": TypeTag.DECIMAL,
    "NUMERIC": TypeTag.DECIMAL,
    "VARCHAR": TypeTag.VARCHAR,
    "STRING": TypeTag.VARCHAR,
    "TEXT": TypeTag.VARCHAR,
    "CHAR": TypeTag.VARCHAR,
    "BPCHAR": TypeTag.VARCHAR,
    "BLOB": TypeTag.BLOB,
    "BYTEA": TypeTag.BLOB,
    "BINARY": TypeTag.BLOB,
    "VARBINARY": TypeTag.BLOB,
    "BIT": TypeTag.BIT,
    "BITSTRING": TypeTag.BIT,
    "UUID": TypeTag.UUID,
    "DATE": TypeTag.DATE,
    "TIME": TypeTag.TIME,
    "TIMETZ": TypeTag.TIME_TZ,
    "TIME WITH TIME ZONE": TypeTag.TIME_TZ,
    "TIMESTAMP": TypeTag.TIMESTAMP,
    "DATETIME": TypeTag.TIMESTAMP,
    "TIMESTAMP_US": TypeTag.TIMESTAMP,
    "TIMESTAMP_S": TypeTag.TIMESTAMP_S,
    "TIMESTAMP_MS": TypeTag.TIMESTAMP_MS,
    "TIMESTAMP_NS": TypeTag.TIMESTAMP_NS,
    "TIMESTAMPTZ": TypeTag.TIMESTAMP_TZ,
    "TIMESTAMP WITH TIME ZONE": TypeTag.TIMESTAMP_TZ,
    "INTERVAL": TypeTag.INTERVAL,
    "VARINT": TypeTag.VARINT,
    "ANY": TypeTag.ANY,
    "NULL": TypeTag.SQLNULL,
    "LIST": TypeTag.LIST,
}

# The engine's default precision for a bare DECIMAL
DEFAULT_DECIMAL = (18, 3)


def _lookup(name: str) -> TypeTag:
    tag = TYPE_ALIASES.get(name.upper())
    if tag is None:
        raise ValueError(f"Unknown type name: {name}")
    return tag


class TypeParser:
    """Parser for SQL type strings."""

    tokens = TypeLexer.tokens

    def __init__(self) -> None:
        self.lexer = TypeLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_type_expr_base(self, p: yacc.YaccProduction) -> None:
        """type_expr : base_type"""
        p[0] = p[1]

    def p_type_expr_list(self, p: yacc.YaccProduction) -> None:
        """type_expr : type_expr LBRACKET RBRACKET"""
        p[0] = LogicalType.list_of(p[1])

    def p_type_expr_array(self, p: yacc.YaccProduction) -> None:
        """type_expr : type_expr LBRACKET INTEGER RBRACKET"""
        p[0] = LogicalType(TypeTag.ARRAY, children=(StructMember("child", p[1]),), array_size=p[3])

    def p_base_type_name(self, p: yacc.YaccProduction) -> None:
        """base_type : IDENTIFIER
                     | MULTIWORD"""
        tag = _lookup(p[1])
        if tag == TypeTag.DECIMAL:
            p[0] = LogicalType.decimal(*DEFAULT_DECIMAL)
        else:
            p[0] = LogicalType(tag)

    def p_base_type_one_param(self, p: yacc.YaccProduction) -> None:
        """base_type : IDENTIFIER LPAREN INTEGER RPAREN"""
        tag = _lookup(p[1])
        if tag == TypeTag.DECIMAL:
            p[0] = LogicalType.decimal(p[3], 0)
        else:
            # Length modifiers such as VARCHAR(10) do not change the storage
            p[0] = LogicalType(tag)

    def p_base_type_decimal(self, p: yacc.YaccProduction) -> None:
        """base_type : IDENTIFIER LPAREN INTEGER COMMA INTEGER RPAREN"""
        tag = _lookup(p[1])
        if tag != TypeTag.DECIMAL:
            raise ValueError(f"Type {p[1]} does not take a width and scale")
        p[0] = LogicalType.decimal(p[3], p[5])

    def p_base_type_wrapped(self, p: yacc.YaccProduction) -> None:
        """base_type : IDENTIFIER LPAREN type_expr RPAREN"""
        tag = _lookup(p[1])
        if tag != TypeTag.LIST:
            raise ValueError(f"Type {p[1]} does not take a child type")
        p[0] = LogicalType.list_of(p[3])

    def p_base_type_struct(self, p: yacc.YaccProduction) -> None:
        """base_type : STRUCT LPAREN member_list RPAREN"""
        p[0] = LogicalType(TypeTag.STRUCT, children=tuple(p[3]))

    def p_base_type_union(self, p: yacc.YaccProduction) -> None:
        """base_type : UNION LPAREN member_list RPAREN"""
        p[0] = LogicalType(TypeTag.UNION, children=tuple(p[3]))

    def p_base_type_map(self, p: yacc.YaccProduction) -> None:
        """base_type : MAP LPAREN type_expr COMMA type_expr RPAREN"""
        p[0] = LogicalType(
            TypeTag.MAP,
            children=(StructMember("key", p[3]), StructMember("value", p[5])),
        )

    def p_base_type_enum(self, p: yacc.YaccProduction) -> None:
        """base_type : ENUM LPAREN string_list RPAREN"""
        p[0] = LogicalType(TypeTag.ENUM, dictionary_size=len(p[3]))

    def p_member_list_single(self, p: yacc.YaccProduction) -> None:
        """member_list : member"""
        p[0] = [p[1]]

    def p_member_list_multiple(self, p: yacc.YaccProduction) -> None:
        """member_list : member_list COMMA member"""
        p[0] = p[1] + [p[3]]

    def p_member(self, p: yacc.YaccProduction) -> None:
        """member : IDENTIFIER type_expr
                  | QUOTED_IDENTIFIER type_expr"""
        p[0] = StructMember(p[1], p[2])

    def p_string_list_single(self, p: yacc.YaccProduction) -> None:
        """string_list : STRING"""
        p[0] = [p[1]]

    def p_string_list_multiple(self, p: yacc.YaccProduction) -> None:
        """string_list : string_list COMMA STRING"""
        p[0] = p[1] + [p[3]]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> LogicalType:
        """Parse a type string into a LogicalType."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)
        result = self.parser.parse(data, lexer=self.lexer.lexer)
        if result is None:
            raise SyntaxError(f"Empty type string: {data!r}")
        return result


_parser: TypeParser | None = None


def parse_type(data: str) -> LogicalType:
    """Parse a type string with a shared parser instance."""
    global _parser
    if _parser is None:
        _parser = TypeParser()
    return _parser.parse(data)
