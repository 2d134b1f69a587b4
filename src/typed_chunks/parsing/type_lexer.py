"""Lexer for SQL type strings such as ``DECIMAL(18,3)`` or ``STRUCT(a INTEGER)[]``."""

import ply.lex as lex


class TypeLexer:
    """Lexer for tokenizing type strings."""

    # Reserved keywords (matched case-insensitively)
    reserved = {
        "struct": "STRUCT",
        "union": "UNION",
        "map": "MAP",
        "enum": "ENUM",
    }

    tokens = [
        "IDENTIFIER",
        "MULTIWORD",
        "INTEGER",
        "STRING",
        "QUOTED_IDENTIFIER",
        "LBRACKET",
        "RBRACKET",
        "LPAREN",
        "RPAREN",
        "COMMA",
    ] + list(reserved.values())

    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_COMMA = r","

    t_ignore = " \t\n"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    # Defined before IDENTIFIER so the longer spellings win
    def t_MULTIWORD(self, t: lex.LexToken) -> lex.LexToken:
        r"(?i:timestamp\s+with\s+time\s+zone|time\s+with\s+time\s+zone|double\s+precision)"
        t.value = " ".join(t.value.upper().split())
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+"
        t.value = int(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"'([^']|'')*'"
        t.value = t.value[1:-1].replace("''", "'")
        return t

    def t_QUOTED_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"]|"")*"'
        t.value = t.value[1:-1].replace('""', '"')
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
