"""Tokenizer for the Exo language.

Scanning is delegated to Lark's basic lexer; the grammar below only
declares terminals. The hand-written recursive-descent parser in
:mod:`exo.parser` pulls tokens one at a time from a :class:`TokenStream`.

Lexical failures are not raised. They surface as a single ``ILLEGAL``
token (whose value is the error message) followed by ``EOF``, and the
parser reports them with their position.

Integer literals must fit in a signed 64-bit Int before any sign is
applied, so the smallest Int is written ``-9223372036854775807 - 1``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .values import NIL, in_int_range


EXO_TERMINALS = r"""
    start: _item*
    _item: IDENT | FLOAT | INT | STRING
         | EQEQ | BANGEQ | LE | GE | LT | GT | EQ
         | PLUS | MINUS | STAR | SLASH | CARET | BANG
         | COMMA | SEMICOLON | LPAREN | RPAREN | LBRACE | RBRACE

    IDENT: /[A-Za-z_][A-Za-z0-9_]*/
    FLOAT.2: /\d+\.\d+/
    INT: /\d+/
    STRING: /"[^"]*"/ | /'[^']*'/

    EQEQ: "=="
    BANGEQ: "!="
    LE: "<="
    GE: ">="
    LT: "<"
    GT: ">"
    EQ: "="
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    CARET: "^"
    BANG: "!"
    COMMA: ","
    SEMICOLON: ";"
    LPAREN: "("
    RPAREN: ")"
    LBRACE: "{"
    RBRACE: "}"

    COMMENT: /\/\/[^\n]*/
    %ignore COMMENT
    %import common.WS
    %ignore WS
"""


EXO_LEXER = Lark(EXO_TERMINALS, parser='lalr', lexer='basic')


KEYWORDS = {
    'fn': 'FN',
    'let': 'LET',
    'true': 'TRUE',
    'false': 'FALSE',
    'nil': 'NIL',
    'if': 'IF',
    'else': 'ELSE',
    'return': 'RETURN',
    'for': 'FOR',
    'in': 'IN',
}

# Source spelling of each fixed token kind, used in error messages.
TOKEN_TEXT = {
    'EQEQ': '==', 'BANGEQ': '!=', 'LE': '<=', 'GE': '>=', 'LT': '<', 'GT': '>',
    'EQ': '=', 'PLUS': '+', 'MINUS': '-', 'STAR': '*', 'SLASH': '/',
    'CARET': '^', 'BANG': '!', 'COMMA': ',', 'SEMICOLON': ';',
    'LPAREN': '(', 'RPAREN': ')', 'LBRACE': '{', 'RBRACE': '}',
    'EOF': 'end of input',
}
TOKEN_TEXT.update({kind: word for word, kind in KEYWORDS.items()})


@dataclass(frozen=True)
class Token:
    type: str
    value: Any
    line: int
    column: int

    def describe(self) -> str:
        if self.type in ('IDENT', 'INT', 'FLOAT'):
            return f"{self.type} {self.value}"
        if self.type == 'STRING':
            return f"STRING {self.value!r}"
        if self.type == 'EOF':
            return 'end of input'
        return repr(TOKEN_TEXT.get(self.type, self.type))


def end_position(source: str):
    line = source.count('\n') + 1
    column = len(source) - (source.rfind('\n') + 1) + 1
    return line, column


class TokenStream:
    """Pull-based stream of tokens over a source string.

    ``next_token()`` returns tokens in order and keeps returning the
    ``EOF`` token once the input is exhausted.
    """
    def __init__(self, source: str):
        self.source = source
        self._tokens = self._scan()
        self._eof = None

    def _scan(self) -> Iterator[Token]:
        try:
            for tok in EXO_LEXER.lex(self.source):
                yield self._convert(tok)
        except UnexpectedCharacters as e:
            if e.char in ('"', "'"):
                message = f"unterminated string - expected {e.char}"
            else:
                message = f"unexpected character: {e.char}"
            yield Token('ILLEGAL', message, e.line, e.column)

    def _convert(self, tok) -> Token:
        kind = tok.type
        if kind == 'IDENT':
            if tok.value in KEYWORDS:
                word = tok.value
                kind = KEYWORDS[word]
                value = {'true': True, 'false': False, 'nil': NIL}.get(word)
                return Token(kind, value, tok.line, tok.column)
            return Token(kind, str(tok.value), tok.line, tok.column)
        if kind == 'INT':
            value = int(tok.value)
            if not in_int_range(value):
                return Token('ILLEGAL', f"integer literal out of range: {tok.value}", tok.line, tok.column)
            return Token(kind, value, tok.line, tok.column)
        if kind == 'FLOAT':
            return Token(kind, float(tok.value), tok.line, tok.column)
        if kind == 'STRING':
            return Token(kind, str(tok.value)[1:-1], tok.line, tok.column)
        return Token(kind, None, tok.line, tok.column)

    def next_token(self) -> Token:
        if self._eof is not None:
            return self._eof
        token = next(self._tokens, None)
        if token is None:
            line, column = end_position(self.source)
            self._eof = Token('EOF', None, line, column)
            return self._eof
        if token.type == 'ILLEGAL':
            # nothing is scanned past a lexical failure
            self._eof = Token('EOF', None, token.line, token.column)
        return token

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == 'EOF':
                return


def tokenize(source: str) -> list:
    """Return every token of ``source``, ending with ``EOF``."""
    return list(TokenStream(source))
