"""
Tokenizer for the miniclips command language.

Turns a raw command string into an ordered list of Tokens in a single
left-to-right scan:

    tokenize('(bind ?x (+ 1 2))')
    -> LPAREN IDENTIFIER(bind) VARIABLE(?x) LPAREN SYMBOL(+) NUMBER(1) NUMBER(2) RPAREN RPAREN

Token kinds:
    LPAREN, RPAREN  - ( and )
    STRING          - "..." (no escape processing; unterminated runs to end)
    NUMBER          - digits, optionally preceded by - and followed by . and digits
    VARIABLE        - ?name
    SYMBOL          - one of the fixed operator names (+ - * / > < = >= <= != eq neq)
    IDENTIFIER      - any other name
"""

import re
from typing import List

from .errors import LexError

# Token kinds
LPAREN = "LPAREN"
RPAREN = "RPAREN"
IDENTIFIER = "IDENTIFIER"
VARIABLE = "VARIABLE"
NUMBER = "NUMBER"
STRING = "STRING"
SYMBOL = "SYMBOL"

OPERATORS = frozenset(["+", "-", "*", "/", ">", "<", "=", ">=", "<=", "!=", "eq", "neq"])

_DIGIT = re.compile(r"[0-9]")
_NUMBER_CHAR = re.compile(r"[0-9.]")
_VARIABLE_CHAR = re.compile(r"[a-zA-Z0-9_]")
_NAME_START = re.compile(r"[a-zA-Z_+\-*/>=<!]")
_NAME_CHAR = re.compile(r"[a-zA-Z0-9_+\-*/>=<!$]")


class Token:
    """A lexical token: kind, source text and start position."""

    __slots__ = ("kind", "text", "position")

    def __init__(self, kind: str, text: str, position: int):
        self.kind = kind
        self.text = text
        self.position = position

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text!r}, {self.position})"

    def __eq__(self, other):
        if isinstance(other, Token):
            return (self.kind, self.text, self.position) == (other.kind, other.text, other.position)
        return False

    def __hash__(self):
        return hash((self.kind, self.text, self.position))


def _scan(text: str, start: int, pattern: "re.Pattern") -> int:
    """Return the index of the first character at or after start not matching pattern."""
    end = start
    while end < len(text) and pattern.match(text[end]):
        end += 1
    return end


def tokenize(text: str) -> List[Token]:
    """
    Split a command string into tokens.

    Raises:
        LexError: on a character that cannot start any token. No partial
            token list is returned.
    """
    tokens: List[Token] = []
    pos = 0

    while pos < len(text):
        c = text[pos]

        if c.isspace():
            pos += 1
            continue

        if c == "(":
            tokens.append(Token(LPAREN, c, pos))
            pos += 1
            continue

        if c == ")":
            tokens.append(Token(RPAREN, c, pos))
            pos += 1
            continue

        if c == '"':
            end = text.find('"', pos + 1)
            if end == -1:
                # Unterminated string swallows the rest of the input
                tokens.append(Token(STRING, text[pos + 1:], pos))
                pos = len(text)
            else:
                tokens.append(Token(STRING, text[pos + 1:end], pos))
                pos = end + 1
            continue

        next_char = text[pos + 1] if pos + 1 < len(text) else ""
        if _DIGIT.match(c) or (c == "-" and _DIGIT.match(next_char)):
            end = _scan(text, pos + 1, _NUMBER_CHAR)
            tokens.append(Token(NUMBER, text[pos:end], pos))
            pos = end
            continue

        if c == "?":
            end = _scan(text, pos + 1, _VARIABLE_CHAR)
            tokens.append(Token(VARIABLE, text[pos:end], pos))
            pos = end
            continue

        if _NAME_START.match(c):
            end = _scan(text, pos + 1, _NAME_CHAR)
            name = text[pos:end]
            kind = SYMBOL if name in OPERATORS else IDENTIFIER
            tokens.append(Token(kind, name, pos))
            pos = end
            continue

        raise LexError(c, pos)

    return tokens
