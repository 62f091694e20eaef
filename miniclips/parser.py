"""
Recursive-descent parser for the miniclips command language.

Builds a tree of Nodes from a token list:

    parse(tokenize("(+ 1 (* 2 ?x))"))
    -> Program([Expression([Symbol('+'), Literal(1),
                            Expression([Symbol('*'), Literal(2), Variable('?x')])])])

Grammar:
    program    := expression*
    expression := "(" designator atom* ")" | atom
    designator := IDENTIFIER | SYMBOL
    atom       := NUMBER | STRING | VARIABLE | IDENTIFIER | SYMBOL | expression

The one exception is the parameter list of loop-for-count, whose head is a
variable: (loop-for-count (?i 1 10) do ...).

Multi-clause forms such as if/then/else or loop-for-count ... do need no
special grammar; the interpreter locates their keywords among the parsed
arguments.
"""

import math
import re
from typing import List, Optional, Sequence, Union

from .errors import ParseError
from .tokenizer import (
    Token, LPAREN, RPAREN, IDENTIFIER, VARIABLE, NUMBER, STRING, SYMBOL,
)

NumericType = Union[int, float]

_NUMBER_PREFIX = re.compile(r"-?\d+(?:\.\d+)?")

LOOP_FOR_COUNT = "loop-for-count"


# ============================================================
# Syntax tree
# ============================================================

class Node:
    """Base class for syntax tree nodes."""

    __slots__ = ()

    def __eq__(self, other):
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self):
        return hash((type(self).__name__, self._key()))

    def _key(self):
        raise NotImplementedError


class _Leaf(Node):
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def _key(self):
        return (type(self.value).__name__, self.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class _Branch(Node):
    __slots__ = ("children",)

    def __init__(self, children: Sequence[Node] = ()):
        self.children = tuple(children)

    def _key(self):
        return self.children

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.children)!r})"


class Program(_Branch):
    """Top-level sequence of expressions, one per command in the input."""


class Expression(_Branch):
    """Parenthesized form; children[0] is the designator."""

    @property
    def designator(self) -> Node:
        return self.children[0]

    @property
    def args(self) -> tuple:
        return self.children[1:]


class Literal(_Leaf):
    """Number or string fixed at parse time."""


class Variable(_Leaf):
    """Variable reference; value is the name including the leading ?."""


class Identifier(_Leaf):
    """Bare name that is not an operator."""


class Symbol(_Leaf):
    """Operator name."""


# ============================================================
# Numbers
# ============================================================

MAX_EXACT_INT = 2 ** 53


def normalize_number(value: NumericType) -> NumericType:
    """
    Hold exactly representable integral values as int, everything else as float.

    Numbers are doubles; int is only a display-friendly form of an integral
    double below 2**53, so every int converts back to float without loss.
    """
    if (isinstance(value, float) and math.isfinite(value) and value.is_integer()
            and abs(value) < MAX_EXACT_INT):
        return int(value)
    return value


def parse_number(text: str) -> NumericType:
    """
    Read the numeric value of a NUMBER token.

    Uses the longest leading -digits[.digits] prefix, so "1.2.3" is 1.2
    and "5." is 5.
    """
    m = _NUMBER_PREFIX.match(text)
    if not m:
        raise ParseError(f"Invalid number: {text}")
    return normalize_number(float(m.group(0)))


# ============================================================
# Parser
# ============================================================

class _Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def consume(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def parse_program(self) -> Program:
        children = []
        while self.pos < len(self.tokens):
            children.append(self.parse_expression())
        return Program(children)

    def parse_expression(self, variable_head: bool = False) -> Node:
        token = self.peek()
        if token is None:
            raise ParseError("Unexpected end of input")

        if token.kind != LPAREN:
            return self.parse_atom()

        self.consume()
        head = self.peek()
        if head is None:
            raise ParseError("Unexpected end of input after '('", token.position)
        allowed = (IDENTIFIER, SYMBOL, VARIABLE) if variable_head else (IDENTIFIER, SYMBOL)
        if head.kind not in allowed:
            raise ParseError(f"Expected identifier or symbol, got {head.kind}", head.position)

        children = [self.parse_atom()]

        # (loop-for-count (?var start end) ...) has a variable-headed parameter list
        if head.kind == IDENTIFIER and head.text == LOOP_FOR_COUNT:
            token_after = self.peek()
            if token_after is not None and token_after.kind == LPAREN:
                children.append(self.parse_expression(variable_head=True))

        while self.peek() is not None and self.peek().kind != RPAREN:
            children.append(self.parse_atom())

        if self.peek() is None:
            raise ParseError("Expected closing parenthesis", token.position)
        self.consume()

        return Expression(children)

    def parse_atom(self) -> Node:
        token = self.peek()
        if token is None:
            raise ParseError("Unexpected end of input")

        if token.kind == LPAREN:
            return self.parse_expression()

        self.consume()
        if token.kind == NUMBER:
            return Literal(parse_number(token.text))
        elif token.kind == STRING:
            return Literal(token.text)
        elif token.kind == VARIABLE:
            return Variable(token.text)
        elif token.kind == IDENTIFIER:
            return Identifier(token.text)
        elif token.kind == SYMBOL:
            return Symbol(token.text)
        raise ParseError(f"Unexpected token type: {token.kind}", token.position)


def parse(tokens: List[Token]) -> Program:
    """
    Parse a token list into a Program.

    An empty token list yields an empty Program.

    Raises:
        ParseError: on a missing closing parenthesis, a designator that is
            neither an identifier nor an operator, a stray ')' or early end
            of input, or nesting too deep to parse.
    """
    try:
        return _Parser(tokens).parse_program()
    except RecursionError:
        raise ParseError("Maximum nesting depth exceeded") from None
