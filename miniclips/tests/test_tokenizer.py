"""Tests for the tokenizer."""

import pytest
from miniclips.tokenizer import (
    tokenize, Token,
    LPAREN, RPAREN, IDENTIFIER, VARIABLE, NUMBER, STRING, SYMBOL,
)
from miniclips.errors import LexError


def kinds(text):
    return [t.kind for t in tokenize(text)]


def texts(text):
    return [t.text for t in tokenize(text)]


class TestBasicTokens:
    """Tests for individual token kinds."""

    def test_empty_input(self):
        """Empty and blank input yield no tokens."""
        assert tokenize("") == []
        assert tokenize("   \t\n ") == []

    def test_parens(self):
        """Parentheses are their own tokens."""
        assert kinds("()") == [LPAREN, RPAREN]

    def test_simple_expression(self):
        """A flat expression tokenizes left to right."""
        assert kinds("(+ 1 2)") == [LPAREN, SYMBOL, NUMBER, NUMBER, RPAREN]
        assert texts("(+ 1 2)") == ["(", "+", "1", "2", ")"]

    def test_positions(self):
        """Tokens record where they start."""
        tokens = tokenize("(bind ?x 10)")
        assert [t.position for t in tokens] == [0, 1, 6, 9, 11]

    def test_token_equality(self):
        """Tokens compare by kind, text and position."""
        assert tokenize("?x") == [Token(VARIABLE, "?x", 0)]


class TestNumbers:
    """Tests for number literals."""

    def test_integer(self):
        assert tokenize("42") == [Token(NUMBER, "42", 0)]

    def test_decimal(self):
        assert texts("3.14") == ["3.14"]

    def test_negative(self):
        """A minus sign directly before a digit starts a number."""
        assert tokenize("-5") == [Token(NUMBER, "-5", 0)]

    def test_minus_alone_is_operator(self):
        """A minus sign followed by a space is the subtraction operator."""
        assert kinds("(- 5)") == [LPAREN, SYMBOL, NUMBER, RPAREN]

    def test_multiple_dots_consumed(self):
        """Dots following digits are consumed without validation."""
        assert texts("1.2.3") == ["1.2.3"]

    def test_number_then_name(self):
        """Letters end a number and start an identifier."""
        assert kinds("3abc") == [NUMBER, IDENTIFIER]


class TestStrings:
    """Tests for string literals."""

    def test_string(self):
        """Quotes are stripped from the token text."""
        assert tokenize('"hello world"') == [Token(STRING, "hello world", 0)]

    def test_empty_string(self):
        assert texts('""') == [""]

    def test_no_escape_processing(self):
        """A backslash is kept verbatim and does not escape the quote."""
        assert texts('"a\\" b') == ["a\\", "b"]

    def test_unterminated_string(self):
        """An unterminated string runs to the end of input."""
        assert tokenize('(print "oops') == [
            Token(LPAREN, "(", 0),
            Token(IDENTIFIER, "print", 1),
            Token(STRING, "oops", 7),
        ]

    def test_parens_inside_string(self):
        assert kinds('"(a)"') == [STRING]


class TestNames:
    """Tests for variables, identifiers and operator symbols."""

    def test_variable(self):
        assert tokenize("?count_1") == [Token(VARIABLE, "?count_1", 0)]

    def test_bare_question_mark(self):
        """A lone ? is a variable with an empty name."""
        assert texts("? x") == ["?", "x"]

    def test_operators_are_symbols(self):
        """Every fixed operator name is a SYMBOL."""
        for op in ["+", "-", "*", "/", ">", "<", "=", ">=", "<=", "!=", "eq", "neq"]:
            assert kinds(op) == [SYMBOL], op

    def test_identifiers(self):
        """Other names are identifiers, including ones containing operator characters."""
        for name in ["bind", "loop-for-count", "create$", "=>", "f-1", "eqx", "neq2"]:
            assert kinds(name) == [IDENTIFIER], name

    def test_arrow_in_rule(self):
        """=> is a single identifier."""
        assert texts("(defrule r (a) => (b))") == [
            "(", "defrule", "r", "(", "a", ")", "=>", "(", "b", ")", ")"
        ]


class TestLexErrors:
    """Tests for unrecognized characters."""

    def test_unexpected_character(self):
        """An unsupported character fails with its position."""
        with pytest.raises(LexError) as exc_info:
            tokenize("(+ 1 #)")
        assert exc_info.value.char == "#"
        assert exc_info.value.position == 5
        assert str(exc_info.value) == "Unexpected character: # at position 5"

    def test_dollar_cannot_start_name(self):
        """$ is only allowed inside a name."""
        with pytest.raises(LexError):
            tokenize("$x")

    def test_semicolon(self):
        with pytest.raises(LexError):
            tokenize("; comment")
