"""
Error types for miniclips.

Every failure raised while tokenizing, parsing or evaluating a command is a
ClipsError. The session engine catches these at its boundary and renders
them as a single "Error: <message>" line, so str(error) is always the bare
human-readable message.
"""

from typing import Optional


class ClipsError(Exception):
    """Base class for all miniclips errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


# ============================================================
# Front-end errors
# ============================================================

class LexError(ClipsError):
    """An input character that starts no token."""

    def __init__(self, char: str, position: int):
        super().__init__(f"Unexpected character: {char} at position {position}")
        self.char = char
        self.position = position


class ParseError(ClipsError):
    """A structurally malformed command."""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position


# ============================================================
# Evaluation errors
# ============================================================

class EvaluationError(ClipsError):
    """Base class for errors raised while walking the syntax tree."""


class UndefinedVariable(EvaluationError):
    def __init__(self, name: str):
        super().__init__(f"Variable not defined: {name}")
        self.name = name


class OperandTypeError(EvaluationError):
    """Non-numeric operand where a number is required."""


class DivisionByZero(EvaluationError):
    def __init__(self):
        super().__init__("Division by zero")


class ArityError(EvaluationError):
    """Wrong number of arguments for an operator or function."""


class InvalidOperator(EvaluationError):
    """Expression designator that is neither a function nor an operator."""


class InvalidArgument(EvaluationError):
    """Argument of the wrong syntactic kind (e.g. bind to a non-variable)."""


class UnknownFunction(EvaluationError):
    def __init__(self, name: str):
        super().__init__(f"Unknown function: {name}")
        self.name = name


class DuplicateRule(EvaluationError):
    def __init__(self, name: str):
        super().__init__(f"Rule '{name}' already exists")
        self.name = name


class FactNotFound(EvaluationError):
    def __init__(self, fact_id: str):
        super().__init__(f"Fact f-{fact_id} not found")
        self.fact_id = fact_id


class MissingThen(EvaluationError):
    def __init__(self):
        super().__init__("Missing 'then' in if statement")
