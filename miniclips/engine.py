"""
Session engine for miniclips.

ScriptEngine owns one Environment and runs commands against it:

    engine = ScriptEngine()
    engine.execute("(bind ?x 10)")        # => ["10"]
    engine.execute("(assert (foo bar))")  # => ["f-1"]
    engine.execute("(/ ?x 0)")            # => ["Error: Division by zero"]
    engine.get_facts()                    # => ["f-1: (foo bar)"]

Each call runs tokenize -> parse -> interpret to completion. Errors never
escape execute(); they come back as a single "Error: ..." line and the
session stays usable. Calls must not overlap: the environment is mutated
in place.
"""

import logging
from typing import List

from .environment import Environment, Value
from .errors import ClipsError, EvaluationError
from .interpreter import format_value, interpret
from .parser import Program, parse
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


def result_lines(result: Value) -> List[str]:
    """Split a command result into display lines."""
    if result is None:
        return []
    if isinstance(result, str):
        return result.split("\n")
    return [format_value(result)]


class ScriptEngine:
    """A single interactive session: one environment, many commands."""

    def __init__(self):
        self.env = Environment()

    def evaluate(self, command: str) -> Value:
        """
        Run a command and return its raw value.

        Raises:
            ClipsError: on lexing, parsing or evaluation failure.
        """
        tokens = tokenize(command)
        program = parse(tokens)
        return self.run(program)

    def run(self, program: Program) -> Value:
        """
        Interpret an already parsed program against the session.

        Raises:
            EvaluationError: on evaluation failure, including nesting too
                deep to evaluate.
        """
        try:
            return interpret(program, self.env)
        except RecursionError:
            raise EvaluationError("Maximum nesting depth exceeded") from None

    def execute(self, command: str) -> List[str]:
        """Run a command and return its display lines."""
        logger.debug("Executing: %s", command)
        try:
            result = self.evaluate(command)
        except ClipsError as e:
            logger.debug("Command failed (%s): %s", type(e).__name__, e)
            return [f"Error: {e}"]
        return result_lines(result)

    def get_facts(self) -> List[str]:
        return [f"f-{k}: {v}" for k, v in self.env.facts.items()]

    def get_rules(self) -> List[str]:
        return [f"{k}: {v}" for k, v in self.env.rules.items()]

    def get_variables(self) -> List[str]:
        """User variable bindings, without TRUE/FALSE/nil."""
        return [f"{k}: {format_value(v)}" for k, v in self.env.user_variables().items()]

    def clear(self) -> None:
        """Discard the session and start a fresh one."""
        self.env = Environment()

    def __repr__(self) -> str:
        return f"ScriptEngine({self.env!r})"
