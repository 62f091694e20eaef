"""
miniclips - a simplified CLIPS

A small Lisp-like rule language: type S-expression commands, get textual
results back, and keep facts, rules and variables across commands.

Quick Start:
    from miniclips import ScriptEngine

    engine = ScriptEngine()
    engine.execute("(bind ?x 10)")              # => ["10"]
    engine.execute("(* ?x 2)")                  # => ["20"]
    engine.execute("(assert (student mohamed))")  # => ["f-1"]
    engine.execute("(facts)")                   # => ["Facts:", "f-1: (student mohamed)"]

Pipeline:
    tokenize(text) -> tokens -> parse(tokens) -> Program -> interpret(program, env) -> value

Built-ins:
    Operators:  + - * / > < = >= <= != eq neq
    Functions:  bind print printout assert facts rules clear defrule
                retract run loop-for-count if create$

Rules are stored as text only: (run) reports every defined rule as
activated without matching it against the facts.
"""

__version__ = "0.1.0"

from .errors import (
    ClipsError,
    LexError,
    ParseError,
    EvaluationError,
    UndefinedVariable,
    OperandTypeError,
    DivisionByZero,
    ArityError,
    InvalidOperator,
    InvalidArgument,
    UnknownFunction,
    DuplicateRule,
    FactNotFound,
    MissingThen,
)

from .tokenizer import Token, tokenize, OPERATORS as OPERATOR_NAMES

from .parser import (
    Node,
    Program,
    Expression,
    Literal,
    Variable,
    Identifier,
    Symbol,
    parse,
)

from .environment import Environment, Value

from .interpreter import (
    interpret,
    evaluate_operator,
    evaluate_function,
    format_value,
    node_to_string,
    OPERATORS,
    FUNCTIONS,
)

from .engine import ScriptEngine

# Public API
__all__ = [
    # Version
    "__version__",
    # Errors
    "ClipsError",
    "LexError",
    "ParseError",
    "EvaluationError",
    "UndefinedVariable",
    "OperandTypeError",
    "DivisionByZero",
    "ArityError",
    "InvalidOperator",
    "InvalidArgument",
    "UnknownFunction",
    "DuplicateRule",
    "FactNotFound",
    "MissingThen",
    # Tokenizer
    "Token",
    "tokenize",
    "OPERATOR_NAMES",
    # Parser
    "Node",
    "Program",
    "Expression",
    "Literal",
    "Variable",
    "Identifier",
    "Symbol",
    "parse",
    # Evaluation
    "Environment",
    "Value",
    "interpret",
    "evaluate_operator",
    "evaluate_function",
    "format_value",
    "node_to_string",
    "OPERATORS",
    "FUNCTIONS",
    # Session
    "ScriptEngine",
]
