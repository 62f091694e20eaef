"""
Tree-walking evaluator for miniclips.

interpret(node, env) evaluates a syntax tree against an Environment and
returns a single Value. Expressions dispatch on their designator:

    Symbol     -> operator  (+ - * / > < = >= <= != eq neq)
    Identifier -> function  (bind, print, assert, if, loop-for-count, ...)

Operators receive their arguments already evaluated, left to right.
Functions receive the raw argument nodes and decide themselves what to
evaluate and when, which is how bind, if and loop-for-count work.

Values are plain Python objects: int/float, str, bool, None (nil) and
list (a multifield built by create$). Numbers are doubles; integral ones
below 2**53 are held as int.
"""

import logging
import math
import operator
from decimal import Decimal
from typing import Callable, Dict, List, Sequence

from .environment import Environment, Value
from .errors import (
    ArityError, DivisionByZero, DuplicateRule, FactNotFound, InvalidArgument,
    InvalidOperator, MissingThen, OperandTypeError, UndefinedVariable,
    UnknownFunction,
)
from .parser import (
    Node, Program, Expression, Literal, Variable, Identifier, Symbol,
    NumericType, normalize_number,
)

logger = logging.getLogger(__name__)

OperatorHandler = Callable[[List[Value]], Value]
FunctionHandler = Callable[[Sequence[Node], Environment], Value]


# ============================================================
# Values
# ============================================================

def is_number(value: Value) -> bool:
    """True for int and float, False for bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_number(value: NumericType) -> str:
    """
    Render a number the way a JavaScript double prints.

    Examples:
        5.0       -> "5"
        1e-07     -> "1e-7"
        1e+21     -> "1e+21"
        1.5e+20   -> "150000000000000000000"
    """
    value = normalize_number(value)
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    text = repr(value)
    if 1e-6 <= abs(value) < 1e21:
        return format(Decimal(text), "f")
    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    sign = "+" if exponent >= 0 else "-"
    return f"{mantissa}e{sign}{abs(exponent)}"


def _is_truthy(value: Value) -> bool:
    """Only nil and FALSE are false; 0, "" and an empty multifield are true."""
    return value is not None and value is not False


def format_value(value: Value) -> str:
    """
    Render a value the way CLIPS shows it.

    Examples:
        None        -> "nil"
        True        -> "TRUE"
        [1, "a"]    -> "(1 a)"
        2.0         -> "2"
    """
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, list):
        return "(" + " ".join(format_value(v) for v in value) + ")"
    if is_number(value):
        return format_number(value)
    return str(value)


def node_to_string(node: Node) -> str:
    """
    Serialize a node back to canonical source text.

    Used to store asserted facts and rule definitions:
        (foo "bar" ?x 2) -> '(foo "bar" ?x 2)'
    """
    if isinstance(node, (Expression, Program)):
        return "(" + " ".join(node_to_string(c) for c in node.children) + ")"
    if isinstance(node, Literal):
        if isinstance(node.value, str):
            return f'"{node.value}"'
        return format_number(node.value)
    return str(node.value)


def strictly_equal(a: Value, b: Value) -> bool:
    """Equality without coercion: 1 and "1" differ, as do 1 and TRUE."""
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, list) or isinstance(b, list):
        # Multifields compare by identity
        return a is b
    return type(a) is type(b) and a == b


# ============================================================
# Operators
# ============================================================

def _require_number(value: Value, message: str) -> float:
    # Arithmetic runs on doubles; results are normalized afterwards
    if not is_number(value):
        raise OperandTypeError(message)
    return float(value)


def nary_fold(identity: NumericType,
              binary_op: Callable[[NumericType, NumericType], NumericType],
              message: str) -> OperatorHandler:
    """
    Create an n-ary numeric fold starting from identity.

    Examples:
        nary_fold(0, operator.add, ...)  # (+) = 0, (+ x y z) = x+y+z
        nary_fold(1, operator.mul, ...)  # (*) = 1, (* x y z) = x*y*z
    """
    def handler(args: List[Value]) -> Value:
        result = identity
        for a in args:
            result = binary_op(result, _require_number(a, message))
        return normalize_number(result)
    return handler


def _minus(args: List[Value]) -> Value:
    """(-) = 0, (- x) = -x, (- x y z) = x-y-z."""
    if not args:
        return 0
    if len(args) == 1:
        return normalize_number(-_require_number(args[0], "Negation requires a numeric operand"))
    result = _require_number(args[0], "Subtraction requires numeric operands")
    for a in args[1:]:
        result = result - _require_number(a, "Subtraction requires numeric operands")
    return normalize_number(result)


def _divide(args: List[Value]) -> Value:
    """(/ x) = x, (/ x y z) = x/y/z; any zero divisor fails."""
    if not args:
        raise ArityError("Division requires operands")
    result = _require_number(args[0], "Division requires numeric operands")
    for a in args[1:]:
        divisor = _require_number(a, "Division requires numeric operands")
        if divisor == 0:
            raise DivisionByZero()
        result = result / divisor
    return normalize_number(result)


def comparison(compare: Callable[[object, object], bool]) -> OperatorHandler:
    """
    Create a binary comparison.

    Two numbers compare numerically; anything else compares by display text.
    """
    def handler(args: List[Value]) -> Value:
        if len(args) != 2:
            raise ArityError("Comparison requires exactly two operands")
        a, b = args
        if is_number(a) and is_number(b):
            return compare(a, b)
        return compare(format_value(a), format_value(b))
    return handler


def equality(name: str, negate: bool) -> OperatorHandler:
    def handler(args: List[Value]) -> Value:
        if len(args) != 2:
            raise ArityError(f"{name} requires exactly two operands")
        return strictly_equal(args[0], args[1]) != negate
    return handler


OPERATORS: Dict[str, OperatorHandler] = {
    "+": nary_fold(0, operator.add, "Addition requires numeric operands"),
    "*": nary_fold(1, operator.mul, "Multiplication requires numeric operands"),
    "-": _minus,
    "/": _divide,
    ">": comparison(operator.gt),
    "<": comparison(operator.lt),
    "=": comparison(operator.eq),
    ">=": comparison(operator.ge),
    "<=": comparison(operator.le),
    "!=": comparison(operator.ne),
    "eq": equality("eq", negate=False),
    "neq": equality("neq", negate=True),
}


def evaluate_operator(name: str, args: Sequence[Node], env: Environment) -> Value:
    values = [interpret(arg, env) for arg in args]
    handler = OPERATORS.get(name)
    if handler is None:
        raise InvalidOperator(f"Unknown operator: {name}")
    return handler(values)


# ============================================================
# Functions
# ============================================================

def _is_keyword(node: Node, word: str) -> bool:
    return isinstance(node, Identifier) and node.value == word


def _bind(args: Sequence[Node], env: Environment) -> Value:
    if len(args) != 2:
        raise ArityError("bind requires exactly two arguments")
    if not isinstance(args[0], Variable):
        raise InvalidArgument("First argument to bind must be a variable")
    value = interpret(args[1], env)
    env.variables[args[0].value] = value
    return value


def _print(args: Sequence[Node], env: Environment) -> Value:
    parts = []
    for i, arg in enumerate(args):
        if i == 0 and _is_keyword(arg, "t"):
            continue  # output destination
        if _is_keyword(arg, "crlf"):
            parts.append("\n")
        else:
            parts.append(format_value(interpret(arg, env)))
    return "".join(parts)


def _assert(args: Sequence[Node], env: Environment) -> Value:
    if len(args) != 1:
        raise ArityError("assert requires exactly one argument")
    if isinstance(args[0], Expression):
        text = node_to_string(args[0])
    else:
        text = format_value(interpret(args[0], env))
    fact_id = env.add_fact(text)
    logger.debug("Asserted f-%s: %s", fact_id, text)
    return f"f-{fact_id}"


def _facts(args: Sequence[Node], env: Environment) -> Value:
    if not env.facts:
        return "No facts in the system"
    lines = ["Facts:"] + [f"f-{k}: {v}" for k, v in env.facts.items()]
    return "\n".join(lines).strip()


def _rules(args: Sequence[Node], env: Environment) -> Value:
    if not env.rules:
        return "No rules in the system"
    lines = ["Rules:"] + [f"{k}: {v}" for k, v in env.rules.items()]
    return "\n".join(lines).strip()


def _clear(args: Sequence[Node], env: Environment) -> Value:
    env.reset()
    logger.debug("Environment cleared")
    return "CLIPS system cleared"


def _defrule(args: Sequence[Node], env: Environment) -> Value:
    if not args:
        raise ArityError("defrule requires at least a rule name")
    if not isinstance(args[0], Identifier):
        raise InvalidArgument("First argument to defrule must be an identifier")

    name = args[0].value
    if name in env.rules:
        raise DuplicateRule(name)

    # Only the source text is kept; conditions are never matched
    env.rules[name] = node_to_string(Expression([Identifier("defrule")] + list(args)))
    logger.debug("Defined rule %s", name)
    return f"Rule '{name}' defined"


def _strip_fact_prefix(text: str) -> str:
    return text[2:] if text.startswith("f-") else text


def _retract(args: Sequence[Node], env: Environment) -> Value:
    if len(args) != 1:
        raise ArityError("retract requires exactly one argument")

    if isinstance(args[0], Identifier):
        fact_id = _strip_fact_prefix(args[0].value)
    else:
        fact_id = _strip_fact_prefix(format_value(interpret(args[0], env)))

    if fact_id not in env.facts:
        raise FactNotFound(fact_id)
    del env.facts[fact_id]
    logger.debug("Retracted f-%s", fact_id)
    return f"Fact f-{fact_id} retracted"


def _run(args: Sequence[Node], env: Environment) -> Value:
    if not env.rules:
        return "No rules to execute"
    lines = ["Executing rules:"]
    lines.extend(f"Activated rule: {name}" for name in env.rules)
    lines.append(f"Run complete. {len(env.rules)} rule(s) activated.")
    return "\n".join(lines)


def _loop_for_count(args: Sequence[Node], env: Environment) -> Value:
    """(loop-for-count (?i start end) [do] body)"""
    if len(args) < 2:
        raise ArityError("loop-for-count requires at least loop parameters and an action")
    if not isinstance(args[0], Expression):
        raise InvalidArgument("First argument to loop-for-count must be a parameter list")

    params = args[0].children
    if len(params) != 3:
        raise InvalidArgument("Loop parameters must include variable, start, and end values")
    if not isinstance(params[0], Variable):
        raise InvalidArgument("First loop parameter must be a variable")

    name = params[0].value
    start = interpret(params[1], env)
    end = interpret(params[2], env)
    if not is_number(start) or not is_number(end):
        raise OperandTypeError("Start and end values must be numbers")

    action_index = 2 if _is_keyword(args[1], "do") else 1
    if action_index >= len(args):
        raise ArityError("Missing action in loop-for-count")
    action = args[action_index]

    parts = []
    i = start
    while i <= end:
        env.variables[name] = i
        result = interpret(action, env)
        if result is not None:
            parts.append(format_value(result))
        i = normalize_number(i + 1)
    return "".join(parts)


def _if(args: Sequence[Node], env: Environment) -> Value:
    """(if cond then action... [else action...])"""
    if len(args) < 3:
        raise ArityError("if requires condition, then clause, and optionally an else clause")

    condition = interpret(args[0], env)

    then_index = -1
    else_index = -1
    for i in range(1, len(args)):
        if _is_keyword(args[i], "then") and then_index == -1:
            then_index = i
        elif _is_keyword(args[i], "else"):
            else_index = i
            break

    if then_index == -1:
        raise MissingThen()

    if _is_truthy(condition):
        branch = args[then_index + 1:else_index if else_index != -1 else len(args)]
    elif else_index != -1:
        branch = args[else_index + 1:]
    else:
        return None

    result = None
    for node in branch:
        result = interpret(node, env)
    return result


def _create_multifield(args: Sequence[Node], env: Environment) -> Value:
    return [interpret(arg, env) for arg in args]


FUNCTIONS: Dict[str, FunctionHandler] = {
    "bind": _bind,
    "print": _print,
    "printout": _print,
    "assert": _assert,
    "facts": _facts,
    "rules": _rules,
    "clear": _clear,
    "defrule": _defrule,
    "retract": _retract,
    "run": _run,
    "loop-for-count": _loop_for_count,
    "if": _if,
    "create$": _create_multifield,
}


def evaluate_function(name: str, args: Sequence[Node], env: Environment) -> Value:
    handler = FUNCTIONS.get(name)
    if handler is None:
        raise UnknownFunction(name)
    return handler(args, env)


# ============================================================
# Dispatch
# ============================================================

def interpret(node: Node, env: Environment) -> Value:
    """
    Evaluate a node against env.

    A Program yields the value of its last expression (None when empty).

    Raises:
        EvaluationError: or one of its subclasses. Changes made to env
            before the failure are kept.
    """
    if isinstance(node, Program):
        result = None
        for child in node.children:
            result = interpret(child, env)
        return result

    if isinstance(node, Expression):
        if not node.children:
            raise InvalidOperator("Empty expression")
        head = node.designator
        if isinstance(head, Identifier):
            return evaluate_function(head.value, node.args, env)
        if isinstance(head, Symbol):
            return evaluate_operator(head.value, node.args, env)
        raise InvalidOperator(f"Invalid operator type: {type(head).__name__}")

    if isinstance(node, Variable):
        if node.value not in env.variables:
            raise UndefinedVariable(node.value)
        return env.variables[node.value]

    if isinstance(node, (Literal, Identifier, Symbol)):
        return node.value

    raise InvalidOperator(f"Unknown node type: {type(node).__name__}")
