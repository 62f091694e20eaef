"""Session state shared by successive commands."""

from typing import Any, Dict, List, Optional, Union

Value = Optional[Union[int, float, str, bool, List[Any]]]

BUILTIN_VARIABLES: Dict[str, Value] = {
    "TRUE": True,
    "FALSE": False,
    "nil": None,
}


class Environment:
    """
    Mutable state of one session.

    Attributes:
        variables: variable name (e.g. "?x", or a built-in like "TRUE") -> value
        facts: fact id ("1", "2", ...) -> fact text, in assertion order
        rules: rule name -> stored rule text, in definition order
        fact_counter: last fact id handed out; never decremented by retract
    """

    def __init__(self):
        self.variables: Dict[str, Value] = dict(BUILTIN_VARIABLES)
        self.facts: Dict[str, str] = {}
        self.rules: Dict[str, str] = {}
        self.fact_counter = 0

    def reset(self) -> None:
        """Drop all facts, rules and user variables; restart fact ids at 1."""
        self.facts.clear()
        self.rules.clear()
        self.fact_counter = 0
        self.variables.clear()
        self.variables.update(BUILTIN_VARIABLES)

    def add_fact(self, text: str) -> str:
        """Store a fact under the next id and return that id."""
        self.fact_counter += 1
        fact_id = str(self.fact_counter)
        self.facts[fact_id] = text
        return fact_id

    def user_variables(self) -> Dict[str, Value]:
        """Bindings made by the user, without TRUE/FALSE/nil."""
        return {k: v for k, v in self.variables.items() if k not in BUILTIN_VARIABLES}

    def __repr__(self) -> str:
        return (f"Environment(variables={len(self.variables)}, facts={len(self.facts)}, "
                f"rules={len(self.rules)}, fact_counter={self.fact_counter})")
