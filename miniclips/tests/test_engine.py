"""Tests for the ScriptEngine session."""

import pytest
from miniclips import ScriptEngine, EvaluationError
from miniclips.parser import Expression, Symbol, Literal


class TestExecute:
    """Tests for execute() result lines."""

    def setup_method(self):
        """Set up a fresh session."""
        self.engine = ScriptEngine()

    def test_number_result(self):
        assert self.engine.execute("(+ 3 3)") == ["6"]

    def test_float_result(self):
        assert self.engine.execute("(/ 10 4)") == ["2.5"]
        assert self.engine.execute("(/ 10 2)") == ["5"]

    def test_boolean_result(self):
        assert self.engine.execute("(> 5 3)") == ["TRUE"]
        assert self.engine.execute("(eq 1 2)") == ["FALSE"]

    def test_multifield_result(self):
        self.engine.execute("(bind ?list (create$ 1 2 3))")
        assert self.engine.execute("?list") == ["(1 2 3)"]

    def test_nil_result_has_no_lines(self):
        assert self.engine.execute('(if (> 1 2) then (print "x"))') == []
        assert self.engine.execute("") == []

    def test_multi_line_result(self):
        self.engine.execute("(assert (a))")
        self.engine.execute("(assert (b))")
        assert self.engine.execute("(facts)") == ["Facts:", "f-1: (a)", "f-2: (b)"]

    def test_trailing_crlf(self):
        assert self.engine.execute('(printout t "Hi" crlf)') == ["Hi", ""]

    def test_bind_then_lookup(self):
        assert self.engine.execute("(bind ?x 10)") == ["10"]
        assert self.engine.execute("?x") == ["10"]
        self.engine.execute('(bind ?x "ten")')
        assert self.engine.execute("?x") == ["ten"]

    def test_empty_multifield_is_true(self):
        assert self.engine.execute("(if (create$) then 1 else 2)") == ["1"]

    def test_if_example(self):
        assert self.engine.execute('(if (> 7 5) then (print "A") else (print "B"))') == ["A"]
        assert self.engine.execute('(if (> 3 5) then (print "A") else (print "B"))') == ["B"]


class TestErrors:
    """Tests for error reporting at the session boundary."""

    def setup_method(self):
        self.engine = ScriptEngine()

    def test_error_lines(self):
        """Each failure becomes exactly one Error: line."""
        cases = [
            ("(/ 1 0)", "Error: Division by zero"),
            ("?y", "Error: Variable not defined: ?y"),
            ("(foo)", "Error: Unknown function: foo"),
            ("(+ 1 2", "Error: Expected closing parenthesis"),
            ("(+ 1 #)", "Error: Unexpected character: # at position 5"),
            ('(+ 1 "a")', "Error: Addition requires numeric operands"),
            ("(if TRUE 1 2)", "Error: Missing 'then' in if statement"),
            ("(retract f-9)", "Error: Fact f-9 not found"),
            ("(> 1)", "Error: Comparison requires exactly two operands"),
        ]
        for command, message in cases:
            assert self.engine.execute(command) == [message], command

    def test_session_survives_error(self):
        self.engine.execute("(bind ?x 5)")
        assert self.engine.execute("(/ ?x 0)") == ["Error: Division by zero"]
        assert self.engine.execute("(* ?x 2)") == ["10"]

    def test_deep_nesting_is_an_error(self):
        """Nesting too deep for the parser becomes one Error: line."""
        command = "(+ " * 3000 + "1" + ")" * 3000
        assert self.engine.execute(command) == ["Error: Maximum nesting depth exceeded"]
        assert self.engine.execute("(+ 1 2)") == ["3"]

    def test_deep_tree_at_run(self):
        node = Literal(1)
        for _ in range(5000):
            node = Expression([Symbol("+"), node])
        with pytest.raises(EvaluationError) as exc_info:
            self.engine.run(node)
        assert str(exc_info.value) == "Maximum nesting depth exceeded"

    def test_number_overflow(self):
        """Results beyond the double range are Infinity, not errors."""
        big = "1" + "0" * 300
        assert self.engine.execute(f"(* {big} {big})") == ["Infinity"]
        assert self.engine.execute("(* " + " ".join([big] * 16) + ")") == ["Infinity"]
        assert self.engine.execute(f"(+ (* {big} {big}) 0.5)") == ["Infinity"]
        assert self.engine.execute(f"(- (* {big} {big}))") == ["-Infinity"]

    def test_small_numbers(self):
        assert self.engine.execute("(/ 1 10000000)") == ["1e-7"]
        assert self.engine.execute("(/ 1 100000)") == ["0.00001"]

    def test_duplicate_rule(self):
        self.engine.execute("(defrule r1 (a) => (b))")
        assert self.engine.execute("(defrule r1 (c) => (d))") == ["Error: Rule 'r1' already exists"]
        assert self.engine.get_rules() == ["r1: (defrule r1 (a) => (b))"]


class TestSessionViews:
    """Tests for get_facts, get_rules, get_variables and clear."""

    def setup_method(self):
        self.engine = ScriptEngine()

    def test_empty_views(self):
        assert self.engine.get_facts() == []
        assert self.engine.get_rules() == []
        assert self.engine.get_variables() == []

    def test_facts_view(self):
        assert self.engine.execute("(assert (foo bar))") == ["f-1"]
        assert self.engine.execute("(assert (baz))") == ["f-2"]
        assert self.engine.get_facts() == ["f-1: (foo bar)", "f-2: (baz)"]

        self.engine.execute("(retract f-1)")
        assert self.engine.get_facts() == ["f-2: (baz)"]
        assert self.engine.execute("(retract f-1)") == ["Error: Fact f-1 not found"]

    def test_rules_view(self):
        self.engine.execute("(defrule adult-rule (person (age ?a)) => (assert (adult ?a)))")
        assert self.engine.get_rules() == [
            "adult-rule: (defrule adult-rule (person (age ?a)) => (assert (adult ?a)))"
        ]

    def test_variables_view(self):
        self.engine.execute("(bind ?x 10)")
        self.engine.execute("(bind ?l (create$ a TRUE))")
        assert self.engine.get_variables() == ["?x: 10", "?l: (a TRUE)"]

    def test_clear_command(self):
        """(clear) empties the session but keeps TRUE/FALSE/nil."""
        self.engine.execute("(bind ?x 1)")
        self.engine.execute("(assert (a))")
        self.engine.execute("(defrule r (a) => (b))")
        assert self.engine.execute("(clear)") == ["CLIPS system cleared"]
        assert self.engine.execute("(facts)") == ["No facts in the system"]
        assert self.engine.execute("(rules)") == ["No rules in the system"]
        assert self.engine.execute("?x") == ["Error: Variable not defined: ?x"]
        assert self.engine.env.variables == {"TRUE": True, "FALSE": False, "nil": None}

    def test_clear_method(self):
        """clear() installs a fresh environment."""
        old_env = self.engine.env
        self.engine.execute("(assert (a))")
        self.engine.clear()
        assert self.engine.env is not old_env
        assert self.engine.get_facts() == []
        assert self.engine.execute("(assert (b))") == ["f-1"]

    def test_views_are_not_cached(self):
        assert self.engine.get_facts() == []
        self.engine.execute("(assert (a))")
        assert self.engine.get_facts() == ["f-1: (a)"]
