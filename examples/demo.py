#!/usr/bin/env python3
"""
miniclips Feature Demonstration

This script walks through the built-in functions of miniclips, one
session per section.
"""

from miniclips import ScriptEngine, tokenize, parse


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def show(engine: ScriptEngine, commands):
    """Run commands in one session and print their output."""
    for command in commands:
        print(f"  > {command}")
        for line in engine.execute(command):
            print(f"    {line}")


def demo_arithmetic():
    """Demonstrate operators."""
    section("Arithmetic and Comparison")
    show(ScriptEngine(), [
        "(+ 3 3)",
        "(- 10 5)",
        "(* 2 3 4)",
        "(/ 10 4)",
        "(> 5 3)",
        '(neq "hello" "world")',
        "(/ 1 0)",
    ])


def demo_variables():
    """Demonstrate bind, variables and multifields."""
    section("Variables")
    show(ScriptEngine(), [
        "(bind ?x 10)",
        "(* ?x ?x)",
        "(bind ?list (create$ 1 2 3))",
        "?list",
        "?undefined",
    ])


def demo_control_flow():
    """Demonstrate if and loop-for-count."""
    section("Control Flow")
    show(ScriptEngine(), [
        "(bind ?n 7)",
        '(if (> ?n 5) then (printout t "Greater than 5") else (printout t "Less than 5"))',
        "(loop-for-count (?c 1 5) do (printout t ?c crlf))",
    ])


def demo_facts_and_rules():
    """Demonstrate the fact and rule tables."""
    section("Facts and Rules")
    engine = ScriptEngine()
    show(engine, [
        "(assert (student mohamed))",
        "(assert (person (age 20)))",
        "(defrule adult-rule (person (age ?a)) => (assert (adult ?a)))",
        "(facts)",
        "(rules)",
        "(run)",
        "(retract f-1)",
        "(retract f-1)",
    ])

    print("\n  Session views:")
    print(f"    facts: {engine.get_facts()}")
    print(f"    rules: {engine.get_rules()}")


def demo_pipeline():
    """Show the tokenizer and parser output for one command."""
    section("Pipeline")
    command = "(bind ?x (+ 1 2))"
    tokens = tokenize(command)
    print(f"  Command: {command}")
    print(f"  Tokens:  {tokens}")
    print(f"  Tree:    {parse(tokens)}")


def main():
    print("miniclips Feature Demonstration")
    demo_arithmetic()
    demo_variables()
    demo_control_flow()
    demo_facts_and_rules()
    demo_pipeline()


if __name__ == "__main__":
    main()
