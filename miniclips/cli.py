#!/usr/bin/env python3
"""
miniclips Command-Line Interface

Provides interactive REPL, script execution, and pipe/filter modes.

Usage:
    miniclips                         # Start REPL
    miniclips script.clp              # Run script
    miniclips -e "(+ 1 2)"            # Evaluate a command
    echo "(+ 1 2)" | miniclips        # Filter mode

Script Format (.clp files):
    #!/usr/bin/env miniclips
    ; comments start with a semicolon
    (bind ?n 7)
    (if (> ?n 5)
        then (printout t "big" crlf)
        else (printout t "small" crlf))
    (assert (student mohamed))
    (facts)

REPL Commands:
    :help              Show help
    :facts             List asserted facts
    :rules             List defined rules
    :vars              List bound variables
    :clear             Start a fresh session
    :load FILE         Run a script in the current session
    :examples          Show example commands
    :quit              Exit
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from . import __version__
from .engine import ScriptEngine
from .interpreter import FUNCTIONS, OPERATORS

logger = logging.getLogger(__name__)

# Try to import readline for better REPL experience
try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False

HISTORY_FILE = Path.home() / ".miniclips_history"
HISTORY_LENGTH = 1000

PROMPT = "CLIPS> "
CONTINUATION_PROMPT = "...... "

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

# Example commands, grouped by topic
EXAMPLES: List[Tuple[str, List[str]]] = [
    ("Arithmetic Operations", [
        "(+ 3 3)",
        "(- 10 5)",
        "(* 2 3 4)",
        "(/ 10 2)",
    ]),
    ("Comparison Operations", [
        "(> 5 3)",
        "(< 5 10)",
        "(= 5 5)",
        "(eq 5 5)",
        '(neq "hello" "world")',
    ]),
    ("Variables", [
        "(bind ?x 10)",
        "?x",
        "(bind ?list (create$ 1 2 3))",
        "?list",
    ]),
    ("Control Flow", [
        "(loop-for-count (?c 1 5) do (printout t ?c crlf))",
        "(bind ?n 7)",
        '(if (> ?n 5) then (printout t "Greater than 5") else (printout t "Less than 5"))',
    ]),
    ("Facts and Rules", [
        "(assert (student mohamed))",
        "(defrule adult-rule (person (age ?a)) => (assert (adult ?a)))",
        "(facts)",
        "(rules)",
        "(run)",
    ]),
    ("Output", [
        '(printout t "Hello, world!" crlf)',
        '(print "Simple output")',
    ]),
]


def is_error(lines: List[str]) -> bool:
    """True if execute() reported a failure."""
    return len(lines) == 1 and lines[0].startswith("Error: ")


def count_parens(text: str) -> int:
    """Count unbalanced parentheses. Returns >0 if more open than close."""
    depth = 0
    in_string = False

    for c in text:
        if c == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1

    return depth


def iter_commands(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """
    Group source lines into complete commands.

    Skips blank lines, ; comments and a #! shebang. A command continues
    onto following lines while its parentheses are unbalanced.

    Yields:
        (line number where the command starts, command text)
    """
    buffer = ""
    start = 0

    for lineno, line in enumerate(lines, 1):
        stripped = line.strip()
        if not stripped or stripped.startswith(";"):
            continue
        if not buffer:
            if stripped.startswith("#!"):
                continue
            buffer = stripped
            start = lineno
        else:
            buffer += "\n" + stripped

        if count_parens(buffer) <= 0:
            yield start, buffer
            buffer = ""

    if buffer:
        # Unbalanced at end of input; let the parser report it
        yield start, buffer


class ClipsCompleter:
    """Tab completer for the miniclips REPL."""

    COMMANDS = [
        ":help", ":quit", ":exit", ":q",
        ":facts", ":rules", ":vars", ":clear",
        ":load", ":examples",
    ]

    NAMES = sorted(set(FUNCTIONS) | set(OPERATORS))

    def __init__(self, repl: 'ClipsREPL'):
        self.repl = repl
        self.matches: List[str] = []

    def complete(self, text: str, state: int) -> Optional[str]:
        """Return the next possible completion for 'text'."""
        if state == 0:
            line = readline.get_line_buffer() if HAS_READLINE else ""
            self.matches = self._get_matches(text, line)

        try:
            return self.matches[state]
        except IndexError:
            return None

    def _get_matches(self, text: str, line: str) -> List[str]:
        """Get list of matches for the current input."""
        line = line.lstrip()

        # After :load, complete file paths
        if line.startswith(":load "):
            return self._complete_path(text)

        # Command completion
        if text.startswith(":") or (line.startswith(":") and " " not in line):
            return [c for c in self.COMMANDS if c.startswith(text)]

        # Function and operator names right after an open paren
        stripped = text.lstrip("(")
        if text.startswith("(") and not stripped.startswith("?"):
            prefix = text[:len(text) - len(stripped)]
            return [prefix + n for n in self.NAMES if n.startswith(stripped)]

        # Bound variable names
        if stripped.startswith("?"):
            prefix = text[:len(text) - len(stripped)]
            names = [v for v in self.repl.engine.env.variables if v.startswith("?")]
            return [prefix + v for v in sorted(names) if v.startswith(stripped)]

        return []

    def _complete_path(self, text: str) -> List[str]:
        """Complete file paths."""
        import glob

        paths = glob.glob((text or "./") + "*")
        return [p + "/" if Path(p).is_dir() else p for p in paths]


class ClipsREPL:
    """Interactive REPL for miniclips."""

    def __init__(self, history: bool = True):
        self.engine = ScriptEngine()
        self.running = True
        self.multi_line_buffer = ""
        self.history = history and HAS_READLINE

        if self.history:
            self.history_file = HISTORY_FILE
            try:
                readline.read_history_file(self.history_file)
            except (FileNotFoundError, PermissionError):
                pass
            readline.set_history_length(HISTORY_LENGTH)

            self.completer = ClipsCompleter(self)
            readline.set_completer(self.completer.complete)
            readline.parse_and_bind("tab: complete")
            readline.set_completer_delims(" \t\n")

    def save_history(self):
        """Save readline history."""
        if self.history:
            try:
                readline.write_history_file(self.history_file)
            except OSError as e:
                logger.warning("Could not save history to %s: %s", self.history_file, e)

    def load_file(self, path: Path) -> Tuple[List[str], int, Optional[str]]:
        """
        Run every command of a script in the current session.

        Stops at the first failing command.

        Returns:
            (output lines of the commands that succeeded,
             number of commands run, first error message or None)
        """
        output: List[str] = []
        count = 0
        for lineno, command in iter_commands(path.read_text().splitlines()):
            lines = self.engine.execute(command)
            count += 1
            if is_error(lines):
                return output, count, f"{path}:{lineno}: {lines[0]}"
            output.extend(lines)
        return output, count, None

    def handle_command(self, line: str) -> Optional[str]:
        """
        Handle a REPL command (starts with :).

        Returns a message to print, or None.
        """
        parts = line[1:].split(None, 1)
        if not parts:
            return "Unknown command. Type :help for help."

        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd == "help":
            return self.help_text()

        elif cmd in ("quit", "exit", "q"):
            self.running = False
            return None

        elif cmd == "facts":
            facts = self.engine.get_facts()
            return "\n".join(facts) if facts else "No facts defined"

        elif cmd == "rules":
            rules = self.engine.get_rules()
            return "\n".join(rules) if rules else "No rules defined"

        elif cmd == "vars":
            variables = self.engine.get_variables()
            return "\n".join(variables) if variables else "No variables bound"

        elif cmd == "clear":
            self.engine.clear()
            return "Session cleared"

        elif cmd == "load":
            if not arg:
                return "Usage: :load FILENAME"
            path = Path(arg)
            try:
                output, count, error = self.load_file(path)
            except OSError as e:
                return f"Error loading {arg}: {e}"
            output.append(error or f"Ran {count} command(s) from {path}")
            return "\n".join(output)

        elif cmd == "examples":
            return self.examples_text()

        else:
            return f"Unknown command: {cmd}. Type :help for help."

    def help_text(self) -> str:
        """Return help text."""
        return """miniclips REPL Commands:
  :help              Show this help
  :facts             List asserted facts
  :rules             List defined rules
  :vars              List bound variables
  :clear             Start a fresh session
  :load FILE         Run a script here and show its output
  :examples          Show example commands
  :quit              Exit

Syntax:
  (function arg ...)                       Call a function or operator
  ?name                                    Show a variable
  (bind ?x (+ 1 2))                        Bind a variable
  (assert (fact ...))                      Assert a fact
  (defrule name pattern => action)         Define a rule
  (if cond then ... else ...)              Conditional
  (loop-for-count (?i 1 5) do ...)         Counted loop
"""

    def examples_text(self) -> str:
        """Return the example command catalogue."""
        lines = []
        for title, commands in EXAMPLES:
            lines.append(f"{title}:")
            lines.extend(f"  {c}" for c in commands)
        return "\n".join(lines)

    def process_line(self, line: str) -> Optional[str]:
        """
        Process a single line of input.

        Returns the result to print, or None.
        """
        line = line.strip()

        if not line or line.startswith(";"):
            return None

        if line.startswith(":"):
            return self.handle_command(line)

        lines = self.engine.execute(line)
        if not lines:
            return None
        return "\n".join(lines)

    def run(self):
        """Run the REPL loop."""
        print(f"miniclips {__version__} - a simplified CLIPS")
        print("Type :help for help, :examples for examples, :quit to exit")
        print("Multi-line input: commands with unbalanced parens continue on next line")
        print()

        while self.running:
            try:
                prompt = CONTINUATION_PROMPT if self.multi_line_buffer else PROMPT

                line = input(prompt)

                if self.multi_line_buffer:
                    self.multi_line_buffer += "\n" + line
                else:
                    self.multi_line_buffer = line

                if count_parens(self.multi_line_buffer) > 0:
                    continue

                complete_input = self.multi_line_buffer
                self.multi_line_buffer = ""

                result = self.process_line(complete_input)
                if result:
                    print(result)

            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                if self.multi_line_buffer:
                    print("\nInput cancelled")
                    self.multi_line_buffer = ""
                else:
                    print()
                continue

        self.save_history()


class ScriptRunner:
    """Runs miniclips scripts."""

    def __init__(self):
        self.repl = ClipsREPL(history=False)

    def _run_lines(self, lines: Iterable[str], source: str, quiet: bool = False) -> int:
        for lineno, command in iter_commands(lines):
            output = self.repl.engine.execute(command)
            if is_error(output):
                print(f"{source}:{lineno}: {output[0]}", file=sys.stderr)
                return 1
            if output and not quiet:
                print("\n".join(output))
        return 0

    def run_script(self, path: Path, quiet: bool = False) -> int:
        """
        Run a script file.

        Args:
            path: Path to the script
            quiet: If True, don't print command results

        Returns:
            Exit code (0 for success)
        """
        try:
            lines = path.read_text().splitlines()
        except OSError as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            return 1

        return self._run_lines(lines, str(path), quiet=quiet)

    def run_expression(self, command: str) -> int:
        """
        Evaluate a single command.

        Returns:
            Exit code (0 for success)
        """
        output = self.repl.engine.execute(command)
        if output:
            print("\n".join(output))
        return 1 if is_error(output) else 0

    def run_stdin(self, quiet: bool = False) -> int:
        """
        Read commands from stdin and evaluate them.

        Returns:
            Exit code (0 for success)
        """
        return self._run_lines(sys.stdin, "<stdin>", quiet=quiet)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="miniclips",
        description="miniclips - a simplified CLIPS rule language",
        epilog="Examples:\n"
               "  miniclips                        Start REPL\n"
               "  miniclips script.clp             Run script\n"
               "  miniclips -e '(+ 1 2)'           Evaluate a command\n"
               "  echo '(+ 1 2)' | miniclips       Filter mode\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "script",
        nargs="?",
        help="Script file to run (.clp)"
    )

    parser.add_argument(
        "-e", "--expr",
        help="Evaluate a single command"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only report errors when running scripts)"
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level for diagnostics on stderr (default: WARNING)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Determine mode
    if args.script:
        # Script mode
        sys.exit(ScriptRunner().run_script(Path(args.script), quiet=args.quiet))

    elif args.expr:
        # Expression mode
        sys.exit(ScriptRunner().run_expression(args.expr))

    elif not sys.stdin.isatty():
        # Pipe/filter mode (stdin is not a terminal)
        sys.exit(ScriptRunner().run_stdin(quiet=args.quiet))

    else:
        # REPL mode
        ClipsREPL().run()


if __name__ == "__main__":
    main()
