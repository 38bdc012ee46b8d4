"""
lfrc script checker.

Loads lfrc scripts statement by statement, the way the application does at
start-up, and reports the first error without running anything.
"""

import sys
from typing import Dict, List, Optional

from .errors import ParseError
from .parser import Parser, Expr, CmdExpr, MapExpr, NodeType, stringify, walk


class ScriptChecker:
    """Parses lfrc scripts and collects diagnostics."""

    def __init__(self, verbose: bool = False, dump: bool = False, out=None):
        self.verbose = verbose
        self.dump = dump
        self.out = out if out is not None else sys.stdout
        self.warnings: List[str] = []
        self.commands: Dict[str, str] = {}  # macro name -> where it was defined
        self.bindings: Dict[str, str] = {}  # key sequence -> where it was bound

    def log(self, message: str):
        """Print log message if verbose mode is enabled."""
        if self.verbose:
            print(f"[lfrc] {message}", file=sys.stderr)

    def warn(self, code: str, message: str):
        """Add a warning with a code."""
        warning = f"{code}: {message}"
        self.warnings.append(warning)
        if self.verbose:
            print(f"[lfrc] Warning: {warning}", file=sys.stderr)

    def get_warnings(self) -> List[str]:
        """Get all warnings generated so far."""
        return self.warnings.copy()

    def trace(self, expr: Expr):
        self.log(f"parsed: {expr}")

    def check_string(self, source: str, filename: str = "<input>") -> List[Expr]:
        """
        Parse an lfrc script.

        Args:
            source: Script text
            filename: Name used in error messages and warnings

        Returns:
            Top-level statements in source order

        Raises:
            ParseError: on the first malformed statement
        """
        parser = Parser(source, filename, trace=self.trace if self.verbose else None)

        statements = []
        while parser.parse():
            expr = parser.expr
            self.record(expr, filename)
            statements.append(expr)
            if self.dump:
                print(stringify(expr).rstrip('\n'), file=self.out)

        if parser.error is not None:
            raise parser.error

        self.log(f"{filename}: {len(statements)} statements ({self.summarize(statements)})")
        return statements

    def record(self, expr: Expr, filename: str):
        """Track macro and key binding definitions for redefinition warnings."""
        if isinstance(expr, CmdExpr):
            if expr.name in self.commands:
                self.warn("LFRC001", f"{filename}: command '{expr.name}' redefines "
                                     f"the one from {self.commands[expr.name]}")
            self.commands[expr.name] = filename
        elif isinstance(expr, MapExpr):
            if expr.keys in self.bindings:
                self.warn("LFRC002", f"{filename}: key '{expr.keys}' is already "
                                     f"mapped in {self.bindings[expr.keys]}")
            self.bindings[expr.keys] = filename

    @staticmethod
    def summarize(statements: List[Expr]) -> str:
        counts = {node_type: 0 for node_type in NodeType}
        for statement in statements:
            for node in walk(statement):
                counts[node.node_type] += 1
        return ', '.join(f"{counts[t]} {t.name.lower()}" for t in NodeType if counts[t])

    def check_file(self, input_path: str) -> bool:
        """
        Check an lfrc script file.

        Returns:
            True if every statement parsed, False otherwise
        """
        try:
            self.log(f"Reading {input_path}...")
            with open(input_path, 'r', encoding='utf-8') as f:
                self.check_string(f.read(), str(input_path))
            return True

        except FileNotFoundError:
            print(f"Error: File not found: {input_path}", file=sys.stderr)
            return False
        except ParseError as e:
            print(f"Syntax error: {e}", file=sys.stderr)
            return False


def main(argv: Optional[List[str]] = None):
    """Command-line interface for the checker."""
    import argparse

    parser = argparse.ArgumentParser(
        description='lfrc checker - Parse lf command scripts and report errors'
    )
    parser.add_argument('input', nargs='*', help='lfrc script files')
    parser.add_argument('-c', '--command', action='append',
                       help='Check an inline script (can be used multiple times)')
    parser.add_argument('--dump', action='store_true',
                       help='Print the canonical form of each statement')
    parser.add_argument('--verbose', action='store_true',
                       help='Verbose output')

    args = parser.parse_args(argv)
    if not args.input and not args.command:
        parser.error('no scripts given')

    checker = ScriptChecker(verbose=args.verbose, dump=args.dump)

    success = True
    for path in args.input:
        success = checker.check_file(path) and success
    for index, source in enumerate(args.command or [], 1):
        try:
            checker.check_string(source, f"<command {index}>")
        except ParseError as e:
            print(f"Syntax error: {e}", file=sys.stderr)
            success = False

    for warning in checker.get_warnings():
        if not args.verbose:
            print(f"Warning: {warning}", file=sys.stderr)

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
