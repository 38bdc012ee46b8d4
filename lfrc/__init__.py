"""
lfrc - Scanner and parser for the lf file manager's command language.

Turns lfrc scripts (option settings, key bindings, macros and shell
commands) into immutable expression trees for an evaluator to run.
"""

from .errors import (
    ErrorKind, ParseError, LexicalError, CommandSyntaxError, IncompleteInputError,
)
from .parser import (
    Parser, parse, stringify, Expr,
    SetExpr, MapExpr, CmdExpr, CallExpr, ExecExpr, ListExpr,
)

__version__ = "0.1.0"
