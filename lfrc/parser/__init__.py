"""lfrc Parser - Builds Abstract Syntax Tree from tokens."""

from .parser import Parser, parse
from .ast_nodes import *

__all__ = [
    'Parser', 'parse', 'stringify', 'walk', 'NodeType', 'ASTNode', 'Expr',
    'SetExpr', 'MapExpr', 'CmdExpr', 'CallExpr', 'ExecExpr', 'ListExpr',
]
