"""
Abstract Syntax Tree node definitions for lfrc.

Each node represents one lfrc statement. Nodes are immutable and compare
structurally; evaluating them is left to the application.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Sequence, Tuple, Union

from ..lexer import PREFIXES


class NodeType(Enum):
    """AST node types."""
    SET = auto()   # set <opt> <val>;
    MAP = auto()   # map <keys> <expr>
    CMD = auto()   # cmd <name> <expr>
    CALL = auto()  # <name> <args>;
    EXEC = auto()  # $ ! & / ? followed by command text
    LIST = auto()  # :{{ <expr>... }};


class ASTNode:
    """Base class for all AST nodes."""
    node_type: ClassVar[NodeType]

    def __str__(self):
        return stringify(self)


@dataclass(frozen=True)
class SetExpr(ASTNode):
    """Option assignment. An empty value sets a boolean option."""
    option: str
    value: str = ""

    node_type: ClassVar[NodeType] = NodeType.SET

    def __repr__(self):
        return f"Set({self.option!r}, {self.value!r})"


@dataclass(frozen=True)
class MapExpr(ASTNode):
    """Key binding: the body runs when the key sequence is pressed."""
    keys: str
    body: 'Expr'

    node_type: ClassVar[NodeType] = NodeType.MAP

    def __repr__(self):
        return f"Map({self.keys!r}, {self.body!r})"


@dataclass(frozen=True)
class CmdExpr(ASTNode):
    """Named macro whose body is another expression."""
    name: str
    body: 'Expr'

    node_type: ClassVar[NodeType] = NodeType.CMD

    def __repr__(self):
        return f"Cmd({self.name!r}, {self.body!r})"


@dataclass(frozen=True)
class CallExpr(ASTNode):
    """Command invocation with positional arguments."""
    name: str
    args: Tuple[str, ...] = ()

    node_type: ClassVar[NodeType] = NodeType.CALL

    def __post_init__(self):
        object.__setattr__(self, 'args', tuple(self.args))

    def __repr__(self):
        return f"Call({self.name!r}, {list(self.args)!r})"


@dataclass(frozen=True)
class ExecExpr(ASTNode):
    """Shell or search command; the prefix selects how it is run.

    $ runs in the shell, ! waits for a key afterwards, & runs asynchronously,
    / and ? search forward and backward.
    """
    prefix: str
    text: str

    node_type: ClassVar[NodeType] = NodeType.EXEC

    def __post_init__(self):
        if len(self.prefix) != 1 or self.prefix not in PREFIXES:
            raise ValueError(f"Invalid exec prefix: {self.prefix!r}")

    def __repr__(self):
        return f"Exec({self.prefix!r}, {self.text!r})"


@dataclass(frozen=True)
class ListExpr(ASTNode):
    """Expressions run in sequence."""
    body: Tuple['Expr', ...]

    node_type: ClassVar[NodeType] = NodeType.LIST

    def __post_init__(self):
        object.__setattr__(self, 'body', tuple(self.body))
        if not self.body:
            raise ValueError("List expression needs at least one expression")

    def __repr__(self):
        return f"List({list(self.body)!r})"


Expr = Union[SetExpr, MapExpr, CmdExpr, CallExpr, ExecExpr, ListExpr]


def stringify(node: Expr) -> str:
    """Return the canonical source text of an expression.

    Parsing the result yields an expression equal to ``node``.
    """
    if isinstance(node, SetExpr):
        if node.value:
            return f"set {node.option} {node.value};"
        return f"set {node.option};"
    elif isinstance(node, MapExpr):
        return f"map {node.keys} {stringify(node.body)}"
    elif isinstance(node, CmdExpr):
        return f"cmd {node.name} {stringify(node.body)}"
    elif isinstance(node, CallExpr):
        return ' '.join((node.name,) + node.args) + ';'
    elif isinstance(node, ExecExpr):
        # A block ends at the first '}}', such text only comes from the line form
        if '}}' in node.text or node.text.endswith('}'):
            return f"{node.prefix}{node.text}\n"
        return f"{node.prefix}{{{{{node.text}}}}};"
    elif isinstance(node, ListExpr):
        return ':{{ ' + ' '.join(stringify(expr) for expr in node.body) + ' }};'
    raise TypeError(f"Not an lfrc expression: {node!r}")


def walk(node: Expr) -> Sequence[Expr]:
    """Return the node and all nested expressions, parents first."""
    nodes = [node]
    if isinstance(node, (MapExpr, CmdExpr)):
        nodes.extend(walk(node.body))
    elif isinstance(node, ListExpr):
        for expr in node.body:
            nodes.extend(walk(expr))
    return nodes
