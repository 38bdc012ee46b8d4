"""
lfrc Parser - Builds Abstract Syntax Tree nodes from scanner tokens.

Grammar:

    Expr     = SetExpr | MapExpr | CmdExpr | CallExpr | ExecExpr | ListExpr
    SetExpr  = 'set' <opt> <val>? ';'
    MapExpr  = 'map' <keys> Expr
    CmdExpr  = 'cmd' <name> Expr
    CallExpr = <name> <args>* ';'
    ExecExpr = Prefix <text> '\\n'  |  Prefix '{{' <text> '}}' ';'
    Prefix   = '$' | '!' | '&' | '/' | '?'
    ListExpr = ':' Expr '\\n'  |  ':' '{{' Expr* '}}' ';'

Parsing is one pass and top-down with a single token of look-ahead.
"""

from typing import Callable, Iterator, List, Optional, TextIO, Union

from ..errors import CommandSyntaxError, IncompleteInputError, ParseError
from ..lexer import Scanner, Token, TokenType
from .ast_nodes import (
    CallExpr, CmdExpr, ExecExpr, Expr, ListExpr, MapExpr, SetExpr,
)


TraceCallback = Callable[[Expr], None]


def describe(token: Token) -> str:
    """Human readable form of a token for error messages."""
    if token.type == TokenType.EOF:
        return "end of input"
    if token.is_newline():
        return "end of line"
    return repr(token.value)


class Parser:
    """Parses lfrc source into expressions, one statement per call."""

    def __init__(self, source: Union[str, TextIO], filename: str = "<input>",
                 trace: Optional[TraceCallback] = None):
        self.scanner = Scanner(source, filename)
        self.filename = filename
        self.trace = trace
        self.expr: Optional[Expr] = None
        self.error: Optional[ParseError] = None

    @property
    def current_token(self) -> Token:
        return self.scanner.token

    def fail(self, message: str):
        """Raise a syntax error at the current token."""
        token = self.current_token
        cls = IncompleteInputError if token.type == TokenType.EOF else CommandSyntaxError
        raise cls(message, self.filename, token.line, token.column)

    def advance(self, expr_start: bool = False) -> Token:
        """Consume and return current token."""
        token = self.current_token
        self.scanner.scan(expr_start)
        if self.scanner.error is not None:
            raise self.scanner.error
        return token

    def expect(self, token_type: TokenType, what: str) -> Token:
        """Consume token of expected type or raise error."""
        token = self.current_token
        if token.type != token_type:
            self.fail(f"Expected {what}, got {describe(token)}")
        return self.advance()

    def parse(self) -> bool:
        """Parse the next statement into ``self.expr``.

        Returns False at the end of input and on error; ``self.error`` tells
        the two apart.
        """
        if self.error is not None:
            self.expr = None
            return False
        try:
            self.expr = self.parse_expr()
        except ParseError:
            self.expr = None
            return False
        return self.expr is not None

    def parse_expr(self) -> Optional[Expr]:
        """Parse one statement.

        Returns None at a clean end of input. Errors are raised and also
        kept in ``self.error``; once set, every later call raises it again.
        """
        if self.error is not None:
            raise self.error
        try:
            if self.scanner.error is not None:
                raise self.scanner.error
            try:
                return self.parse_statement()
            except RecursionError:
                token = self.current_token
                raise CommandSyntaxError("Expressions nested too deeply",
                                         self.filename, token.line, token.column) from None
        except ParseError as err:
            self.error = err
            raise

    def parse_all(self) -> List[Expr]:
        """Parse every remaining statement."""
        return list(self)

    def __iter__(self) -> Iterator[Expr]:
        while True:
            expr = self.parse_expr()
            if expr is None:
                return
            yield expr

    def parse_statement(self) -> Optional[Expr]:
        while self.current_token.type == TokenType.SEMICOLON:
            self.advance(expr_start=True)

        token = self.current_token
        if token.type == TokenType.EOF:
            return None

        if token.type == TokenType.IDENT:
            if token.value == 'set':
                expr = self.parse_set()
            elif token.value == 'map':
                expr = self.parse_map()
            elif token.value == 'cmd':
                expr = self.parse_cmd()
            else:
                expr = self.parse_call()
        elif token.type == TokenType.COLON:
            expr = self.parse_list()
        elif token.type == TokenType.PREFIX:
            expr = self.parse_exec()
        else:
            self.fail(f"Unexpected {describe(token)}, expected a command")

        if self.trace is not None:
            self.trace(expr)
        return expr

    def parse_nested(self, owner: str) -> Expr:
        """Parse an expression that must be present (body or list item)."""
        expr = self.parse_statement()
        if expr is None:
            self.fail(f"Unexpected end of input in {owner}")
        return expr

    def parse_set(self) -> SetExpr:
        """Parse 'set' <opt> <val>? ';'"""
        self.advance()  # set
        option = self.expect(TokenType.IDENT, "option name after 'set'").value

        value = ""
        if self.current_token.type != TokenType.SEMICOLON:
            value = self.expect(TokenType.IDENT, f"value or ';' after 'set {option}'").value

        self.expect(TokenType.SEMICOLON, f"';' after 'set {option}'")
        return SetExpr(option, value)

    def parse_map(self) -> MapExpr:
        """Parse 'map' <keys> Expr"""
        self.advance()  # map
        keys = self.current_token
        if keys.type != TokenType.IDENT:
            self.fail(f"Expected keys after 'map', got {describe(keys)}")
        self.advance(expr_start=True)

        body = self.parse_nested(f"'map {keys.value}'")
        return MapExpr(keys.value, body)

    def parse_cmd(self) -> CmdExpr:
        """Parse 'cmd' <name> Expr"""
        self.advance()  # cmd
        name = self.current_token
        if name.type != TokenType.IDENT:
            self.fail(f"Expected command name after 'cmd', got {describe(name)}")
        self.advance(expr_start=True)

        body = self.parse_nested(f"'cmd {name.value}'")
        return CmdExpr(name.value, body)

    def parse_call(self) -> CallExpr:
        """Parse <name> <args>* ';'"""
        name = self.advance().value

        args = []
        while self.current_token.type != TokenType.SEMICOLON:
            token = self.current_token
            if token.type != TokenType.IDENT:
                self.fail(f"Expected argument or ';' after '{name}', got {describe(token)}")
            args.append(token.value)
            self.advance()

        self.advance()  # ;
        return CallExpr(name, args)

    def parse_list(self) -> ListExpr:
        """Parse ':' Expr '\\n' or ':' '{{' Expr* '}}' ';'"""
        self.advance()  # :

        body = []
        if self.current_token.type == TokenType.LBRACES:
            self.advance()  # {{
            while True:
                body.append(self.parse_nested("':{{' list"))
                if self.current_token.type == TokenType.RBRACES:
                    break
            self.advance()  # }}
        else:
            while True:
                body.append(self.parse_nested("':' list"))
                if self.current_token.is_newline():
                    break

        self.expect(TokenType.SEMICOLON, "';' after list")
        return ListExpr(body)

    def parse_exec(self) -> ExecExpr:
        """Parse Prefix <text> '\\n' or Prefix '{{' <text> '}}' ';'"""
        prefix = self.advance().value

        if self.current_token.type == TokenType.LBRACES:
            self.advance()  # {{
            text = self.expect(TokenType.COMMAND, "command text").value
            self.expect(TokenType.RBRACES, "'}}'")
        else:
            text = self.expect(TokenType.COMMAND, f"command text after '{prefix}'").value

        self.expect(TokenType.SEMICOLON, "end of command")
        return ExecExpr(prefix, text)


def parse(source: Union[str, TextIO], filename: str = "<input>",
          trace: Optional[TraceCallback] = None) -> List[Expr]:
    """Convenience function to parse a whole lfrc script.

    Raises ParseError on the first malformed statement.
    """
    return Parser(source, filename, trace).parse_all()
