"""
lfrc Scanner - Produces tokens from lfrc command-language source.

The scanner keeps a single look-ahead token that the parser advances with
scan(). Lexing is mode-sensitive:

- Prefixes ($ ! & / ?) and ':' are only recognized at expression starts
- After a prefix, either a '{{ ... }}' block or the rest of the line is
  taken verbatim as command text
- Line breaks are insignificant except where a newline marker is owed
  (after line-form command text, after '}}', and for open ':' line lists)
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import List, Optional, TextIO, Union

from ..errors import LexicalError


PREFIXES = "$!&/?"
BLANKS = " \t\r\f\v"
WHITESPACE = BLANKS + "\n"


class TokenType(Enum):
    """lfrc token types."""
    EOF = auto()
    SEMICOLON = auto()   # ; (also the synthetic newline marker)
    IDENT = auto()       # option names, keys, command names, arguments
    COLON = auto()       # : (starts a list)
    LBRACES = auto()     # {{
    RBRACES = auto()     # }}
    PREFIX = auto()      # $ ! & / ?
    COMMAND = auto()     # raw command text after a prefix


@dataclass
class Token:
    """Represents a single token."""
    type: TokenType
    value: str
    line: int
    column: int

    def is_newline(self) -> bool:
        return self.type == TokenType.SEMICOLON and self.value == "\n"

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class ScanMode(Enum):
    """What the next call to scan() expects to read."""
    NORMAL = auto()
    COLON = auto()       # after ':', a '{{' list or a line list
    PREFIX = auto()      # after a prefix, '{{' or raw command text
    BLOCK = auto()       # verbatim text up to '}}'
    TERMINATOR = auto()  # after '}}', ';' or end of line


class Scanner:
    """Tokenizes lfrc source one token at a time."""

    def __init__(self, source: Union[str, TextIO], filename: str = "<input>"):
        if not isinstance(source, str):
            source = source.read()
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.mode = ScanMode.NORMAL
        self.expr_start = True
        self.line_lists = 0  # open ':' lists closed by the next line break
        self.brace_lists: List[int] = []  # line lists open outside each '{{'
        self.pending = 0     # newline markers owed before the next real token
        self.marker_line = 1
        self.marker_column = 1
        self.done = False
        self.error: Optional[LexicalError] = None
        self.token = Token(TokenType.EOF, "", 1, 1)
        self.scan()

    def fail(self, message: str, line: Optional[int] = None,
             column: Optional[int] = None):
        """Raise a lexical error with location information."""
        raise LexicalError(
            message, self.filename,
            self.line if line is None else line,
            self.column if column is None else column,
        )

    def peek(self, offset: int = 0) -> Optional[str]:
        """Peek at character at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return None

    def advance(self) -> Optional[str]:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return None

        ch = self.source[self.pos]
        self.pos += 1

        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return ch

    def at(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def skip_blanks(self):
        """Skip whitespace up to, but not including, a line break."""
        while self.peek() is not None and self.peek() in BLANKS:
            self.advance()

    def scan(self, expr_start: bool = False) -> bool:
        """Advance to the next token.

        Pass expr_start=True when the next token begins an expression in a
        position the scanner cannot infer (the body of 'map' and 'cmd').
        Returns False once the end of input, or a lexical error, is reached.
        """
        if self.done:
            return False

        expr_start = expr_start or self.expr_start
        self.expr_start = False

        try:
            self.token = self.next_token(expr_start)
        except LexicalError as err:
            self.error = err
            self.token = Token(TokenType.EOF, "", err.line, err.column)

        if self.token.type == TokenType.EOF:
            self.done = True
            return False
        return True

    def next_token(self, expr_start: bool) -> Token:
        if self.pending:
            return self.newline_marker()

        if self.mode == ScanMode.BLOCK:
            return self.read_block()
        if self.mode == ScanMode.PREFIX:
            return self.read_command()

        if self.mode == ScanMode.TERMINATOR:
            self.mode = ScanMode.NORMAL
            self.skip_blanks()
            ch = self.peek()
            if ch != ';':
                if ch is not None and ch != '\n':
                    self.fail(f"Unexpected {ch!r} after '}}}}', expected ';' or end of line")
                self.end_line(1)
                return self.newline_marker()

        if self.mode == ScanMode.COLON:
            self.mode = ScanMode.NORMAL
            self.skip_blanks()
            if self.at('{{'):
                line, col = self.line, self.column
                self.advance()
                self.advance()
                self.expr_start = True
                self.open_braces(nested_list=True)
                return Token(TokenType.LBRACES, '{{', line, col)
            self.line_lists += 1
            expr_start = True

        return self.read_token(expr_start)

    def open_braces(self, nested_list: bool = False):
        """Enter a '{{'; line breaks inside a list do not close outer line lists."""
        self.brace_lists.append(self.line_lists)
        if nested_list:
            self.line_lists = 0

    def close_braces(self):
        if self.brace_lists:
            self.line_lists = self.brace_lists.pop()

    def end_line(self, owed: int):
        """Consume a line break (if any) and owe its newline markers."""
        self.marker_line = self.line
        self.marker_column = self.column
        if self.peek() == '\n':
            self.advance()
        self.pending += owed + self.line_lists
        self.line_lists = 0

    def newline_marker(self) -> Token:
        self.pending -= 1
        self.expr_start = True
        return Token(TokenType.SEMICOLON, "\n", self.marker_line, self.marker_column)

    def read_token(self, expr_start: bool) -> Token:
        """Read a token in normal mode."""
        while self.peek() is not None and self.peek() in WHITESPACE:
            if self.peek() == '\n' and self.line_lists:
                self.end_line(0)
                return self.newline_marker()
            self.advance()

        ch = self.peek()
        line = self.line
        col = self.column

        if ch is None:
            if self.line_lists:
                self.end_line(0)
                return self.newline_marker()
            return Token(TokenType.EOF, "", line, col)

        if ch == ';':
            self.advance()
            self.expr_start = True
            return Token(TokenType.SEMICOLON, ';', line, col)
        if self.at('{{'):
            self.advance()
            self.advance()
            self.open_braces()
            return Token(TokenType.LBRACES, '{{', line, col)
        if self.at('}}'):
            self.advance()
            self.advance()
            self.mode = ScanMode.TERMINATOR
            self.close_braces()
            return Token(TokenType.RBRACES, '}}', line, col)

        if expr_start and ch == ':':
            self.advance()
            self.mode = ScanMode.COLON
            return Token(TokenType.COLON, ':', line, col)
        if expr_start and ch in PREFIXES:
            self.advance()
            self.mode = ScanMode.PREFIX
            return Token(TokenType.PREFIX, ch, line, col)

        return Token(TokenType.IDENT, self.read_ident(), line, col)

    def read_ident(self) -> str:
        """Read a run of characters up to whitespace, ';' or '}}'."""
        chars = []
        while self.peek() is not None:
            ch = self.peek()
            if ch in WHITESPACE or ch == ';' or self.at('}}'):
                break
            chars.append(self.advance())
        return ''.join(chars)

    def read_command(self) -> Token:
        """Read what follows a prefix: '{{' or the rest of the line."""
        self.mode = ScanMode.NORMAL
        self.skip_blanks()
        line = self.line
        col = self.column

        if self.at('{{'):
            self.advance()
            self.advance()
            self.mode = ScanMode.BLOCK
            self.open_braces()
            return Token(TokenType.LBRACES, '{{', line, col)

        if self.peek() is None or self.peek() == '\n':
            self.fail("Missing command text after prefix")

        # Escapes are kept verbatim; an escaped line break continues the command
        chars = []
        while self.peek() is not None and self.peek() != '\n':
            if self.peek() == '\\':
                chars.append(self.advance())
                if self.peek() is None:
                    self.fail(f"Unterminated command text starting at {line}:{col}")
            chars.append(self.advance())

        text = ''.join(chars).rstrip('\r')
        self.end_line(1)
        return Token(TokenType.COMMAND, text, line, col)

    def read_block(self) -> Token:
        """Read verbatim text up to the closing '}}'."""
        self.mode = ScanMode.NORMAL
        line = self.line
        col = self.column

        end = self.source.find('}}', self.pos)
        if end < 0:
            self.fail(f"Unterminated '{{{{' block starting at {line}:{col}", line, col)

        chars = []
        while self.pos < end:
            chars.append(self.advance())
        return Token(TokenType.COMMAND, ''.join(chars), line, col)
