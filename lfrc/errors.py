"""
Errors raised while scanning and parsing lfrc scripts.

Every error carries its source location and formats as
``filename:line:column: message``.
"""

from enum import Enum, auto


class ErrorKind(Enum):
    """Category of a parse failure."""
    LEXICAL = auto()     # malformed token
    SYNTAX = auto()      # token where no grammar alternative applies
    INCOMPLETE = auto()  # input ended inside a statement


class ParseError(Exception):
    """Base class for all scanner and parser errors."""

    kind = ErrorKind.SYNTAX

    def __init__(self, message: str, filename: str = "<input>",
                 line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column

    def __str__(self):
        return f"{self.filename}:{self.line}:{self.column}: {self.message}"


class LexicalError(ParseError):
    """Malformed token, e.g. an unterminated ``{{ ... }}`` block."""

    kind = ErrorKind.LEXICAL


class CommandSyntaxError(ParseError):
    """A token appeared where the grammar does not allow it."""

    kind = ErrorKind.SYNTAX


class IncompleteInputError(CommandSyntaxError):
    """End of input reached before a statement was complete."""

    kind = ErrorKind.INCOMPLETE
