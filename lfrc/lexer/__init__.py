"""lfrc Lexer - Tokenizes lfrc command-language source."""

from .scanner import Scanner, ScanMode, Token, TokenType, PREFIXES

__all__ = ['Scanner', 'ScanMode', 'Token', 'TokenType', 'PREFIXES']
