"""
Sigil Lexer Package

Implements the tokenizer for sigil markup: a maximal-munch scanner over a
small, priority-ordered rule table.

Key Features:
- Total classification (any unmatched character becomes an UNKNOWN token)
- Lossless output (lexemes concatenate back to the input)
- Fence width carried on @@@ tokens for blob quoting
- Source location tracking for diagnostics

Author: xwest
"""

from .tokens import Token, TokenType, SourceLocation, SourceSpan
from .lexer import Lexer, tokenize, tokenize_file
from .errors import Diagnostic, LexerError

__all__ = [
    "Lexer",
    "tokenize",
    "tokenize_file",
    "Token",
    "TokenType",
    "SourceLocation",
    "SourceSpan",
    "Diagnostic",
    "LexerError",
]
