"""
Token definitions for the sigil lexer.

This module defines the token types of the sigil markup language:
- Sigils (@, @@, @@@..., @end, #)
- Delimiters ((), [], {})
- Atoms (bare runs, quoted strings, backslash escapes)
- Whitespace and line breaks (kept, since prose is reproduced verbatim)

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    """
    Enumeration of all token types in sigil markup.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of input (sentinel, empty lexeme)
    LINE_BREAK = auto()             # \n (significant for block style and prose)
    WHITESPACE = auto()             # any other single whitespace character

    # ========================================================================
    # Literals
    # ========================================================================
    ATOM = auto()                   # word, "quoted \" string", \@escaped

    # ========================================================================
    # Sigils
    # ========================================================================
    AT = auto()                     # @   (block)
    AT_AT = auto()                  # @@  (item / annotation)
    AT_AT_AT = auto()               # @@@+ (blob fence, value is the width)
    AT_END = auto()                 # @end (closes an incontext block)
    HASH = auto()                   # #

    # ========================================================================
    # Delimiters
    # ========================================================================
    PAREN_OPEN = auto()             # (
    PAREN_CLOSE = auto()            # )
    BRACKET_OPEN = auto()           # [
    BRACKET_CLOSE = auto()          # ]
    BRACE_OPEN = auto()             # {
    BRACE_CLOSE = auto()            # }

    # ========================================================================
    # Fallback
    # ========================================================================
    UNKNOWN = auto()                # any single unclassified character


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source text.

    Used for error reporting and for slicing verbatim text back out of the
    source.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def advanced(self, text: str) -> 'SourceLocation':
        """Return the location just past `text` when it starts here."""
        newlines = text.count('\n')
        if newlines:
            column = len(text) - text.rfind('\n')
        else:
            column = self.column + len(text)
        return SourceLocation(self.filename, self.line + newlines, column, self.offset + len(text))

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a span of source text (start and end locations)."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token of sigil markup.

    Contains the token type, lexeme (exact source text), semantic value
    and source location.
    """
    type: TokenType
    lexeme: str                     # Exact text from source
    value: Any                      # Atom text, fence width, or the character
    location: SourceLocation        # Start location

    def __str__(self) -> str:
        if self.type == TokenType.EOF:
            return "end of input"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    @property
    def end_offset(self) -> int:
        return self.location.offset + len(self.lexeme)

    @property
    def span(self) -> SourceSpan:
        return SourceSpan(self.location, self.location.advanced(self.lexeme))

    @property
    def is_prose(self) -> bool:
        """Check if this token can only ever be part of raw prose."""
        return self.type in PROSE_TOKENS

    @property
    def is_space(self) -> bool:
        return self.type in (TokenType.WHITESPACE, TokenType.LINE_BREAK)


# Characters that may appear in a bare atom. Everything structural
# (@ # ( ) [ ] { } " \ and whitespace) is excluded.
ATOM_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789"
    "+*,._~=?!$%&`'<>:;^-|/"
)

# Fixed-text tokens, longest first within each shared prefix
SIGILS = {
    "@end": TokenType.AT_END,
    "@@": TokenType.AT_AT,
    "@": TokenType.AT,
    "#": TokenType.HASH,
}

DELIMITERS = {
    "(": TokenType.PAREN_OPEN,
    ")": TokenType.PAREN_CLOSE,
    "[": TokenType.BRACKET_OPEN,
    "]": TokenType.BRACKET_CLOSE,
    "{": TokenType.BRACE_OPEN,
    "}": TokenType.BRACE_CLOSE,
}

OPENERS = {
    TokenType.PAREN_OPEN: TokenType.PAREN_CLOSE,
    TokenType.BRACKET_OPEN: TokenType.BRACKET_CLOSE,
    TokenType.BRACE_OPEN: TokenType.BRACE_CLOSE,
}

CLOSERS = frozenset(OPENERS.values())

# Tokens that never start markup
PROSE_TOKENS = frozenset({
    TokenType.ATOM,
    TokenType.UNKNOWN,
    TokenType.HASH,
    TokenType.WHITESPACE,
    TokenType.LINE_BREAK,
})
