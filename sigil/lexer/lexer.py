"""
Sigil Lexer - turns markup text into a flat token stream

Maximal munch over a small rule table. Every rule is tried at the current
position and the longest match wins; on a tie the rule listed first wins,
which is how `@end` beats `@` and a newline beats plain whitespace.

The token stream is lossless: joining every lexeme gives back the input,
which the parser relies on for raw prose and blobs.

xwest
"""

import logging
import re
from typing import Callable, List, Optional, Tuple

from .tokens import Token, TokenType, SourceLocation, SIGILS, DELIMITERS
from .errors import create_invalid_character_error

logger = logging.getLogger(__name__)


class Lexer:
    """
    Sigil lexical analyzer.

    Converts markup text into a list of tokens terminated by an EOF token.
    Lexing is all-or-nothing: the first unclassifiable character raises.
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the lexer with source text.

        Args:
            source: Markup text
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

        self._compile_patterns()

    def _compile_patterns(self):
        """Compile the rule table, in precedence order."""

        atom_char = r"[a-zA-Z0-9+*,._~=?!$%&`'<>:;^\-|/]"

        # Bare run | "quoted \" string" | \x escape followed by more atom chars
        self.atom_pattern = re.compile(
            rf'{atom_char}+|'
            r'"[^"\\]*(?:\\.[^"\\]*)*"|'
            rf'\\.{atom_char}*'
        )

        self.rules: List[Tuple[TokenType, re.Pattern]] = [
            (TokenType.AT_END, re.compile(r'@end')),
            (TokenType.LINE_BREAK, re.compile(r'\n')),
            (TokenType.WHITESPACE, re.compile(r'\s')),
            (TokenType.AT_AT_AT, re.compile(r'@{3,}')),
        ]
        for text, token_type in SIGILS.items():
            if token_type != TokenType.AT_END:
                self.rules.append((token_type, re.compile(re.escape(text))))
        for text, token_type in DELIMITERS.items():
            self.rules.append((token_type, re.compile(re.escape(text))))
        self.rules.append((TokenType.ATOM, self.atom_pattern))
        self.rules.append((TokenType.UNKNOWN, re.compile(r'.', re.DOTALL)))

    def tokenize(self, start: int = 0, stop: Optional[Callable[[int], bool]] = None,
                 origin: Optional[SourceLocation] = None) -> List[Token]:
        """
        Tokenize the source from `start` to the end.

        Args:
            start: Offset to begin scanning at; line and column are derived
                from the text before it
            stop: Called with the position before each token; scanning ends
                early (with no EOF token) once it returns True
            origin: Location to begin scanning at, instead of `start`, when
                the caller already knows its line and column

        Returns:
            List of tokens including EOF token, unless `stop` ended the scan

        Raises:
            LexerError: If a character cannot be classified
        """
        if origin is not None:
            self.pos, self.line, self.column = origin.offset, origin.line, origin.column
        else:
            self.pos = start
            self.line = self.source.count('\n', 0, start) + 1
            self.column = start - (self.source.rfind('\n', 0, start) + 1) + 1
        self.tokens = []

        while self.pos < len(self.source):
            if stop is not None and stop(self.pos):
                logger.debug("Rescanned %d tokens from %s", len(self.tokens), self.filename)
                return self.tokens
            self.tokens.append(self._next_token())

        self.tokens.append(Token(TokenType.EOF, "", None, self._location()))
        logger.debug("Tokenized %d tokens from %s", len(self.tokens), self.filename)
        return self.tokens

    def _next_token(self) -> Token:
        """Match the longest rule at the current position and consume it."""
        best_type: Optional[TokenType] = None
        best_length = 0

        for token_type, pattern in self.rules:
            match = pattern.match(self.source, self.pos)
            if match and match.end() - self.pos > best_length:
                best_type = token_type
                best_length = match.end() - self.pos

        if best_type is None:
            raise create_invalid_character_error(self.source[self.pos], self._location())

        location = self._location()
        lexeme = self.source[self.pos:self.pos + best_length]
        self._advance_by(lexeme)

        if best_type == TokenType.AT_AT_AT:
            value = len(lexeme)
        elif best_type in (TokenType.ATOM, TokenType.UNKNOWN,
                           TokenType.WHITESPACE, TokenType.LINE_BREAK):
            value = lexeme
        else:
            value = None

        return Token(best_type, lexeme, value, location)

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _advance_by(self, lexeme: str):
        """Advance past `lexeme`, updating line/column."""
        end = self._location().advanced(lexeme)
        self.pos = end.offset
        self.line = end.line
        self.column = end.column


def tokenize(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Markup text
        filename: Filename for error reporting

    Returns:
        List of tokens

    Raises:
        LexerError: If lexing fails
    """
    return Lexer(source, filename).tokenize()


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If lexing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize(source, filepath)
