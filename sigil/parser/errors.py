"""
Error handling for the sigil parser.

A parse either yields a complete tree or raises exactly one ParseError;
nothing is recovered and no partial tree escapes. The error records the
offending token (an EOF token for end of input), the token kinds that
would have been accepted, and, for delimiter problems, where the
unmatched opener was.

Author: xwest
"""

from typing import FrozenSet, Iterable, Optional, List, Union

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Exception raised when the parser meets input no production accepts.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        token: Optional[Token] = None,
        expected: Iterable[str] = (),
        opener: Optional[SourceLocation] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.location = location
        self.token = token
        self.expected: FrozenSet[str] = frozenset(expected)
        self.opener = opener
        self.code = code

    @property
    def at_end_of_input(self) -> bool:
        return self.token is not None and self.token.type == TokenType.EOF

    def __str__(self) -> str:
        return str(self.diagnostic)


# Parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Unexpected end of input",
    "P003": "Unclosed delimiter",
    "P004": "Mismatched delimiter",
    "P005": "Dangling annotation",
    "P006": "Unterminated blob",
    "P007": "Nesting too deep",
}

CLOSING_TEXT = {
    TokenType.PAREN_OPEN: ")",
    TokenType.BRACKET_OPEN: "]",
    TokenType.BRACE_OPEN: "}",
    TokenType.AT: "@end",
}


def _names(expected: Iterable[Union[TokenType, str]]) -> List[str]:
    return sorted(e.name if isinstance(e, TokenType) else e for e in expected)


# Helper functions for creating common parser errors

def create_unexpected_token_error(expected: Iterable[Union[TokenType, str]], found: Token) -> ParseError:
    """Create an error for an unexpected token (or end of input)."""
    names = _names(expected)
    expected_str = ", ".join(names) if names else "nothing"

    if found.type == TokenType.EOF:
        return ParseError(
            message=f"Unexpected end of input, expected one of: {expected_str}",
            location=found.location,
            token=found,
            expected=names,
            code="P002",
            help_text="The input ended while a construct was still incomplete.",
        )

    return ParseError(
        message=f"Unexpected {found.type.name} {found.lexeme!r}, expected one of: {expected_str}",
        location=found.location,
        token=found,
        expected=names,
        code="P001",
        help_text=f"Escape the text with a backslash if '{found.lexeme}' is meant literally.",
    )


def create_unclosed_delimiter_error(opener: Token, found: Token,
                                    expected: Iterable[Union[TokenType, str]]) -> ParseError:
    """Create an error for an opener (or incontext block) whose closer never arrives."""
    closing = CLOSING_TEXT.get(opener.type, "a closer")
    what = "block" if opener.type == TokenType.AT else f"delimiter {opener.lexeme!r}"

    return ParseError(
        message=f"Unclosed {what}, found {found}",
        location=found.location,
        token=found,
        expected=_names(expected),
        opener=opener.location,
        code="P003",
        help_text=f"The {what} opened at {opener.location} was never closed.",
        suggestions=[f"Add a closing '{closing}'"]
    )


def create_mismatched_delimiter_error(opener: Token, found: Token,
                                      expected: TokenType) -> ParseError:
    """Create an error for a closer of the wrong kind."""
    return ParseError(
        message=f"Mismatched delimiter: {found.lexeme!r} cannot close {opener.lexeme!r}",
        location=found.location,
        token=found,
        expected=[expected.name],
        opener=opener.location,
        code="P004",
        help_text=f"The {opener.lexeme!r} opened at {opener.location} must be closed first.",
        suggestions=[f"Replace {found.lexeme!r} with '{CLOSING_TEXT[opener.type]}'"]
    )


def create_dangling_annotation_error(annotation_location: SourceLocation, found: Token,
                                     expected: Iterable[Union[TokenType, str]]) -> ParseError:
    """Create an error for queued annotations with nothing to attach to."""
    return ParseError(
        message=f"Dangling annotation: nothing follows it to attach to, found {found}",
        location=found.location,
        token=found,
        expected=_names(expected),
        opener=annotation_location,
        code="P005",
        help_text=f"The annotation at {annotation_location} must be followed by an item, blob or block.",
        suggestions=["Add the item, blob or block it annotates", "Remove the annotation"]
    )


def create_unterminated_blob_error(fence: Token) -> ParseError:
    """Create an error for a blob whose closing fence never appears."""
    return ParseError(
        message=f"Unterminated blob: no closing {fence.lexeme!r}",
        location=fence.location,
        token=fence,
        expected=[f"{TokenType.AT_AT_AT.name}({fence.value})"],
        opener=fence.location,
        code="P006",
        help_text=f"A blob opened with {fence.value} '@' is closed by exactly {fence.value} '@'.",
        suggestions=[f"Add a closing {fence.lexeme!r}"]
    )


def create_nesting_too_deep_error(token: Token, limit: int) -> ParseError:
    """Create an error for input nested past the configured limit."""
    return ParseError(
        message=f"Nesting too deep: more than {limit} levels",
        location=token.location,
        token=token,
        code="P007",
        help_text="Raise the parser's depth limit if this document is legitimate.",
    )
