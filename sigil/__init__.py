"""
Sigil Markup Package

Parses documents written in sigil markup: prose mixed with @-directives
that carry nested bracket payloads, verbatim blobs and named blocks.

Architecture:
    sigil/
    ├── lexer/           # Tokenization
    ├── parser/          # Syntax tree construction and rendering
    ├── config.py        # Parser options
    └── repl.py          # Interactive front end

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__email__ = "maintainers@sigil-markup.dev"
__license__ = "MIT"

from .lexer import Lexer, LexerError, Token, TokenType, tokenize, tokenize_file
from .parser import (
    Parser, ParseError, Top, format_tree, parse, parse_annotation,
    parse_file, parse_string,
)

__all__ = [
    # Core entry points
    "tokenize",
    "tokenize_file",
    "parse",
    "parse_annotation",
    "parse_string",
    "parse_file",
    "format_tree",

    # Core classes
    "Lexer",
    "Parser",
    "Token",
    "TokenType",
    "Top",

    # Errors
    "LexerError",
    "ParseError",

    # Version info
    "__version__",
    "__author__",
    "__email__",
    "__license__",
]
