"""
Sigil Parser Package

Implements a recursive descent parser for sigil markup, producing an
immutable syntax tree.

Key Features:
- Annotation grammar on an explicit stack (deep nesting is safe)
- Document grammar with delimited, braced and incontext blocks
- Fenced verbatim blobs
- Attachment queue binding @@ annotations to the next item, blob or block
- Span-anchored diagnostics; a parse is all-or-nothing

Author: xwest
"""

from .ast_nodes import *
from .parser import Parser, parse, parse_annotation, parse_string, parse_file
from .printer import format_annotation, format_tree
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser",
    "parse",
    "parse_annotation",
    "parse_string",
    "parse_file",

    # Tree nodes
    "Atom", "Annotation", "Delimiter", "Element",
    "Annotated", "Entity", "Raw", "IncontextAnnotation",
    "Item", "Blob", "Block", "BlockStyle", "Top",
    "walk", "depth",

    # Rendering
    "format_annotation",
    "format_tree",

    # Error handling
    "ParseError",
]
