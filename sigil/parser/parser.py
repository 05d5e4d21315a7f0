"""
Sigil Recursive Descent Parser

Builds a syntax tree from the token stream. Two grammars live here:

- Annotations: balanced (...) / [...] groups of atoms. Parsed with an
  explicit stack, so nesting depth costs memory rather than call stack.
- Documents (Top): prose interleaved with items, blobs and blocks. Blocks
  recurse into another Top, bounded by the configured depth.

Annotations written with @@ wait in a queue until the next item, blob or
block takes them. Prose arriving first releases them as free-standing
annotations; reaching the end of the document or block with annotations
still queued is an error.

Author: xwest
"""

import logging
import re
from bisect import bisect_left
from typing import List, Optional, Tuple, TypeVar

from ..config import DEFAULT_PARSER_CONFIG, ParserConfig, resolve_config
from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenType, SourceLocation, SourceSpan, OPENERS, CLOSERS
from .ast_nodes import (
    Annotated, Annotation, Atom, Blob, Block, BlockStyle, Delimiter, Element,
    Entity, IncontextAnnotation, Item, Raw, Top,
)
from .errors import (
    create_unexpected_token_error, create_unclosed_delimiter_error,
    create_mismatched_delimiter_error, create_dangling_annotation_error,
    create_unterminated_blob_error, create_nesting_too_deep_error,
)

logger = logging.getLogger(__name__)

ANNOTATION_OPENERS = {
    TokenType.PAREN_OPEN: Delimiter.PAREN,
    TokenType.BRACKET_OPEN: Delimiter.BRACKET,
}

# What may follow a queued annotation
ATTACHABLE_STARTS = (TokenType.AT_AT, TokenType.AT, TokenType.AT_AT_AT)

T = TypeVar('T', Item, Blob, Block)


class Parser:
    """
    Sigil recursive descent parser.

    One instance parses one token stream; all state (position, attachment
    queues, block depth) belongs to the instance.
    """

    def __init__(self, tokens: List[Token], config: Optional[ParserConfig] = None):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: The complete token stream from the lexer
            config: Optional parser options, see `sigil.config`
        """
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            end = (self.tokens[-1].span.end if self.tokens
                   else SourceLocation("<unknown>", 1, 1, 0))
            self.tokens.append(Token(TokenType.EOF, "", None, end))

        self.current = 0
        self.config = resolve_config(config or {}, DEFAULT_PARSER_CONFIG)
        self.block_depth = 0

        # Tokens are lossless, so the source can be rebuilt for raw text and blobs
        self.source = "".join(token.lexeme for token in self.tokens)
        self.filename = self.tokens[0].location.filename
        self._offsets = [token.location.offset for token in self.tokens]

    def parse(self) -> Top:
        """
        Parse the whole token stream as a document.

        Raises:
            ParseError: If the tokens do not form a document
        """
        top = self._parse_top(None, None)
        logger.debug("Parsed %d top-level entities from %s", len(top.entities), self.filename)
        return top

    def parse_annotation(self) -> Annotation:
        """
        Parse the whole token stream as a single annotation.

        Whitespace around the annotation is allowed; anything else is not.
        """
        self._skip_space()
        token = self._peek()
        if token.type not in ANNOTATION_OPENERS:
            raise create_unexpected_token_error(ANNOTATION_OPENERS, token)

        annotation = self._parse_annotation()

        self._skip_space()
        if not self._is_at_end():
            raise create_unexpected_token_error([TokenType.EOF], self._peek())
        return annotation

    # ========================================================================
    # Document grammar
    # ========================================================================

    def _parse_top(self, terminator: Optional[TokenType], opener: Optional[Token]) -> Top:
        """
        Parse entities until end of input or `terminator`.

        The terminator only counts when every bare bracket opened in the
        prose of this body has been closed. It is left for the caller to
        consume.
        """
        entities: List[Entity] = []
        queue: List[Annotation] = []
        groups: List[Token] = []        # bare brackets open in prose
        raw_first: Optional[Token] = None
        raw_last: Optional[Token] = None
        closing = [terminator or TokenType.EOF]

        while True:
            token = self._peek()

            if token.type == TokenType.EOF or (token.type == terminator and not groups):
                if raw_first is not None:
                    entities.append(self._raw(raw_first, raw_last))
                if groups:
                    raise create_unclosed_delimiter_error(groups[-1], token, [OPENERS[groups[-1].type]])
                if token.type == TokenType.EOF and opener is not None:
                    raise create_unclosed_delimiter_error(opener, token, closing)
                if queue:
                    raise create_dangling_annotation_error(
                        queue[0].span.start, token, ATTACHABLE_STARTS)
                return Top(tuple(entities))

            if token.is_prose or token.type in OPENERS or token.type in CLOSERS:
                if token.type in OPENERS:
                    groups.append(token)
                elif token.type in CLOSERS:
                    if not groups and opener is not None:
                        raise create_mismatched_delimiter_error(opener, token, closing[0])
                    if not groups:
                        raise create_unexpected_token_error(closing, token)
                    expected = OPENERS[groups[-1].type]
                    if token.type != expected:
                        raise create_mismatched_delimiter_error(groups[-1], token, expected)
                    groups.pop()

                if raw_first is None:
                    if token.is_space:
                        self._advance()
                        continue
                    if queue:
                        logger.debug("Releasing %d queued annotation(s) into prose", len(queue))
                        entities.extend(IncontextAnnotation(annotation) for annotation in queue)
                        queue.clear()
                    raw_first = token
                raw_last = self._advance()
                continue

            # Everything below is markup, which ends the current run of prose
            if raw_first is not None:
                entities.append(self._raw(raw_first, raw_last))
                raw_first = raw_last = None

            if token.type == TokenType.AT_AT:
                following = self._peek(1)
                if following.type in ANNOTATION_OPENERS:
                    self._advance()
                    queue.append(self._parse_annotation())
                elif following.type == TokenType.ATOM:
                    entities.append(self._attach(queue, self._parse_item()))
                else:
                    raise create_unexpected_token_error(
                        [TokenType.ATOM, TokenType.PAREN_OPEN, TokenType.BRACKET_OPEN], following)
            elif token.type == TokenType.AT:
                following = self._peek(1)
                if following.type != TokenType.ATOM:
                    raise create_unexpected_token_error([TokenType.ATOM], following)
                entities.append(self._attach(queue, self._parse_block()))
            elif token.type == TokenType.AT_AT_AT:
                entities.append(self._attach(queue, self._parse_blob()))
            elif groups:
                raise create_unclosed_delimiter_error(groups[-1], token, [OPENERS[groups[-1].type]])
            elif opener is not None:
                raise create_unclosed_delimiter_error(opener, token, closing)
            else:
                raise create_unexpected_token_error(closing, token)

    def _parse_item(self) -> Item:
        """@@name (payload) | @@name rest of the line"""
        at_at = self._advance()
        name = self._atom(self._advance())

        while self._check(TokenType.WHITESPACE):
            self._advance()
        if self._peek().type in ANNOTATION_OPENERS:
            payload = self._parse_annotation()
        else:
            payload = self._parse_line_payload()
        return Item(name, payload, SourceSpan(at_at.location, payload.span.end))

    def _parse_line_payload(self) -> Annotation:
        """
        Take the atoms up to the end of the line as an implicit (...) payload.

        `@@title How did we end up here?` reads as `@@title(How did we end up here?)`.
        """
        elements: List[Element] = []
        while not self._check(TokenType.LINE_BREAK) and not self._is_at_end():
            token = self._peek()
            if token.type == TokenType.WHITESPACE:
                self._advance()
            elif token.type == TokenType.ATOM:
                elements.append(self._atom(self._advance()))
            elif elements:
                raise create_unexpected_token_error([TokenType.ATOM, TokenType.LINE_BREAK], token)
            else:
                break

        if not elements:
            raise create_unexpected_token_error(
                [TokenType.ATOM, *ANNOTATION_OPENERS], self._peek())
        span = SourceSpan(elements[0].span.start, elements[-1].span.end)
        return Annotation(Delimiter.PAREN, tuple(elements), span)

    def _parse_block(self) -> Block:
        """
        @name( ... ) | @name{ ... } | @name ... @end

        The style is chosen by the token right after the name, with no
        whitespace skipped.
        """
        at = self._advance()
        name = self._atom(self._advance())

        following = self._peek().type
        if following == TokenType.PAREN_OPEN:
            style, terminator = BlockStyle.DELIMITED, TokenType.PAREN_CLOSE
        elif following == TokenType.BRACE_OPEN:
            style, terminator = BlockStyle.BRACED, TokenType.BRACE_CLOSE
        else:
            style, terminator = BlockStyle.INCONTEXT, TokenType.AT_END

        limit = self.config["max_block_depth"]
        if self.block_depth >= limit:
            raise create_nesting_too_deep_error(at, limit)

        opener = at if style == BlockStyle.INCONTEXT else self._advance()
        self.block_depth += 1
        top = self._parse_top(terminator, opener)
        self.block_depth -= 1
        closer = self._advance()

        logger.debug("Parsed %s block %r with %d entities",
                     style.value, name.content, len(top.entities))
        return Block(style, name, top, SourceSpan(at.location, closer.span.end))

    def _parse_blob(self) -> Blob:
        """
        Take the source text verbatim up to the next fence of the same width.

        The closing fence is searched for in the text, not the tokens, so
        nothing inside the blob is interpreted, quotes included.
        """
        fence = self._advance()
        width = fence.value
        start = fence.end_offset

        match = re.compile(rf"(?<!@)@{{{width}}}(?!@)").search(self.source, start)
        if match is None:
            raise create_unterminated_blob_error(fence)

        end = match.start()
        self._resync(fence.span.end.advanced(self.source[start:end]))
        closing = self._advance()

        logger.debug("Parsed blob of %d characters (fence width %d)", end - start, width)
        return Blob(self.source[start:end], SourceSpan(fence.location, closing.span.end))

    def _attach(self, queue: List[Annotation], inner: T) -> Annotated:
        """Bind everything queued to `inner`, in the order it was written."""
        if queue:
            logger.debug("Attaching %d annotation(s) to %s", len(queue), type(inner).__name__)
        annotated = Annotated(tuple(queue), inner)
        queue.clear()
        return annotated

    def _raw(self, first: Token, last: Token) -> Raw:
        content = self.source[first.location.offset:last.end_offset]
        return Raw(content, SourceSpan(first.location, last.span.end))

    # ========================================================================
    # Annotation grammar
    # ========================================================================

    def _parse_annotation(self) -> Annotation:
        """
        Parse a balanced group starting at the current ( or [ token.

        Whitespace and line breaks between elements are dropped.
        """
        limit = self.config["max_annotation_depth"]
        stack: List[Tuple[Token, List[Element]]] = []

        while True:
            token = self._peek()

            if token.type in ANNOTATION_OPENERS:
                if limit is not None and len(stack) >= limit:
                    raise create_nesting_too_deep_error(token, limit)
                stack.append((self._advance(), []))
            elif token.type == TokenType.ATOM:
                stack[-1][1].append(self._atom(self._advance()))
            elif token.is_space:
                self._advance()
            elif token.type in (TokenType.PAREN_CLOSE, TokenType.BRACKET_CLOSE):
                opener, elements = stack[-1]
                expected = OPENERS[opener.type]
                if token.type != expected:
                    raise create_mismatched_delimiter_error(opener, token, expected)
                closer = self._advance()
                stack.pop()

                annotation = Annotation(
                    ANNOTATION_OPENERS[opener.type],
                    tuple(elements),
                    SourceSpan(opener.location, closer.span.end),
                )
                if not stack:
                    return annotation
                stack[-1][1].append(annotation)
            else:
                opener = stack[-1][0]
                expected_types = [TokenType.ATOM, TokenType.PAREN_OPEN,
                                  TokenType.BRACKET_OPEN, OPENERS[opener.type]]
                if token.type == TokenType.EOF:
                    raise create_unclosed_delimiter_error(opener, token, expected_types)
                raise create_unexpected_token_error(expected_types, token)

    # ========================================================================
    # Token stream helpers
    # ========================================================================

    def _resync(self, location: SourceLocation):
        """
        Move to the token starting at `location`, re-scanning if none does.

        When the location falls inside a token (say a quoted atom), the text
        is scanned again from there only until it meets a token boundary of
        the old stream; the old tokens from that boundary on are kept.
        """
        offset = location.offset
        index = bisect_left(self._offsets, offset, self.current)
        if index < len(self.tokens) and self._offsets[index] == offset:
            self.current = index
            return

        def aligned(position: int) -> bool:
            found = bisect_left(self._offsets, position, index)
            return found < len(self._offsets) and self._offsets[found] == position

        relexed = Lexer(self.source, self.filename).tokenize(stop=aligned, origin=location)
        resume = len(self.tokens)
        if relexed[-1].type != TokenType.EOF:
            resume = bisect_left(self._offsets, relexed[-1].end_offset, index)

        self.tokens[index:resume] = relexed
        self._offsets[index:resume] = [token.location.offset for token in relexed]
        self.current = index

    def _atom(self, token: Token) -> Atom:
        return Atom(token.value, token.span)

    def _skip_space(self):
        while self._peek().is_space:
            self._advance()

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches type without consuming."""
        return self._peek().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        if not self._is_at_end():
            self.current += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self, ahead: int = 0) -> Token:
        """Return the token `ahead` places from the current one; EOF past the end."""
        index = self.current + ahead
        if index < len(self.tokens):
            return self.tokens[index]
        return self.tokens[-1]

    def _previous(self) -> Token:
        """Return previous token."""
        if self.current > 0:
            return self.tokens[self.current - 1]
        return self.tokens[0]


def parse(tokens: List[Token], config: Optional[ParserConfig] = None) -> Top:
    """
    Parse a token stream into a document tree.

    Raises:
        ParseError: If parsing fails
    """
    return Parser(tokens, config).parse()


def parse_annotation(tokens: List[Token], config: Optional[ParserConfig] = None) -> Annotation:
    """Parse a token stream holding exactly one annotation."""
    return Parser(tokens, config).parse_annotation()


def parse_string(source: str, filename: str = "<string>",
                 config: Optional[ParserConfig] = None) -> Top:
    """
    Convenience function to parse a source string.

    Raises:
        LexerError: If lexing fails
        ParseError: If parsing fails
    """
    from ..lexer import tokenize

    return parse(tokenize(source, filename), config)


def parse_file(filepath: str, config: Optional[ParserConfig] = None) -> Top:
    """
    Convenience function to parse a source file.

    Raises:
        LexerError: If lexing fails
        ParseError: If parsing fails
        IOError: If file cannot be read
    """
    from ..lexer import tokenize_file

    return parse(tokenize_file(filepath), config)
