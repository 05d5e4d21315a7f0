"""
Test suite for the sigil lexer.

Tests cover:
- Sigil and delimiter recognition
- Longest-match disambiguation (@end, @@@ fences)
- Atom forms: bare runs, quoted strings, backslash escapes
- Totality and lossless output
- Source locations

Author: xwest
"""

import os
import sys
import tempfile
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from sigil.lexer import Lexer, SourceLocation, TokenType, tokenize, tokenize_file


def kinds(source):
    """Token types without the trailing EOF."""
    return [token.type for token in tokenize(source)[:-1]]


def lexemes(source):
    return [token.lexeme for token in tokenize(source)[:-1]]


class TestSigils(unittest.TestCase):
    """Sigils and the rules that decide between them."""

    def test_at_runs(self):
        """One, two, and three-or-more @ are distinct tokens."""
        tokens = tokenize("@ @@ @@@ @@@@@")[:-1]
        self.assertEqual(
            [token.type for token in tokens if token.type != TokenType.WHITESPACE],
            [TokenType.AT, TokenType.AT_AT, TokenType.AT_AT_AT, TokenType.AT_AT_AT],
        )
        fences = [token.value for token in tokens if token.type == TokenType.AT_AT_AT]
        self.assertEqual(fences, [3, 5])

    def test_at_end_beats_at(self):
        """The @end keyword wins over @ followed by an atom."""
        self.assertEqual(kinds("@end"), [TokenType.AT_END])
        self.assertEqual(kinds("@en"), [TokenType.AT, TokenType.ATOM])

    def test_at_end_is_longest_match_prefix(self):
        """@ending is @end followed by the atom 'ing'."""
        tokens = tokenize("@ending")
        self.assertEqual(tokens[0].type, TokenType.AT_END)
        self.assertEqual(tokens[1].type, TokenType.ATOM)
        self.assertEqual(tokens[1].value, "ing")

    def test_double_at_before_end(self):
        """@@end is an item sigil followed by the atom 'end'."""
        self.assertEqual(kinds("@@end"), [TokenType.AT_AT, TokenType.ATOM])
        self.assertEqual(kinds("@@@end"), [TokenType.AT_AT_AT, TokenType.ATOM])

    def test_hash(self):
        self.assertEqual(kinds("#"), [TokenType.HASH])
        self.assertEqual(kinds("##"), [TokenType.HASH, TokenType.HASH])

    def test_delimiters(self):
        self.assertEqual(kinds("()[]{}"), [
            TokenType.PAREN_OPEN, TokenType.PAREN_CLOSE,
            TokenType.BRACKET_OPEN, TokenType.BRACKET_CLOSE,
            TokenType.BRACE_OPEN, TokenType.BRACE_CLOSE,
        ])

    def test_markup_sample(self):
        """Sigils glued to atoms and annotations split correctly."""
        self.assertEqual(
            lexemes("@(w [dw wea (x 10.0)])@lck@@a"),
            ["@", "(", "w", " ", "[", "dw", " ", "wea", " ", "(", "x", " ", "10.0",
             ")", "]", ")", "@", "lck", "@@", "a"],
        )


class TestAtoms(unittest.TestCase):
    """Bare runs, quoted strings and escapes."""

    def test_bare_run(self):
        """Punctuation in the atom class stays inside the atom."""
        tokens = tokenize("saen.lk |- : ;; a+b*c,d~e=f?g!h$i%j&k`l'm<n>o^p/q")
        atoms = [token.value for token in tokens if token.type == TokenType.ATOM]
        self.assertEqual(atoms, ["saen.lk", "|-", ":", ";;", "a+b*c,d~e=f?g!h$i%j&k`l'm<n>o^p/q"])

    def test_quoted_string(self):
        """Quoted strings are single atoms, quotes included."""
        tokens = tokenize('sdf "asd0duj19~" x')
        self.assertEqual(tokens[2].type, TokenType.ATOM)
        self.assertEqual(tokens[2].value, '"asd0duj19~"')

    def test_quoted_string_with_structure_and_escapes(self):
        source = r'"a \" (b) @c"'
        self.assertEqual(kinds(source), [TokenType.ATOM])
        self.assertEqual(tokenize(source)[0].value, source)

    def test_quoted_string_spans_lines(self):
        self.assertEqual(kinds('"a\nb"'), [TokenType.ATOM])

    def test_adjacent_empty_strings(self):
        self.assertEqual(lexemes('""x""'), ['""', 'x', '""'])

    def test_unterminated_quote(self):
        """A quote with no partner is an unknown character."""
        self.assertEqual(kinds('"abc'), [TokenType.UNKNOWN, TokenType.ATOM])

    def test_escape_is_atom(self):
        """A backslash makes the next character literal atom text."""
        self.assertEqual(lexemes(r"\@x"), [r"\@x"])
        self.assertEqual(kinds(r"\@x"), [TokenType.ATOM])
        self.assertEqual(kinds(r"\("), [TokenType.ATOM])
        self.assertEqual(kinds(r"\/"), [TokenType.ATOM])

    def test_escape_sequence_in_braces(self):
        tokens = tokenize(r"@code{\@\@atom}")[:-1]
        self.assertEqual([token.type for token in tokens], [
            TokenType.AT, TokenType.ATOM, TokenType.BRACE_OPEN,
            TokenType.ATOM, TokenType.ATOM, TokenType.BRACE_CLOSE,
        ])
        self.assertEqual(tokens[3].value, r"\@")
        self.assertEqual(tokens[4].value, r"\@atom")

    def test_trailing_backslash(self):
        """A lone backslash at the end, or before a newline, is unknown."""
        self.assertEqual(kinds("\\"), [TokenType.UNKNOWN])
        self.assertEqual(kinds("\\\n"), [TokenType.UNKNOWN, TokenType.LINE_BREAK])

    def test_non_ascii_letters_are_unknown(self):
        self.assertEqual(kinds("é"), [TokenType.UNKNOWN])
        self.assertEqual(tokenize("é")[0].value, "é")


class TestWhitespace(unittest.TestCase):

    def test_line_break_beats_whitespace(self):
        self.assertEqual(kinds("a\tb\nc"), [
            TokenType.ATOM, TokenType.WHITESPACE, TokenType.ATOM,
            TokenType.LINE_BREAK, TokenType.ATOM,
        ])

    def test_one_token_per_whitespace_character(self):
        self.assertEqual(kinds("  \r\n"), [
            TokenType.WHITESPACE, TokenType.WHITESPACE,
            TokenType.WHITESPACE, TokenType.LINE_BREAK,
        ])


class TestTotality(unittest.TestCase):
    """Lexing never fails and never loses text."""

    def test_every_character_classifies(self):
        for code in list(range(0, 0x300)) + [0x2028, 0x3000, 0x1F600]:
            char = chr(code)
            with self.subTest(char=repr(char)):
                tokens = tokenize(char)
                self.assertEqual(tokens[-1].type, TokenType.EOF)
                self.assertEqual("".join(token.lexeme for token in tokens), char)

    def test_lossless(self):
        source = 'sdf "asd0duj19~" saen.lk ""x"" \\/ |- : ;; @(w [dw wea (x 10.0)])@lck@@a \n\n#ew(\n@end\n ☃ \\'
        tokens = tokenize(source)
        self.assertEqual("".join(token.lexeme for token in tokens), source)

    def test_empty_input(self):
        tokens = tokenize("")
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens[0].type, TokenType.EOF)


class TestLocations(unittest.TestCase):

    def test_line_and_column(self):
        tokens = tokenize("ab\n  cd", "doc.sg")
        cd = tokens[-2]
        self.assertEqual(cd.value, "cd")
        self.assertEqual(cd.location.filename, "doc.sg")
        self.assertEqual((cd.location.line, cd.location.column, cd.location.offset), (2, 3, 5))
        self.assertEqual(str(cd.location), "doc.sg:2:3")

    def test_span_end(self):
        ab = tokenize("ab\ncd")[0]
        self.assertEqual(ab.end_offset, 2)
        self.assertEqual((ab.span.end.line, ab.span.end.column), (1, 3))

    def test_span_across_lines(self):
        string = tokenize('"a\nbc" x')[0]
        self.assertEqual((string.span.end.line, string.span.end.column), (2, 4))

    def test_eof_location(self):
        eof = tokenize("a\nb")[-1]
        self.assertEqual(eof.lexeme, "")
        self.assertEqual((eof.location.line, eof.location.column, eof.location.offset), (2, 2, 3))

    def test_tokenize_from_offset(self):
        """Scanning can start mid-input with correct line and column."""
        tokens = Lexer("ab\ncd ef").tokenize(start=6)
        self.assertEqual(tokens[0].value, "ef")
        self.assertEqual((tokens[0].location.line, tokens[0].location.column), (2, 4))

    def test_tokenize_from_known_location(self):
        tokens = Lexer("ab\ncd ef", "doc.sg").tokenize(origin=SourceLocation("doc.sg", 2, 1, 3))
        self.assertEqual(tokens[0].value, "cd")
        self.assertEqual((tokens[0].location.line, tokens[0].location.column), (2, 1))
        self.assertEqual(tokens[-1].location.offset, 8)

    def test_stop_ends_scan_early(self):
        """A stop condition ends the scan before the token at that position, with no EOF."""
        tokens = Lexer("ab cd ef").tokenize(stop=lambda position: position == 6)
        self.assertEqual([token.lexeme for token in tokens], ["ab", " ", "cd", " "])


class TestTokenizeFile(unittest.TestCase):

    def test_reads_utf8_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "doc.sg")
            with open(path, "w", encoding="utf-8") as f:
                f.write("@note ☃\n@end\n")
            tokens = tokenize_file(path)
        self.assertEqual(tokens[0].location.filename, path)
        self.assertEqual(tokens[0].type, TokenType.AT)
        self.assertIn(TokenType.AT_END, [token.type for token in tokens])


if __name__ == '__main__':
    unittest.main()
