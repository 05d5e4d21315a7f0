"""
Interactive front end for the sigil parser.

Reads a whole buffer from stdin (until end of input), prints the parsed
tree or the error, then asks whether to go again. Given a path, parses
that file once instead.
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO, Tuple

from .config import DEFAULT_PARSER_CONFIG, ParserConfig
from .lexer import LexerError, tokenize
from .parser import ParseError, Parser, format_tree


def render(source: str, filename: str = "<stdin>",
           config: Optional[ParserConfig] = None) -> Tuple[bool, str]:
    """Lex and parse `source`; return success and the tree outline or error report."""
    try:
        tokens = tokenize(source, filename)
    except LexerError as e:
        return False, f"Lexing error: {e}"

    try:
        top = Parser(tokens, config).parse()
    except ParseError as e:
        return False, f"Parsing error: {e}"

    return True, format_tree(top)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Parse sigil markup and print the syntax tree.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    sigil-repl                      # Paste input, finish with Ctrl+D
    sigil-repl notes.sg             # Parse a file and exit
    sigil-repl --verbose notes.sg   # Same, with debug logging
        """
    )
    parser.add_argument('path', nargs='?',
                        help='File to parse once instead of reading interactively')
    parser.add_argument('--max-block-depth', type=int,
                        default=DEFAULT_PARSER_CONFIG["max_block_depth"],
                        help='Deepest block nesting accepted (default: %(default)s)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log lexer and parser activity')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None,
         stdin: Optional[TextIO] = None,
         stdout: Optional[TextIO] = None) -> int:
    """Main entry point for the REPL"""
    args = parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config: ParserConfig = {"max_block_depth": args.max_block_depth}

    if args.path:
        with open(args.path, 'r', encoding='utf-8') as f:
            source = f.read()
        ok, output = render(source, args.path, config)
        print(output, file=stdout)
        return 0 if ok else 1

    while True:
        print("Enter input (Ctrl+D to finish):", file=stdout)
        source = stdin.read()
        _, output = render(source, "<stdin>", config)
        print(output, file=stdout)

        print("Continue? [Y/n] ", end="", file=stdout, flush=True)
        answer = stdin.readline()
        if not answer or answer.strip().lower() == "n":
            break

    return 0


if __name__ == "__main__":
    sys.exit(main())
