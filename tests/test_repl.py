"""
Tests for the sigil-repl front end.

Author: xwest
"""

import io
import os
import sys
import tempfile
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from sigil.repl import main, parse_args, render


class TestRender(unittest.TestCase):

    def test_success(self):
        ok, output = render("@@k(v)")
        self.assertTrue(ok)
        self.assertEqual(output, "Top\n  Item k (v)")

    def test_parse_error(self):
        ok, output = render("@a(unclosed", "doc.sg")
        self.assertFalse(ok)
        self.assertTrue(output.startswith("Parsing error: ERROR[P003]"))
        self.assertIn("doc.sg:1:12", output)

    def test_block_depth_option(self):
        ok, output = render("@a{@b{}}", config={"max_block_depth": 1})
        self.assertFalse(ok)
        self.assertIn("P007", output)


class TestMain(unittest.TestCase):

    def test_interactive_session(self):
        """One buffer is read to end of input, printed, then the prompt ends the session."""
        stdin = io.StringIO("@@(a) text")
        stdout = io.StringIO()
        self.assertEqual(main([], stdin=stdin, stdout=stdout), 0)
        output = stdout.getvalue()
        self.assertTrue(output.startswith("Enter input (Ctrl+D to finish):\n"))
        self.assertIn("IncontextAnnotation (a)\n  Raw 'text'", output)
        self.assertTrue(output.endswith("Continue? [Y/n] "))

    def test_interactive_error_keeps_running(self):
        stdout = io.StringIO()
        self.assertEqual(main([], stdin=io.StringIO("a ) b"), stdout=stdout), 0)
        self.assertIn("Parsing error:", stdout.getvalue())

    def test_file_mode(self):
        with tempfile.TemporaryDirectory() as tmp:
            good = os.path.join(tmp, "good.sg")
            bad = os.path.join(tmp, "bad.sg")
            with open(good, "w", encoding="utf-8") as f:
                f.write("@note\nhello\n@end\n")
            with open(bad, "w", encoding="utf-8") as f:
                f.write("@@(dangling)\n")

            stdout = io.StringIO()
            self.assertEqual(main([good], stdout=stdout), 0)
            self.assertEqual(stdout.getvalue(), "Top\n  Block note [Incontext]\n    Raw 'hello\\n'\n")

            stdout = io.StringIO()
            self.assertEqual(main([bad], stdout=stdout), 1)
            self.assertIn("P005", stdout.getvalue())

    def test_arguments(self):
        args = parse_args(["--max-block-depth", "4", "-v", "doc.sg"])
        self.assertEqual(args.max_block_depth, 4)
        self.assertTrue(args.verbose)
        self.assertEqual(args.path, "doc.sg")
        self.assertEqual(parse_args([]).max_block_depth, 128)


if __name__ == '__main__':
    unittest.main()
