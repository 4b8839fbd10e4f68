import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from texpaper.utils import command_argument, extract_body, is_url, read_braced


class ExtractBodyTests(unittest.TestCase):
    def test_between_markers(self) -> None:
        tex = "\\documentclass{article}\n\\begin{document}\n  Body text \n\\end{document}\ntrailer"
        self.assertEqual(extract_body(tex), "Body text")

    def test_missing_markers_use_whole_text(self) -> None:
        self.assertEqual(extract_body("Just text"), "Just text")
        self.assertEqual(extract_body("\\begin{document} no end"), "\\begin{document} no end")

    def test_end_before_begin_uses_whole_text(self) -> None:
        tex = "\\end{document} x \\begin{document}"
        self.assertEqual(extract_body(tex), tex)


class BraceTests(unittest.TestCase):
    def test_read_braced_nested(self) -> None:
        self.assertEqual(read_braced("{a{b}c}d", 0), ("a{b}c", 7))

    def test_read_braced_escaped_and_unclosed(self) -> None:
        self.assertEqual(read_braced("{a\\}b}", 0), ("a\\}b", 6))
        self.assertIsNone(read_braced("{open", 0))
        self.assertIsNone(read_braced("no brace", 0))

    def test_command_argument(self) -> None:
        self.assertEqual(command_argument("x \\caption[short]{Long {nested} text} y", "caption"), "Long {nested} text")
        self.assertIsNone(command_argument("nothing here", "caption"))

    def test_is_url(self) -> None:
        self.assertTrue(is_url("https://example.org/core.tex"))
        self.assertFalse(is_url("papers/core.tex"))
        self.assertFalse(is_url("C:\\papers\\core.tex"))


if __name__ == "__main__":
    unittest.main()
