"""Language resolution order tests: explicit hint, filename, plain text."""

from __future__ import annotations

import unittest

from codeshow.syntax.language import DEFAULT_GRAMMAR, language_name, resolve_language


class ResolveLanguageTests(unittest.TestCase):
    def test_explicit_hint_wins_over_filename(self) -> None:
        self.assertEqual(resolve_language("python", "main.rs"), "python")

    def test_hint_aliases_resolve_to_canonical_grammar(self) -> None:
        self.assertEqual(resolve_language("rs"), "rust")
        self.assertEqual(resolve_language("  Rust "), "rust")

    def test_unknown_hint_falls_back_to_filename(self) -> None:
        self.assertEqual(resolve_language("klingon", "main.rs"), "rust")

    def test_empty_hint_uses_filename_extension(self) -> None:
        self.assertEqual(resolve_language("", "src/app.py"), "python")
        self.assertEqual(resolve_language(None, "/tmp/helloworld.rs"), "rust")

    def test_unrecognized_everything_degrades_to_plain_text(self) -> None:
        self.assertEqual(resolve_language("klingon", "notes.unknownext"), DEFAULT_GRAMMAR)
        self.assertEqual(resolve_language(None, None), DEFAULT_GRAMMAR)

    def test_inline_placeholder_filename_is_plain_text(self) -> None:
        self.assertEqual(resolve_language(None, "noname.txt"), DEFAULT_GRAMMAR)

    def test_language_name_is_human_readable(self) -> None:
        self.assertEqual(language_name("rust"), "Rust")
        self.assertEqual(language_name("no-such-grammar"), "no-such-grammar")


if __name__ == "__main__":
    unittest.main()
