"""Lexical side of the display pipeline: themes, languages and tokens."""

from __future__ import annotations

from .language import DEFAULT_GRAMMAR, language_name, resolve_language
from .theme import Color, Style, Theme, load_theme, theme_from_pygments_style
from .tokenizer import Span, sanitize_terminal_text, tokenize

__all__ = [
    "Color",
    "DEFAULT_GRAMMAR",
    "Span",
    "Style",
    "Theme",
    "language_name",
    "load_theme",
    "resolve_language",
    "sanitize_terminal_text",
    "theme_from_pygments_style",
    "tokenize",
]
