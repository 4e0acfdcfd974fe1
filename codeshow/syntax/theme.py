"""Theme loading and token-class style lookup.

A theme maps token classes to display styles and always carries a
``default`` entry that every unknown or unstyled class falls back to. Themes
are loaded once at startup and are immutable afterwards.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from ..errors import ConfigError
from .tokens import DEFAULT, REPRESENTATIVE_TOKEN_TYPES, TOKEN_CLASSES

logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_FALLBACK_FOREGROUND = "#d0d0d0"


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, value: object) -> "Color":
        """Parse ``#rrggbb`` or ``#rgb`` (leading ``#`` optional)."""
        match = _HEX_COLOR_RE.match(value.strip()) if isinstance(value, str) else None
        if match is None:
            raise ValueError(f"invalid colour: {value!r}")
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


@dataclass(frozen=True)
class Style:
    """Resolved display style for one token class."""

    foreground: Color
    background: Color | None = None
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class Theme:
    """Immutable token-class to style mapping with a guaranteed default."""

    styles: Mapping[str, Style] = field(default_factory=dict)
    name: str = ""

    def __post_init__(self) -> None:
        if DEFAULT not in self.styles:
            raise ConfigError(f"Theme {self.name or '<unnamed>'} has no {DEFAULT!r} entry")
        object.__setattr__(self, "styles", MappingProxyType(dict(self.styles)))

    @property
    def default_style(self) -> Style:
        return self.styles[DEFAULT]

    def style_for(self, token_class: str) -> Style:
        """Return the style for ``token_class``, falling back to ``default``."""
        return self.styles.get(token_class, self.styles[DEFAULT])

    def color_for(self, token_class: str) -> Color:
        return self.style_for(token_class).foreground

    @classmethod
    def from_mapping(cls, data: object, name: str = "") -> "Theme":
        """Build a theme from decoded JSON.

        Entries are either a colour string or an object with ``foreground``,
        ``background``, ``bold`` and ``italic`` keys. Unknown token classes are
        skipped; malformed entries raise ``ConfigError``.
        """
        label = name or "<unnamed>"
        if not isinstance(data, dict):
            raise ConfigError(f"Theme {label} must be a JSON object")
        if DEFAULT not in data:
            raise ConfigError(f"Theme {label} has no {DEFAULT!r} entry")

        default_style = _parse_entry(data[DEFAULT], None, label, DEFAULT)
        styles: dict[str, Style] = {DEFAULT: default_style}
        for token_class, entry in data.items():
            if token_class == DEFAULT:
                continue
            if token_class not in TOKEN_CLASSES:
                logger.warning("theme %s: ignoring unknown token class %r", label, token_class)
                continue
            styles[token_class] = _parse_entry(entry, default_style, label, token_class)
        return cls(styles=styles, name=name)


def _parse_color(value: object, label: str, token_class: str, key: str) -> Color:
    try:
        return Color.from_hex(value)
    except ValueError as exc:
        raise ConfigError(f"Theme {label}: {token_class}.{key} is not a colour: {value!r}") from exc


def _parse_entry(entry: object, default_style: Style | None, label: str, token_class: str) -> Style:
    if isinstance(entry, str):
        return Style(foreground=_parse_color(entry, label, token_class, "foreground"))
    if not isinstance(entry, dict):
        raise ConfigError(f"Theme {label}: entry for {token_class!r} must be a colour or an object")

    raw_foreground = entry.get("foreground")
    if raw_foreground is None:
        if default_style is None:
            raise ConfigError(f"Theme {label}: {DEFAULT!r} entry needs a foreground colour")
        foreground = default_style.foreground
    else:
        foreground = _parse_color(raw_foreground, label, token_class, "foreground")

    raw_background = entry.get("background")
    background = None
    if raw_background is not None:
        background = _parse_color(raw_background, label, token_class, "background")

    flags: dict[str, bool] = {}
    for key in ("bold", "italic"):
        value = entry.get(key, False)
        if not isinstance(value, bool):
            raise ConfigError(f"Theme {label}: {token_class}.{key} must be true or false")
        flags[key] = value
    return Style(foreground=foreground, background=background, **flags)


def load_theme(path: Path) -> Theme:
    """Load a JSON theme file, raising ``ConfigError`` when missing or malformed."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Couldn't load theme: {path}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Theme {path} is not UTF-8 text") from exc
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ConfigError(f"Theme {path} is not valid JSON: {exc}") from exc
    theme = Theme.from_mapping(data, name=str(path))
    logger.info("loaded theme %s with %d token classes", path, len(theme.styles))
    return theme


def theme_from_pygments_style(style_name: str) -> Theme:
    """Derive a theme from a Pygments style such as ``monokai``."""
    try:
        style = get_style_by_name(style_name)
    except ClassNotFound as exc:
        raise ConfigError(f"Unknown Pygments style: {style_name}") from exc

    def _entry(token_class: str) -> dict[str, object]:
        token_style = style.style_for_token(REPRESENTATIVE_TOKEN_TYPES[token_class])
        entry: dict[str, object] = {
            "bold": bool(token_style.get("bold")),
            "italic": bool(token_style.get("italic")),
        }
        if token_style.get("color"):
            entry["foreground"] = f"#{token_style['color']}"
        if token_style.get("bgcolor"):
            entry["background"] = f"#{token_style['bgcolor']}"
        return entry

    default_entry = _entry(DEFAULT)
    default_entry.setdefault("foreground", _FALLBACK_FOREGROUND)
    data: dict[str, object] = {DEFAULT: default_entry}
    for token_class in sorted(TOKEN_CLASSES - {DEFAULT}):
        data[token_class] = _entry(token_class)
    return Theme.from_mapping(data, name=style_name)
