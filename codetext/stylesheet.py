"""Parser for highlight.js-style custom stylesheets.

Only the subset needed to color code is understood: class selectors of the
form ``.hljs`` / ``.hljs-<class>[.<sub>_]`` and the ``color``, ``background``,
``background-color``, ``font-weight``, ``font-style`` and ``text-decoration``
properties. Everything else is ignored rather than rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_SELECTOR_RE = re.compile(r"^\.hljs(?:-([\w-]+)((?:\.[\w-]+)*))?$")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_RGB_RE = re.compile(r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*[\d.]+\s*)?\)$")

BASE_SELECTOR = ""

NAMED_COLORS: dict[str, str] = {
    "black": "#000000",
    "white": "#ffffff",
    "red": "#ff0000",
    "green": "#008000",
    "blue": "#0000ff",
    "yellow": "#ffff00",
    "orange": "#ffa500",
    "purple": "#800080",
    "navy": "#000080",
    "maroon": "#800000",
    "olive": "#808000",
    "teal": "#008080",
    "gray": "#808080",
    "grey": "#808080",
    "silver": "#c0c0c0",
    "aqua": "#00ffff",
    "fuchsia": "#ff00ff",
    "lime": "#00ff00",
    "brown": "#a52a2a",
    "darkblue": "#00008b",
    "darkgreen": "#006400",
    "darkred": "#8b0000",
}


@dataclass
class StyleDeclarations:
    """Accumulated properties for one selector; ``None`` means unset."""

    color: str | None = None
    background: str | None = None
    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None

    def update(self, other: StyleDeclarations) -> None:
        for name in ("color", "background", "bold", "italic", "underline"):
            value = getattr(other, name)
            if value is not None:
                setattr(self, name, value)


@dataclass
class Stylesheet:
    """Parsed stylesheet. ``rules`` is keyed by class tag; ``""`` is ``.hljs``."""

    rules: dict[str, StyleDeclarations] = field(default_factory=dict)

    @property
    def base(self) -> StyleDeclarations:
        return self.rules.get(BASE_SELECTOR, StyleDeclarations())


def normalize_color(value: str) -> str | None:
    """Normalize a CSS color to ``#rrggbb``; unsupported values yield ``None``."""
    text = value.strip().lower()
    if not text:
        return None
    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return f"#{digits}"
    match = _RGB_RE.match(text)
    if match:
        channels = [min(255, int(part)) for part in match.groups()]
        return "#{:02x}{:02x}{:02x}".format(*channels)
    return NAMED_COLORS.get(text)


def _background_color(value: str) -> str | None:
    # ``background`` is a shorthand; take the first token that parses as a color.
    for part in value.split():
        color = normalize_color(part)
        if color is not None:
            return color
    return None


def _parse_declarations(body: str) -> StyleDeclarations:
    decls = StyleDeclarations()
    for item in body.split(";"):
        name, sep, value = item.partition(":")
        if not sep:
            continue
        name = name.strip().lower()
        value = value.replace("!important", "").strip()
        lowered = value.lower()
        if name == "color":
            decls.color = normalize_color(value)
        elif name in {"background", "background-color"}:
            decls.background = _background_color(value)
        elif name == "font-weight":
            decls.bold = lowered in {"bold", "bolder"} or (lowered.isdigit() and int(lowered) >= 600)
        elif name == "font-style":
            decls.italic = lowered in {"italic", "oblique"}
        elif name == "text-decoration":
            decls.underline = "underline" in lowered
    return decls


def selector_class(selector: str) -> str | None:
    """Return the class tag for a selector, ``""`` for ``.hljs``, ``None`` if unsupported.

    ``.hljs-title.class_`` -> ``title.class``.
    """
    match = _SELECTOR_RE.match(selector.strip())
    if match is None:
        return None
    name, subclasses = match.groups()
    if name is None:
        return BASE_SELECTOR
    parts = [name]
    parts.extend(sub.rstrip("_") for sub in subclasses.split(".") if sub)
    return ".".join(parts)


def parse_stylesheet(css: str) -> Stylesheet:
    """Parse ``css`` into per-class declarations. Later rules override earlier ones."""
    sheet = Stylesheet()
    text = _COMMENT_RE.sub("", css)
    for match in _RULE_RE.finditer(text):
        selectors, body = match.groups()
        decls = _parse_declarations(body)
        for selector in selectors.split(","):
            css_class = selector_class(selector)
            if css_class is None:
                continue
            sheet.rules.setdefault(css_class, StyleDeclarations()).update(decls)
    return sheet


__all__ = [
    "BASE_SELECTOR",
    "NAMED_COLORS",
    "StyleDeclarations",
    "Stylesheet",
    "normalize_color",
    "parse_stylesheet",
    "selector_class",
]
