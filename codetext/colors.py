"""Color specs, theme presets and palettes.

A color spec is either a preset theme id or a custom stylesheet. Both resolve
to a ``Palette`` for a light or dark color scheme: a default style, a style per
markup class, and an optional background color for the surrounding card.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Union

from .errors import UnknownThemeError
from .markup import CLASS_TOKENS, class_fallbacks
from .styled_text import TextStyle, hex_to_rgb
from .stylesheet import StyleDeclarations, parse_stylesheet

logger = logging.getLogger(__name__)

DEFAULT_THEME_ID = "xcode"
LIGHT_FOREGROUND = "#000000"
DARK_FOREGROUND = "#ffffff"


class ColorScheme(enum.Enum):
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def parse(cls, value: str | None, default: ColorScheme | None = None) -> ColorScheme:
        """Parse ``light``/``dark`` case-insensitively, falling back to ``default`` or light."""
        fallback = default if default is not None else cls.LIGHT
        if not value:
            return fallback
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return fallback


@dataclass(frozen=True)
class Theme:
    """Preset theme by id (see ``THEME_PRESETS``)."""

    preset_id: str = DEFAULT_THEME_ID


@dataclass(frozen=True)
class CustomStylesheet:
    """Custom CSS. ``dark_css`` is used for the dark scheme when given."""

    css: str
    dark_css: str | None = None

    def css_for(self, scheme: ColorScheme) -> str:
        if scheme is ColorScheme.DARK and self.dark_css is not None:
            return self.dark_css
        return self.css


ColorSpec = Union[Theme, CustomStylesheet]


@dataclass(frozen=True)
class ThemePreset:
    """Preset theme mapped onto a light and a dark Pygments style."""

    id: str
    light_style: str
    dark_style: str

    def style_name(self, scheme: ColorScheme) -> str:
        return self.dark_style if scheme is ColorScheme.DARK else self.light_style


_PRESETS: tuple[ThemePreset, ...] = (
    ThemePreset("xcode", "xcode", "github-dark"),
    ThemePreset("github", "default", "github-dark"),
    ThemePreset("atom-one", "friendly", "one-dark"),
    ThemePreset("solarized", "solarized-light", "solarized-dark"),
    ThemePreset("gruvbox", "gruvbox-light", "gruvbox-dark"),
    ThemePreset("paraiso", "paraiso-light", "paraiso-dark"),
    ThemePreset("stata", "stata-light", "stata-dark"),
    ThemePreset("visual-studio", "vs", "native"),
    ThemePreset("tango", "tango", "monokai"),
    ThemePreset("monokai", "monokai", "monokai"),
    ThemePreset("dracula", "dracula", "dracula"),
    ThemePreset("nord", "nord", "nord-darker"),
    ThemePreset("zenburn", "zenburn", "zenburn"),
    ThemePreset("grayscale", "friendly_grayscale", "bw"),
)

THEME_PRESETS: dict[str, ThemePreset] = {preset.id: preset for preset in _PRESETS}


def available_theme_ids() -> tuple[str, ...]:
    return tuple(preset.id for preset in _PRESETS)


def theme_preset(preset_id: str) -> ThemePreset:
    """Return the preset for ``preset_id`` (case-insensitive) or raise ``UnknownThemeError``."""
    preset = THEME_PRESETS.get(preset_id.strip().lower())
    if preset is None:
        raise UnknownThemeError(preset_id)
    return preset


@dataclass(frozen=True)
class Palette:
    """Resolved class-to-style table for one color spec and scheme."""

    default: TextStyle
    classes: dict[str, TextStyle] = field(default_factory=dict)
    background: str | None = None

    def style_for(self, css_class: str | None) -> TextStyle:
        """Return the style for ``css_class``; unmapped classes use the default."""
        if css_class is None:
            return self.default
        for candidate in class_fallbacks(css_class):
            style = self.classes.get(candidate)
            if style is not None:
                return style
        return self.default


def _is_dark(color: str | None) -> bool:
    rgb = hex_to_rgb(color)
    if rgb is None:
        return False
    red, green, blue = rgb
    return (0.299 * red + 0.587 * green + 0.114 * blue) < 128


def _hex(value: str | None) -> str | None:
    if not value:
        return None
    text = value if value.startswith("#") else f"#{value}"
    if len(text) == 4:
        text = "#" + "".join(ch * 2 for ch in text[1:])
    return text.lower() if hex_to_rgb(text.lower()) is not None else None


@lru_cache(maxsize=64)
def _palette_for_pygments_style(style_name: str) -> Palette:
    from pygments.styles import get_style_by_name
    from pygments.token import Token, string_to_tokentype

    style = get_style_by_name(style_name)
    background = _hex(style.background_color)
    base = style.style_for_token(Token)
    foreground = _hex(base["color"]) or (DARK_FOREGROUND if _is_dark(background) else LIGHT_FOREGROUND)
    default = TextStyle(color=foreground)

    classes: dict[str, TextStyle] = {}
    for css_class, path in CLASS_TOKENS.items():
        # Undefined token types inherit their parent's style.
        info = style.style_for_token(string_to_tokentype(path))
        classes[css_class] = TextStyle(
            color=_hex(info["color"]) or foreground,
            background=_hex(info["bgcolor"]),
            bold=bool(info["bold"]),
            italic=bool(info["italic"]),
            underline=bool(info["underline"]),
        )
    return Palette(default=default, classes=classes, background=background)


def _text_style(decls: StyleDeclarations, fallback: TextStyle) -> TextStyle:
    return TextStyle(
        color=decls.color or fallback.color,
        background=decls.background,
        bold=bool(decls.bold) if decls.bold is not None else fallback.bold,
        italic=bool(decls.italic) if decls.italic is not None else fallback.italic,
        underline=bool(decls.underline) if decls.underline is not None else fallback.underline,
    )


@lru_cache(maxsize=64)
def _palette_for_css(css: str, scheme: ColorScheme) -> Palette:
    sheet = parse_stylesheet(css)
    base = sheet.base
    background = base.background
    fallback_fg = DARK_FOREGROUND if (scheme is ColorScheme.DARK or _is_dark(background)) else LIGHT_FOREGROUND
    default = TextStyle(
        color=base.color or fallback_fg,
        bold=bool(base.bold),
        italic=bool(base.italic),
        underline=bool(base.underline),
    )
    classes = {
        css_class: _text_style(decls, default)
        for css_class, decls in sheet.rules.items()
        if css_class
    }
    return Palette(default=default, classes=classes, background=background)


def palette_for(colors: ColorSpec, scheme: ColorScheme = ColorScheme.LIGHT) -> Palette:
    """Resolve a color spec to a palette for ``scheme``.

    Raises ``UnknownThemeError`` for preset ids outside ``THEME_PRESETS``.
    """
    if isinstance(colors, Theme):
        style_name = theme_preset(colors.preset_id).style_name(scheme)
        logger.debug("using pygments style %s for theme %s (%s)", style_name, colors.preset_id, scheme.value)
        return _palette_for_pygments_style(style_name)
    if isinstance(colors, CustomStylesheet):
        return _palette_for_css(colors.css_for(scheme), scheme)
    raise TypeError(f"unsupported color spec: {colors!r}")


def background_color(colors: ColorSpec, scheme: ColorScheme = ColorScheme.LIGHT) -> str | None:
    return palette_for(colors, scheme).background


def parse_color_spec(theme: str | None = None, css: str | None = None, dark_css: str | None = None) -> ColorSpec:
    """Build a color spec from CLI/config values; CSS wins over a theme id."""
    if css is not None:
        return CustomStylesheet(css=css, dark_css=dark_css)
    return Theme(theme.strip().lower() if theme else DEFAULT_THEME_ID)


__all__ = [
    "ColorScheme",
    "ColorSpec",
    "CustomStylesheet",
    "DEFAULT_THEME_ID",
    "Palette",
    "THEME_PRESETS",
    "Theme",
    "ThemePreset",
    "available_theme_ids",
    "background_color",
    "palette_for",
    "parse_color_spec",
    "theme_preset",
]
