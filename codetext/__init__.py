"""Public package surface for codetext.

Syntax-highlighted code for reactive views: language resolution, Pygments
highlighting, theming, and cancellation-safe background refresh.
"""

from __future__ import annotations

from .colors import ColorScheme, CustomStylesheet, Theme
from .errors import CodeTextError, HighlightEngineError, UnknownThemeError
from .highlight import Highlight, HighlightRequest
from .modes import Automatic, ExplicitLanguage, LanguageAlias
from .results import HighlightResult
from .runtime.refresh import HighlightRefresher, RefreshState, RefreshTrigger
from .view import CodeText


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "Automatic",
    "CodeText",
    "CodeTextError",
    "ColorScheme",
    "CustomStylesheet",
    "ExplicitLanguage",
    "Highlight",
    "HighlightEngineError",
    "HighlightRefresher",
    "HighlightRequest",
    "HighlightResult",
    "LanguageAlias",
    "RefreshState",
    "RefreshTrigger",
    "Theme",
    "UnknownThemeError",
    "main",
]
