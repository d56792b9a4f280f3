"""Highlight requests and the synchronous resolve -> invoke -> synthesize pipeline.

``Highlight`` is the blocking facade for scripts and tests. Views use
``codetext.runtime.refresh.HighlightRefresher`` instead, which runs the same
pipeline with the engine call on a worker thread.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .colors import DEFAULT_THEME_ID, ColorScheme, ColorSpec, Theme
from .engine import EngineOutcome, HighlightEngine, PygmentsEngine
from .languages import resolve
from .modes import Automatic, LanguageAlias, Mode
from .results import HighlightResult
from .styled_text import StyledText
from .synthesizer import synthesize


@dataclass(frozen=True)
class HighlightRequest:
    """Everything a highlight depends on; compared by value to detect changes."""

    code: str
    mode: Mode = field(default_factory=Automatic)
    colors: ColorSpec = field(default_factory=lambda: Theme(DEFAULT_THEME_ID))
    color_scheme: ColorScheme = ColorScheme.LIGHT


def run_engine(engine: HighlightEngine, request: HighlightRequest) -> EngineOutcome:
    """Resolve the request's mode and invoke the engine (the slow, off-thread part)."""
    return engine.invoke(request.code, resolve(request.mode))


def synthesize_request(outcome: EngineOutcome, request: HighlightRequest) -> HighlightResult:
    return synthesize(outcome, request.colors, request.color_scheme)


class Highlight:
    """Blocking highlight facade."""

    def __init__(self, engine: HighlightEngine | None = None) -> None:
        self.engine: HighlightEngine = engine if engine is not None else PygmentsEngine()

    def request(
        self,
        code: str,
        mode: Mode | None = None,
        colors: ColorSpec | None = None,
        color_scheme: ColorScheme = ColorScheme.LIGHT,
    ) -> HighlightResult:
        """Highlight ``code`` and return the result with language metadata.

        Raises ``HighlightEngineError`` only when the engine cannot run.
        """
        request = HighlightRequest(
            code=code,
            mode=mode if mode is not None else Automatic(),
            colors=colors if colors is not None else Theme(DEFAULT_THEME_ID),
            color_scheme=color_scheme,
        )
        return synthesize_request(run_engine(self.engine, request), request)

    def styled_text(
        self,
        code: str,
        language: str | None = None,
        colors: ColorSpec | None = None,
        color_scheme: ColorScheme = ColorScheme.LIGHT,
    ) -> StyledText:
        """Return only the styled text; ``language`` is looked up as an alias."""
        mode: Mode = LanguageAlias(language) if language else Automatic()
        return self.request(code, mode=mode, colors=colors, color_scheme=color_scheme).styled_text


__all__ = [
    "Highlight",
    "HighlightRequest",
    "run_engine",
    "synthesize_request",
]
