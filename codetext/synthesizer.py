"""Turn engine markup into a themed, labelled ``HighlightResult``."""

from __future__ import annotations

from .colors import ColorScheme, ColorSpec, palette_for
from .engine import EngineOutcome
from .languages import UNKNOWN_DISPLAY_NAME, UNKNOWN_LANGUAGE_ID, display_name
from .results import HighlightResult
from .styled_text import StyledRun, StyledText

# Matches at or below this relevance are labelled as uncertain ("Python?").
CONFIDENCE_THRESHOLD = 5


def language_display_name(language_id: str, relevance: int, *, is_undefined: bool) -> str:
    if is_undefined:
        return UNKNOWN_DISPLAY_NAME
    name = display_name(language_id)
    if relevance > CONFIDENCE_THRESHOLD:
        return name
    return f"{name}?"


def synthesize(
    outcome: EngineOutcome,
    colors: ColorSpec,
    color_scheme: ColorScheme = ColorScheme.LIGHT,
) -> HighlightResult:
    """Style ``outcome`` with ``colors`` and derive its display metadata.

    Pure: equal inputs give equal results, and changing only ``colors`` or
    ``color_scheme`` changes only the color-derived fields.
    """
    palette = palette_for(colors, color_scheme)
    styled_text = StyledText.from_runs(
        StyledRun(run.text, palette.style_for(run.css_class)) for run in outcome.markup
    )

    is_undefined = not outcome.is_match
    relevance = 0 if is_undefined else max(0, int(outcome.relevance))
    language_id = UNKNOWN_LANGUAGE_ID if is_undefined else outcome.language_id
    return HighlightResult(
        styled_text=styled_text,
        language_id=language_id,
        language_display_name=language_display_name(language_id, relevance, is_undefined=is_undefined),
        relevance=relevance,
        is_undefined=is_undefined,
        background_color=palette.background,
        has_illegal=outcome.has_illegal,
    )


__all__ = ["CONFIDENCE_THRESHOLD", "language_display_name", "synthesize"]
