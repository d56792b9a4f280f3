"""Published highlight result."""

from __future__ import annotations

from dataclasses import dataclass

from .styled_text import StyledText


@dataclass(frozen=True)
class HighlightResult:
    """Themed styled text plus language metadata for one highlight request."""

    styled_text: StyledText
    language_id: str
    language_display_name: str
    relevance: int
    is_undefined: bool
    background_color: str | None = None
    has_illegal: bool = False

    @property
    def text(self) -> str:
        return self.styled_text.plain

    @property
    def is_uncertain(self) -> bool:
        return not self.is_undefined and self.language_display_name.endswith("?")


__all__ = ["HighlightResult"]
