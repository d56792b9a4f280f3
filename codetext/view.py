"""Reactive code view model.

``CodeText`` holds the four inputs a highlight depends on (code, mode, colors,
color scheme) and forwards lifecycle events and value changes to its
``HighlightRefresher``. A change triggers a refresh only when the new value
differs from the old one.
"""

from __future__ import annotations

from .ansi import render_card
from .colors import DEFAULT_THEME_ID, ColorScheme, ColorSpec, Theme
from .highlight import HighlightRequest
from .modes import Automatic, Mode
from .results import HighlightResult
from .runtime.refresh import HighlightRefresher, RefreshSession, RefreshTrigger
from .styled_text import StyledRun, StyledText


class CodeText:
    """Displayable code whose highlighting follows its properties."""

    def __init__(
        self,
        code: str,
        *,
        mode: Mode | None = None,
        colors: ColorSpec | None = None,
        color_scheme: ColorScheme = ColorScheme.LIGHT,
        refresher: HighlightRefresher | None = None,
    ) -> None:
        self._code = code
        self._mode: Mode = mode if mode is not None else Automatic()
        self._colors: ColorSpec = colors if colors is not None else Theme(DEFAULT_THEME_ID)
        self._color_scheme = color_scheme
        self.refresher = refresher if refresher is not None else HighlightRefresher()
        self.visible = False

    def request(self) -> HighlightRequest:
        return HighlightRequest(
            code=self._code,
            mode=self._mode,
            colors=self._colors,
            color_scheme=self._color_scheme,
        )

    def _changed(self, trigger: RefreshTrigger) -> RefreshSession | None:
        if not self.visible:
            return None
        return self.refresher.request_refresh(self.request(), trigger)

    @property
    def code(self) -> str:
        return self._code

    @code.setter
    def code(self, value: str) -> None:
        if value == self._code:
            return
        self._code = value
        self._changed(RefreshTrigger.CODE_CHANGED)

    @property
    def mode(self) -> Mode:
        return self._mode

    @mode.setter
    def mode(self, value: Mode) -> None:
        if value == self._mode:
            return
        self._mode = value
        self._changed(RefreshTrigger.MODE_CHANGED)

    @property
    def colors(self) -> ColorSpec:
        return self._colors

    @colors.setter
    def colors(self, value: ColorSpec) -> None:
        if value == self._colors:
            return
        self._colors = value
        self._changed(RefreshTrigger.COLORS_CHANGED)

    @property
    def color_scheme(self) -> ColorScheme:
        return self._color_scheme

    @color_scheme.setter
    def color_scheme(self, value: ColorScheme) -> None:
        if value == self._color_scheme:
            return
        self._color_scheme = value
        self._changed(RefreshTrigger.COLOR_SCHEME_CHANGED)

    @property
    def highlight_result(self) -> HighlightResult | None:
        return self.refresher.result

    def appear(self) -> RefreshSession | None:
        """First display (or re-display); skipped when nothing changed since the last highlight."""
        self.visible = True
        return self.refresher.request_refresh(self.request(), RefreshTrigger.APPEAR)

    def disappear(self) -> None:
        """View torn down; any in-flight highlight is abandoned."""
        self.visible = False
        self.refresher.teardown()

    def scene_became_active(self) -> RefreshSession | None:
        """App resumed to the foreground; always re-highlights while visible."""
        return self._changed(RefreshTrigger.RESUMED)

    def update(self) -> HighlightResult | None:
        """Apply finished highlight work; call from the owning thread."""
        return self.refresher.process_completions()

    def render(self, width: int | None = None, *, horizontal_padding: int = 1) -> str:
        """Render as an ANSI card; plain code is shown until a result is applied."""
        result = self.highlight_result
        if result is None:
            return render_card(
                StyledText.from_runs([StyledRun(self._code)]),
                width=width,
                horizontal_padding=horizontal_padding,
            )
        return render_card(
            result.styled_text,
            background=result.background_color,
            width=width,
            horizontal_padding=horizontal_padding,
        )


__all__ = ["CodeText"]
