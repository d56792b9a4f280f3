"""Exception types raised by codetext.

Only infrastructure problems are errors. Unknown languages and low-confidence
matches are normal results and never raise.
"""

from __future__ import annotations


class CodeTextError(Exception):
    """Base class for codetext failures."""


class HighlightEngineError(CodeTextError):
    """The highlighting engine could not run at all."""


class UnknownThemeError(CodeTextError, KeyError):
    """A preset theme id is not in the preset table."""

    def __init__(self, theme_id: str) -> None:
        super().__init__(theme_id)
        self.theme_id = theme_id

    def __str__(self) -> str:
        return f"unknown theme: {self.theme_id!r}"
