"""Highlight request modes.

A mode says how the grammar is chosen: automatically from the whole corpus,
from one canonical language id, or from a user-supplied alias.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Automatic:
    """Try every known grammar and keep the best match."""


@dataclass(frozen=True)
class ExplicitLanguage:
    """Use exactly one canonical grammar id."""

    language_id: str


@dataclass(frozen=True)
class LanguageAlias:
    """Use a user-supplied language name, matched case-insensitively."""

    alias: str


Mode = Union[Automatic, ExplicitLanguage, LanguageAlias]


def parse_mode(value: str | None) -> Mode:
    """Parse ``auto``, ``language:<id>`` or ``alias:<name>`` (bare names are aliases)."""
    if value is None:
        return Automatic()
    text = value.strip()
    if not text or text.lower() in {"auto", "automatic"}:
        return Automatic()
    prefix, sep, rest = text.partition(":")
    if sep and prefix.lower() == "language":
        return ExplicitLanguage(rest.strip().lower())
    if sep and prefix.lower() == "alias":
        return LanguageAlias(rest.strip())
    return LanguageAlias(text)


__all__ = [
    "Automatic",
    "ExplicitLanguage",
    "LanguageAlias",
    "Mode",
    "parse_mode",
]
