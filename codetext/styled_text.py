"""Styled text: code annotated with per-run color and font attributes.

``StyledText`` is the renderer-neutral output of synthesis. Terminal output is
produced by ``to_ansi``; other front ends can walk ``runs`` directly.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TextStyle:
    """Visual attributes for one run. Colors are ``#rrggbb`` strings."""

    color: str | None = None
    background: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def sgr_params(self) -> str:
        """Return SGR parameters for this style (truecolor), empty when unstyled."""
        params: list[str] = []
        if self.bold:
            params.append("1")
        if self.italic:
            params.append("3")
        if self.underline:
            params.append("4")
        rgb = hex_to_rgb(self.color)
        if rgb is not None:
            params.append("38;2;{};{};{}".format(*rgb))
        rgb = hex_to_rgb(self.background)
        if rgb is not None:
            params.append("48;2;{};{};{}".format(*rgb))
        return ";".join(params)


PLAIN_STYLE = TextStyle()


@dataclass(frozen=True)
class StyledRun:
    text: str
    style: TextStyle = PLAIN_STYLE


@dataclass(frozen=True)
class StyledText:
    """Immutable sequence of styled runs."""

    runs: tuple[StyledRun, ...] = field(default_factory=tuple)

    @classmethod
    def from_runs(cls, runs: Iterable[StyledRun]) -> StyledText:
        """Build styled text, dropping empty runs and merging equal neighbours."""
        merged: list[StyledRun] = []
        for run in runs:
            if not run.text:
                continue
            if merged and merged[-1].style == run.style:
                merged[-1] = StyledRun(merged[-1].text + run.text, run.style)
                continue
            merged.append(run)
        return cls(tuple(merged))

    @property
    def plain(self) -> str:
        return "".join(run.text for run in self.runs)

    def __iter__(self) -> Iterator[StyledRun]:
        return iter(self.runs)

    def __len__(self) -> int:
        """Character count of the underlying text."""
        return sum(len(run.text) for run in self.runs)

    def __str__(self) -> str:
        return self.plain

    def lines(self) -> list[StyledText]:
        """Split into one ``StyledText`` per line (newlines removed)."""
        out: list[list[StyledRun]] = [[]]
        for run in self.runs:
            parts = run.text.split("\n")
            for idx, part in enumerate(parts):
                if idx > 0:
                    out.append([])
                if part:
                    out[-1].append(StyledRun(part, run.style))
        return [StyledText.from_runs(line) for line in out]

    def to_ansi(self) -> str:
        """Render runs as ANSI SGR sequences. Each styled run is reset after."""
        out: list[str] = []
        for run in self.runs:
            params = run.style.sgr_params()
            if not params:
                out.append(run.text)
                continue
            # Escapes never span a newline.
            segments = run.text.split("\n")
            for idx, segment in enumerate(segments):
                if idx > 0:
                    out.append("\n")
                if segment:
                    out.append(f"\033[{params}m{segment}\033[0m")
        return "".join(out)


def hex_to_rgb(value: str | None) -> tuple[int, int, int] | None:
    """Parse ``#rrggbb`` into an RGB tuple; anything else yields ``None``."""
    if not value or len(value) != 7 or not value.startswith("#"):
        return None
    try:
        return int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16)
    except ValueError:
        return None


__all__ = [
    "PLAIN_STYLE",
    "StyledRun",
    "StyledText",
    "TextStyle",
    "hex_to_rgb",
]
