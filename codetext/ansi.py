"""ANSI-aware measurement, clipping and card rendering for styled code.

Clipping and padding preserve escape sequences and count display columns
(tabs, wide and combining characters) rather than code points.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import replace

from .styled_text import StyledRun, StyledText, hex_to_rgb

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
TAB_STOP = 8
RESET = "\033[0m"


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    """Return the display width of ``text`` ignoring escape sequences."""
    col = 0
    for ch in ANSI_ESCAPE_RE.sub("", text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1
    if col >= max_cols and i < n:
        # Keep styles closed when the line is cut mid-run.
        out.append(RESET)
    return "".join(out)


def background_sgr(color: str | None) -> str:
    rgb = hex_to_rgb(color)
    if rgb is None:
        return ""
    return "\033[48;2;{};{};{}m".format(*rgb)


def _with_background(run: StyledRun, background: str | None) -> StyledRun:
    if background is None or run.style.background is not None:
        return run
    return StyledRun(run.text, replace(run.style, background=background))


def render_card(
    styled_text: StyledText,
    *,
    background: str | None = None,
    width: int | None = None,
    horizontal_padding: int = 1,
    vertical_padding: int = 0,
) -> str:
    """Render styled text as a block of lines filled with ``background``.

    Every line is padded to the same width (the widest line, or ``width``
    when given, in which case longer lines are clipped).
    """
    lines = [
        StyledText.from_runs(
            StyledRun(sanitize_terminal_text(run.text), run.style) for run in line
        )
        for line in styled_text.lines()
    ]
    if lines and not lines[-1].runs and len(lines) > 1:
        lines.pop()

    inner_width = max((display_width(line.plain) for line in lines), default=0)
    if width is not None:
        inner_width = max(0, width - 2 * horizontal_padding)

    fill = background_sgr(background)
    pad = " " * horizontal_padding
    blank = f"{fill}{pad}{' ' * inner_width}{pad}{RESET if fill else ''}"

    out: list[str] = [blank] * vertical_padding
    for line in lines:
        rendered = StyledText.from_runs(_with_background(run, background) for run in line).to_ansi()
        rendered = clip_ansi_line(rendered, inner_width) if inner_width else ""
        gap = max(0, inner_width - display_width(rendered))
        out.append(f"{fill}{pad}{rendered}{fill}{' ' * gap}{pad}{RESET if fill else ''}")
    out.extend([blank] * vertical_padding)
    return "\n".join(out)


__all__ = [
    "ANSI_ESCAPE_RE",
    "RESET",
    "background_sgr",
    "char_display_width",
    "clip_ansi_line",
    "display_width",
    "render_card",
    "sanitize_terminal_text",
]
