"""Command-line front door for codetext.

Reads code from a file or stdin, highlights it through the same refresh
pipeline a view uses, and prints an ANSI card (or metadata with ``--info``).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .ansi import render_card
from .colors import ColorScheme, available_theme_ids, parse_color_spec, theme_preset
from .errors import CodeTextError
from .highlight import HighlightRequest
from .languages import LANGUAGES, known_language_ids
from .modes import Automatic, ExplicitLanguage, LanguageAlias, Mode
from .runtime import config
from .runtime.refresh import HighlightRefresher

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def _positive_float(value: str) -> float:
    """argparse type for positive float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codetext",
        description="Print source code with syntax coloring, detecting the language when needed.",
    )
    parser.add_argument("path", nargs="?", default=None, help="File to highlight. Reads stdin when omitted.")
    language = parser.add_mutually_exclusive_group()
    language.add_argument("--language", metavar="ID", help="Canonical language id (see --list-languages).")
    language.add_argument("--alias", metavar="NAME", help="Language name or alias, matched case-insensitively.")
    parser.add_argument("--theme", default=None, help=f"Preset theme ({', '.join(available_theme_ids())}).")
    parser.add_argument("--css", metavar="FILE", type=Path, help="Custom highlight.js-style stylesheet.")
    parser.add_argument("--dark-css", metavar="FILE", type=Path, help="Stylesheet used with --scheme dark.")
    parser.add_argument("--scheme", choices=[scheme.value for scheme in ColorScheme], default=None)
    parser.add_argument("--width", type=_positive_int, default=None, help="Card width (default: fit the code).")
    parser.add_argument("--no-color", action="store_true", help="Print the code without colors.")
    parser.add_argument("--info", action="store_true", help="Print detected language and relevance only.")
    parser.add_argument("--timeout", type=_positive_float, default=None, help="Give up after SECONDS.")
    parser.add_argument("--save-defaults", action="store_true", help="Persist --theme/--scheme/--timeout.")
    parser.add_argument("--list-languages", action="store_true", help="List language ids and exit.")
    parser.add_argument("--list-themes", action="store_true", help="List preset themes and exit.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more (-vv for debug).")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _mode_from_args(args: argparse.Namespace) -> Mode:
    if args.language:
        return ExplicitLanguage(args.language.strip().lower())
    if args.alias:
        return LanguageAlias(args.alias)
    return Automatic()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments, highlight the input, and write the card to stdout."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.list_languages:
        for language_id in known_language_ids():
            sys.stdout.write(f"{language_id}\t{LANGUAGES[language_id].display_name}\n")
        return
    if args.list_themes:
        sys.stdout.write("\n".join(available_theme_ids()) + "\n")
        return

    if args.theme is not None:
        try:
            theme_preset(args.theme)
        except CodeTextError as exc:
            raise SystemExit(str(exc)) from exc
    theme_id = args.theme or config.load_theme_id()
    scheme = ColorScheme.parse(args.scheme, config.load_color_scheme())
    timeout = args.timeout if args.timeout is not None else config.load_timeout_seconds()
    if args.save_defaults:
        if args.theme:
            config.save_theme_id(args.theme)
        if args.scheme:
            config.save_color_scheme(scheme)
        if args.timeout is not None:
            config.save_timeout_seconds(args.timeout)

    if args.path is not None:
        path = Path(args.path)
        if not path.is_file():
            raise SystemExit(f"File not found: {path}")
        code = read_text(path)
    else:
        code = sys.stdin.read()

    css = read_text(args.css) if args.css is not None else None
    dark_css = read_text(args.dark_css) if args.dark_css is not None else None
    request = HighlightRequest(
        code=code,
        mode=_mode_from_args(args),
        colors=parse_color_spec(theme_id, css, dark_css),
        color_scheme=scheme,
    )

    refresher = HighlightRefresher(timeout_seconds=timeout)
    refresher.request_refresh(request)
    try:
        result = refresher.wait(timeout)
    except CodeTextError as exc:
        raise SystemExit(f"codetext: {exc}") from exc
    if result is None:
        raise SystemExit(f"codetext: highlighting did not finish within {timeout:g}s")

    if args.info:
        sys.stdout.write(
            f"language: {result.language_id}\n"
            f"name: {result.language_display_name}\n"
            f"relevance: {result.relevance}\n"
            f"undefined: {str(result.is_undefined).lower()}\n"
            f"background: {result.background_color or '-'}\n"
        )
        return

    if args.no_color:
        sys.stdout.write(result.text)
        if result.text and not result.text.endswith("\n"):
            sys.stdout.write("\n")
        return

    sys.stdout.write(render_card(result.styled_text, background=result.background_color, width=args.width) + "\n")


if __name__ == "__main__":
    main()
