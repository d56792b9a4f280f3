"""Highlight engine adapter backed by Pygments.

The engine takes code plus a resolution (one or more grammar ids, or the full
corpus), tokenizes with the matching Pygments lexers, scores each match and
returns class-tagged markup for the winner. "No grammar matched" is a normal
outcome; only a broken engine raises ``HighlightEngineError``.

Scoring counts tokens that come from a grammar's word lists (keywords,
builtins, preprocessor directives, diff and heading markers). Structural
names are only trusted in context: a class, function or namespace name when
it directly follows a keyword, and a tag when it is opened by markup ``<`` or
used as a ``key:``. Stylesheet lexers tag every bare word as a selector, so
counting tags unconditionally lets them win on any input.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Protocol

from .errors import HighlightEngineError
from .languages import (
    LANGUAGES,
    UNKNOWN_LANGUAGE_ID,
    Candidates,
    FullCorpus,
    LanguageInfo,
    Resolution,
    known_language_ids,
)
from .markup import css_class_for_token

logger = logging.getLogger(__name__)

# Token types whose occurrences always count towards relevance.
SIGNIFICANT_TOKEN_PATHS: tuple[str, ...] = (
    "Keyword",
    "Operator.Word",
    "Name.Builtin",
    "Comment.Preproc",
    "Generic.Heading",
    "Generic.Subheading",
    "Generic.Inserted",
    "Generic.Deleted",
)

# Names that count only right after a keyword (``class Point``, ``import os``).
DECLARED_NAME_PATHS: tuple[str, ...] = (
    "Name.Class",
    "Name.Function",
    "Name.Namespace",
)

_MARKUP_OPENERS = frozenset({"<", "</"})

_PYGMENTS_LOCK = threading.Lock()
_PYGMENTS_READY = False
_PYGMENTS_AVAILABLE = False
_PYGMENTS_FIND_LEXER_CLASS = None
_PYGMENTS_ERROR_TOKEN = None
_PYGMENTS_KEYWORD_TOKEN = None
_PYGMENTS_TAG_TOKEN = None
_PYGMENTS_PUNCTUATION_TOKEN = None
_PYGMENTS_DECORATOR_TOKEN = None
_PYGMENTS_SIGNIFICANT: tuple = ()
_PYGMENTS_DECLARED: tuple = ()
_LEXER_CLASSES: dict[str, type] = {}


@dataclass(frozen=True)
class MarkupRun:
    """A run of source text tagged with a markup class (``None`` for plain text)."""

    text: str
    css_class: str | None = None


@dataclass(frozen=True)
class EngineOutcome:
    """Raw engine output for one highlight call."""

    markup: tuple[MarkupRun, ...]
    language_id: str
    relevance: int
    matched_requested_language: bool
    has_illegal: bool = False

    @property
    def is_match(self) -> bool:
        return self.language_id != UNKNOWN_LANGUAGE_ID

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.markup)


class HighlightEngine(Protocol):
    def invoke(self, code: str, resolution: Resolution) -> EngineOutcome:
        ...


@dataclass(frozen=True)
class TokenScore:
    """Relevance of one token stream.

    ``density`` is the share of non-whitespace tokens that counted, used to
    rank grammars whose relevance ties.
    """

    relevance: int
    has_illegal: bool
    density: float = 0.0


@dataclass(frozen=True)
class _Scored:
    language_id: str
    score: TokenScore
    confidence: float
    tokens: list

    @property
    def rank(self) -> tuple[int, float, float]:
        return self.score.relevance, self.confidence, self.score.density


def _ensure_pygments_loaded() -> bool:
    """Lazily import and cache the Pygments callables the engine needs."""
    global _PYGMENTS_READY
    global _PYGMENTS_AVAILABLE
    global _PYGMENTS_FIND_LEXER_CLASS
    global _PYGMENTS_ERROR_TOKEN
    global _PYGMENTS_KEYWORD_TOKEN
    global _PYGMENTS_TAG_TOKEN
    global _PYGMENTS_PUNCTUATION_TOKEN
    global _PYGMENTS_DECORATOR_TOKEN
    global _PYGMENTS_SIGNIFICANT
    global _PYGMENTS_DECLARED

    with _PYGMENTS_LOCK:
        if _PYGMENTS_READY:
            return _PYGMENTS_AVAILABLE

        _PYGMENTS_READY = True
        try:
            from pygments.lexers import find_lexer_class_by_name
            from pygments.token import Error, Keyword, Name, Punctuation, string_to_tokentype
        except ImportError:
            logger.exception("pygments is not importable")
            _PYGMENTS_AVAILABLE = False
            return False

        _PYGMENTS_FIND_LEXER_CLASS = find_lexer_class_by_name
        _PYGMENTS_ERROR_TOKEN = Error
        _PYGMENTS_KEYWORD_TOKEN = Keyword
        _PYGMENTS_TAG_TOKEN = Name.Tag
        _PYGMENTS_PUNCTUATION_TOKEN = Punctuation
        _PYGMENTS_DECORATOR_TOKEN = Name.Decorator
        _PYGMENTS_SIGNIFICANT = tuple(string_to_tokentype(path) for path in SIGNIFICANT_TOKEN_PATHS)
        _PYGMENTS_DECLARED = tuple(string_to_tokentype(path) for path in DECLARED_NAME_PATHS)
        _PYGMENTS_AVAILABLE = True
        return True


def _lexer_class(info: LanguageInfo) -> type:
    with _PYGMENTS_LOCK:
        cached = _LEXER_CLASSES.get(info.id)
        if cached is not None:
            return cached
    if _PYGMENTS_FIND_LEXER_CLASS is None:
        raise HighlightEngineError("pygments is not loaded")
    try:
        lexer_cls = _PYGMENTS_FIND_LEXER_CLASS(info.lexer_alias)
    except Exception as exc:
        raise HighlightEngineError(f"no pygments lexer for {info.id!r} ({info.lexer_alias!r})") from exc
    with _PYGMENTS_LOCK:
        _LEXER_CLASSES[info.id] = lexer_cls
    return lexer_cls


def _is_a(ttype, parents: tuple) -> bool:
    return any(ttype in parent for parent in parents)


def _is_markup_tag(visible: list, idx: int) -> bool:
    value = visible[idx][1].lstrip()
    if value.startswith("<"):
        return True
    if idx == 0:
        return False
    previous = visible[idx - 1][1].strip()
    if previous in _MARKUP_OPENERS:
        return True
    return previous == "/" and idx > 1 and visible[idx - 2][1].strip() == "<"


def _is_mapping_key(visible: list, idx: int) -> bool:
    """``"key":`` or ``key:`` with a one-word key; ``a:hover`` selectors excluded."""
    if idx + 1 >= len(visible):
        return False
    colon_type, colon = visible[idx + 1]
    if colon.strip() != ":" or colon_type not in _PYGMENTS_PUNCTUATION_TOKEN:
        return False
    if idx + 2 < len(visible) and visible[idx + 2][0] in _PYGMENTS_DECORATOR_TOKEN:
        return False
    key = visible[idx][1].strip()
    return key[:1] in {'"', "'"} or not any(ch.isspace() for ch in key)


def _counts(visible: list, idx: int) -> bool:
    ttype = visible[idx][0]
    if _is_a(ttype, _PYGMENTS_SIGNIFICANT):
        return True
    if _is_a(ttype, _PYGMENTS_DECLARED):
        return idx > 0 and visible[idx - 1][0] in _PYGMENTS_KEYWORD_TOKEN
    if _PYGMENTS_TAG_TOKEN is not None and ttype in _PYGMENTS_TAG_TOKEN:
        return _is_markup_tag(visible, idx) or _is_mapping_key(visible, idx)
    return False


def score_tokens(tokens: list) -> TokenScore:
    """Score a Pygments token list.

    Relevance is the number of counted tokens plus the number of distinct
    one-word counted lexemes, minus the number of error tokens, floored at
    zero.
    """
    _ensure_pygments_loaded()
    visible = [(ttype, value) for ttype, value in tokens if value.strip()]
    hits = 0
    distinct: set[tuple[object, str]] = set()
    errors = 0
    for idx, (ttype, value) in enumerate(visible):
        if _PYGMENTS_ERROR_TOKEN is not None and ttype in _PYGMENTS_ERROR_TOKEN:
            errors += 1
            continue
        if not _counts(visible, idx):
            continue
        hits += 1
        lexeme = value.strip()
        # Whole-line tokens (headings, diff lines) are never "distinct" words.
        if not any(ch.isspace() for ch in lexeme):
            distinct.add((ttype, lexeme))
    density = hits / len(visible) if visible else 0.0
    return TokenScore(
        relevance=max(0, hits + len(distinct) - errors),
        has_illegal=errors > 0,
        density=density,
    )


def _markup_from_tokens(tokens: list) -> tuple[MarkupRun, ...]:
    runs: list[MarkupRun] = []
    for ttype, value in tokens:
        if not value:
            continue
        css_class = css_class_for_token(ttype)
        if runs and runs[-1].css_class == css_class:
            runs[-1] = MarkupRun(runs[-1].text + value, css_class)
            continue
        runs.append(MarkupRun(value, css_class))
    return tuple(runs)


def no_match_outcome(code: str) -> EngineOutcome:
    markup = (MarkupRun(code),) if code else ()
    return EngineOutcome(
        markup=markup,
        language_id=UNKNOWN_LANGUAGE_ID,
        relevance=0,
        matched_requested_language=False,
    )


class PygmentsEngine:
    """Stateless engine adapter; safe to call from several threads at once."""

    def __init__(self, corpus: tuple[str, ...] | None = None) -> None:
        self._corpus = tuple(corpus) if corpus is not None else known_language_ids()

    @property
    def corpus(self) -> tuple[str, ...]:
        return self._corpus

    def _score(self, code: str, info: LanguageInfo) -> _Scored:
        lexer_cls = _lexer_class(info)
        try:
            lexer = lexer_cls(stripnl=False, ensurenl=False)
            tokens = list(lexer.get_tokens(code))
        except Exception as exc:
            raise HighlightEngineError(f"pygments failed to tokenize as {info.id!r}") from exc
        # analyse_text is wrapped by pygments to return a float in [0, 1].
        confidence = float(lexer_cls.analyse_text(code) or 0.0)
        return _Scored(info.id, score_tokens(tokens), confidence, tokens)

    def invoke(self, code: str, resolution: Resolution) -> EngineOutcome:
        """Highlight ``code`` using the grammars named by ``resolution``.

        ``FullCorpus`` keeps the best-ranked grammar: highest relevance, then
        Pygments' own ``analyse_text`` confidence, then token density; earlier
        corpus entries win full ties. Nothing scoring above zero is no match.
        ``Candidates`` applies the best known candidate even at relevance zero;
        when no candidate is known the outcome is no match.
        """
        if not _ensure_pygments_loaded():
            raise HighlightEngineError("pygments is not available")

        if isinstance(resolution, FullCorpus):
            ids = self._corpus
            explicit = False
        elif isinstance(resolution, Candidates):
            ids = resolution.ids
            explicit = True
        else:
            raise TypeError(f"unsupported resolution: {resolution!r}")

        best: _Scored | None = None
        for language_id in ids:
            info = LANGUAGES.get(language_id)
            if info is None:
                logger.debug("skipping unknown grammar %r", language_id)
                continue
            scored = self._score(code, info)
            if best is None or scored.rank > best.rank:
                best = scored

        if best is None or (not explicit and best.score.relevance == 0):
            logger.debug("no grammar matched (candidates=%s)", ids if explicit else "all")
            return no_match_outcome(code)

        logger.debug(
            "matched %s with relevance %d (confidence %.2f)",
            best.language_id,
            best.score.relevance,
            best.confidence,
        )
        return EngineOutcome(
            markup=_markup_from_tokens(best.tokens),
            language_id=best.language_id,
            relevance=best.score.relevance,
            matched_requested_language=explicit or best.score.relevance > 0,
            has_illegal=best.score.has_illegal,
        )


__all__ = [
    "DECLARED_NAME_PATHS",
    "EngineOutcome",
    "HighlightEngine",
    "MarkupRun",
    "PygmentsEngine",
    "SIGNIFICANT_TOKEN_PATHS",
    "TokenScore",
    "no_match_outcome",
    "score_tokens",
]
