"""Grammar tables and language resolution.

``LANGUAGES`` is the closed corpus of grammars the engine may apply. Each
entry names the Pygments lexer alias that implements it and the user-facing
aliases that resolve to it. Resolution is a pure lookup over these tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .modes import Automatic, ExplicitLanguage, LanguageAlias, Mode

UNKNOWN_LANGUAGE_ID = "unknown"
UNKNOWN_DISPLAY_NAME = "Unknown"


@dataclass(frozen=True)
class LanguageInfo:
    """One grammar in the corpus."""

    id: str
    display_name: str
    lexer_alias: str
    aliases: tuple[str, ...] = ()


def _lang(language_id: str, display_name: str, lexer_alias: str, *aliases: str) -> LanguageInfo:
    return LanguageInfo(language_id, display_name, lexer_alias, tuple(aliases))


# Corpus order doubles as the tie-break order for automatic detection.
_CORPUS: tuple[LanguageInfo, ...] = (
    _lang("python", "Python", "python", "py", "py3", "python3", "gyp", "ipython"),
    _lang("javascript", "JavaScript", "javascript", "js", "jsx", "mjs", "cjs"),
    _lang("typescript", "TypeScript", "typescript", "ts", "tsx", "mts", "cts"),
    _lang("java", "Java", "java", "jsp"),
    _lang("kotlin", "Kotlin", "kotlin", "kt", "kts"),
    _lang("swift", "Swift", "swift"),
    _lang("go", "Go", "go", "golang"),
    _lang("rust", "Rust", "rust", "rs"),
    _lang("c", "C", "c", "h"),
    _lang("cpp", "C++", "cpp", "cc", "c++", "h++", "hpp", "hh", "hxx", "cxx"),
    _lang("csharp", "C#", "csharp", "cs", "c#"),
    _lang("objectivec", "Objective-C", "objective-c", "mm", "objc", "obj-c", "obj-c++", "objective-c++"),
    _lang("ruby", "Ruby", "ruby", "rb", "gemspec", "podspec", "thor", "irb"),
    _lang("php", "PHP", "php", "php3", "php4", "php5"),
    _lang("perl", "Perl", "perl", "pl", "pm"),
    _lang("lua", "Lua", "lua"),
    _lang("r", "R", "r"),
    _lang("bash", "Bash", "bash", "sh", "zsh", "shell", "console"),
    _lang("sql", "SQL", "sql"),
    _lang("graphql", "GraphQL", "graphql", "gql"),
    _lang("vbnet", "VB.NET", "vb.net", "vb"),
    _lang("wasm", "WebAssembly", "wat", "wast"),
    _lang("html", "HTML", "html", "xhtml"),
    _lang("xml", "XML", "xml", "rss", "atom", "xsd", "xsl", "plist", "svg"),
    _lang("css", "CSS", "css"),
    _lang("scss", "SCSS", "scss"),
    _lang("less", "Less", "less"),
    _lang("json", "JSON", "json", "jsonc"),
    _lang("yaml", "YAML", "yaml", "yml"),
    _lang("ini", "INI", "ini", "toml", "cfg"),
    _lang("makefile", "Makefile", "makefile", "mk", "mak", "make"),
    _lang("markdown", "Markdown", "markdown", "md", "mkdown", "mkd"),
    _lang("diff", "Diff", "diff", "patch", "udiff"),
    _lang("plaintext", "Plain text", "text", "text", "txt"),
)

LANGUAGES: dict[str, LanguageInfo] = {info.id: info for info in _CORPUS}


def _build_alias_table() -> dict[str, str]:
    table: dict[str, str] = {}
    for info in _CORPUS:
        for name in (info.id, info.display_name, *info.aliases):
            table.setdefault(name.strip().lower(), info.id)
    return table


ALIASES: dict[str, str] = _build_alias_table()


@dataclass(frozen=True)
class FullCorpus:
    """Try every known grammar; the engine picks the best match."""


@dataclass(frozen=True)
class Candidates:
    """Try only these grammar ids (which may not be known)."""

    ids: tuple[str, ...]


Resolution = Union[FullCorpus, Candidates]


def known_language_ids() -> tuple[str, ...]:
    """Return corpus ids in detection order."""
    return tuple(info.id for info in _CORPUS)


def language_info(language_id: str) -> LanguageInfo | None:
    return LANGUAGES.get(language_id)


def lookup_alias(name: str) -> str | None:
    """Return the canonical id for ``name`` or ``None`` when unknown."""
    return ALIASES.get(name.strip().lower())


def display_name(language_id: str) -> str:
    """Return the display name, capitalizing ids outside the corpus."""
    info = LANGUAGES.get(language_id)
    if info is not None:
        return info.display_name
    if language_id == UNKNOWN_LANGUAGE_ID or not language_id:
        return UNKNOWN_DISPLAY_NAME
    return language_id[:1].upper() + language_id[1:]


def resolve(mode: Mode) -> Resolution:
    """Turn a request mode into the grammar candidates the engine should try.

    Unknown explicit ids and unmatched aliases are passed through as opaque
    candidates; the engine reports them as "no match" instead of this
    function raising.
    """
    if isinstance(mode, Automatic):
        return FullCorpus()
    if isinstance(mode, ExplicitLanguage):
        return Candidates((mode.language_id,))
    if isinstance(mode, LanguageAlias):
        canonical = lookup_alias(mode.alias)
        if canonical is not None:
            return Candidates((canonical,))
        return Candidates((mode.alias.strip().lower(),))
    raise TypeError(f"unsupported highlight mode: {mode!r}")


__all__ = [
    "ALIASES",
    "Candidates",
    "FullCorpus",
    "LANGUAGES",
    "LanguageInfo",
    "Resolution",
    "UNKNOWN_DISPLAY_NAME",
    "UNKNOWN_LANGUAGE_ID",
    "display_name",
    "known_language_ids",
    "language_info",
    "lookup_alias",
    "resolve",
]
