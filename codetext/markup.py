"""Markup class tags and their Pygments token types.

The engine tags every run with a highlight class name (``keyword``,
``title.class``...) instead of leaking Pygments token types. Color specs map
those class names to styles. Token types are kept as dotted strings so this
table stays plain data.
"""

from __future__ import annotations

from functools import lru_cache

# (class tag, pygments token type). Earlier rows win when a class is listed twice.
CLASS_TOKEN_TABLE: tuple[tuple[str, str], ...] = (
    ("keyword", "Keyword"),
    ("keyword", "Operator.Word"),
    ("literal", "Keyword.Constant"),
    ("literal", "Literal"),
    ("type", "Keyword.Type"),
    ("built_in", "Name.Builtin"),
    ("variable.language", "Name.Builtin.Pseudo"),
    ("title.class", "Name.Class"),
    ("title.class", "Name.Namespace"),
    ("title.function", "Name.Function"),
    ("meta", "Name.Decorator"),
    ("meta", "Comment.Preproc"),
    ("meta", "Comment.PreprocFile"),
    ("tag", "Name.Tag"),
    ("attr", "Name.Attribute"),
    ("property", "Name.Property"),
    ("variable", "Name.Variable"),
    ("variable.constant", "Name.Constant"),
    ("symbol", "Name.Label"),
    ("symbol", "Literal.String.Symbol"),
    ("string", "Literal.String"),
    ("char.escape", "Literal.String.Escape"),
    ("subst", "Literal.String.Interpol"),
    ("regexp", "Literal.String.Regex"),
    ("number", "Literal.Number"),
    ("comment", "Comment"),
    ("operator", "Operator"),
    ("punctuation", "Punctuation"),
    ("section", "Generic.Heading"),
    ("section", "Generic.Subheading"),
    ("addition", "Generic.Inserted"),
    ("deletion", "Generic.Deleted"),
    ("emphasis", "Generic.Emph"),
    ("strong", "Generic.Strong"),
    ("meta.prompt", "Generic.Prompt"),
)

TOKEN_CLASSES: dict[str, str] = {}
CLASS_TOKENS: dict[str, str] = {}
for _css_class, _token_path in CLASS_TOKEN_TABLE:
    TOKEN_CLASSES.setdefault(_token_path, _css_class)
    CLASS_TOKENS.setdefault(_css_class, _token_path)
del _css_class, _token_path

MARKUP_CLASSES: tuple[str, ...] = tuple(CLASS_TOKENS)


def token_path(ttype) -> str:
    """Return ``Keyword.Declaration`` style path for a Pygments token type."""
    return ".".join(ttype)


@lru_cache(maxsize=512)
def css_class_for_token(ttype) -> str | None:
    """Map a token type to the closest class tag by walking its parents."""
    current = ttype
    while current:
        css_class = TOKEN_CLASSES.get(token_path(current))
        if css_class is not None:
            return css_class
        current = current.parent
    return None


def class_fallbacks(css_class: str) -> list[str]:
    """Return ``css_class`` and its dotted prefixes, most specific first.

    ``title.class`` -> ``["title.class", "title"]``.
    """
    parts = css_class.split(".")
    return [".".join(parts[:idx]) for idx in range(len(parts), 0, -1)]


__all__ = [
    "CLASS_TOKENS",
    "CLASS_TOKEN_TABLE",
    "MARKUP_CLASSES",
    "TOKEN_CLASSES",
    "class_fallbacks",
    "css_class_for_token",
    "token_path",
]
