"""Naming utilities for code generation."""

from __future__ import annotations

from functools import lru_cache

# Characters rewritten to spaces before title-casing
_SEPARATORS: tuple[str, ...] = ("_", ".")


def _is_word_boundary(char: str) -> bool:
    """Return True if the character after ``char`` starts a new word.

    Matches Go's ``strings.Title``: ASCII punctuation and spaces are
    boundaries, ASCII letters, digits and underscore are not, and outside
    ASCII only whitespace is.
    """
    if char.isascii():
        return not (char.isalnum() or char == "_")
    return char.isspace()


@lru_cache(maxsize=1024)
def go_name(identifier: str) -> str:
    """Convert a catalog identifier to an exported Go identifier.

    Underscores and periods separate words; each word is title-cased and the
    words are joined without separators. Other punctuation also starts a new
    word but is kept, so ``user-id`` becomes ``User-Id``. Uses caching for
    repeated calls with the same input.

    Examples:
        >>> go_name("goose_db_version")
        'GooseDbVersion'
        >>> go_name("a.b_c")
        'ABC'
        >>> go_name("user-id")
        'User-Id'
        >>> go_name("")
        ''
    """
    spaced = identifier
    for separator in _SEPARATORS:
        spaced = spaced.replace(separator, " ")

    chars = []
    previous = " "
    for char in spaced:
        chars.append(char.upper() if _is_word_boundary(previous) else char)
        previous = char
    return "".join(chars).replace(" ", "")


def split_table_list(value: str | None) -> list[str]:
    """Split a comma separated table list, dropping blank entries."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
