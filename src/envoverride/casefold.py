"""
Case folding policy for variable names.

Names are compared case-insensitively but stored with the casing the caller
supplied. Every key touchpoint in the store and the reference graph goes
through ``fold`` so that ``Path``, ``PATH`` and ``path`` share one identity.
"""

from typing import Iterable, List


def _fold_char(ch: str) -> str:
    upper = ch.upper()
    if len(upper) != 1:
        upper = ch
    lower = upper.lower()
    return lower if len(lower) == 1 else upper


def fold(name: str) -> str:
    """
    Return the lookup identity of a variable name.

    Folding is per character (upper, then lower case). A character whose case
    mapping would change the length is kept as is, so "straße" and "STRASSE"
    stay distinct names.
    """
    return "".join(_fold_char(ch) for ch in name)


def same(lhs: str, rhs: str) -> bool:
    return fold(lhs) == fold(rhs)


def compare(lhs: str, rhs: str) -> int:
    """
    Three-way comparison ignoring case.

    Returns:
        negative if lhs sorts first, 0 if equal ignoring case, positive otherwise
    """
    a, b = fold(lhs), fold(rhs)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def sort_names(names: Iterable[str]) -> List[str]:
    """Sort names in case-insensitive lexical order."""
    return sorted(names, key=fold)
