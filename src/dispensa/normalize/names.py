"""Ingredient name canonicalization for fuzzy identity comparison."""

import re

_PARENTHESIZED = re.compile(r"\(.*\)")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def sanitize_ingredient_name(name: str) -> str:
    """
    Reduce an ingredient name to lowercase ASCII letters and digits.

    The parenthesized part is dropped first ("Pomodori (San Marzano)" ->
    "pomodori"). Accented letters are deleted rather than transliterated, so
    "caffè" becomes "caff".
    """
    if not name:
        return ""
    lowered = name.lower()
    lowered = _PARENTHESIZED.sub("", lowered)
    return _NON_ALNUM.sub("", lowered)
