"""Best-effort parsing of free-text recipe ingredient lines (Italian phrasing)."""

import html
import re
from dataclasses import dataclass

from dispensa.normalize.units import DEFAULT_COUNT_UNIT, parse_quantity_string

TO_TASTE_UNIT = "q.b."

# Unit tokens recognised right after (or before) a quantity
COMMON_UNITS: list[str] = [
    "g",
    "gr",
    "grammi",
    "kg",
    "chili",
    "chilo",
    "l",
    "ml",
    "cl",
    "dl",
    "litri",
    "litro",
    "cucchiai",
    "cucchiaio",
    "cucchiaino",
    "cucchiaini",
    "pz",
    "pezzi",
    "fette",
    "foglie",
    "spicchi",
    "spicchio",
    "bicchieri",
    "bicchiere",
    "vasetti",
    "vasetto",
    "pizzico",
    "bustina",
    "bustine",
    "panetto",
    "panetti",
    "mazzetto",
    "mazzetti",
]

_UNITS = "|".join(COMMON_UNITS)

_TAGS = re.compile(r"<[^>]*>?")
_WHITESPACE = re.compile(r"\s+")
_TO_TASTE = re.compile(r"\bq\.?b\.?", re.IGNORECASE)

# "200 g di farina", "1/2 cucchiaino di sale", "3 uova"
_LEADING_QUANTITY = re.compile(
    rf"^([\d.,/\s]+)\s*({_UNITS})?\b\s*(?:(?:degli|delle|dei|del|di)\b|d')?\s*(.*)$",
    re.IGNORECASE,
)

# "farina 00 (200 g)", "uova 3"
_TRAILING_QUANTITY = re.compile(
    rf"^(.*?)\s*\(?([\d.,/\s]+)\s*({_UNITS})?\b\)?$",
    re.IGNORECASE,
)


@dataclass
class ParsedIngredient:
    """Ingredient extracted from a recipe line."""

    name: str
    quantity: float
    unit: str


def clean_ingredient_text(raw: str) -> str:
    """Unescape entities, drop HTML tags and collapse whitespace."""
    text = html.unescape(raw or "")
    text = _TAGS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def parse_ingredient_string(raw: str) -> ParsedIngredient:
    """
    Split a recipe ingredient line into name, quantity and unit.

    Tried in order: a "q.b." (to taste) marker anywhere, a leading quantity,
    a trailing quantity. Lines matching none of them are one "pz" of the
    whole text.

    Examples:
        "200 g di farina"     -> farina, 200, g
        "Sale q.b."           -> Sale, 1, q.b.
        "Uova (2)"            -> Uova, 2, pz
        "un pizzico di pepe"  -> un pizzico di pepe, 1, pz
    """
    text = clean_ingredient_text(raw)

    if _TO_TASTE.search(text):
        name = _TO_TASTE.sub("", text, count=1).strip()
        name = name.rstrip(",").strip()
        return ParsedIngredient(name=name, quantity=1.0, unit=TO_TASTE_UNIT)

    leading = _LEADING_QUANTITY.match(text)
    if leading:
        return ParsedIngredient(
            name=leading.group(3).strip(),
            quantity=parse_quantity_string(leading.group(1)),
            unit=leading.group(2) or DEFAULT_COUNT_UNIT,
        )

    trailing = _TRAILING_QUANTITY.match(text)
    if trailing and trailing.group(2):
        return ParsedIngredient(
            name=trailing.group(1).rstrip(",").strip(),
            quantity=parse_quantity_string(trailing.group(2)),
            unit=trailing.group(3) or DEFAULT_COUNT_UNIT,
        )

    return ParsedIngredient(name=text, quantity=1.0, unit=DEFAULT_COUNT_UNIT)
