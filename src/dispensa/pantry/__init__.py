"""Pantry matching and reconciliation with the weekly plan."""

from dispensa.pantry.matching import IngredientMatcher, find_pantry_match, names_match

__all__ = [
    "IngredientMatcher",
    "find_pantry_match",
    "names_match",
]
