"""Matching of required ingredient names against pantry rows."""

from collections.abc import Sequence

from dispensa.models import PantryItem
from dispensa.normalize.names import sanitize_ingredient_name


def names_match(sanitized_a: str, sanitized_b: str) -> bool:
    """Equal, or either contains the other. An empty name is contained in anything."""
    return sanitized_a == sanitized_b or sanitized_a in sanitized_b or sanitized_b in sanitized_a


class IngredientMatcher:
    """
    Finds the pantry row standing in for a required ingredient.

    Names are compared in sanitized form with bidirectional substring
    containment, so "Farina 00" finds "farina" and "pomodori" finds
    "pomodorini". There is no scoring: the first candidate in pantry order wins.
    """

    def __init__(self, candidates: Sequence[PantryItem]):
        self.candidates = list(candidates)
        self._sanitized = [sanitize_ingredient_name(c.ingredient.name) for c in self.candidates]

    def find_match(self, required_name: str) -> PantryItem | None:
        """Return the first pantry row matching `required_name`, if any."""
        wanted = sanitize_ingredient_name(required_name)
        for candidate, sanitized in zip(self.candidates, self._sanitized):
            if names_match(wanted, sanitized):
                return candidate
        return None


def find_pantry_match(required_name: str, candidates: Sequence[PantryItem]) -> PantryItem | None:
    """One-off lookup; build an IngredientMatcher to reuse the sanitized pantry."""
    return IngredientMatcher(candidates).find_match(required_name)
