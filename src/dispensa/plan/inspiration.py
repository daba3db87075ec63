"""Rank recipes by how much of them can be cooked with the current pantry."""

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from typing import Literal

from dispensa.config import INSPIRATION_IGNORED_INGREDIENTS
from dispensa.models import PantryItem, Recipe
from dispensa.normalize.aggregate import RequiredIngredient
from dispensa.normalize.units import normalize_quantity
from dispensa.pantry.matching import IngredientMatcher

InspirationFilter = Literal["ready", "almost", "others", "all"]

ALMOST_READY_THRESHOLD = 50.0


@dataclass
class RecipeAvailability:
    """Share of a recipe's essential ingredients the pantry can cover."""

    recipe_id: int | None
    recipe_name: str
    percent: float
    essential_count: int
    ingredient_count: int
    missing: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @property
    def missing_count(self) -> int:
        return len(self.missing)

    @property
    def is_ready(self) -> bool:
        return self.percent == 100 and self.ingredient_count > 0

    @property
    def is_almost_ready(self) -> bool:
        return ALMOST_READY_THRESHOLD <= self.percent < 100


@dataclass
class InspirationResult:
    """Ranked recipes plus bucket sizes for the filter tabs."""

    recipes: list[RecipeAvailability]
    ready_count: int
    almost_count: int
    others_count: int
    total: int


def is_satisfied(ingredient: RequiredIngredient, pantry_item: PantryItem | None) -> bool:
    """
    Whether the pantry row covers one recipe ingredient.

    Same base unit: the pantry must hold at least the required amount.
    Different base units: any positive pantry quantity counts.
    """
    if pantry_item is None:
        return False

    required = normalize_quantity(ingredient.quantity, ingredient.unit)
    available = normalize_quantity(pantry_item.quantity, pantry_item.unit)

    if available.base_unit == required.base_unit:
        return available.value >= required.value
    return pantry_item.quantity > 0


def compute_availability(
    ingredients: Sequence[RequiredIngredient],
    matcher: IngredientMatcher,
    ignored: Collection[str] = INSPIRATION_IGNORED_INGREDIENTS,
    recipe_id: int | None = None,
    recipe_name: str = "",
) -> RecipeAvailability:
    """
    Score a recipe against the pantry.

    A recipe whose ingredients are all ignored (only water and salt, say)
    scores 0%, not 100%.
    """
    satisfied = 0
    essential = 0
    missing: list[str] = []

    for ingredient in ingredients:
        if ingredient.name.lower() in ignored:
            continue
        essential += 1

        if is_satisfied(ingredient, matcher.find_match(ingredient.name)):
            satisfied += 1
        else:
            missing.append(ingredient.name)

    percent = satisfied / essential * 100 if essential > 0 else 0.0

    return RecipeAvailability(
        recipe_id=recipe_id,
        recipe_name=recipe_name,
        percent=percent,
        essential_count=essential,
        ingredient_count=len(ingredients),
        missing=missing,
    )


def recipe_requirements(recipe: Recipe) -> list[RequiredIngredient]:
    """Recipe ingredient lines as plain values; ingredients must be loaded."""
    return [
        RequiredIngredient(name=ri.ingredient.name, quantity=ri.quantity, unit=ri.unit)
        for ri in recipe.ingredients
    ]


def rank_recipes(
    recipes: Sequence[Recipe],
    pantry: Sequence[PantryItem],
    search: str | None = None,
    filter_by: InspirationFilter = "almost",
) -> InspirationResult:
    """
    Score every recipe, best first, then keep the requested bucket.

    Bucket counts are computed after the name search but before the bucket
    filter, so the tab sizes always add up.
    """
    matcher = IngredientMatcher(pantry)
    query = (search or "").lower()

    analyzed = []
    for recipe in recipes:
        if query and query not in recipe.name.lower():
            continue
        availability = compute_availability(
            recipe_requirements(recipe),
            matcher,
            recipe_id=recipe.id,
            recipe_name=recipe.name,
        )
        availability.tags = recipe.tag_list
        analyzed.append(availability)

    analyzed.sort(key=lambda a: a.percent, reverse=True)

    ready = [a for a in analyzed if a.is_ready]
    almost = [a for a in analyzed if a.is_almost_ready]
    others = [a for a in analyzed if a.percent < ALMOST_READY_THRESHOLD]

    selected = {"ready": ready, "almost": almost, "others": others}.get(filter_by, analyzed)

    return InspirationResult(
        recipes=selected,
        ready_count=len(ready),
        almost_count=len(almost),
        others_count=len(others),
        total=len(analyzed),
    )
