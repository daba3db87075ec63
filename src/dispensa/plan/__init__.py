"""Shopping list and recipe availability computations."""

from dispensa.plan.inspiration import (
    InspirationResult,
    RecipeAvailability,
    compute_availability,
    rank_recipes,
)
from dispensa.plan.shopping_list import (
    ShoppingItem,
    ShoppingList,
    build_shopping_list,
    compute_shortfall,
)

__all__ = [
    "InspirationResult",
    "RecipeAvailability",
    "ShoppingItem",
    "ShoppingList",
    "build_shopping_list",
    "compute_availability",
    "compute_shortfall",
    "rank_recipes",
]
