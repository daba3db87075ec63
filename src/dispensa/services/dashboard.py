"""Home page summary: counts, next meal and quick recipe suggestions."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.models import PantryItem, Recipe, WeeklyPlan
from dispensa.repository import Repository

SUGGESTION_LIMIT = 3


@dataclass
class Suggestion:
    recipe_id: int
    recipe_name: str
    match_count: int
    percent: float


@dataclass
class Dashboard:
    pantry_count: int
    recipe_count: int
    next_meal: WeeklyPlan | None
    suggestions: list[Suggestion] = field(default_factory=list)


def suggest_recipes(
    recipes: Sequence[Recipe],
    pantry: Sequence[PantryItem],
    limit: int = SUGGESTION_LIMIT,
) -> list[Suggestion]:
    """
    Recipes sharing the most ingredients with the pantry.

    Only exact ingredient identity counts here, no name matching and no
    quantities. Recipes with no ingredient in the pantry are left out.
    """
    in_pantry = {item.ingredient_id for item in pantry}
    suggestions = []

    for recipe in recipes:
        if not recipe.ingredients:
            continue
        matches = sum(1 for ri in recipe.ingredients if ri.ingredient_id in in_pantry)
        if matches == 0:
            continue
        suggestions.append(
            Suggestion(
                recipe_id=recipe.id,
                recipe_name=recipe.name,
                match_count=matches,
                percent=matches / len(recipe.ingredients) * 100,
            )
        )

    suggestions.sort(key=lambda s: s.percent, reverse=True)
    return suggestions[:limit]


class DashboardService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = Repository(session)

    async def summary(self) -> Dashboard:
        # One session cannot run queries concurrently, so these run in turn
        pantry_count = await self.repo.count_pantry()
        recipe_count = await self.repo.count_recipes()
        entries = await self.repo.list_plan_entries(with_ingredients=False)
        recipes = await self.repo.list_recipes()
        pantry = await self.repo.list_pantry()

        return Dashboard(
            pantry_count=pantry_count,
            recipe_count=recipe_count,
            next_meal=entries[0] if entries else None,
            suggestions=suggest_recipes(recipes, pantry),
        )
