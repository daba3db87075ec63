"""Reconcile the pantry with the weekly plan: shop, rank, cook and restock."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.config import SHOPPING_IGNORED_INGREDIENTS, Settings, get_settings
from dispensa.database import unit_of_work
from dispensa.logging_config import LoggingContext, get_logger
from dispensa.models import PantryItem, WeeklyPlan
from dispensa.normalize.aggregate import (
    AggregatedRequirement,
    RequiredIngredient,
    aggregate_requirements,
)
from dispensa.normalize.units import NormalizedQuantity, normalize_quantity, unit_factor
from dispensa.pantry.matching import IngredientMatcher
from dispensa.plan.inspiration import (
    InspirationFilter,
    InspirationResult,
    RecipeAvailability,
    compute_availability,
    rank_recipes,
    recipe_requirements,
)
from dispensa.plan.shopping_list import ShoppingList, compute_shortfall
from dispensa.repository import Repository
from dispensa.results import OperationResult

logger = get_logger(__name__)


@dataclass
class RestockAction:
    """Quantity to add to the pantry for one aggregated requirement."""

    name: str
    increment: float
    unit: str
    pantry_item: PantryItem | None = None


def remaining_after_consumption(
    pantry_item: PantryItem,
    required: NormalizedQuantity,
) -> float | None:
    """
    Pantry quantity left after using `required`, in the row's own unit.

    Returns None when the row is in another base unit and nothing can be
    deducted, and 0 when the row is used up.
    """
    available = normalize_quantity(pantry_item.quantity, pantry_item.unit)
    if available.base_unit != required.base_unit:
        return None

    new_base = max(0.0, available.value - required.value)
    if new_base <= 0 or available.value <= 0:
        return 0.0

    # base unit -> pantry display unit (e.g. 1/1000 for a row kept in kg)
    ratio = pantry_item.quantity / available.value
    return new_base * ratio


def plan_restock(
    requirements: Mapping[str, AggregatedRequirement],
    pantry: Sequence[PantryItem],
) -> list[RestockAction]:
    """
    Work out what buying the whole shopping list adds to the pantry.

    Every requirement is compared with the pantry as it was before the trip.
    A matched row is topped up in its own unit; anything else becomes a new
    row in the requirement's base unit.
    """
    matcher = IngredientMatcher(pantry)
    actions: list[RestockAction] = []

    for key, requirement in requirements.items():
        pantry_item = matcher.find_match(key)

        in_pantry = 0.0
        if pantry_item is not None:
            available = normalize_quantity(pantry_item.quantity, pantry_item.unit)
            if available.base_unit == requirement.base_unit:
                in_pantry = available.value

        needed = max(0.0, requirement.total_value - in_pantry)
        if needed <= 0:
            continue

        if pantry_item is not None:
            actions.append(
                RestockAction(
                    name=key,
                    increment=needed / unit_factor(pantry_item.unit),
                    unit=pantry_item.unit,
                    pantry_item=pantry_item,
                )
            )
        else:
            actions.append(RestockAction(name=key, increment=needed, unit=requirement.base_unit))

    return actions


def planned_requirements(entries: Sequence[WeeklyPlan]) -> list[RequiredIngredient]:
    """Flatten the ingredient lines of every planned recipe, one per occurrence."""
    items: list[RequiredIngredient] = []
    for entry in entries:
        if entry.recipe is None:
            continue
        items.extend(recipe_requirements(entry.recipe))
    return items


class PantryReconciler:
    """
    The four pantry computations behind the shopping list, the inspiration
    page, "cooked!" and "bought everything".

    Each public method runs in its own transaction. Pantry rows that will be
    written are read with FOR UPDATE so concurrent cook/restock requests
    queue up instead of losing updates.
    """

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.repo = Repository(session)
        self.settings = settings or get_settings()

    async def compute_shortfall(self) -> ShoppingList:
        """What still has to be bought for the whole weekly plan."""
        with LoggingContext(operation="shortfall"):
            async with unit_of_work(self.session):
                entries = await self.repo.list_plan_entries()
                pantry = await self.repo.list_pantry()

                return compute_shortfall(
                    planned_requirements(entries),
                    pantry,
                    assume_covered_on_unit_mismatch=self.settings.assume_covered_on_unit_mismatch,
                )

    async def compute_availability(self, recipe_id: int) -> OperationResult:
        """Availability of a single recipe against the pantry."""
        with LoggingContext(operation="availability"):
            async with unit_of_work(self.session):
                recipe = await self.repo.get_recipe(recipe_id)
                if recipe is None:
                    logger.info(f"Recipe {recipe_id} not found, nothing to score")
                    return OperationResult.not_found(f"Recipe {recipe_id} not found")

                pantry = await self.repo.list_pantry()
                availability: RecipeAvailability = compute_availability(
                    recipe_requirements(recipe),
                    IngredientMatcher(pantry),
                    recipe_id=recipe.id,
                    recipe_name=recipe.name,
                )
                availability.tags = recipe.tag_list
                return OperationResult.success(availability)

    async def rank_recipes(
        self,
        search: str | None = None,
        filter_by: InspirationFilter = "almost",
    ) -> InspirationResult:
        """Every recipe scored against the pantry, best first."""
        with LoggingContext(operation="inspiration"):
            async with unit_of_work(self.session):
                recipes = await self.repo.list_recipes()
                pantry = await self.repo.list_pantry()
                return rank_recipes(recipes, pantry, search=search, filter_by=filter_by)

    async def apply_consumption(self, plan_id: int) -> OperationResult:
        """
        Mark a planned meal as cooked.

        Deducts each recipe ingredient from its pantry row, where the units
        are comparable, then removes the plan entry even if some ingredients
        could not be deducted.
        """
        with LoggingContext(operation="consume"):
            async with unit_of_work(self.session):
                entry = await self.repo.get_plan_entry(plan_id)
                if entry is None:
                    logger.info(f"Plan entry {plan_id} not found, nothing to cook")
                    return OperationResult.not_found(f"Plan entry {plan_id} not found")

                deducted = 0
                removed = 0
                ingredients = entry.recipe.ingredients if entry.recipe else []

                for ri in ingredients:
                    required = normalize_quantity(ri.quantity, ri.unit)
                    pantry_item = await self.repo.find_pantry_item_for_consumption(
                        ri.ingredient.name
                    )
                    if pantry_item is None:
                        continue

                    remaining = remaining_after_consumption(pantry_item, required)
                    if remaining is None:
                        logger.debug(
                            f"Skipping '{ri.ingredient.name}': pantry in {pantry_item.unit!r}, "
                            f"recipe needs {required.base_unit!r}"
                        )
                        continue

                    if remaining <= 0:
                        await self.repo.delete_pantry_item(pantry_item)
                        removed += 1
                    else:
                        pantry_item.quantity = remaining
                        await self.session.flush()
                    deducted += 1

                await self.repo.delete_plan_entry(plan_id)

                logger.info(
                    f"Cooked plan entry {plan_id}: {deducted} ingredients deducted, "
                    f"{removed} pantry rows used up"
                )
                return OperationResult.success({"deducted": deducted, "removed": removed})

    async def apply_restock(self) -> OperationResult:
        """Move the whole shopping list into the pantry."""
        with LoggingContext(operation="restock"):
            async with unit_of_work(self.session):
                entries = await self.repo.list_plan_entries()
                pantry = await self.repo.list_pantry(for_update=True)

                requirements = aggregate_requirements(
                    planned_requirements(entries), SHOPPING_IGNORED_INGREDIENTS
                )
                actions = plan_restock(requirements, pantry)

                for action in actions:
                    if action.pantry_item is not None:
                        ingredient_id = action.pantry_item.ingredient_id
                    else:
                        ingredient = await self.repo.upsert_ingredient(action.name)
                        ingredient_id = ingredient.id
                    await self.repo.upsert_pantry_item(ingredient_id, action.increment, action.unit)

                logger.info(f"Restocked {len(actions)} pantry items")
                return OperationResult.success(
                    [
                        {"name": a.name, "increment": a.increment, "unit": a.unit}
                        for a in actions
                    ]
                )
