"""Weekly plan: schedule, move and remove meals, and mark them as cooked."""

from collections import defaultdict
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.database import unit_of_work
from dispensa.logging_config import get_logger
from dispensa.models import DAYS, MEAL_TYPES, WeeklyPlan
from dispensa.pantry.reconciler import PantryReconciler
from dispensa.repository import Repository
from dispensa.results import OperationResult

logger = get_logger(__name__)


def _validate_slot(day: str, meal_type: str) -> OperationResult | None:
    if day not in DAYS:
        return OperationResult.invalid(f"Unknown day {day!r}")
    if meal_type not in MEAL_TYPES:
        return OperationResult.invalid(f"Unknown meal type {meal_type!r}")
    return None


class WeeklyPlanService:
    """Service layer for the weekly plan grid."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = Repository(session)

    async def entries(self) -> Sequence[WeeklyPlan]:
        """All plan entries with their recipe, without ingredients."""
        return await self.repo.list_plan_entries(with_ingredients=False)

    async def grid(self) -> dict[str, dict[str, list[WeeklyPlan]]]:
        """Plan entries grouped by day then meal type, every slot present."""
        slots: dict[str, dict[str, list[WeeklyPlan]]] = {
            day: defaultdict(list) for day in DAYS
        }
        for entry in await self.entries():
            if entry.day in slots:
                slots[entry.day][entry.meal_type].append(entry)
        return {day: {meal: list(slots[day][meal]) for meal in MEAL_TYPES} for day in DAYS}

    async def add(self, day: str, meal_type: str, recipe_id: int) -> OperationResult:
        """Schedule a recipe; a slot may hold more than one recipe."""
        error = _validate_slot(day, meal_type)
        if error is not None:
            return error

        async with unit_of_work(self.session):
            recipe = await self.repo.get_recipe(recipe_id)
            if recipe is None:
                return OperationResult.not_found(f"Recipe {recipe_id} not found")
            entry = await self.repo.create_plan_entry(day, meal_type, recipe_id)

        logger.info(f"Planned '{recipe.name}' for {day} {meal_type}")
        return OperationResult.success({"id": entry.id})

    async def remove(self, entry_id: int) -> OperationResult:
        async with unit_of_work(self.session):
            deleted = await self.repo.delete_plan_entry(entry_id)
        if not deleted:
            return OperationResult.not_found(f"Plan entry {entry_id} not found")
        return OperationResult.success()

    async def move(self, entry_id: int, day: str, meal_type: str) -> OperationResult:
        error = _validate_slot(day, meal_type)
        if error is not None:
            return error

        async with unit_of_work(self.session):
            entry = await self.repo.get_plan_entry(entry_id)
            if entry is None:
                return OperationResult.not_found(f"Plan entry {entry_id} not found")
            entry.day = day
            entry.meal_type = meal_type

        logger.info(f"Moved plan entry {entry_id} to {day} {meal_type}")
        return OperationResult.success({"id": entry_id, "day": day, "meal_type": meal_type})

    async def mark_cooked(self, entry_id: int) -> OperationResult:
        """Deduct the recipe from the pantry and drop the entry from the plan."""
        return await PantryReconciler(self.session).apply_consumption(entry_id)
