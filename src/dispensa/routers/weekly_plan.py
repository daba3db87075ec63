"""API routes for the weekly meal plan."""

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.database import get_db
from dispensa.logging_config import get_logger
from dispensa.models import DAYS, MEAL_TYPES, WeeklyPlan
from dispensa.routers.common import raise_for_result
from dispensa.services.weekly_plan import WeeklyPlanService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/weekly-plan", tags=["weekly-plan"])


# =============================================================================
# Request/Response Schemas
# =============================================================================


class PlanEntryCreateRequest(BaseModel):
    """Schedule a recipe in a day/meal slot."""

    day: str = Field(description="Lunedì ... Domenica")
    meal_type: str = Field(description="Colazione, Pranzo or Cena")
    recipe_id: int


class PlanEntryMoveRequest(BaseModel):
    day: str
    meal_type: str


class PlanEntryResponse(BaseModel):
    id: int
    day: str
    meal_type: str
    recipe_id: int
    recipe_name: str


class WeeklyPlanResponse(BaseModel):
    """Every slot of the week, empty slots included."""

    days: list[str]
    meal_types: list[str]
    grid: dict[str, dict[str, list[PlanEntryResponse]]]
    total: int


class CookedResponse(BaseModel):
    deducted: int
    removed: int


def _entry(entry: WeeklyPlan) -> PlanEntryResponse:
    return PlanEntryResponse(
        id=entry.id,
        day=entry.day,
        meal_type=entry.meal_type,
        recipe_id=entry.recipe_id,
        recipe_name=entry.recipe.name if entry.recipe else "Unknown",
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/", response_model=WeeklyPlanResponse)
async def get_weekly_plan(db: AsyncSession = Depends(get_db)) -> WeeklyPlanResponse:
    """The plan as a day x meal grid."""
    grid = await WeeklyPlanService(db).grid()

    return WeeklyPlanResponse(
        days=list(DAYS),
        meal_types=list(MEAL_TYPES),
        grid={
            day: {meal: [_entry(e) for e in entries] for meal, entries in meals.items()}
            for day, meals in grid.items()
        },
        total=sum(len(entries) for meals in grid.values() for entries in meals.values()),
    )


@router.post("/", status_code=status.HTTP_201_CREATED)
async def add_plan_entry(
    request: PlanEntryCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Schedule a recipe."""
    result = raise_for_result(
        await WeeklyPlanService(db).add(request.day, request.meal_type, request.recipe_id)
    )
    return result.data


@router.patch("/{entry_id}")
async def move_plan_entry(
    entry_id: int,
    request: PlanEntryMoveRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Move a planned meal to another slot."""
    result = raise_for_result(
        await WeeklyPlanService(db).move(entry_id, request.day, request.meal_type)
    )
    return result.data


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_plan_entry(entry_id: int, db: AsyncSession = Depends(get_db)) -> None:
    """Remove a planned meal without touching the pantry."""
    raise_for_result(await WeeklyPlanService(db).remove(entry_id))


@router.post("/{entry_id}/cooked", response_model=CookedResponse)
async def mark_cooked(entry_id: int, db: AsyncSession = Depends(get_db)) -> CookedResponse:
    """
    Mark a planned meal as cooked.

    The recipe's ingredients are deducted from the pantry where the units
    allow it, then the entry leaves the plan.
    """
    logger.info(f"Marking plan entry {entry_id} as cooked")
    result = raise_for_result(await WeeklyPlanService(db).mark_cooked(entry_id))
    return CookedResponse(**result.data)
