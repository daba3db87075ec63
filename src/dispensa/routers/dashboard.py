"""API route for the home page summary."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.database import get_db
from dispensa.services.dashboard import DashboardService

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


class NextMealResponse(BaseModel):
    id: int
    day: str
    meal_type: str
    recipe_id: int
    recipe_name: str


class SuggestionResponse(BaseModel):
    recipe_id: int
    recipe_name: str
    match_count: int
    percent: float


class DashboardResponse(BaseModel):
    pantry_count: int
    recipe_count: int
    next_meal: NextMealResponse | None = None
    suggestions: list[SuggestionResponse] = Field(default_factory=list)


@router.get("/", response_model=DashboardResponse)
async def get_dashboard(db: AsyncSession = Depends(get_db)) -> DashboardResponse:
    """Pantry and recipe counts, the next planned meal and three suggestions."""
    summary = await DashboardService(db).summary()

    next_meal = None
    if summary.next_meal is not None:
        entry = summary.next_meal
        next_meal = NextMealResponse(
            id=entry.id,
            day=entry.day,
            meal_type=entry.meal_type,
            recipe_id=entry.recipe_id,
            recipe_name=entry.recipe.name if entry.recipe else "Unknown",
        )

    return DashboardResponse(
        pantry_count=summary.pantry_count,
        recipe_count=summary.recipe_count,
        next_meal=next_meal,
        suggestions=[
            SuggestionResponse(
                recipe_id=s.recipe_id,
                recipe_name=s.recipe_name,
                match_count=s.match_count,
                percent=s.percent,
            )
            for s in summary.suggestions
        ],
    )
