"""API routes for recipe suggestions based on the pantry."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.database import get_db
from dispensa.pantry.reconciler import PantryReconciler
from dispensa.plan.inspiration import InspirationFilter, RecipeAvailability
from dispensa.routers.common import raise_for_result

router = APIRouter(prefix="/api/v1/inspiration", tags=["inspiration"])


class RecipeAvailabilityResponse(BaseModel):
    """How much of a recipe the pantry covers."""

    recipe_id: int | None
    recipe_name: str
    percent: float
    essential_count: int
    ingredient_count: int
    missing: list[str] = Field(default_factory=list)
    missing_count: int = 0
    tags: list[str] = Field(default_factory=list)
    is_ready: bool = False


class InspirationResponse(BaseModel):
    recipes: list[RecipeAvailabilityResponse]
    ready_count: int
    almost_count: int
    others_count: int
    total: int


def _availability(a: RecipeAvailability) -> RecipeAvailabilityResponse:
    return RecipeAvailabilityResponse(
        recipe_id=a.recipe_id,
        recipe_name=a.recipe_name,
        percent=a.percent,
        essential_count=a.essential_count,
        ingredient_count=a.ingredient_count,
        missing=a.missing,
        missing_count=a.missing_count,
        tags=a.tags,
        is_ready=a.is_ready,
    )


@router.get("/", response_model=InspirationResponse)
async def get_inspiration(
    search: Annotated[str | None, Query(description="Filter by recipe name")] = None,
    filter_by: Annotated[InspirationFilter, Query(alias="filter")] = "almost",
    db: AsyncSession = Depends(get_db),
) -> InspirationResponse:
    """Recipes ranked by how much of them the pantry covers."""
    result = await PantryReconciler(db).rank_recipes(search=search, filter_by=filter_by)
    return InspirationResponse(
        recipes=[_availability(a) for a in result.recipes],
        ready_count=result.ready_count,
        almost_count=result.almost_count,
        others_count=result.others_count,
        total=result.total,
    )


@router.get("/{recipe_id}", response_model=RecipeAvailabilityResponse)
async def get_recipe_availability(
    recipe_id: int,
    db: AsyncSession = Depends(get_db),
) -> RecipeAvailabilityResponse:
    """Availability of a single recipe."""
    result = raise_for_result(await PantryReconciler(db).compute_availability(recipe_id))
    return _availability(result.data)
