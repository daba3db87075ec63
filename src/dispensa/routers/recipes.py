"""API routes for the recipe book."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.database import get_db
from dispensa.ingest.parser import ParsedIngredient
from dispensa.logging_config import get_logger
from dispensa.models import Recipe
from dispensa.normalize.units import DEFAULT_COUNT_UNIT
from dispensa.repository import RecipeSort
from dispensa.routers.common import raise_for_result
from dispensa.services.recipes import RecipeService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


# =============================================================================
# Request/Response Schemas
# =============================================================================


class RecipeImportRequest(BaseModel):
    """Web page holding a schema.org Recipe."""

    url: str = Field(min_length=1)


class IngredientLine(BaseModel):
    """Quantity of an ingredient in a recipe."""

    name: str = Field(min_length=1)
    quantity: float = Field(default=1.0, ge=0)
    unit: str = DEFAULT_COUNT_UNIT


class RecipeCreateRequest(BaseModel):
    """Recipe entered by hand."""

    name: str = Field(min_length=1)
    tags: str = Field(default="", description="Comma-separated tags")
    ingredients: list[IngredientLine] = Field(default_factory=list)


class RecipeCreatedResponse(BaseModel):
    id: int
    name: str


class RecipeSummary(BaseModel):
    id: int
    name: str
    source_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    ingredient_count: int = 0


class RecipeDetail(RecipeSummary):
    ingredients: list[IngredientLine] = Field(default_factory=list)


class RecipeListResponse(BaseModel):
    """Paginated list of recipes."""

    recipes: list[RecipeSummary]
    total: int
    page: int
    total_pages: int


def _summary(recipe: Recipe) -> RecipeSummary:
    return RecipeSummary(
        id=recipe.id,
        name=recipe.name,
        source_url=recipe.source_url,
        tags=recipe.tag_list,
        ingredient_count=len(recipe.ingredients),
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/", response_model=RecipeListResponse)
async def list_recipes(
    search: Annotated[
        str | None, Query(description="Match recipe name or ingredient name")
    ] = None,
    sort: Annotated[RecipeSort, Query()] = "newest",
    page: Annotated[int, Query(ge=1)] = 1,
    db: AsyncSession = Depends(get_db),
) -> RecipeListResponse:
    """List recipes, newest first by default."""
    try:
        result = await RecipeService(db).list_page(search=search, sort=sort, page=page)
    except Exception as e:
        logger.error(f"Failed to list recipes: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list recipes",
        )

    return RecipeListResponse(
        recipes=[_summary(recipe) for recipe in result.recipes],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/{recipe_id}", response_model=RecipeDetail)
async def get_recipe(recipe_id: int, db: AsyncSession = Depends(get_db)) -> RecipeDetail:
    """Get a recipe with its ingredient lines."""
    recipe = await RecipeService(db).get(recipe_id)
    if recipe is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Recipe {recipe_id} not found",
        )

    return RecipeDetail(
        **_summary(recipe).model_dump(),
        ingredients=[
            IngredientLine(name=ri.ingredient.name, quantity=ri.quantity, unit=ri.unit)
            for ri in recipe.ingredients
        ],
    )


@router.post("/import", response_model=RecipeCreatedResponse, status_code=status.HTTP_201_CREATED)
async def import_recipe(
    request: RecipeImportRequest,
    db: AsyncSession = Depends(get_db),
) -> RecipeCreatedResponse:
    """
    Import a recipe from a web page.

    Returns 409 when the URL was already imported and 502 when the page
    cannot be downloaded.
    """
    logger.info(f"Importing recipe from {request.url}")
    result = raise_for_result(await RecipeService(db).import_from_url(request.url))
    return RecipeCreatedResponse(**result.data)


@router.post("/", response_model=RecipeCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    request: RecipeCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> RecipeCreatedResponse:
    """Create a recipe by hand."""
    ingredients = [
        ParsedIngredient(name=line.name, quantity=line.quantity, unit=line.unit)
        for line in request.ingredients
    ]
    result = raise_for_result(
        await RecipeService(db).create_manual(request.name, ingredients, tags=request.tags)
    )
    return RecipeCreatedResponse(**result.data)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(recipe_id: int, db: AsyncSession = Depends(get_db)) -> None:
    """Delete a recipe, its ingredient lines and its weekly plan entries."""
    raise_for_result(await RecipeService(db).delete(recipe_id))
