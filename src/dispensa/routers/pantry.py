"""API routes for the pantry."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.database import get_db
from dispensa.logging_config import get_logger
from dispensa.normalize.units import DEFAULT_COUNT_UNIT
from dispensa.routers.common import raise_for_result
from dispensa.services.pantry import PantryService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/pantry", tags=["pantry"])


# =============================================================================
# Request/Response Schemas
# =============================================================================


class PantryItemCreateRequest(BaseModel):
    """Ingredient bought or found in the pantry."""

    name: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit: str = DEFAULT_COUNT_UNIT


class PantryAdjustRequest(BaseModel):
    """Relative change of a pantry quantity, e.g. -1 or +250."""

    delta: float


class PantryItemResponse(BaseModel):
    id: int
    name: str
    quantity: float
    unit: str


class PantryListResponse(BaseModel):
    items: list[PantryItemResponse]
    total: int


class PantryAdjustResponse(BaseModel):
    """Adjusted row, or removed=True when the quantity reached zero."""

    item: PantryItemResponse | None = None
    removed: bool = False


class IngredientNamesResponse(BaseModel):
    names: list[str]


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/", response_model=PantryListResponse)
async def list_pantry(
    search: Annotated[str | None, Query(description="Filter by ingredient name")] = None,
    db: AsyncSession = Depends(get_db),
) -> PantryListResponse:
    """List pantry contents alphabetically."""
    try:
        items = await PantryService(db).list_items(search=search)
    except Exception as e:
        logger.error(f"Failed to list pantry: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list pantry",
        )

    return PantryListResponse(
        items=[
            PantryItemResponse(
                id=item.id,
                name=item.ingredient.name,
                quantity=item.quantity,
                unit=item.unit,
            )
            for item in items
        ],
        total=len(items),
    )


@router.get("/ingredients", response_model=IngredientNamesResponse)
async def list_ingredient_names(db: AsyncSession = Depends(get_db)) -> IngredientNamesResponse:
    """Known ingredient names, for autocompletion."""
    return IngredientNamesResponse(names=await PantryService(db).ingredient_names())


@router.post("/", response_model=PantryItemResponse, status_code=status.HTTP_201_CREATED)
async def add_pantry_item(
    request: PantryItemCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> PantryItemResponse:
    """Add an ingredient; an existing row is incremented and takes the new unit."""
    logger.info(f"Adding {request.quantity} {request.unit} of '{request.name}' to pantry")
    result = raise_for_result(
        await PantryService(db).add_or_update(request.name, request.quantity, request.unit)
    )
    return PantryItemResponse(**result.data)


@router.patch("/{item_id}", response_model=PantryAdjustResponse)
async def adjust_pantry_item(
    item_id: int,
    request: PantryAdjustRequest,
    db: AsyncSession = Depends(get_db),
) -> PantryAdjustResponse:
    """Change a pantry quantity by a delta; rows reaching zero are removed."""
    result = raise_for_result(await PantryService(db).adjust(item_id, request.delta))
    if result.data is None:
        return PantryAdjustResponse(removed=True)
    return PantryAdjustResponse(item=PantryItemResponse(**result.data))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pantry_item(item_id: int, db: AsyncSession = Depends(get_db)) -> None:
    """Remove an ingredient from the pantry."""
    raise_for_result(await PantryService(db).delete(item_id))
