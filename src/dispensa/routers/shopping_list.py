"""API routes for the shopping list."""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.database import get_db
from dispensa.logging_config import get_logger
from dispensa.pantry.reconciler import PantryReconciler
from dispensa.routers.common import raise_for_result

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/shopping-list", tags=["shopping-list"])


class ShoppingListItemResponse(BaseModel):
    """Single item to buy, quantities in the base unit."""

    name: str
    base_unit: str
    needed: float
    total: float
    in_pantry: float
    needed_formatted: str
    total_formatted: str
    in_pantry_formatted: str
    pantry_item_id: int | None = None


class ShoppingListResponse(BaseModel):
    items: list[ShoppingListItemResponse]
    total: int


class RestockedItem(BaseModel):
    name: str
    increment: float
    unit: str


class RestockResponse(BaseModel):
    restocked: list[RestockedItem]
    total: int


@router.get("/", response_model=ShoppingListResponse)
async def get_shopping_list(db: AsyncSession = Depends(get_db)) -> ShoppingListResponse:
    """Everything the weekly plan needs that the pantry does not hold."""
    try:
        shopping_list = await PantryReconciler(db).compute_shortfall()
    except Exception as e:
        logger.error(f"Failed to compute shopping list: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute shopping list",
        )

    return ShoppingListResponse(
        items=[
            ShoppingListItemResponse(
                name=item.name,
                base_unit=item.base_unit,
                needed=item.needed_value,
                total=item.total_value,
                in_pantry=item.in_pantry_value,
                needed_formatted=item.needed_formatted,
                total_formatted=item.total_formatted,
                in_pantry_formatted=item.pantry_formatted,
                pantry_item_id=item.pantry_item_id,
            )
            for item in shopping_list.items
        ],
        total=len(shopping_list),
    )


@router.post("/restock", response_model=RestockResponse)
async def restock_pantry(db: AsyncSession = Depends(get_db)) -> RestockResponse:
    """Put the whole shopping list in the pantry ("bought everything")."""
    result = raise_for_result(await PantryReconciler(db).apply_restock())
    return RestockResponse(
        restocked=[RestockedItem(**action) for action in result.data],
        total=len(result.data),
    )
