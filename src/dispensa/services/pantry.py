"""Pantry management: list, add, adjust and delete pantry rows."""

import math

from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.database import unit_of_work
from dispensa.logging_config import get_logger
from dispensa.models import PantryItem
from dispensa.repository import Repository
from dispensa.results import OperationResult

logger = get_logger(__name__)


def pantry_payload(item: PantryItem, name: str) -> dict:
    return {"id": item.id, "name": name, "quantity": item.quantity, "unit": item.unit}


class PantryService:
    """Service layer for the pantry page."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = Repository(session)

    async def list_items(self, search: str | None = None) -> list[PantryItem]:
        """Pantry rows ordered by ingredient name, optionally filtered by name."""
        items = await self.repo.list_pantry(search=search)
        return sorted(items, key=lambda item: item.ingredient.name)

    async def ingredient_names(self) -> list[str]:
        """Every known ingredient name, for autocompletion."""
        return await self.repo.list_ingredient_names()

    async def add_or_update(self, name: str, quantity: float, unit: str) -> OperationResult:
        """
        Add an ingredient to the pantry.

        An existing row is incremented and takes the new unit.
        """
        name = (name or "").strip()
        if not name or math.isnan(quantity) or quantity <= 0:
            logger.info(f"Rejected pantry input name={name!r} quantity={quantity}")
            return OperationResult.invalid("A name and a positive quantity are required")

        async with unit_of_work(self.session):
            ingredient = await self.repo.upsert_ingredient(name)
            item = await self.repo.upsert_pantry_item(ingredient.id, quantity, unit)
            logger.info(f"Pantry '{ingredient.name}' now {item.quantity} {item.unit}")
            return OperationResult.success(pantry_payload(item, ingredient.name))

    async def adjust(self, item_id: int, delta: float) -> OperationResult:
        """Change a row's quantity by delta, never below zero; a row at zero is removed."""
        async with unit_of_work(self.session):
            item = await self.repo.get_pantry_item(item_id, for_update=True)
            if item is None:
                logger.info(f"Pantry item {item_id} not found, nothing to adjust")
                return OperationResult.not_found(f"Pantry item {item_id} not found")

            new_quantity = max(0.0, item.quantity + delta)
            if new_quantity == 0:
                await self.repo.delete_pantry_item(item)
                logger.info(f"Pantry item {item_id} used up and removed")
                return OperationResult.success(None, message="removed")

            item.quantity = new_quantity
            await self.session.flush()
            return OperationResult.success(pantry_payload(item, item.ingredient.name))

    async def delete(self, item_id: int) -> OperationResult:
        async with unit_of_work(self.session):
            item = await self.repo.get_pantry_item(item_id, for_update=True)
            if item is None:
                return OperationResult.not_found(f"Pantry item {item_id} not found")
            await self.repo.delete_pantry_item(item)
            logger.info(f"Deleted pantry item {item_id}")
            return OperationResult.success()
