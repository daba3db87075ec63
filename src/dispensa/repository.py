"""Repository for relational database operations."""

from collections.abc import Sequence
from typing import Literal

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dispensa.logging_config import get_logger
from dispensa.models import Ingredient, PantryItem, Recipe, RecipeIngredient, WeeklyPlan

logger = get_logger(__name__)

RecipeSort = Literal["newest", "name_asc", "name_desc"]


class Repository:
    """
    Persistence store for ingredients, pantry, recipes and the weekly plan.

    Methods never commit; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # Ingredient Operations
    # =========================================================================

    async def get_ingredient_by_name(self, name: str) -> Ingredient | None:
        result = await self.session.execute(
            select(Ingredient).where(Ingredient.name == name.lower())
        )
        return result.scalar_one_or_none()

    async def upsert_ingredient(self, name: str) -> Ingredient:
        """Get or create the ingredient with this (lowercased) name."""
        canonical = name.lower()
        ingredient = await self.get_ingredient_by_name(canonical)
        if ingredient is None:
            ingredient = Ingredient(name=canonical)
            self.session.add(ingredient)
            await self.session.flush()
            logger.debug(f"Created ingredient '{canonical}'")
        return ingredient

    async def list_ingredient_names(self) -> list[str]:
        result = await self.session.execute(select(Ingredient.name).order_by(Ingredient.name))
        return list(result.scalars().all())

    # =========================================================================
    # Pantry Operations
    # =========================================================================

    async def list_pantry(
        self,
        search: str | None = None,
        for_update: bool = False,
    ) -> Sequence[PantryItem]:
        """
        List pantry rows with their ingredient.

        Ordered by row id, i.e. insertion order, which is the order the
        matcher walks the pantry in.
        """
        query = select(PantryItem).options(selectinload(PantryItem.ingredient))
        if search:
            query = query.join(PantryItem.ingredient).where(
                Ingredient.name.icontains(search, autoescape=True)
            )
        query = query.order_by(PantryItem.id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_pantry(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(PantryItem))
        return result.scalar_one()

    async def get_pantry_item(self, item_id: int, for_update: bool = False) -> PantryItem | None:
        query = (
            select(PantryItem)
            .options(selectinload(PantryItem.ingredient))
            .where(PantryItem.id == item_id)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def upsert_pantry_item(self, ingredient_id: int, quantity: float, unit: str) -> PantryItem:
        """
        Create the pantry row for an ingredient, or add to the existing one.

        The unit of an existing row is overwritten with `unit`.
        """
        result = await self.session.execute(
            select(PantryItem).where(PantryItem.ingredient_id == ingredient_id).with_for_update()
        )
        item = result.scalar_one_or_none()
        if item is None:
            item = PantryItem(ingredient_id=ingredient_id, quantity=quantity, unit=unit)
            self.session.add(item)
        else:
            item.quantity += quantity
            item.unit = unit
        await self.session.flush()
        return item

    async def find_pantry_item_for_consumption(self, name: str) -> PantryItem | None:
        """
        First pantry row whose ingredient is `name` or contains it.

        Plain lowercase comparison, no sanitizing: "farina" finds
        "farina 00" but "farina 00" does not find "farina".
        """
        lowered = name.lower()
        result = await self.session.execute(
            select(PantryItem)
            .join(PantryItem.ingredient)
            .options(selectinload(PantryItem.ingredient))
            .where(
                or_(
                    Ingredient.name == lowered,
                    Ingredient.name.contains(lowered, autoescape=True),
                )
            )
            .order_by(PantryItem.id)
            .limit(1)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def delete_pantry_item(self, item: PantryItem) -> None:
        await self.session.delete(item)
        await self.session.flush()

    # =========================================================================
    # Recipe Operations
    # =========================================================================

    async def get_recipe(self, recipe_id: int) -> Recipe | None:
        result = await self.session.execute(
            select(Recipe)
            .options(selectinload(Recipe.ingredients).selectinload(RecipeIngredient.ingredient))
            .where(Recipe.id == recipe_id)
        )
        return result.scalar_one_or_none()

    async def get_recipe_by_source_url(self, url: str) -> Recipe | None:
        result = await self.session.execute(select(Recipe).where(Recipe.source_url == url))
        return result.scalars().first()

    async def list_recipes(self) -> Sequence[Recipe]:
        """All recipes with ingredients loaded, oldest first."""
        result = await self.session.execute(
            select(Recipe)
            .options(selectinload(Recipe.ingredients).selectinload(RecipeIngredient.ingredient))
            .order_by(Recipe.id)
        )
        return result.scalars().all()

    def _recipe_search_clause(self, search: str | None):
        if not search:
            return None
        return or_(
            Recipe.name.icontains(search, autoescape=True),
            Recipe.ingredients.any(
                RecipeIngredient.ingredient.has(Ingredient.name.icontains(search, autoescape=True))
            ),
        )

    async def search_recipes(
        self,
        search: str | None = None,
        sort: RecipeSort = "newest",
        offset: int = 0,
        limit: int = 12,
    ) -> Sequence[Recipe]:
        """Recipes whose name, or one of whose ingredient names, contains `search`."""
        order_by = {
            "newest": Recipe.id.desc(),
            "name_asc": Recipe.name.asc(),
            "name_desc": Recipe.name.desc(),
        }.get(sort, Recipe.id.desc())

        query = select(Recipe).options(
            selectinload(Recipe.ingredients).selectinload(RecipeIngredient.ingredient)
        )
        clause = self._recipe_search_clause(search)
        if clause is not None:
            query = query.where(clause)

        result = await self.session.execute(query.order_by(order_by).offset(offset).limit(limit))
        return result.scalars().all()

    async def count_recipes(self, search: str | None = None) -> int:
        query = select(func.count()).select_from(Recipe)
        clause = self._recipe_search_clause(search)
        if clause is not None:
            query = query.where(clause)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def create_recipe(self, name: str, tags: str = "", source_url: str | None = None) -> Recipe:
        recipe = Recipe(name=name, tags=tags, source_url=source_url)
        self.session.add(recipe)
        await self.session.flush()
        return recipe

    async def add_recipe_ingredient(
        self,
        recipe_id: int,
        ingredient_id: int,
        quantity: float,
        unit: str,
    ) -> RecipeIngredient:
        link = RecipeIngredient(
            recipe_id=recipe_id,
            ingredient_id=ingredient_id,
            quantity=quantity,
            unit=unit,
        )
        self.session.add(link)
        await self.session.flush()
        return link

    async def delete_recipe(self, recipe_id: int) -> bool:
        """Delete a recipe after its ingredient links and plan entries."""
        await self.session.execute(
            delete(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id)
        )
        await self.session.execute(delete(WeeklyPlan).where(WeeklyPlan.recipe_id == recipe_id))
        result = await self.session.execute(delete(Recipe).where(Recipe.id == recipe_id))
        return result.rowcount > 0

    # =========================================================================
    # Weekly Plan Operations
    # =========================================================================

    async def list_plan_entries(self, with_ingredients: bool = True) -> Sequence[WeeklyPlan]:
        """Every plan entry with its recipe, in insertion order."""
        loader = selectinload(WeeklyPlan.recipe)
        if with_ingredients:
            loader = loader.selectinload(Recipe.ingredients).selectinload(
                RecipeIngredient.ingredient
            )
        result = await self.session.execute(
            select(WeeklyPlan).options(loader).order_by(WeeklyPlan.id)
        )
        return result.scalars().all()

    async def get_plan_entry(self, entry_id: int) -> WeeklyPlan | None:
        result = await self.session.execute(
            select(WeeklyPlan)
            .options(
                selectinload(WeeklyPlan.recipe)
                .selectinload(Recipe.ingredients)
                .selectinload(RecipeIngredient.ingredient)
            )
            .where(WeeklyPlan.id == entry_id)
        )
        return result.scalar_one_or_none()

    async def create_plan_entry(self, day: str, meal_type: str, recipe_id: int) -> WeeklyPlan:
        entry = WeeklyPlan(day=day, meal_type=meal_type, recipe_id=recipe_id)
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def delete_plan_entry(self, entry_id: int) -> bool:
        result = await self.session.execute(delete(WeeklyPlan).where(WeeklyPlan.id == entry_id))
        return result.rowcount > 0
