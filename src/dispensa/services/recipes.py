"""Recipe management: import from a URL, manual entry, listing and deletion."""

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dispensa.config import Settings, get_settings
from dispensa.database import unit_of_work
from dispensa.ingest.parser import ParsedIngredient
from dispensa.ingest.scraper import RecipeFetchError, RecipeScraper
from dispensa.logging_config import LoggingContext, get_logger
from dispensa.models import Recipe
from dispensa.repository import RecipeSort, Repository
from dispensa.results import OperationResult

logger = get_logger(__name__)


@dataclass
class RecipePage:
    """One page of the recipe listing."""

    recipes: Sequence[Recipe]
    total: int
    page: int
    total_pages: int


class RecipeService:
    """Service layer for the recipe book."""

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
        scraper_factory: Callable[[], RecipeScraper] = RecipeScraper,
    ):
        self.session = session
        self.repo = Repository(session)
        self.settings = settings or get_settings()
        self.scraper_factory = scraper_factory

    async def _save_recipe(
        self,
        name: str,
        tags: str,
        ingredients: Iterable[ParsedIngredient],
        source_url: str | None = None,
    ) -> Recipe:
        """Write a recipe and its ingredient lines; the caller commits."""
        recipe = await self.repo.create_recipe(name=name, tags=tags, source_url=source_url)
        for parsed in ingredients:
            if not parsed.name.strip():
                logger.debug(f"Skipping ingredient line without a name in '{name}'")
                continue
            ingredient = await self.repo.upsert_ingredient(parsed.name.strip())
            await self.repo.add_recipe_ingredient(
                recipe.id, ingredient.id, parsed.quantity, parsed.unit
            )
        return recipe

    async def import_from_url(self, url: str) -> OperationResult:
        """
        Import a recipe from a web page.

        A URL that was already imported is reported as DUPLICATE and nothing
        is fetched. A page that cannot be downloaded is reported as
        FETCH_FAILED and nothing is written.
        """
        url = (url or "").strip()
        if not url:
            return OperationResult.invalid("A URL is required")

        with LoggingContext(operation="recipe_import"):
            existing = await self.repo.get_recipe_by_source_url(url)
            if existing is not None:
                logger.info(f"Recipe from {url} already imported as {existing.id}")
                return OperationResult.duplicate(
                    f"Recipe already imported from {url}", data={"id": existing.id}
                )

            try:
                async with self.scraper_factory() as scraper:
                    scraped = await scraper.scrape(url)
            except RecipeFetchError as e:
                logger.warning(f"Could not fetch {url}: {e}")
                return OperationResult.fetch_failed(f"Could not fetch {url}: {e}")

            try:
                async with unit_of_work(self.session):
                    recipe = await self._save_recipe(
                        name=scraped.name or url,
                        tags=scraped.tags,
                        ingredients=scraped.ingredients,
                        source_url=url,
                    )
            except IntegrityError:
                logger.info(f"Recipe from {url} imported concurrently, keeping the first one")
                return OperationResult.duplicate(f"Recipe already imported from {url}")

            logger.info(
                f"Imported recipe {recipe.id} '{recipe.name}' "
                f"with {len(scraped.ingredients)} ingredient lines"
            )
            return OperationResult.success({"id": recipe.id, "name": recipe.name})

    async def create_manual(
        self,
        name: str,
        ingredients: Sequence[ParsedIngredient],
        tags: str = "",
    ) -> OperationResult:
        """Create a recipe from explicit ingredient lines."""
        name = (name or "").strip()
        if not name:
            return OperationResult.invalid("A recipe name is required")

        async with unit_of_work(self.session):
            recipe = await self._save_recipe(name=name, tags=tags, ingredients=ingredients)

        logger.info(f"Created recipe {recipe.id} '{recipe.name}' by hand")
        return OperationResult.success({"id": recipe.id, "name": recipe.name})

    async def get(self, recipe_id: int) -> Recipe | None:
        return await self.repo.get_recipe(recipe_id)

    async def delete(self, recipe_id: int) -> OperationResult:
        """Delete a recipe together with its ingredient lines and plan entries."""
        async with unit_of_work(self.session):
            deleted = await self.repo.delete_recipe(recipe_id)
        if not deleted:
            logger.info(f"Recipe {recipe_id} not found, nothing to delete")
            return OperationResult.not_found(f"Recipe {recipe_id} not found")
        logger.info(f"Deleted recipe {recipe_id}")
        return OperationResult.success()

    async def list_page(
        self,
        search: str | None = None,
        sort: RecipeSort = "newest",
        page: int = 1,
    ) -> RecipePage:
        """A page of recipes matching `search` by recipe or ingredient name."""
        page_size = self.settings.recipes_page_size
        page = max(1, page)

        total = await self.repo.count_recipes(search)
        recipes = await self.repo.search_recipes(
            search=search,
            sort=sort,
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        return RecipePage(
            recipes=recipes,
            total=total,
            page=page,
            total_pages=max(1, math.ceil(total / page_size)),
        )
