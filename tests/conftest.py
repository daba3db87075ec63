"""Pytest configuration and shared fixtures."""

import os

# Settings are read once, on first import of the application modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import Sequence  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from dispensa.database import Base  # noqa: E402
from dispensa.models import PantryItem, Recipe, WeeklyPlan  # noqa: E402
from dispensa.repository import Repository  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


def create_test_engine() -> AsyncEngine:
    """In-memory SQLite engine; StaticPool keeps the single database alive."""
    return create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


# =============================================================================
# Failure Injection
# =============================================================================


@pytest.fixture
def fail_on_call(monkeypatch):
    """Make a Repository method raise RuntimeError on its n-th call."""

    def patch(method_name: str, call_number: int) -> None:
        original = getattr(Repository, method_name)
        calls = 0

        async def failing(self, *args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == call_number:
                raise RuntimeError(f"{method_name} failed")
            return await original(self, *args, **kwargs)

        monkeypatch.setattr(Repository, method_name, failing)

    return patch


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def engine():
    """Fresh database with all tables for each test."""
    test_engine = create_test_engine()
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    """Database session; objects stay usable after commit."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as db_session:
        yield db_session


class Kitchen:
    """Seeds pantry rows, recipes and plan entries through the repository."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = Repository(session)

    async def stock(self, name: str, quantity: float, unit: str) -> PantryItem:
        ingredient = await self.repo.upsert_ingredient(name)
        item = await self.repo.upsert_pantry_item(ingredient.id, quantity, unit)
        await self.session.commit()
        return item

    async def recipe(
        self,
        name: str,
        ingredients: Sequence[tuple[str, float, str]],
        tags: str = "",
        source_url: str | None = None,
    ) -> Recipe:
        recipe = await self.repo.create_recipe(name=name, tags=tags, source_url=source_url)
        for ingredient_name, quantity, unit in ingredients:
            ingredient = await self.repo.upsert_ingredient(ingredient_name)
            await self.repo.add_recipe_ingredient(recipe.id, ingredient.id, quantity, unit)
        await self.session.commit()
        return recipe

    async def plan(self, recipe: Recipe, day: str = "Lunedì", meal_type: str = "Cena") -> WeeklyPlan:
        entry = await self.repo.create_plan_entry(day, meal_type, recipe.id)
        await self.session.commit()
        return entry

    async def pantry(self) -> dict[str, tuple[float, str]]:
        """Current pantry as {ingredient name: (quantity, unit)}."""
        items = await self.repo.list_pantry()
        return {item.ingredient.name: (item.quantity, item.unit) for item in items}


@pytest.fixture
def kitchen(session) -> Kitchen:
    """Helper for seeding the test database."""
    return Kitchen(session)


# =============================================================================
# Recipe Page Fixtures
# =============================================================================


@pytest.fixture
def recipe_page_html():
    """Recipe page with a JSON-LD @graph, as most recipe sites publish it."""
    return """
    <html>
      <head>
        <title>Pasta alla Norma | Ricette</title>
        <script type="application/ld+json">{ not valid json </script>
        <script type="application/ld+json">
        {
          "@context": "https://schema.org",
          "@graph": [
            {"@type": "WebSite", "name": "Ricette di Casa"},
            {
              "@type": ["Recipe", "NewsArticle"],
              "name": "Pasta alla Norma",
              "recipeCategory": "Primi piatti",
              "keywords": "pasta, melanzane, Ricetta, siciliana, pasta, ricotta salata stagionata al forno",
              "recipeIngredient": [
                "320 g di pasta",
                "2 melanzane",
                "Sale q.b.",
                "400 g di pomodori pelati",
                "Ricotta salata (80 g)"
              ]
            }
          ]
        }
        </script>
      </head>
      <body><h1>Pasta alla Norma</h1></body>
    </html>
    """


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def client(monkeypatch):
    """API client backed by a fresh in-memory database."""
    from fastapi.testclient import TestClient

    from dispensa import main
    from dispensa.database import get_db

    test_engine = create_test_engine()
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as db_session:
            yield db_session

    # Tables are created by the app lifespan
    monkeypatch.setattr(main, "async_engine", test_engine)
    main.app.dependency_overrides[get_db] = override_get_db

    with TestClient(main.app) as test_client:
        yield test_client

    main.app.dependency_overrides.clear()
