"""SQLAlchemy database models."""

from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dispensa.database import Base

DAYS: tuple[str, ...] = (
    "Lunedì",
    "Martedì",
    "Mercoledì",
    "Giovedì",
    "Venerdì",
    "Sabato",
    "Domenica",
)
MEAL_TYPES: tuple[str, ...] = ("Colazione", "Pranzo", "Cena")


class Ingredient(Base):
    """Canonical ingredient, identified by its lowercased name."""

    __tablename__ = "ingredients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    pantry_item: Mapped["PantryItem | None"] = relationship(
        "PantryItem", back_populates="ingredient", uselist=False
    )
    recipe_links: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient", back_populates="ingredient"
    )


class PantryItem(Base):
    """What is currently in the pantry; at most one row per ingredient."""

    __tablename__ = "pantry_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ingredient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredients.id"), unique=True, nullable=False
    )
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String, nullable=False, default="")

    ingredient: Mapped["Ingredient"] = relationship("Ingredient", back_populates="pantry_item")


class Recipe(Base):
    """Recipe, imported from a URL or entered by hand."""

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    source_url: Mapped[str | None] = mapped_column(Text, unique=True, nullable=True)
    tags: Mapped[str] = mapped_column(Text, nullable=False, default="")  # comma-joined

    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient", back_populates="recipe", order_by="RecipeIngredient.id"
    )
    plan_entries: Mapped[list["WeeklyPlan"]] = relationship("WeeklyPlan", back_populates="recipe")

    @property
    def tag_list(self) -> list[str]:
        return [t for t in self.tags.split(",") if t] if self.tags else []


class RecipeIngredient(Base):
    """Quantity of an ingredient required by a recipe."""

    __tablename__ = "recipe_ingredients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(Integer, ForeignKey("recipes.id"), nullable=False)
    ingredient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredients.id"), nullable=False
    )
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String, nullable=False, default="")

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")
    ingredient: Mapped["Ingredient"] = relationship("Ingredient", back_populates="recipe_links")

    __table_args__ = (
        Index("idx_recipe_ingredients_recipe_id", "recipe_id"),
        Index("idx_recipe_ingredients_ingredient_id", "ingredient_id"),
    )


class WeeklyPlan(Base):
    """A recipe scheduled in a day/meal slot. A slot may hold several entries."""

    __tablename__ = "weekly_plan"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    day: Mapped[str] = mapped_column(String(20), nullable=False)  # one of DAYS
    meal_type: Mapped[str] = mapped_column(String(20), nullable=False)  # one of MEAL_TYPES
    recipe_id: Mapped[int] = mapped_column(Integer, ForeignKey("recipes.id"), nullable=False)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="plan_entries")

    __table_args__ = (Index("idx_weekly_plan_recipe_id", "recipe_id"),)
