"""Tests for ranking recipes by what the pantry can cover."""

from dispensa.models import Ingredient, PantryItem, Recipe, RecipeIngredient
from dispensa.normalize import RequiredIngredient
from dispensa.pantry.matching import IngredientMatcher
from dispensa.plan.inspiration import compute_availability, is_satisfied, rank_recipes


def make_item(item_id: int, name: str, quantity: float, unit: str) -> PantryItem:
    return PantryItem(id=item_id, quantity=quantity, unit=unit, ingredient=Ingredient(name=name))


def make_recipe(recipe_id: int, name: str, lines: list[tuple[str, float, str]], tags: str = "") -> Recipe:
    return Recipe(
        id=recipe_id,
        name=name,
        tags=tags,
        ingredients=[
            RecipeIngredient(quantity=quantity, unit=unit, ingredient=Ingredient(name=n))
            for n, quantity, unit in lines
        ],
    )


class TestIsSatisfied:
    """Tests for is_satisfied function."""

    def test_enough_in_same_unit(self):
        assert is_satisfied(RequiredIngredient("farina", 200, "g"), make_item(1, "farina", 1, "kg"))

    def test_not_enough(self):
        assert not is_satisfied(
            RequiredIngredient("farina", 2, "kg"), make_item(1, "farina", 500, "g")
        )

    def test_different_units_any_positive_quantity(self):
        assert is_satisfied(RequiredIngredient("olio", 2, "cucchiai"), make_item(1, "olio", 1, "pz"))
        assert not is_satisfied(
            RequiredIngredient("olio", 2, "cucchiai"), make_item(1, "olio", 0, "pz")
        )

    def test_no_pantry_row(self):
        assert not is_satisfied(RequiredIngredient("uova", 2, "pz"), None)


class TestComputeAvailability:
    """Tests for compute_availability function."""

    def test_half_available(self):
        """Test farina covered and zucchero missing gives 50%."""
        matcher = IngredientMatcher([make_item(1, "farina", 1, "kg")])
        result = compute_availability(
            [
                RequiredIngredient("Farina", 200, "g"),
                RequiredIngredient("Zucchero", 100, "g"),
                RequiredIngredient("pepe", 1, "q.b."),
            ],
            matcher,
        )

        assert result.percent == 50
        assert result.missing == ["Zucchero"]
        assert result.essential_count == 2
        assert result.ingredient_count == 3

    def test_only_ignored_ingredients_scores_zero(self):
        """Test a recipe of water and salt is not reported as ready."""
        result = compute_availability(
            [RequiredIngredient("acqua", 1, "l"), RequiredIngredient("sale", 1, "q.b.")],
            IngredientMatcher([]),
        )
        assert result.percent == 0
        assert not result.is_ready


class TestRankRecipes:
    """Tests for rank_recipes function."""

    def setup_method(self):
        self.pantry = [make_item(1, "pasta", 500, "g"), make_item(2, "pomodori pelati", 400, "g")]
        self.recipes = [
            make_recipe(1, "Carbonara", [("pasta", 320, "g"), ("guanciale", 150, "g")]),
            make_recipe(2, "Pasta al pomodoro", [("pasta", 320, "g"), ("pomodori", 400, "g")]),
            make_recipe(3, "Tiramisù", [("mascarpone", 500, "g"), ("savoiardi", 300, "g")]),
        ]

    def test_sorted_best_first(self):
        result = rank_recipes(self.recipes, self.pantry, filter_by="all")
        assert [a.recipe_name for a in result.recipes] == [
            "Pasta al pomodoro",
            "Carbonara",
            "Tiramisù",
        ]

    def test_bucket_counts(self):
        result = rank_recipes(self.recipes, self.pantry)
        assert (result.ready_count, result.almost_count, result.others_count) == (1, 1, 1)
        assert result.total == 3

    def test_default_filter_is_almost(self):
        result = rank_recipes(self.recipes, self.pantry)
        assert [a.recipe_name for a in result.recipes] == ["Carbonara"]

    def test_ready_filter(self):
        result = rank_recipes(self.recipes, self.pantry, filter_by="ready")
        assert [a.recipe_id for a in result.recipes] == [2]
        assert result.recipes[0].is_ready

    def test_search_is_case_insensitive(self):
        result = rank_recipes(self.recipes, self.pantry, search="CARBO", filter_by="all")
        assert [a.recipe_name for a in result.recipes] == ["Carbonara"]
        assert result.total == 1

    def test_tags_carried(self):
        recipes = [make_recipe(1, "Pasta", [("pasta", 100, "g")], tags="primi,veloci")]
        result = rank_recipes(recipes, self.pantry, filter_by="all")
        assert result.recipes[0].tags == ["primi", "veloci"]
