"""Unit tests for shopping list generation."""

from dispensa.models import Ingredient, PantryItem
from dispensa.normalize import AggregatedRequirement, RequiredIngredient
from dispensa.plan.shopping_list import (
    ShoppingItem,
    ShoppingList,
    build_shopping_list,
    compute_shortfall,
    pantry_coverage,
)


def make_item(item_id: int, name: str, quantity: float, unit: str) -> PantryItem:
    return PantryItem(id=item_id, quantity=quantity, unit=unit, ingredient=Ingredient(name=name))


class TestShoppingList:
    """Tests for ShoppingList dataclass."""

    def test_covered_items_not_listed(self):
        """Test items with nothing left to buy are dropped."""
        shopping_list = ShoppingList()
        shopping_list.add_item(ShoppingItem("uova", "pz", 2, 2, 0))
        assert shopping_list.is_empty
        assert len(shopping_list) == 0

    def test_formatted_quantities(self):
        item = ShoppingItem("farina", "g", 1500, 1000, 500)
        assert item.needed_formatted == "500 g"
        assert item.total_formatted == "1.5 kg"
        assert item.pantry_formatted == "1 kg"


class TestPantryCoverage:
    """Tests for pantry_coverage function."""

    def test_same_base_unit(self):
        requirement = AggregatedRequirement("farina", 1000, "g")
        assert pantry_coverage(requirement, make_item(1, "farina", 0.3, "kg")) == 300

    def test_unit_mismatch_assumed_covered(self):
        """Test a bottle of oil covers 2 tablespoons by default."""
        requirement = AggregatedRequirement("olio", 30, "ml")
        assert pantry_coverage(requirement, make_item(1, "olio", 1, "bottiglia")) == 30

    def test_unit_mismatch_policy_off(self):
        requirement = AggregatedRequirement("olio", 30, "ml")
        item = make_item(1, "olio", 1, "bottiglia")
        assert pantry_coverage(requirement, item, assume_covered_on_unit_mismatch=False) == 0

    def test_no_pantry_row(self):
        assert pantry_coverage(AggregatedRequirement("uova", 2, "pz"), None) == 0


class TestComputeShortfall:
    """Tests for compute_shortfall function."""

    def test_partial_coverage(self):
        """Test 1 kg of 'Farina 00' with 500 g of farina in the pantry."""
        result = compute_shortfall(
            [RequiredIngredient("Farina 00", 1, "kg")],
            [make_item(1, "farina", 500, "g")],
        )

        assert len(result) == 1
        item = result.items[0]
        assert item.name == "Farina 00"
        assert item.needed_formatted == "500 g"
        assert item.pantry_item_id == 1

    def test_aggregates_before_subtracting(self):
        """Test two recipes using eggs need the sum of both."""
        result = compute_shortfall(
            [RequiredIngredient("uova", 2, "pz"), RequiredIngredient("uova", 3, "pz")],
            [make_item(1, "uova", 1, "pz")],
        )
        assert result.items[0].needed_value == 4

    def test_water_and_salt_never_bought(self):
        result = compute_shortfall(
            [RequiredIngredient("Acqua", 500, "ml"), RequiredIngredient("sale grosso", 1, "q.b.")],
            [],
        )
        assert result.is_empty

    def test_pepper_still_bought(self):
        """Test pepper is only ignored when ranking recipes."""
        result = compute_shortfall([RequiredIngredient("pepe", 1, "q.b.")], [])
        assert [item.name for item in result.items] == ["pepe"]

    def test_fully_covered(self):
        result = compute_shortfall(
            [RequiredIngredient("latte", 200, "ml")],
            [make_item(1, "latte", 1, "l")],
        )
        assert result.is_empty

    def test_idempotent(self):
        """Test computing twice gives the same list."""
        planned = [RequiredIngredient("farina", 1, "kg"), RequiredIngredient("uova", 3, "pz")]
        pantry = [make_item(1, "farina", 200, "g")]

        first = compute_shortfall(planned, pantry)
        second = compute_shortfall(planned, pantry)
        assert first == second


class TestBuildShoppingList:
    def test_missing_everything(self):
        result = build_shopping_list([AggregatedRequirement("zucchero", 100, "g")], [])
        assert result.items[0].needed_value == 100
        assert result.items[0].in_pantry_value == 0
        assert result.items[0].pantry_item_id is None
