"""Shopping list generation from the weekly plan and the pantry."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from dispensa.config import SHOPPING_IGNORED_INGREDIENTS
from dispensa.logging_config import get_logger
from dispensa.models import PantryItem
from dispensa.normalize.aggregate import (
    AggregatedRequirement,
    RequiredIngredient,
    aggregate_requirements,
)
from dispensa.normalize.units import format_output, normalize_quantity
from dispensa.pantry.matching import IngredientMatcher

logger = get_logger(__name__)


@dataclass
class ShoppingItem:
    """A single item in the shopping list, quantities in base units."""

    name: str
    base_unit: str
    total_value: float
    in_pantry_value: float
    needed_value: float
    pantry_item_id: int | None = None

    @property
    def needed_formatted(self) -> str:
        return format_output(self.needed_value, self.base_unit)

    @property
    def total_formatted(self) -> str:
        return format_output(self.total_value, self.base_unit)

    @property
    def pantry_formatted(self) -> str:
        return format_output(self.in_pantry_value, self.base_unit)


@dataclass
class ShoppingList:
    """Everything still missing for the planned meals."""

    items: list[ShoppingItem] = field(default_factory=list)

    def add_item(self, item: ShoppingItem) -> None:
        """Add an item; fully covered items are not listed."""
        if item.needed_value > 0:
            self.items.append(item)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def __len__(self) -> int:
        return len(self.items)


def pantry_coverage(
    requirement: AggregatedRequirement,
    pantry_item: PantryItem | None,
    assume_covered_on_unit_mismatch: bool = True,
) -> float:
    """
    How much of a requirement the pantry covers, in the requirement's base unit.

    A pantry row in another base unit cannot be compared; with the mismatch
    policy on, any positive quantity of it covers the whole requirement.
    """
    if pantry_item is None:
        return 0.0

    in_pantry = normalize_quantity(pantry_item.quantity, pantry_item.unit)
    if in_pantry.base_unit == requirement.base_unit:
        return in_pantry.value

    if assume_covered_on_unit_mismatch and pantry_item.quantity > 0:
        return requirement.total_value
    return 0.0


def build_shopping_list(
    requirements: Iterable[AggregatedRequirement],
    pantry: Sequence[PantryItem],
    assume_covered_on_unit_mismatch: bool = True,
) -> ShoppingList:
    """
    Compare aggregated requirements with the pantry.

    Args:
        requirements: Output of aggregate_requirements().
        pantry: Pantry rows with their ingredient loaded.
        assume_covered_on_unit_mismatch: See pantry_coverage().

    Returns:
        ShoppingList holding only the items with something left to buy.
    """
    matcher = IngredientMatcher(pantry)
    shopping_list = ShoppingList()

    for requirement in requirements:
        pantry_item = matcher.find_match(requirement.name)
        in_pantry = pantry_coverage(requirement, pantry_item, assume_covered_on_unit_mismatch)
        needed = max(0.0, requirement.total_value - in_pantry)

        shopping_list.add_item(
            ShoppingItem(
                name=requirement.name,
                base_unit=requirement.base_unit,
                total_value=requirement.total_value,
                in_pantry_value=in_pantry,
                needed_value=needed,
                pantry_item_id=pantry_item.id if pantry_item else None,
            )
        )

    logger.info(f"Shopping list: {len(shopping_list)} items to buy")
    return shopping_list


def compute_shortfall(
    planned_ingredients: Iterable[RequiredIngredient],
    pantry: Sequence[PantryItem],
    assume_covered_on_unit_mismatch: bool = True,
) -> ShoppingList:
    """Aggregate the planned ingredients and subtract what the pantry holds."""
    requirements = aggregate_requirements(planned_ingredients, SHOPPING_IGNORED_INGREDIENTS)
    return build_shopping_list(requirements.values(), pantry, assume_covered_on_unit_mismatch)
