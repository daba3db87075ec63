"""Aggregation of ingredient requirements across recipes."""

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from dispensa.logging_config import get_logger
from dispensa.normalize.units import normalize_quantity

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequiredIngredient:
    """One ingredient line of a recipe, as stored."""

    name: str
    quantity: float
    unit: str


@dataclass
class AggregatedRequirement:
    """Total requirement for one ingredient name, in base units."""

    name: str
    total_value: float
    base_unit: str


def aggregate_requirements(
    items: Iterable[RequiredIngredient],
    ignored: Collection[str] = frozenset(),
) -> dict[str, AggregatedRequirement]:
    """
    Sum required quantities per ingredient.

    Keys are the lowercased ingredient names, so two spellings of the same
    ingredient stay separate here; fuzzy matching only happens later against
    the pantry. The display name and base unit come from the first occurrence.
    A later occurrence in another base unit is still added to the total.

    Args:
        items: Ingredient lines from every planned recipe.
        ignored: Lowercased names to skip entirely.

    Returns:
        Dict mapping lowercased names to AggregatedRequirement, in first-seen order.
    """
    aggregated: dict[str, AggregatedRequirement] = {}

    for item in items:
        key = item.name.lower()
        if key in ignored:
            continue

        normalized = normalize_quantity(item.quantity, item.unit)
        existing = aggregated.get(key)

        if existing is None:
            aggregated[key] = AggregatedRequirement(
                name=item.name,
                total_value=normalized.value,
                base_unit=normalized.base_unit,
            )
            continue

        if existing.base_unit != normalized.base_unit:
            logger.debug(
                f"Summing {normalized.base_unit} into {existing.base_unit} for '{key}'"
            )
        existing.total_value += normalized.value

    return aggregated
