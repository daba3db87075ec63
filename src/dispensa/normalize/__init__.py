"""Normalize quantities, units and ingredient names into comparable forms."""

from dispensa.normalize.aggregate import (
    AggregatedRequirement,
    RequiredIngredient,
    aggregate_requirements,
)
from dispensa.normalize.names import sanitize_ingredient_name
from dispensa.normalize.units import (
    NormalizedQuantity,
    format_output,
    normalize_quantity,
    parse_quantity_string,
    unit_factor,
)

__all__ = [
    "AggregatedRequirement",
    "NormalizedQuantity",
    "RequiredIngredient",
    "aggregate_requirements",
    "format_output",
    "normalize_quantity",
    "parse_quantity_string",
    "sanitize_ingredient_name",
    "unit_factor",
]
