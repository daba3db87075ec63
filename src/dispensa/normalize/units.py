"""Unit normalization and conversion utilities."""

import re
from dataclasses import dataclass

# =============================================================================
# Unit Conversion Tables
# =============================================================================

# Weight conversions (base unit: g)
WEIGHT_UNITS: dict[str, float] = {
    "g": 1.0,
    "gr": 1.0,
    "grammi": 1.0,
    "kg": 1000.0,
    "chili": 1000.0,
    "chilo": 1000.0,
}

# Volume conversions (base unit: ml). Spoons use the usual kitchen standard.
VOLUME_UNITS: dict[str, float] = {
    "ml": 1.0,
    "millilitri": 1.0,
    "cl": 10.0,
    "dl": 100.0,
    "l": 1000.0,
    "litro": 1000.0,
    "litri": 1000.0,
    "cucchiaio": 15.0,
    "cucchiai": 15.0,
    "cucchiaino": 5.0,
    "cucchiaini": 5.0,
}

DEFAULT_COUNT_UNIT = "pz"


@dataclass(frozen=True)
class NormalizedQuantity:
    """A quantity expressed in its base unit (g, ml, or the count unit itself)."""

    value: float
    base_unit: str

    def is_comparable(self, other: "NormalizedQuantity") -> bool:
        """Check whether two quantities share a base unit."""
        return self.base_unit == other.base_unit


def normalize_quantity(quantity: float, unit: str | None) -> NormalizedQuantity:
    """
    Normalize a quantity and unit to base units.

    Mass goes to grams and volume to milliliters. Any other unit ("pz",
    "fette", "spicchi", ...) is its own base unit; an empty unit becomes "pz".
    """
    u = (unit or "").lower().strip()

    if u in WEIGHT_UNITS:
        return NormalizedQuantity(value=quantity * WEIGHT_UNITS[u], base_unit="g")
    if u in VOLUME_UNITS:
        return NormalizedQuantity(value=quantity * VOLUME_UNITS[u], base_unit="ml")

    return NormalizedQuantity(value=quantity, base_unit=u or DEFAULT_COUNT_UNIT)


def unit_factor(unit: str | None) -> float:
    """Base-unit value of one `unit`, never zero."""
    return normalize_quantity(1, unit).value or 1.0


def _strip_decimals(text: str) -> str:
    return text.rstrip("0").rstrip(".") if "." in text else text


def format_output(value: float, base_unit: str) -> str:
    """
    Render a base-unit quantity for display.

    Examples:
        1000, "g" -> "1 kg"
        1500, "g" -> "1.5 kg"
        250, "g"  -> "250 g"
        2250, "ml" -> "2.25 l"
    """
    if base_unit == "g" and value >= 1000:
        return f"{_strip_decimals(f'{value / 1000:.2f}')} kg"
    if base_unit == "ml" and value >= 1000:
        return f"{_strip_decimals(f'{value / 1000:.2f}')} l"

    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text} {base_unit}"


# =============================================================================
# Parsing Functions
# =============================================================================

_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def _parse_float_prefix(text: str) -> float | None:
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return None
    return float(match.group(0))


def parse_quantity_string(quantity_str: str | None) -> float:
    """
    Parse a quantity string into a float.

    Handles formats like:
    - "2"
    - "1,5" / "1.5"
    - "1/2"
    - "1 1/2" (one and a half)

    A zero denominator or anything unparsable yields 1.
    """
    if not quantity_str:
        return 1.0

    text = quantity_str.strip().replace(",", ".", 1)

    mixed_match = re.match(r"^(\d+)\s+(\d+)\s*/\s*(\d+)", text)
    if mixed_match:
        whole, num, denom = (int(g) for g in mixed_match.groups())
        return whole + num / denom if denom else 1.0

    compact = re.sub(r"\s", "", text)
    if "/" in compact:
        num_str, _, rest = compact.partition("/")
        den_str = rest.split("/", 1)[0]
        num = _parse_float_prefix(num_str) if num_str else 0.0
        den = _parse_float_prefix(den_str) if den_str else 0.0
        if num is None or den is None:
            return 1.0
        return num / den if den != 0 else 1.0

    parsed = _parse_float_prefix(compact)
    return parsed if parsed is not None else 1.0
