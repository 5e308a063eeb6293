"""Unit normalization, classification and conversion to base units."""

import re
from types import MappingProxyType
from typing import Literal

UnitCategory = Literal["mass", "volume", "count", "none"]

# =============================================================================
# Conversion Tables
# =============================================================================

# Mass conversions (base unit: g)
MASS_UNITS: MappingProxyType[str, float] = MappingProxyType(
    {
        "kg": 1000.0,
        "g": 1.0,
        "lb": 453.59237,
        "lbs": 453.59237,
        "oz": 28.349523125,
    }
)

# Volume conversions (base unit: ml)
VOLUME_UNITS: MappingProxyType[str, float] = MappingProxyType(
    {
        "l": 1000.0,
        "liter": 1000.0,
        "liters": 1000.0,
        "dl": 100.0,
        "cl": 10.0,
        "ml": 1.0,
        "tsp": 5.0,
        "tbsp": 15.0,
        "cup": 240.0,
        "cups": 240.0,
    }
)

# Count-based units (no conversion, base unit: unit)
COUNT_UNITS: frozenset[str] = frozenset({"unit", "pc", "piece", "x", "count"})

BASE_UNITS: MappingProxyType[str, str] = MappingProxyType(
    {"mass": "g", "volume": "ml", "count": "unit"}
)

# Spelling -> canonical code, keyed on the lowercased token with periods and
# whitespace removed ("c. à s." -> "càs").
UNIT_SYNONYMS: MappingProxyType[str, str] = MappingProxyType(
    {
        # Mass
        "kgs": "kg",
        "kilogram": "kg",
        "kilograms": "kg",
        "kilogramme": "kg",
        "kilogrammes": "kg",
        "gram": "g",
        "grams": "g",
        "gr": "g",
        "gms": "g",
        "gramme": "g",
        "grammes": "g",
        "pound": "lb",
        "pounds": "lb",
        "ounce": "oz",
        "ounces": "oz",
        # Volume
        "liter": "l",
        "liters": "l",
        "litre": "l",
        "litres": "l",
        "deciliter": "dl",
        "decilitre": "dl",
        "centiliter": "cl",
        "centilitre": "cl",
        "milliliter": "ml",
        "milliliters": "ml",
        "millilitre": "ml",
        "millilitres": "ml",
        "teaspoon": "tsp",
        "teaspoons": "tsp",
        "cac": "tsp",
        "càc": "tsp",
        "cc": "tsp",
        "càco": "tsp",
        "cuillereacafe": "tsp",
        "cuillèreàcafé": "tsp",
        "cuillereàcafé": "tsp",
        "tablespoon": "tbsp",
        "tablespoons": "tbsp",
        "cas": "tbsp",
        "càs": "tbsp",
        "cs": "tbsp",
        "cuillereasoupe": "tbsp",
        "cuillèreàsoupe": "tbsp",
        "cuillereàsoupe": "tbsp",
        "cups": "cup",
        "tasse": "cup",
        "tasses": "cup",
        # Count
        "pcs": "pc",
        "pieces": "piece",
        "pièce": "piece",
        "pièces": "piece",
        "gousse": "unit",
        "gousses": "unit",
        "tranche": "unit",
        "tranches": "unit",
        "sachet": "unit",
        "sachets": "unit",
        "boite": "unit",
        "boites": "unit",
        "boîte": "unit",
        "boîtes": "unit",
    }
)

# French prepositions the free-text parser can mistake for a unit ("3 de ...").
_PREPOSITION_TOKENS: frozenset[str] = frozenset({"de", "d", "d'", "d’"})

_STRIP_RE = re.compile(r"[.\s]+")


def normalize_unit(raw: str | None) -> str | None:
    """
    Map a unit spelling to its canonical code.

    Returns None for empty input and for French prepositions captured as a
    unit. Unknown tokens come back lowercased with periods and whitespace
    removed, so classify() can report them as "none".
    """
    if not raw:
        return None

    token = _STRIP_RE.sub("", str(raw).lower())
    if not token or token in _PREPOSITION_TOKENS:
        return None

    return UNIT_SYNONYMS.get(token, token)


def classify(unit: str | None) -> UnitCategory:
    """Classify a canonical unit code as mass, volume, count or none."""
    if not unit:
        return "none"
    if unit in MASS_UNITS:
        return "mass"
    if unit in VOLUME_UNITS:
        return "volume"
    if unit in COUNT_UNITS:
        return "count"
    return "none"


def to_base(qty: float, unit: str | None, category: UnitCategory) -> tuple[float, str]:
    """
    Convert a quantity to its category's base unit.

    Examples:
        to_base(1, "kg", "mass") -> (1000.0, "g")
        to_base(1, "tbsp", "volume") -> (15.0, "ml")
        to_base(3, "unit", "count") -> (3, "unit")

    Raises:
        ValueError: for the "none" category, or a unit missing from the
            category's table. Callers apply the count fallback first.
    """
    if category == "count":
        return qty, BASE_UNITS["count"]

    if category == "mass":
        table = MASS_UNITS
    elif category == "volume":
        table = VOLUME_UNITS
    else:
        raise ValueError(f"Cannot convert quantity of unit category {category!r}")

    if unit not in table:
        raise ValueError(f"Unit {unit!r} is not a {category} unit")

    return qty * table[unit], BASE_UNITS[category]
