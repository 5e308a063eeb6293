"""Normalize ingredient names, units and entries into canonical form."""

from ourmeals.normalize.ingredients import (
    FreeText,
    IngredientEntry,
    IngredientListError,
    ParsedIngredient,
    Structured,
    ingredient_entry,
    ingredient_to_line,
    parse_ingredient,
    parse_ingredient_list,
)
from ourmeals.normalize.names import normalize_name
from ourmeals.normalize.units import (
    UnitCategory,
    classify,
    normalize_unit,
    to_base,
)

__all__ = [
    "FreeText",
    "IngredientEntry",
    "IngredientListError",
    "ParsedIngredient",
    "Structured",
    "UnitCategory",
    "classify",
    "ingredient_entry",
    "ingredient_to_line",
    "normalize_name",
    "normalize_unit",
    "parse_ingredient",
    "parse_ingredient_list",
    "to_base",
]
