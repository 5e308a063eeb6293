"""Meal plan slots, grocery aggregation and display formatting."""

from ourmeals.plan.formatting import (
    format_grocery_list,
    format_line,
    format_number,
)
from ourmeals.plan.grocery import (
    BareLine,
    GroceryLine,
    GroceryList,
    MealSlot,
    QuantifiedLine,
    RecipeRef,
    aggregate,
    clamp_base_servings,
    clamp_servings,
)
from ourmeals.plan.slots import (
    active_slots,
    clear_recipe,
    sanitize_meal_plan,
    slot_from_value,
)

__all__ = [
    "BareLine",
    "GroceryLine",
    "GroceryList",
    "MealSlot",
    "QuantifiedLine",
    "RecipeRef",
    "active_slots",
    "aggregate",
    "clamp_base_servings",
    "clamp_servings",
    "clear_recipe",
    "format_grocery_list",
    "format_line",
    "format_number",
    "sanitize_meal_plan",
    "slot_from_value",
]
