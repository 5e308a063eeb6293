"""Date-indexed meal plan handling.

A meal plan maps ISO day keys ("2024-05-06") to the meals of that day. Each
meal holds either an empty string, a recipe id, or
``{"id": recipe_id, "servings": int | None}``.
"""

import re
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from ourmeals.logging_config import get_logger
from ourmeals.plan.grocery import MealSlot, coerce_servings

logger = get_logger(__name__)

DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

SlotValue = str | dict[str, Any]
MealPlanDays = dict[str, dict[str, SlotValue]]


def sanitize_slot(value: Any) -> SlotValue:
    """Reduce a submitted slot to a recipe id, an id with servings, or ""."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        recipe_id = value.get("id")
        if not isinstance(recipe_id, str) or not recipe_id:
            return ""
        return {"id": recipe_id, "servings": coerce_servings(value.get("servings"))}
    return ""


def sanitize_meal_plan(raw: Mapping[str, Any], meals: Iterable[str]) -> MealPlanDays:
    """
    Keep only well-formed days of a submitted meal plan.

    Keys that are not ISO dates, and days that are not mappings, are dropped.
    Every kept day gets exactly the configured meals.
    """
    meal_names = list(meals)
    cleaned: MealPlanDays = {}

    for key, value in raw.items():
        if not isinstance(key, str) or not DAY_KEY_RE.match(key):
            logger.debug(f"Ignoring meal plan key {key!r}")
            continue
        if not isinstance(value, Mapping):
            continue
        cleaned[key] = {meal: sanitize_slot(value.get(meal)) for meal in meal_names}

    return cleaned


def slot_from_value(value: Any) -> MealSlot:
    """Read a stored slot value as a MealSlot."""
    if isinstance(value, str):
        return MealSlot(recipe_id=value)
    if isinstance(value, Mapping):
        recipe_id = value.get("id")
        return MealSlot(
            recipe_id=recipe_id if isinstance(recipe_id, str) else "",
            servings=value.get("servings"),
        )
    return MealSlot()


def active_slots(
    plan: Mapping[str, Mapping[str, Any]],
    meals: Iterable[str],
    start: date | None = None,
    end: date | None = None,
) -> list[MealSlot]:
    """
    Collect the filled slots of a plan, in day then meal order.

    Args:
        plan: Day key -> meal -> slot value.
        meals: Meal names in the order they are served.
        start: First day to include (inclusive), or None for no lower bound.
        end: Last day to include (inclusive), or None for no upper bound.
    """
    meal_names = list(meals)
    start_key = start.isoformat() if start else None
    end_key = end.isoformat() if end else None

    slots: list[MealSlot] = []
    for day_key in sorted(k for k in plan if DAY_KEY_RE.match(k)):
        if start_key and day_key < start_key:
            continue
        if end_key and day_key > end_key:
            continue
        day = plan[day_key]
        for meal in meal_names:
            slot = slot_from_value(day.get(meal))
            if slot.recipe_id:
                slots.append(slot)

    return slots


def clear_recipe(plan: MealPlanDays, recipe_id: str) -> bool:
    """
    Empty every slot that points at recipe_id.

    Returns:
        True if any slot was cleared.
    """
    changed = False
    for day in plan.values():
        for meal, value in day.items():
            if slot_from_value(value).recipe_id == recipe_id:
                day[meal] = ""
                changed = True
    return changed
