"""Grocery list aggregation from planned meals."""

import math
import unicodedata
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ourmeals.logging_config import get_logger
from ourmeals.normalize.ingredients import IngredientEntry, parse_ingredient
from ourmeals.normalize.units import BASE_UNITS, classify, to_base

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecipeRef:
    """Snapshot of a recipe as the aggregator sees it."""

    id: str
    name: str
    base_servings: int = 1
    ingredients: Sequence[IngredientEntry] = ()


@dataclass(frozen=True)
class MealSlot:
    """One planned meal: a recipe id and an optional number of servings."""

    recipe_id: str = ""
    servings: int | None = None


@dataclass(frozen=True)
class QuantifiedLine:
    """Total quantity of an ingredient in one base unit (g, ml or unit)."""

    name: str
    unit: str
    total: float


@dataclass(frozen=True)
class BareLine:
    """An ingredient needed without any measured amount."""

    name: str


GroceryLine = QuantifiedLine | BareLine


@dataclass
class GroceryList:
    """Aggregated grocery list: quantified lines first, then bare names."""

    quantified: list[QuantifiedLine] = field(default_factory=list)
    bare: list[BareLine] = field(default_factory=list)

    @property
    def lines(self) -> list[GroceryLine]:
        """All lines in display order."""
        return [*self.quantified, *self.bare]

    def __iter__(self) -> Iterator[GroceryLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.quantified) + len(self.bare)


# =============================================================================
# Servings
# =============================================================================


def coerce_servings(value: Any) -> int | None:
    """Read a servings count: finite numbers >= 1 are floored, anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 1:
        return None
    return math.floor(number)


def clamp_base_servings(value: Any) -> int:
    """Get a recipe's base servings as an int >= 1, defaulting to 1."""
    servings = coerce_servings(value)
    return servings if servings is not None else 1


def clamp_servings(value: Any, default: int) -> int:
    """Get a slot's servings as an int >= 1, falling back to default."""
    servings = coerce_servings(value)
    return servings if servings is not None else clamp_base_servings(default)


# =============================================================================
# Aggregation
# =============================================================================


def collation_key(text: str) -> str:
    """Case and accent insensitive sort key ("Écrou" sorts with "ecrou")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def aggregate(
    active_slots: Iterable[MealSlot],
    recipes_by_id: Mapping[str, RecipeRef],
) -> GroceryList:
    """
    Aggregate the ingredients of every planned meal into a grocery list.

    Each recipe's quantities are scaled by desired servings / base servings,
    converted to g, ml or unit, and summed per (name, base unit). A quantity
    with an unknown unit counts as that many units. Names used without a
    quantity are listed bare, unless the same name has a quantified total
    under any unit.

    Slots with an empty recipe id, or pointing to a recipe that no longer
    exists, are skipped. A quantity that would push a total past the float
    range is dropped, so every total stays finite.
    """
    totals: dict[tuple[str, str], float] = {}
    names_only: set[str] = set()
    slots_used = 0

    for slot in active_slots:
        if not slot.recipe_id:
            continue

        recipe = recipes_by_id.get(slot.recipe_id)
        if recipe is None:
            logger.debug(f"Skipping slot for missing recipe {slot.recipe_id}")
            continue

        base_servings = clamp_base_servings(recipe.base_servings)
        desired_servings = clamp_servings(slot.servings, base_servings)
        scale = desired_servings / base_servings
        slots_used += 1

        for entry in recipe.ingredients:
            parsed = parse_ingredient(entry)
            if parsed is None or not parsed.name:
                continue

            if parsed.qty is None:
                names_only.add(parsed.name)
                continue

            unit = parsed.unit
            category = classify(unit)
            if category == "none":
                category = "count"
                unit = BASE_UNITS["count"]

            qty, base_unit = to_base(parsed.qty * scale, unit, category)
            key = (parsed.name, base_unit)
            total = totals.get(key, 0.0) + qty
            if not math.isfinite(total):
                logger.warning(f"Ignoring {parsed.name} in {recipe.id}: quantity overflows")
                continue
            totals[key] = total

    quantified_names = {name for name, _ in totals}
    names_only -= quantified_names

    quantified = [
        QuantifiedLine(name=name, unit=unit, total=total)
        for (name, unit), total in sorted(
            totals.items(),
            key=lambda item: (
                collation_key(item[0][0]),
                item[0][0],
                collation_key(item[0][1]),
                item[0][1],
            ),
        )
    ]
    bare = [
        BareLine(name=name)
        for name in sorted(names_only, key=lambda n: (collation_key(n), n))
    ]

    logger.info(
        f"Aggregated {slots_used} meals into {len(quantified)} quantified "
        f"and {len(bare)} bare grocery lines"
    )

    return GroceryList(quantified=quantified, bare=bare)
