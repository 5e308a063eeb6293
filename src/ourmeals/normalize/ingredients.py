"""Ingredient entry parsing for recipe ingestion and grocery aggregation."""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ourmeals.logging_config import get_logger
from ourmeals.normalize.names import normalize_name
from ourmeals.normalize.units import normalize_unit

logger = get_logger(__name__)


class IngredientListError(ValueError):
    """Raised when an ingredients value is neither text nor a list."""

    def __init__(self, message: str, value_type: str | None = None):
        super().__init__(message)
        self.value_type = value_type


# =============================================================================
# Ingredient Entries
# =============================================================================


@dataclass(frozen=True)
class FreeText:
    """An ingredient typed as a single line, e.g. "200 g farine"."""

    text: str


@dataclass(frozen=True)
class Structured:
    """An ingredient stored as separate fields."""

    name: str
    qty: Any = None
    unit: str | None = None
    raw: str = ""


IngredientEntry = FreeText | Structured


@dataclass(frozen=True)
class ParsedIngredient:
    """An ingredient with normalized name and canonical unit code."""

    name: str
    qty: float | None
    unit: str | None
    raw: str

    def to_record(self) -> dict[str, Any]:
        """Get the structured record persisted with a recipe."""
        return {"qty": self.qty, "unit": self.unit, "name": self.name, "raw": self.raw}


def ingredient_entry(value: Any) -> IngredientEntry | None:
    """
    Wrap a stored ingredient value in its entry type.

    Strings become FreeText, mappings become Structured. Anything else has no
    ingredient reading and gives None.
    """
    if isinstance(value, str):
        return FreeText(value)
    if isinstance(value, Mapping):
        return Structured(
            name=str(value.get("name") or ""),
            qty=value.get("qty"),
            unit=value.get("unit") or None,
            raw=value.get("raw") or "",
        )
    return None


# =============================================================================
# Parsing
# =============================================================================

# quantity (int or decimal, "." or ","), optional unit token, then the name
_FREE_TEXT_RE = re.compile(r"^(\d+(?:[.,]\d+)?)\s*([^\s\d]+)?\s+(.*)$")


def _coerce_qty(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        qty = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(qty) or qty < 0:
        return None
    return qty


def _parse_free_text(text: str) -> ParsedIngredient | None:
    text = text.strip()
    if not text:
        return None

    qty: float | None = None
    unit: str | None = None
    name = text

    match = _FREE_TEXT_RE.match(text)
    if match:
        qty = _coerce_qty(match.group(1).replace(",", "."))
        unit = normalize_unit(match.group(2))
        name = match.group(3)

    normalized = normalize_name(name)
    if not normalized:
        return None

    return ParsedIngredient(name=normalized, qty=qty, unit=unit, raw=text)


def _parse_structured(entry: Structured) -> ParsedIngredient | None:
    normalized = normalize_name(entry.name)
    if not normalized:
        return None

    return ParsedIngredient(
        name=normalized,
        qty=_coerce_qty(entry.qty),
        unit=normalize_unit(entry.unit),
        raw=entry.raw,
    )


def parse_ingredient(entry: IngredientEntry) -> ParsedIngredient | None:
    """
    Parse one ingredient entry.

    Free text is read as "<qty> [unit] <name>" (e.g. "2 tomates",
    "200 g flour", "1,5 l lait"); text without a leading number is a bare
    name with no quantity. Returns None when the normalized name is empty.
    """
    if isinstance(entry, FreeText):
        return _parse_free_text(entry.text)
    if isinstance(entry, Structured):
        return _parse_structured(entry)
    raise TypeError(f"Unsupported ingredient entry: {type(entry).__name__}")


def parse_ingredient_list(value: Any) -> list[ParsedIngredient]:
    """
    Parse the ingredients of a recipe submitted for storage.

    Args:
        value: Text with one ingredient per line or comma, or a list of
            strings and structured records.

    Returns:
        Parsed ingredients in input order, with unusable entries dropped.

    Raises:
        IngredientListError: if value is neither a string nor a list.
    """
    if isinstance(value, str):
        items: list[Any] = [s.strip() for s in re.split(r"[\n,]", value)]
        items = [s for s in items if s]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise IngredientListError(
            "Ingredients must be a list or newline-separated text",
            value_type=type(value).__name__,
        )

    parsed: list[ParsedIngredient] = []
    for item in items:
        entry = ingredient_entry(item)
        if entry is None:
            logger.debug(f"Dropping ingredient of type {type(item).__name__}")
            continue
        ingredient = parse_ingredient(entry)
        if ingredient is not None:
            parsed.append(ingredient)

    return parsed


def _format_qty(qty: Any) -> str:
    if isinstance(qty, float) and qty.is_integer():
        return str(int(qty))
    return str(qty)


def ingredient_to_line(stored: Any) -> str:
    """
    Render a stored ingredient back into an editable line.

    Structured records prefer their original text; otherwise the line is
    rebuilt from quantity, unit and name.
    """
    if isinstance(stored, str):
        return stored
    if not isinstance(stored, Mapping):
        return ""

    if stored.get("raw"):
        return str(stored["raw"])

    parts = []
    qty = stored.get("qty")
    if qty is not None and qty != "":
        parts.append(_format_qty(qty))
    if stored.get("unit"):
        parts.append(str(stored["unit"]))
    if stored.get("name"):
        parts.append(str(stored["name"]))
    return " ".join(parts).strip()
