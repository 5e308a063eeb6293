"""Request and response schemas for the HTTP API."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class IngredientSchema(BaseModel):
    """Structured ingredient as stored with a recipe."""

    qty: float | None = None
    unit: str | None = None
    name: str
    raw: str = ""


class RecipeCreateRequest(BaseModel):
    """Request to add a recipe."""

    name: str
    ingredients: Any = Field(
        default_factory=list,
        description="Newline/comma separated text, or a list of strings and records",
    )
    base_servings: Any = Field(default=1, description="Servings the quantities are written for")


class RecipeResponse(BaseModel):
    """Single recipe."""

    id: str
    name: str
    base_servings: int
    # Older recipes may still hold plain text entries
    ingredients: list[IngredientSchema | str]
    ingredient_lines: list[str] = Field(default_factory=list)
    created_at: datetime


class RecipeListResponse(BaseModel):
    """All recipes, newest first."""

    recipes: list[RecipeResponse]
    total: int


class MealSlotSchema(BaseModel):
    """A meal slot holding a recipe and optional servings."""

    id: str
    servings: int | None = None


class MealPlanUpdateRequest(BaseModel):
    """Full replacement of the date-indexed meal plan."""

    days: dict[str, Any] = Field(
        description="ISO date -> meal name -> recipe id or {id, servings}",
    )


class MealPlanResponse(BaseModel):
    """Date-indexed meal plan."""

    meals: list[str]
    days: dict[str, dict[str, MealSlotSchema | str]]


class QuantifiedLineSchema(BaseModel):
    """Aggregated quantity of one ingredient in a base unit."""

    name: str
    unit: Literal["g", "ml", "unit"]
    total: float


class GroceryListResponse(BaseModel):
    """Grocery list for the planned meals in a date range."""

    locale: str
    lines: list[str]
    quantified: list[QuantifiedLineSchema]
    bare: list[str]
