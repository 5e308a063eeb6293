"""API routes for the date-indexed meal plan and its grocery list."""

from datetime import date
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ourmeals.config import get_settings
from ourmeals.database import get_db
from ourmeals.logging_config import get_logger
from ourmeals.models import MealPlanDay, Recipe
from ourmeals.plan.formatting import format_grocery_list
from ourmeals.plan.grocery import aggregate
from ourmeals.plan.slots import MealPlanDays, active_slots, sanitize_meal_plan
from ourmeals.schemas import (
    GroceryListResponse,
    MealPlanResponse,
    MealPlanUpdateRequest,
    QuantifiedLineSchema,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/meal-plan", tags=["meal-plan"])


# =============================================================================
# Helper Functions
# =============================================================================


def _check_range(start: date | None, end: date | None) -> None:
    if start and end and end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End date must be on or after start date",
        )


async def load_plan(
    db: AsyncSession,
    start: date | None = None,
    end: date | None = None,
) -> MealPlanDays:
    """Load the stored plan days within the inclusive date range."""
    query = select(MealPlanDay).order_by(MealPlanDay.plan_date)
    if start:
        query = query.where(MealPlanDay.plan_date >= start)
    if end:
        query = query.where(MealPlanDay.plan_date <= end)

    result = await db.execute(query)
    return {day.plan_date.isoformat(): dict(day.slots or {}) for day in result.scalars().all()}


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=MealPlanResponse)
async def get_meal_plan(
    start: Annotated[date | None, Query(description="First day (inclusive)")] = None,
    end: Annotated[date | None, Query(description="Last day (inclusive)")] = None,
    db: AsyncSession = Depends(get_db),
) -> MealPlanResponse:
    """Get the planned meals, optionally limited to a date range."""
    _check_range(start, end)
    days = await load_plan(db, start, end)
    return MealPlanResponse(meals=get_settings().meal_names, days=days)


@router.put("", response_model=MealPlanResponse)
async def replace_meal_plan(
    request: MealPlanUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> MealPlanResponse:
    """
    Replace the whole meal plan.

    Keys that are not ISO dates and malformed slots are dropped; slot servings
    are kept only when they are a number >= 1.
    """
    meals = get_settings().meal_names
    cleaned = sanitize_meal_plan(request.days, meals)

    days: list[MealPlanDay] = []
    for key, slots in cleaned.items():
        try:
            plan_date = date.fromisoformat(key)
        except ValueError:
            logger.debug(f"Ignoring impossible date {key}")
            continue
        days.append(MealPlanDay(plan_date=plan_date, slots=slots))

    await db.execute(delete(MealPlanDay))
    db.add_all(days)
    await db.commit()

    logger.info(f"Meal plan replaced: {len(days)} days")
    days.sort(key=lambda d: d.plan_date)
    return MealPlanResponse(
        meals=meals,
        days={day.plan_date.isoformat(): day.slots for day in days},
    )


@router.get("/grocery-list", response_model=GroceryListResponse)
async def get_grocery_list(
    start: Annotated[date | None, Query(description="First day (inclusive)")] = None,
    end: Annotated[date | None, Query(description="Last day (inclusive)")] = None,
    locale: Annotated[Literal["fr", "en"] | None, Query(description="Display locale")] = None,
    db: AsyncSession = Depends(get_db),
) -> GroceryListResponse:
    """
    Build the grocery list for the meals planned in a date range.

    Quantities are scaled to each slot's servings, converted to g, ml or
    pieces and summed per ingredient. Ingredients without a quantity are
    listed by name only when no quantified line covers them.
    """
    _check_range(start, end)
    display_locale = locale or get_settings().display_locale

    try:
        plan = await load_plan(db, start, end)
        result = await db.execute(select(Recipe))
        recipes_by_id = {r.id: r.to_ref() for r in result.scalars().all()}
    except Exception as e:
        logger.error(f"Failed to load meal plan snapshot: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load meal plan",
        )

    slots = active_slots(plan, get_settings().meal_names, start, end)
    grocery = aggregate(slots, recipes_by_id)

    try:
        lines = format_grocery_list(grocery, display_locale)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return GroceryListResponse(
        locale=display_locale,
        lines=lines,
        quantified=[
            QuantifiedLineSchema(name=q.name, unit=q.unit, total=q.total)
            for q in grocery.quantified
        ],
        bare=[b.name for b in grocery.bare],
    )
