"""API routes for the recipe catalog."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ourmeals.database import get_db
from ourmeals.logging_config import LoggingContext, get_logger
from ourmeals.models import MealPlanDay, Recipe
from ourmeals.normalize.ingredients import (
    IngredientListError,
    ingredient_to_line,
    parse_ingredient_list,
)
from ourmeals.plan.grocery import clamp_base_servings
from ourmeals.plan.slots import clear_recipe
from ourmeals.schemas import RecipeCreateRequest, RecipeListResponse, RecipeResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["recipes"])


def to_response(recipe: Recipe) -> RecipeResponse:
    """Build the API view of a stored recipe."""
    ingredients = list(recipe.ingredients or [])
    return RecipeResponse(
        id=recipe.id,
        name=recipe.name,
        base_servings=clamp_base_servings(recipe.base_servings),
        ingredients=ingredients,
        ingredient_lines=[line for line in map(ingredient_to_line, ingredients) if line],
        created_at=recipe.created_at,
    )


@router.get("/recipes", response_model=RecipeListResponse)
async def list_recipes(db: AsyncSession = Depends(get_db)) -> RecipeListResponse:
    """List all recipes, newest first."""
    try:
        result = await db.execute(select(Recipe).order_by(Recipe.created_at.desc()))
        recipes = result.scalars().all()
    except Exception as e:
        logger.error(f"Failed to list recipes: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch recipes",
        )

    return RecipeListResponse(
        recipes=[to_response(r) for r in recipes],
        total=len(recipes),
    )


@router.post("/recipes", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    request: RecipeCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> RecipeResponse:
    """
    Add a recipe.

    Ingredients are normalized at write time with the same rules the grocery
    list uses, and stored as {qty, unit, name, raw} records.
    """
    name = request.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Recipe name is required",
        )

    try:
        parsed = parse_ingredient_list(request.ingredients)
    except IngredientListError as e:
        logger.warning(f"Rejected recipe {name!r}: {e} (got {e.value_type})")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    recipe = Recipe(
        id=str(uuid.uuid4()),
        name=name,
        ingredients=[p.to_record() for p in parsed],
        base_servings=clamp_base_servings(request.base_servings),
    )
    db.add(recipe)
    await db.commit()
    await db.refresh(recipe)

    logger.info(f"Created recipe {recipe.id} ({name}) with {len(parsed)} ingredients")
    return to_response(recipe)


@router.get("/recipes/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(recipe_id: str, db: AsyncSession = Depends(get_db)) -> RecipeResponse:
    """Get a recipe, with its ingredients rendered back as editable lines."""
    recipe = await db.get(Recipe, recipe_id)
    if not recipe:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Recipe {recipe_id} not found",
        )
    return to_response(recipe)


@router.delete("/recipes/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(recipe_id: str, db: AsyncSession = Depends(get_db)) -> None:
    """Delete a recipe and empty every meal slot that used it."""
    with LoggingContext(recipe_id=recipe_id):
        recipe = await db.get(Recipe, recipe_id)
        if not recipe:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Recipe {recipe_id} not found",
            )

        await db.delete(recipe)

        result = await db.execute(select(MealPlanDay))
        cleared = 0
        for day in result.scalars().all():
            # JSON columns only notice reassignment, not in-place edits
            slots = dict(day.slots or {})
            if clear_recipe({"day": slots}, recipe_id):
                day.slots = slots
                cleared += 1

        await db.commit()
        logger.info(f"Deleted recipe, cleared slots on {cleared} days")
