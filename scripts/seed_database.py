#!/usr/bin/env python
"""
Database seeding script with sample recipes and a week of planned meals.

This script will:

1. Create the tables if they don't exist
2. Check if recipes already exist (skip if already seeded)
3. Store a few sample recipes, normalizing their ingredients
4. Plan dinners and lunches for the next seven days
5. Log the resulting grocery list

Run with: python scripts/seed_database.py

Environment Variables:
    SEED_SKIP_IF_EXISTS: Skip seeding if recipes exist (default: true)
    SEED_LOCALE: Locale of the logged grocery list (default: DISPLAY_LOCALE)
    DATABASE_URL: SQLAlchemy async connection string
"""

import os
import sys
import uuid
from datetime import date, timedelta

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from ourmeals.config import settings
from ourmeals.database import Base
from ourmeals.logging_config import configure_logging, get_logger
from ourmeals.models import MealPlanDay, Recipe
from ourmeals.normalize.ingredients import parse_ingredient_list
from ourmeals.plan.formatting import format_grocery_list
from ourmeals.plan.grocery import aggregate
from ourmeals.plan.slots import active_slots

configure_logging(log_level=os.getenv("LOG_LEVEL", "INFO"))
logger = get_logger(__name__)

SEED_SKIP_IF_EXISTS = os.getenv("SEED_SKIP_IF_EXISTS", "true").lower() == "true"
SEED_LOCALE = os.getenv("SEED_LOCALE", settings.display_locale)

SAMPLE_RECIPES = [
    {
        "name": "Omelette aux tomates",
        "base_servings": 2,
        "ingredients": "4 oeufs\n2 tomates\n1 c.à.s. huile d'olive\nsel\npoivre",
    },
    {
        "name": "Soupe de légumes",
        "base_servings": 4,
        "ingredients": "3 carottes\n2 pommes de terre\n1 oignons\n1 l eau\n1 pincée sel",
    },
    {
        "name": "Pancakes",
        "base_servings": 4,
        "ingredients": [
            "200 g flour",
            "300 ml milk",
            "2 eggs",
            {"qty": 1, "unit": "tbsp", "name": "sugar"},
            "butter",
        ],
    },
]


def _sync_url(url: str) -> str:
    return url.replace("+aiosqlite", "").replace("+asyncpg", "")


def store_recipes(session: Session) -> list[Recipe]:
    """Store the sample recipes with normalized ingredients."""
    recipes = []
    for sample in SAMPLE_RECIPES:
        parsed = parse_ingredient_list(sample["ingredients"])
        recipe = Recipe(
            id=str(uuid.uuid4()),
            name=sample["name"],
            ingredients=[p.to_record() for p in parsed],
            base_servings=sample["base_servings"],
        )
        session.add(recipe)
        recipes.append(recipe)
        logger.info(f"Seeded recipe {recipe.name} ({len(parsed)} ingredients)")
    return recipes


def plan_week(session: Session, recipes: list[Recipe], start: date) -> None:
    """Alternate the sample recipes over lunch and dinner for seven days."""
    for offset in range(7):
        lunch = recipes[offset % len(recipes)]
        dinner = recipes[(offset + 1) % len(recipes)]
        session.merge(
            MealPlanDay(
                plan_date=start + timedelta(days=offset),
                slots={
                    "breakfast": "",
                    "lunch": lunch.id,
                    "dinner": {"id": dinner.id, "servings": 4},
                },
            )
        )


def seed_database() -> dict:
    """Seed recipes and a meal plan, returning a summary."""
    results: dict = {"status": "pending"}
    engine = create_engine(_sync_url(settings.database_url))
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        existing = session.scalar(select(func.count()).select_from(Recipe))
        if existing and SEED_SKIP_IF_EXISTS:
            logger.info(f"Found {existing} recipes, skipping seed")
            engine.dispose()
            results["status"] = "skipped"
            return results

        recipes = store_recipes(session)
        start = date.today()
        plan_week(session, recipes, start)
        session.commit()

        results["recipes"] = len(recipes)
        results["days_planned"] = 7

        plan = {
            day.plan_date.isoformat(): day.slots
            for day in session.scalars(select(MealPlanDay)).all()
        }
        recipes_by_id = {r.id: r.to_ref() for r in session.scalars(select(Recipe)).all()}
    engine.dispose()

    grocery = aggregate(active_slots(plan, settings.meal_names, start), recipes_by_id)
    for line in format_grocery_list(grocery, SEED_LOCALE):
        logger.info(f"  - {line}")

    results["grocery_lines"] = len(grocery)
    results["status"] = "completed"
    return results


def main():
    """Entry point for the seed script."""
    try:
        results = seed_database()
        logger.info(f"Seeding results: {results}")
        sys.exit(0 if results["status"] in ("completed", "skipped") else 1)
    except KeyboardInterrupt:
        logger.info("Seeding interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Seeding failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
