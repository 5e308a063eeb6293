"""API routers for the ourmeals application."""

from ourmeals.routers.meal_plans import router as meal_plans_router
from ourmeals.routers.recipes import router as recipes_router

__all__ = [
    "meal_plans_router",
    "recipes_router",
]
