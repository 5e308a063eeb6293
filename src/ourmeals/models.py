"""SQLAlchemy database models."""

from datetime import date, datetime, timezone

from sqlalchemy import JSON, Date, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ourmeals.database import Base
from ourmeals.normalize.ingredients import ingredient_entry
from ourmeals.plan.grocery import RecipeRef, clamp_base_servings


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Recipe(Base):
    """Household recipe with its structured ingredients."""

    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Legacy rows may hold plain strings next to {"qty", "unit", "name", "raw"} records
    ingredients: Mapped[list] = mapped_column(JSON, default=list)
    base_servings: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (Index("idx_recipes_created_at", "created_at"),)

    def to_ref(self) -> RecipeRef:
        """Snapshot this recipe for grocery aggregation."""
        entries = []
        for value in self.ingredients or []:
            entry = ingredient_entry(value)
            if entry is not None:
                entries.append(entry)

        return RecipeRef(
            id=self.id,
            name=self.name,
            base_servings=clamp_base_servings(self.base_servings),
            ingredients=tuple(entries),
        )


class MealPlanDay(Base):
    """Meals planned for one day, keyed by meal name."""

    __tablename__ = "meal_plan_days"

    plan_date: Mapped[date] = mapped_column(Date, primary_key=True)
    # meal name -> "" | recipe id | {"id": recipe id, "servings": int | None}
    slots: Mapped[dict] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)
