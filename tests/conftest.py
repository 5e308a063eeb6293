"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncIterator, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ourmeals.database import Base, get_db
from ourmeals.main import app
from ourmeals.normalize.ingredients import FreeText, Structured
from ourmeals.plan.grocery import RecipeRef

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "api: marks tests that go through the HTTP layer")


# =============================================================================
# Recipe Fixtures
# =============================================================================


@pytest.fixture
def crepes_recipe() -> RecipeRef:
    """Crêpes written for 4 people, mixing free text and structured entries."""
    return RecipeRef(
        id="crepes",
        name="Crêpes",
        base_servings=4,
        ingredients=(
            FreeText("250 g farine"),
            FreeText("4 oeufs"),
            FreeText("0,5 l lait"),
            Structured(name="sucre", qty=2, unit="c.à.s."),
            FreeText("sel"),
        ),
    )


@pytest.fixture
def omelette_recipe() -> RecipeRef:
    """Omelette written for 2 people."""
    return RecipeRef(
        id="omelette",
        name="Omelette",
        base_servings=2,
        ingredients=(
            FreeText("3 œufs"),
            FreeText("2 tomates"),
            FreeText("1 pincée sel"),
            FreeText("poivre"),
        ),
    )


@pytest.fixture
def recipes_by_id(crepes_recipe, omelette_recipe) -> dict[str, RecipeRef]:
    """Recipe catalog keyed by id."""
    return {r.id: r for r in (crepes_recipe, omelette_recipe)}


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def database_url(tmp_path) -> str:
    """Create an empty SQLite database file with all tables."""
    path = tmp_path / "ourmeals-test.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def client(database_url) -> Iterator[TestClient]:
    """Test client whose requests use the temporary database."""
    engine = create_async_engine(database_url, poolclass=NullPool)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
