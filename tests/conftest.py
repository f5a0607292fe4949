import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import sqlite3
import json

from grocerygen.main import app
from grocerygen.db import Base, get_db
from grocerygen.models import MealPlan, MealPlanEntry, Recipe, RecipeIngredient

# --- Test Database Setup ---

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles

@compiles(JSONB, 'sqlite')
def compile_jsonb(element, compiler, **kw):
    return "JSON"

# Register adapters for SQLite to handle list/dict as JSON
sqlite3.register_adapter(list, json.dumps)
sqlite3.register_adapter(dict, json.dumps)

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool # Important for in-memory to share connection across threads/sessions if needed
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client():
    """Test client with DB override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = TestingSessionLocal()
    yield session
    session.close()

@pytest.fixture
def session_factory():
    return TestingSessionLocal

@pytest.fixture
def make_recipe(db_session):
    """Create a recipe from (amount, unit, name) tuples."""
    def _make(name, ingredients=()):
        recipe = Recipe(
            name=name,
            ingredients=[
                RecipeIngredient(position=i, amount=amount, unit=unit, name=ing_name)
                for i, (amount, unit, ing_name) in enumerate(ingredients)
            ],
        )
        db_session.add(recipe)
        db_session.commit()
        return recipe
    return _make

@pytest.fixture
def make_plan(db_session):
    """Create a meal plan; `days` is a list of lists of recipes (None = empty slot)."""
    def _make(name="Week 1", days=(), trainer_id="trainer-1"):
        plan = MealPlan(name=name, trainer_id=trainer_id)
        meal_types = ["breakfast", "lunch", "dinner", "snack"]
        for day_index, recipes in enumerate(days):
            for position, recipe in enumerate(recipes):
                plan.entries.append(MealPlanEntry(
                    day_index=day_index,
                    position=position,
                    meal_type=meal_types[position % len(meal_types)],
                    recipe_id=recipe.id if recipe else None,
                ))
        db_session.add(plan)
        db_session.commit()
        return plan
    return _make

import fakeredis
import fakeredis.aioredis
from grocerygen.infra import redis_client

@pytest.fixture(autouse=True)
def mock_redis(monkeypatch):
    server = fakeredis.FakeServer()
    # Create fake clients sharing the same server
    async_redis = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)
    sync_redis = fakeredis.FakeRedis(server=server, decode_responses=True)

    # Force the clients into the infra module
    redis_client._redis_async = async_redis
    redis_client._redis_sync = sync_redis

    yield sync_redis

    # Cleanup
    redis_client._redis_async = None
    redis_client._redis_sync = None
