"""
Pytest configuration and fixtures.

Each test gets its own in-memory SQLite database (aiosqlite, one shared
connection) and an HTTP client whose ``get_db`` dependency points at it.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from decimal import Decimal

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models.product import Product

ADMIN_HEADERS = {"X-User-Id": "1", "X-User-Role": "admin"}
INVENTORY_HEADERS = {"X-User-Id": "2", "X-User-Role": "inventory"}
VIEWER_HEADERS = {"X-User-Id": "3", "X-User-Role": "employee"}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_product(**overrides) -> Product:
    """Unsaved product with sensible defaults, for pure-function tests."""
    fields = {
        "id": 1,
        "sku": "SKU-1",
        "name": "Widget",
        "category": "Hardware",
        "quantity_on_hand": 20,
        "unit_cost": Decimal("2.50"),
        "reorder_level": 10,
        "is_active": True,
    }
    fields.update(overrides)
    return Product(**fields)
