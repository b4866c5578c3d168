import os

# keep the application away from the on-disk sqlite database during tests
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from billing.db.base import get_store, init_models
from billing.db.repositories.documents import SqlDocumentStore
from billing.db.store import InMemoryDocumentStore
from billing.main import app

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
async def sql_store():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(bind=engine)
    yield SqlDocumentStore(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-Owner-Id": OWNER}


@pytest.fixture
def other_headers():
    return {"X-Owner-Id": OTHER_OWNER}


def line(name, quantity, unit_price, tax_rate_percent, **extra):
    return {
        "name": name,
        "quantity": quantity,
        "unit_price": unit_price,
        "tax_rate_percent": tax_rate_percent,
        **extra,
    }


@pytest.fixture
def gas_lines():
    return [
        line("Cylinder", 2, 900, 5),
        line("Regulator", 1, 300, 18),
        line("Pipe", 4, 50, 12),
    ]
