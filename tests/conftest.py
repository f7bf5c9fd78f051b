"""Root conftest - shared fixtures: a fresh SQLite file database per test.

Invariants:
    - Every test gets its own database file under tmp_path
    - Tables are created from Base.metadata before the test and dropped after
    - crud fixtures share one store so tests can mix recipes over the same rows
"""

import os

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

# Ensure settings never point at a real database during tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")

from recordcrud.db.base import Base  # noqa: E402
from recordcrud.infrastructure.database import DatabaseSessionManager  # noqa: E402
from recordcrud.infrastructure.record_store import SqlRecordStore  # noqa: E402
from recordcrud.services.crud_recipe import default_recipe  # noqa: E402
from recordcrud.services.recipe_overrides import alternate_key, owner_scoped  # noqa: E402
from recordcrud.services.record_crud import RecordCrud  # noqa: E402
from tests.sample_records import SampleRecord, SampleRecordSchema  # noqa: E402


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'records.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def store(db):
    return SqlRecordStore(SampleRecord, db)


@pytest.fixture
def crud(store):
    """Plain recipe: no access restriction, lookup by id only."""
    return RecordCrud(default_recipe(store, SampleRecordSchema))


@pytest.fixture
def tenant_crud(crud):
    """Records scoped to identity via the user_id column."""
    return crud.extend(*owner_scoped("user_id"))


@pytest.fixture
def keyed_crud(crud):
    """Tenant-scoped recipe that also finds records by custom_id."""
    return crud.extend(*owner_scoped("user_id"), *alternate_key("custom_id"))


@pytest.fixture
def valid_data():
    return {"name": "tito", "number": 7, "required_field": "req"}
