import pytest
from typing import AsyncGenerator, Dict, List
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.main import app
from app.core.tenant import clear_tenant_id
from app.infrastructure.database import products_db, users_db
from app.infrastructure.redis import CacheService, get_cache_service


class InMemoryRedis:
    """The subset of the redis.asyncio client used by CacheService"""

    def __init__(self):
        self.store: Dict[str, bytes] = {}
        self.set_calls: List[str] = []
        self.ttls: Dict[str, int] = {}
        self.deleted: List[str] = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("redis unavailable")

    async def get(self, key: str):
        self._check()
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: bytes):
        self._check()
        self.store[key] = value
        self.ttls[key] = ttl
        self.set_calls.append(key)
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            self.deleted.append(key)
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self):
        self._check()
        return True


@pytest.fixture(autouse=True)
def reset_tenant_context():
    clear_tenant_id()
    yield
    clear_tenant_id()


@pytest.fixture(scope="function")
async def databases(tmp_path) -> AsyncGenerator[None, None]:
    """Fresh users and products stores, one SQLite file each."""
    await users_db.connect(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    await products_db.connect(f"sqlite+aiosqlite:///{tmp_path / 'products.db'}")
    try:
        yield
    finally:
        await products_db.disconnect()
        await users_db.disconnect()


@pytest.fixture(scope="function")
async def products_session(databases) -> AsyncGenerator[AsyncSession, None]:
    async with products_db.session() as session:
        yield session


@pytest.fixture(scope="function")
async def users_session(databases) -> AsyncGenerator[AsyncSession, None]:
    async with users_db.session() as session:
        yield session


@pytest.fixture(scope="function")
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture(scope="function")
def cache(fake_redis: InMemoryRedis) -> CacheService:
    return CacheService(fake_redis)


@pytest.fixture(scope="function")
async def client(databases, cache: CacheService) -> AsyncGenerator[AsyncClient, None]:
    """Test client with both stores and the in-memory cache wired in."""
    app.dependency_overrides[get_cache_service] = lambda: cache

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def sample_product_data() -> dict:
    return {
        "name": "Widget",
        "description": "A small widget",
        "price": 9.99,
    }


@pytest.fixture(scope="function")
def sample_user_data() -> dict:
    return {
        "name": "Jane Doe",
        "email": "jane.doe@example.com",
    }


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "tenancy: mark test as tenant isolation related"
    )
