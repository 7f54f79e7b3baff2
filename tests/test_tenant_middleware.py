import asyncio
import pytest
from unittest.mock import patch
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.core import tenant
from app.core.config import settings
from app.core.tenant import get_tenant_id, get_tenant_id_or_none
from app.middleware.tenant_middleware import TenantMiddleware
from app.middleware.timeout_middleware import RequestTimeoutMiddleware


def build_app() -> FastAPI:
    test_app = FastAPI()
    test_app.add_middleware(RequestTimeoutMiddleware)
    test_app.add_middleware(TenantMiddleware)

    @test_app.get("/whoami")
    async def whoami():
        return {"tenant": get_tenant_id()}

    @test_app.get("/boom")
    async def boom():
        raise RuntimeError("handler failed")

    @test_app.get("/slow")
    async def slow():
        await asyncio.sleep(1)
        return {"tenant": get_tenant_id()}

    return test_app


@pytest.fixture
async def middleware_client():
    transport = ASGITransport(app=build_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def clear_spy():
    with patch(
        "app.middleware.tenant_middleware.clear_tenant_id",
        side_effect=tenant.clear_tenant_id,
    ) as spy:
        yield spy


@pytest.mark.unit
@pytest.mark.tenancy
class TestTenantMiddleware:

    async def test_header_sets_tenant(self, middleware_client: AsyncClient) -> None:
        response = await middleware_client.get("/whoami", headers={"X-Tenant-ID": "acme"})

        assert response.status_code == 200
        assert response.json() == {"tenant": "acme"}
        assert response.headers["X-Tenant-ID"] == "acme"

    async def test_missing_header_defaults(self, middleware_client: AsyncClient) -> None:
        response = await middleware_client.get("/whoami")

        assert response.status_code == 200
        assert response.json() == {"tenant": "default"}

    async def test_blank_header_defaults(self, middleware_client: AsyncClient) -> None:
        response = await middleware_client.get("/whoami", headers={"X-Tenant-ID": "  "})

        assert response.json() == {"tenant": "default"}

    async def test_context_cleared_once_after_success(self, middleware_client: AsyncClient, clear_spy) -> None:
        await middleware_client.get("/whoami", headers={"X-Tenant-ID": "acme"})

        assert clear_spy.call_count == 1
        assert get_tenant_id_or_none() is None

    async def test_context_cleared_once_after_handler_error(self, middleware_client: AsyncClient, clear_spy) -> None:
        response = await middleware_client.get("/boom", headers={"X-Tenant-ID": "acme"})

        assert response.status_code == 500
        assert clear_spy.call_count == 1
        assert get_tenant_id_or_none() is None

    async def test_timeout_returns_504_and_clears(self, middleware_client: AsyncClient, clear_spy, monkeypatch) -> None:
        monkeypatch.setattr(settings, "REQUEST_TIMEOUT_SECONDS", 0.05)

        response = await middleware_client.get("/slow", headers={"X-Tenant-ID": "acme"})

        assert response.status_code == 504
        assert response.json()["error_code"] == "REQUEST_TIMEOUT"
        assert clear_spy.call_count == 1

    async def test_required_header_rejects_missing(self, middleware_client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(settings, "REQUIRE_TENANT_HEADER", True)

        response = await middleware_client.get("/whoami")

        assert response.status_code == 400
        assert response.json()["error_code"] == "TENANT_HEADER_MISSING"

        response = await middleware_client.get("/whoami", headers={"X-Tenant-ID": "acme"})
        assert response.json() == {"tenant": "acme"}

    async def test_concurrent_requests_keep_their_tenant(self, middleware_client: AsyncClient) -> None:
        tenants = [f"tenant-{i}" for i in range(20)]

        responses = await asyncio.gather(*(
            middleware_client.get("/whoami", headers={"X-Tenant-ID": t}) for t in tenants
        ))

        assert [r.json()["tenant"] for r in responses] == tenants
