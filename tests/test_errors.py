import pytest
from unittest.mock import AsyncMock, patch
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from app.core.exceptions import DatabaseError, handle_database_error
from app.core.tenant import get_tenant_id_or_none


@pytest.mark.integration
class TestStoreFailures:

    async def test_store_failure_maps_to_500(self, client: AsyncClient) -> None:
        failure = OperationalError("SELECT", {}, Exception("could not connect to server"))

        with patch(
            "app.domain.products.repository.ProductRepository.find_by_tenant_id",
            new=AsyncMock(side_effect=failure),
        ):
            response = await client.get("/api/products", headers={"X-Tenant-ID": "acme"})

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "DATABASE_OPERATION_ERROR"
        assert data["message"] == "Database connection failed"
        assert "could not connect" not in response.text
        assert get_tenant_id_or_none() is None

    async def test_users_store_failure_maps_to_500(self, client: AsyncClient) -> None:
        with patch(
            "app.domain.users.repository.UserRepository.find_by_tenant_id_and_id",
            new=AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("timeout expired"))),
        ):
            response = await client.delete("/api/users/1")

        assert response.status_code == 500
        assert response.json()["message"] == "Database operation timed out"

    async def test_socket_error_maps_to_500(self, client: AsyncClient) -> None:
        with patch(
            "app.domain.products.repository.ProductRepository.find_by_tenant_id",
            new=AsyncMock(side_effect=OSError(113, "No route to host")),
        ):
            response = await client.get("/api/products", headers={"X-Tenant-ID": "acme"})

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "DATABASE_OPERATION_ERROR"
        assert data["details"]["error_type"] == "OSError"
        assert "No route" not in response.text

    def test_handle_database_error(self) -> None:
        error = handle_database_error(Exception("unique constraint failed"), "save product")

        assert isinstance(error, DatabaseError)
        assert error.status_code == 500
        assert error.message == "Database constraint violation"
        assert error.details == {"operation": "save product", "error_type": "Exception"}


@pytest.mark.integration
class TestHealth:

    async def test_health_reports_stores(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["users_db"] is True
        assert data["products_db"] is True
        # Redis is never connected in tests
        assert data["cache"] is False
