"""Integration tests for the application shell: health, errors, middleware."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import DataError, IntegrityError

from src.order_manager.api.http.app import create_app
from src.order_manager.core.exceptions import ConflictError, InternalServerError
from src.order_manager.core.services import OrderService
from tests.fixtures.core import make_test_config


class TestHealth:
    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Server is running"
        assert "timestamp" in body

    def test_readiness(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["environment"] == "test"
        assert body["checks"]["database"]["status"] == "healthy"
        assert body["checks"]["database"]["type"] == "sqlite"

    def test_readiness_when_database_is_down(self, client, database_service, monkeypatch):
        monkeypatch.setattr(database_service, "health_check", lambda: False)

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"
        assert response.json()["checks"]["database"]["status"] == "unhealthy"


class TestErrorMapping:
    def test_unknown_route(self, client):
        response = client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Route GET /api/unknown not found",
        }

    def test_method_not_allowed(self, client):
        response = client.patch("/api/orders/1", json={})

        assert response.status_code == 405
        assert response.json()["success"] is False

    def test_malformed_json(self, client):
        response = client.post(
            "/api/orders",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"

    def test_domain_error_uses_its_status(self, client, monkeypatch):
        def conflict(self):
            raise ConflictError()

        monkeypatch.setattr(OrderService, "list_orders", conflict)

        response = client.get("/api/orders")

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Resource already exists"}

    @pytest.mark.parametrize(
        ("orig", "status_code", "message"),
        [
            (
                Exception("UNIQUE constraint failed: products.id"),
                ConflictError.status_code,
                ConflictError.default_message,
            ),
            (
                Exception("FOREIGN KEY constraint failed"),
                400,
                "Referenced resource does not exist",
            ),
        ],
    )
    def test_integrity_errors(self, client, monkeypatch, orig, status_code, message):
        def violate(self):
            raise IntegrityError("INSERT ...", {}, orig)

        monkeypatch.setattr(OrderService, "list_orders", violate)

        response = client.get("/api/orders")

        assert response.status_code == status_code
        assert response.json()["message"] == message

    def test_data_error(self, client, monkeypatch):
        def bad_data(self):
            raise DataError("SELECT ...", {}, Exception("invalid input syntax"))

        monkeypatch.setattr(OrderService, "list_orders", bad_data)

        response = client.get("/api/orders")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid input format"

    def test_unexpected_error_message_shown_outside_production(self, client, monkeypatch):
        def boom(self):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(OrderService, "list_orders", boom)

        response = client.get("/api/orders")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "disk on fire"}
        assert "X-Request-ID" in response.headers

    def test_unexpected_error_without_text_uses_default_message(self, client, monkeypatch):
        def boom(self):
            raise RuntimeError()

        monkeypatch.setattr(OrderService, "list_orders", boom)

        response = client.get("/api/orders")

        assert response.status_code == InternalServerError.status_code
        assert response.json() == {
            "success": False,
            "message": InternalServerError.default_message,
        }


class TestProduction:
    @pytest.fixture
    def production_client(self, database_service):
        config = make_test_config(environment="production")
        app = create_app(config=config, database_service=database_service)
        with TestClient(app) as test_client:
            yield test_client

    def test_unexpected_error_is_redacted(self, production_client, monkeypatch):
        def boom(self):
            raise RuntimeError("connection string with secrets")

        monkeypatch.setattr(OrderService, "list_orders", boom)

        response = production_client.get("/api/orders")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}

    def test_hsts_and_no_docs(self, production_client):
        response = production_client.get("/health")

        assert "Strict-Transport-Security" in response.headers
        assert production_client.get("/docs").status_code == 404
        assert production_client.get("/openapi.json").status_code == 404

    def test_wildcard_origin_with_credentials_is_refused(self, database_service):
        config = make_test_config(environment="production")
        config.app.cors.allow_credentials = True

        with pytest.raises(RuntimeError, match="CORS misconfigured"):
            create_app(config=config, database_service=database_service)


class TestMiddleware:
    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "Strict-Transport-Security" not in response.headers

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        assert client.get("/health").headers["X-Request-ID"]

    def test_cors_preflight(self, client):
        response = client.options(
            "/api/orders",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "PUT",
            },
        )

        assert response.status_code == 200
        assert "PUT" in response.headers["access-control-allow-methods"]

    def test_docs_available_outside_production(self, client):
        assert client.get("/openapi.json").status_code == 200
