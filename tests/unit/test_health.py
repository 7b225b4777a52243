import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from post_publisher.config import settings
from post_publisher.domain.ports import ChannelType
from post_publisher.infrastructure.adapters import ChannelGatewayRegistry
from post_publisher.main import app
from post_publisher.presentation.dependencies import get_database, get_gateway_registry

from conftest import FakeGateway


@pytest.fixture
def db_session():
    session = MagicMock()
    session.execute = AsyncMock()
    return session


@pytest.fixture
def client(db_session, monkeypatch):
    monkeypatch.setattr(settings, "service_role_key", "secret")
    database = MagicMock()
    database.session.return_value.__aenter__.return_value = db_session
    registry = ChannelGatewayRegistry([FakeGateway(ChannelType.LINKEDIN), FakeGateway(ChannelType.FACEBOOK)])
    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_gateway_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestReadiness:
    def test_ready(self, client, db_session):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["providers"]["registered"] == ["facebook", "linkedin"]
        db_session.execute.assert_awaited_once()

    def test_database_down(self, client, db_session):
        db_session.execute.side_effect = RuntimeError("could not connect to server")

        response = client.get("/health/ready")

        assert response.status_code == 503
        checks = response.json()["checks"]
        assert checks["database"]["status"] == "unhealthy"
        assert "could not connect" in checks["database"]["error"]

    def test_missing_service_role_key(self, client, monkeypatch):
        monkeypatch.setattr(settings, "service_role_key", "")

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["trigger_auth"]["status"] == "unconfigured"

    def test_no_providers(self, client):
        app.dependency_overrides[get_gateway_registry] = lambda: ChannelGatewayRegistry()

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["providers"]["registered"] == []


def test_liveness(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
