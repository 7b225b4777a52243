import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from post_publisher.application.services import PassResult
from post_publisher.config import settings
from post_publisher.main import app
from post_publisher.presentation.dependencies import get_orchestrator

SECRET = "service-role-secret"


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    mock.run = AsyncMock(return_value=PassResult(processed=2))
    return mock


@pytest.fixture
def client(orchestrator, monkeypatch):
    monkeypatch.setattr(settings, "service_role_key", SECRET)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token=SECRET):
    return {"Authorization": f"Bearer {token}"}


class TestPublishTrigger:
    def test_missing_header(self, client, orchestrator):
        response = client.post("/publish-scheduled-posts")

        assert response.status_code == 401
        assert response.text == "Unauthorized"
        orchestrator.run.assert_not_awaited()

    def test_wrong_secret(self, client, orchestrator):
        response = client.post("/publish-scheduled-posts", headers=auth("nope"))

        assert response.status_code == 401
        assert response.text == "Unauthorized"
        orchestrator.run.assert_not_awaited()

    @pytest.mark.parametrize(
        "header",
        [
            f"bearer {SECRET}",
            f"BEARER {SECRET}",
            f"Bearer  {SECRET}",
            f"Bearer {SECRET} ",
            SECRET,
            f"Basic {SECRET}",
        ],
    )
    def test_only_exact_bearer_header_accepted(self, client, orchestrator, header):
        response = client.post("/publish-scheduled-posts", headers={"Authorization": header})

        assert response.status_code == 401
        assert response.text == "Unauthorized"
        orchestrator.run.assert_not_awaited()

    def test_unset_secret_rejects_everything(self, client, orchestrator, monkeypatch):
        monkeypatch.setattr(settings, "service_role_key", "")

        response = client.post("/publish-scheduled-posts", headers=auth(""))

        assert response.status_code == 401

    def test_processed_posts(self, client):
        response = client.post("/publish-scheduled-posts", headers=auth())

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "processed": 2}

    def test_root_path_triggers_too(self, client, orchestrator):
        response = client.post("/", headers=auth())

        assert response.status_code == 200
        orchestrator.run.assert_awaited_once()

    def test_no_due_posts(self, client, orchestrator):
        orchestrator.run.return_value = PassResult(processed=0)

        response = client.post("/publish-scheduled-posts", headers=auth())

        assert response.status_code == 200
        assert response.json() == {"message": "No hi ha publicacions per a enviar."}

    def test_query_failure(self, client, orchestrator):
        orchestrator.run.side_effect = RuntimeError("relation social_posts does not exist")

        response = client.post("/publish-scheduled-posts", headers=auth())

        assert response.status_code == 500
        assert response.json() == {"error": "relation social_posts does not exist"}

    def test_request_id_echoed(self, client):
        response = client.post("/publish-scheduled-posts", headers={**auth(), "X-Request-ID": "req-1"})

        assert response.headers["X-Request-ID"] == "req-1"

    def test_request_id_generated(self, client):
        response = client.post("/publish-scheduled-posts", headers=auth())

        assert len(response.headers["X-Request-ID"]) == 36
