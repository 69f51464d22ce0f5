import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from devhub.api.deps import get_deployment_service
from devhub.main import app
from devhub.models.deployment import AppStatus, Deployment, DeploymentError
from devhub.services.deployment_service import DeploymentService
from devhub.services.error_handler import QueryError


def test_ready_event_upserts_single_status_row(client: TestClient, session: Session):
    event = {"type": "deployment.ready", "payload": {"id": "d1"}}

    first = client.post("/api/webhooks", json=event)
    second = client.post("/api/webhooks", json=event)

    assert first.json() == {"received": True}
    assert second.json() == {"received": True}
    rows = session.exec(select(AppStatus)).all()
    assert len(rows) == 1
    assert rows[0].status == "ready"
    assert rows[0].last_deployment == "d1"


def test_ready_event_overwrites_last_deployment(client: TestClient, session: Session):
    client.post("/api/webhooks", json={"type": "deployment.ready", "payload": {"id": "d1"}})
    client.post("/api/webhooks", json={"type": "deployment.ready", "payload": {"id": "d2"}})

    rows = session.exec(select(AppStatus)).all()
    assert [row.last_deployment for row in rows] == ["d2"]


def test_succeeded_event_appends_every_delivery(client: TestClient, session: Session):
    """Redelivery is not deduplicated."""
    event = {"type": "deployment.succeeded", "payload": {"id": "d1", "url": "u"}}

    client.post("/api/webhooks", json=event)
    client.post("/api/webhooks", json=event)

    rows = session.exec(select(Deployment)).all()
    assert len(rows) == 2
    assert all(row.status == "success" and row.url == "u" and row.deployment_id == "d1" for row in rows)


def test_error_event_appends_error_row(client: TestClient, session: Session):
    response = client.post(
        "/api/webhooks",
        json={"type": "deployment.error", "payload": {"id": "d9", "error": "Build exited with 1"}},
    )

    assert response.status_code == 200
    rows = session.exec(select(DeploymentError)).all()
    assert len(rows) == 1
    assert rows[0].error == "Build exited with 1"
    assert rows[0].deployment_id == "d9"


def test_unknown_event_is_acknowledged_without_writes(client: TestClient, session: Session):
    response = client.post("/api/webhooks", json={"type": "deployment.created", "payload": {"id": "d1"}})

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert session.exec(select(Deployment)).all() == []
    assert session.exec(select(DeploymentError)).all() == []
    assert session.exec(select(AppStatus)).all() == []


def test_unparsable_body_returns_500(client: TestClient):
    response = client.post(
        "/api/webhooks", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@pytest.mark.parametrize("body", [
    {"payload": {"id": "d1"}},
    {"type": "other", "payload": None},
    {"type": 7, "payload": {}},
    {"type": "other", "payload": "x"},
    {},
])
def test_unexpected_shapes_are_acknowledged(client: TestClient, session: Session, body):
    response = client.post("/api/webhooks", json=body)

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert session.exec(select(Deployment)).all() == []
    assert session.exec(select(AppStatus)).all() == []


def test_recognized_type_without_payload_returns_500(client: TestClient, session: Session):
    response = client.post("/api/webhooks", json={"type": "deployment.succeeded", "payload": None})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert session.exec(select(Deployment)).all() == []


def test_write_failure_returns_500(client: TestClient):
    service = MagicMock(spec=DeploymentService)
    service.handle_event = AsyncMock(side_effect=QueryError("database is locked"))
    app.dependency_overrides[get_deployment_service] = lambda: service

    response = client.post("/api/webhooks", json={"type": "deployment.ready", "payload": {"id": "d1"}})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
