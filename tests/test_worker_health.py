import importlib

import httpx
import pytest
from kombu.exceptions import OperationalError

from app.worker_health import start_health_server

celery_module = importlib.import_module("app.tasks.celery_app")


@pytest.fixture
def serve():
    servers = []

    def start(check):
        server = start_health_server(check, port=0, host="127.0.0.1")
        servers.append(server)
        return f"http://127.0.0.1:{server.server_address[1]}"

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


def test_health_reports_healthy_when_broker_reachable(serve):
    base_url = serve(lambda: True)

    response = httpx.get(f"{base_url}/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "alert-worker", "broker": True}
    assert httpx.get(f"{base_url}/").status_code == 200


def test_health_reports_degraded_without_broker(serve):
    base_url = serve(lambda: False)

    response = httpx.get(f"{base_url}/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["broker"] is False


def test_health_unknown_path(serve):
    calls = []
    base_url = serve(lambda: calls.append(1) or True)

    assert httpx.get(f"{base_url}/metrics").status_code == 404
    assert calls == []


def test_broker_reachable_reports_connection_failure(monkeypatch):
    class UnreachableConnection:
        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            return False

        def ensure_connection(self, **kwargs):
            raise OperationalError("connection refused")

    monkeypatch.setattr(celery_module.celery_app, "connection_for_write", UnreachableConnection)

    assert celery_module.broker_reachable(timeout=0.1) is False
