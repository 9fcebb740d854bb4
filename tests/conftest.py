# tests/conftest.py
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from services.backend_client import BackendClientAsync, get_backend_client

ICT = timezone(timedelta(hours=7))
NOW = datetime(2025, 10, 17, 10, 0, tzinfo=ICT)

TOKEN = "tok-123"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


class FakeBackend:
    """
    Service A giả: routes[(method, path)] = (status, json) | Exception.
    Ghi lại mọi request đã nhận.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"detail": "not found"})
        spec = self.routes[key]
        if isinstance(spec, Exception):
            raise spec
        status, body = spec
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def client(self) -> BackendClientAsync:
        return BackendClientAsync("http://service-a.test", transport=httpx.MockTransport(self.handler))

    def paths(self):
        return [(r.method, r.url.path) for r in self.requests]


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def app_client(backend):
    from main import app
    from routers.dashboard import get_clock

    app.dependency_overrides[get_backend_client] = backend.client
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
