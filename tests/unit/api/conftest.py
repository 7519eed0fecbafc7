"""Fixtures for API unit tests: fake backend over httpx.MockTransport, in-memory Redis, AsyncClient."""

import json
from datetime import datetime, timezone

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from matter_diff.application.task_supervisor import BackgroundTaskSupervisor
from matter_diff.infrastructure.backend.backend_client import BackendClient
from matter_diff.main import app


class FakeBackend:
    """Backend system of record: matter reads, writes that append activity, activity listing."""

    def __init__(self):
        self.matters: dict[str, dict] = {
            "M1": {"id": "M1", "title": "Old title", "status": "open", "assignee_ids": ["u-1"]},
        }
        self.activity: dict[str, list[dict]] = {"M1": []}
        self.requests: list[httpx.Request] = []
        self.raw_activity_body: bytes | None = None
        self.write_status = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        # /api/matters/{practice}
        if request.method == "GET" and len(parts) == 3:
            matter = self.matters.get(request.url.params.get("matter_uuid"))
            if matter is None:
                return httpx.Response(404, json={"error": "not found"})
            return httpx.Response(200, json={"success": True, "data": matter})
        # /api/matters/{practice}/update/{matter}
        if len(parts) == 5 and parts[3] == "update":
            if self.write_status >= 400:
                return httpx.Response(self.write_status, json={"error": "rejected"})
            matter_id = parts[4]
            self.matters[matter_id] = {**self.matters[matter_id], **json.loads(request.content)}
            self.activity.setdefault(matter_id, []).insert(
                0,
                {
                    "id": f"act-{len(self.activity[matter_id]) + 1}",
                    "matter_id": matter_id,
                    "user_id": request.headers.get("x-user-id"),
                    "action": "matter_updated",
                    "created_at": datetime.now(timezone.utc).isoformat(),
                    "metadata": {},
                },
            )
            return httpx.Response(
                self.write_status,
                json={"success": True, "data": self.matters[matter_id]},
                headers=[("set-cookie", "a=1; Path=/"), ("set-cookie", "b=2; Path=/"), ("x-backend", "yes")],
            )
        # /api/matters/{practice}/matters/{matter}/activity
        if request.method == "GET" and len(parts) == 6 and parts[5] == "activity":
            if self.raw_activity_body is not None:
                return httpx.Response(200, content=self.raw_activity_body, headers={"content-type": "text/plain"})
            items = self.activity.get(parts[4], [])
            return httpx.Response(
                200,
                json={"success": True, "data": {"activity": items, "pagination": {"page": 1, "total": len(items)}}},
            )
        return httpx.Response(404, json={"error": "unknown route"})


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def backend_client(fake_backend):
    return BackendClient(
        httpx.AsyncClient(transport=httpx.MockTransport(fake_backend), base_url="http://backend.test")
    )


@pytest.fixture
def supervisor():
    """Inline so correlation has finished by the time the response arrives."""
    return BackgroundTaskSupervisor(inline=True)


@pytest.fixture
def app_with_overrides(fake_redis, backend_client, supervisor):
    """App with Redis, backend and supervisor overridden for testing."""
    from matter_diff.api import dependencies

    app.dependency_overrides[dependencies.get_redis_client] = lambda: fake_redis
    app.dependency_overrides[dependencies.get_backend_client] = lambda: backend_client
    app.dependency_overrides[dependencies.get_supervisor] = lambda: supervisor
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
