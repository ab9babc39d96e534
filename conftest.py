"""Pytest configuration and shared fakes."""

import os

import pytest

# Keep config from picking up a developer .env
os.environ.setdefault("PORTAL_API_URL", "http://portal.test/api")
os.environ.setdefault("HTTP_TIMEOUT_SEC", "2")

from api import ApiError
from page_tracker import PageEnvironment, TrackerProvider


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingDispatcher:
    """Captures what the tracker sends, serialized at send time like the real dispatcher."""

    def __init__(self, fail: bool = False):
        self.sent: list[tuple[dict, bool]] = []
        self.fail = fail

    def send(self, visit, sync: bool = False) -> None:
        if self.fail:
            raise ConnectionError("network down")
        self.sent.append((visit.to_dict(), sync))

    def bodies(self, path: str | None = None) -> list[dict]:
        return [b for b, _ in self.sent if path is None or b["page_path"] == path]


class FakeClient:
    """Stands in for ApiClient: records posts, optionally fails per endpoint."""

    def __init__(self, base_url: str = "http://portal.test/api", token: str | None = None):
        self.base_url = base_url
        self.token = token
        self.posts: list[tuple[str, dict]] = []
        self.visits: list[dict] = []
        self.failures: dict[str, ApiError] = {}

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def post(self, endpoint: str, data=None):
        self.posts.append((endpoint, data))
        err = self.failures.get(endpoint)
        if err is not None:
            raise err
        return {"success": True}

    def track_page_visit(self, visit: dict):
        err = self.failures.get("visit")
        if err is not None:
            raise err
        self.visits.append(visit)
        return {"success": True, "id": len(self.visits)}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def env():
    return PageEnvironment(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
        title="Course portal",
        referrer="https://mail.example.com/",
    )


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def provider(env, dispatcher, clock):
    p = TrackerProvider(env, dispatcher, clock=clock)
    yield p
    p.destroy()


@pytest.fixture
def fake_client():
    return FakeClient()
