"""
Pytest configuration and fixtures for the Mattermost connector tests.

Provides:
- Settings for a fake Mattermost server
- Post / page envelope factories
- A MockTransport-backed client serving canned channel history
"""

import json
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest

from mattermost_connector.core.config import Settings
from mattermost_connector.services.filters import to_epoch_ms
from mattermost_connector.services.mattermost_client import MattermostClient

BASE_URL = "https://mm.example.com/api/v4"

# 2025-12-18T00:00:00Z
DAY_START_MS = to_epoch_ms(datetime(2025, 12, 18, tzinfo=timezone.utc))


# ============ Settings Fixtures ============


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a fake Mattermost server."""
    return Settings(
        url=BASE_URL,
        token="test-token",
        team_id="team-1",
        history_max_pages=50,
    )


# ============ Sample Data Fixtures ============


def build_post(post_id: str, create_at: int, **overrides) -> Dict:
    post = {
        "id": post_id,
        "user_id": "user-1",
        "channel_id": "C1",
        "message": f"message {post_id}",
        "create_at": create_at,
        "update_at": create_at,
        "reply_count": 0,
        "root_id": "",
    }
    post.update(overrides)
    return post


def build_page(posts: List[Dict], next_post_id: str = "", prev_post_id: str = "") -> Dict:
    return {
        "order": [post["id"] for post in posts],
        "posts": {post["id"]: post for post in posts},
        "next_post_id": next_post_id,
        "prev_post_id": prev_post_id,
    }


@pytest.fixture
def make_post() -> Callable[..., Dict]:
    """Factory for upstream post objects."""
    return build_post


@pytest.fixture
def make_page() -> Callable[..., Dict]:
    """Factory for upstream page envelopes."""
    return build_page


@pytest.fixture
def three_page_history() -> List[Dict]:
    """Channel C1 split over pages of 100, 100 and 40 posts, one minute apart."""
    posts = [build_post(f"p{i:03d}", DAY_START_MS + i * 60_000) for i in range(240)]
    return [
        build_page(posts[0:100], next_post_id="p099"),
        build_page(posts[100:200], next_post_id="p199"),
        build_page(posts[200:240]),
    ]


# ============ Client Fixtures ============


class FakeMattermost:
    """Canned Mattermost server recording every request it receives."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.history: Dict[Optional[str], Dict] = {}
        self.routes: Dict[str, httpx.Response] = {}

    def serve_history(self, pages: List[Dict]) -> None:
        """Serve pages in sequence, keyed by the 'after' cursor that leads to them."""
        cursor = None
        for page in pages:
            self.history[cursor] = page
            cursor = page.get("next_post_id") or None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.routes:
            return self.routes[path]
        if path.endswith("/posts"):
            page = self.history.get(request.url.params.get("after"))
            if page is None:
                return httpx.Response(200, json=build_page([]))
            return httpx.Response(200, json=page)
        return httpx.Response(404, content=json.dumps({"message": "Not found"}))


@pytest.fixture
def fake_mattermost() -> FakeMattermost:
    return FakeMattermost()


@pytest.fixture
async def mattermost_client(settings, fake_mattermost):
    """Real client wired to the fake server."""
    client = MattermostClient(settings, transport=httpx.MockTransport(fake_mattermost.handler))
    yield client
    await client.aclose()


@pytest.fixture
def mock_client() -> AsyncMock:
    """Client double for service and handler tests."""
    client = AsyncMock(spec=MattermostClient)
    client.team_id = "team-1"
    client.history_max_pages = 50
    return client
