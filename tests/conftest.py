"""Shared test fixtures and configuration.

Provides a scripted Graph API requester and a recording sleep so the publish
pipeline can be driven end to end without network access or real waiting.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from socials_publisher.instagram.errors import GraphAPIError


class ScriptedRequester:
    """Stands in for GraphClient, replaying canned responses per endpoint.

    Routes:
        create:  POST .../{node}/media
        status:  GET  .../{creation_id}
        publish: POST .../{node}/media_publish

    Each route replays its responses in order. The last response repeats
    once the script runs out. Exceptions in a script are raised instead of
    returned.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self._scripts: dict[str, list[Any]] = {"create": [], "status": [], "publish": []}

    def script(self, route: str, *responses: Any) -> "ScriptedRequester":
        self._scripts[route].extend(responses)
        return self

    @staticmethod
    def route_for(method: str, url: str) -> str:
        if method == "GET":
            return "status"
        if url.endswith("/media_publish"):
            return "publish"
        return "create"

    def calls_to(self, route: str) -> list[tuple[str, str, dict[str, Any]]]:
        return [call for call in self.calls if self.route_for(call[0], call[1]) == route]

    async def request(self, method: str, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        self.calls.append((method, url, dict(params or {})))
        route = self.route_for(method, url)
        script = self._scripts[route]
        if not script:
            raise AssertionError(f"Unexpected {route} request: {method} {url}")
        response = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(response, BaseException):
            raise response
        return response


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def not_ready_error(**error_fields: Any) -> GraphAPIError:
    """Publish rejection the platform sends while a container is still processing."""
    error = {
        "message": "The media is not ready for publishing, please wait for a moment",
        "code": 9007,
        "error_subcode": 2207027,
    }
    error.update(error_fields)
    return GraphAPIError(error["message"], status_code=400, error=error)


@pytest.fixture
def make_not_ready():
    """Factory for "media not ready" publish rejections."""
    return not_ready_error


@pytest.fixture
def requester() -> ScriptedRequester:
    """Create an empty scripted requester."""
    return ScriptedRequester()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    """Create a sleep that returns immediately and records delays."""
    return RecordingSleep()


@pytest.fixture
def image_item() -> dict[str, Any]:
    """Minimal valid image item."""
    return {
        "resource": "image",
        "operation": "publish",
        "node": "17841400000000000",
        "graph_api_version": "v22.0",
        "caption": "Hello",
        "image_url": "https://cdn.example.com/photo.jpg",
    }


@pytest.fixture
def reel_item() -> dict[str, Any]:
    """Minimal valid reels item."""
    return {
        "resource": "reels",
        "node": "17841400000000000",
        "graphApiVersion": "v22.0",
        "caption": "Watch this",
        "videoUrl": "https://cdn.example.com/clip.mp4",
    }
