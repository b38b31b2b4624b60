"""Unit tests for GraphClient using httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from socials_publisher.instagram.client import GraphClient, raise_for_error_body
from socials_publisher.instagram.errors import GraphAPIError
from socials_publisher.instagram.pipeline import PublishPipeline


def make_client(handler) -> GraphClient:
    return GraphClient("test-token", timeout=5.0, transport=httpx.MockTransport(handler))


class TestGraphClient:
    """Tests for GraphClient.request."""

    @pytest.mark.asyncio
    async def test_attaches_access_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"id": "123"})

        async with make_client(handler) as client:
            body = await client.request("post", "https://graph.facebook.com/v22.0/1/media", {"caption": "hi"})

        assert body == {"id": "123"}
        assert seen["method"] == "POST"
        assert seen["params"] == {"caption": "hi", "access_token": "test-token"}
        assert client.api_call_count == 1

    @pytest.mark.asyncio
    async def test_error_response_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"error": {"message": "Invalid parameter", "code": 100, "fbtrace_id": "xyz"}},
                headers={"x-fb-debug": "dbg"},
            )

        async with make_client(handler) as client:
            with pytest.raises(GraphAPIError) as exc_info:
                await client.request("POST", "https://graph.facebook.com/v22.0/1/media")

        error = exc_info.value
        assert error.message == "Invalid parameter"
        assert error.status_code == 400
        assert error.error_code == 100
        assert error.info["name"] == "INVALID_PARAMETER"
        assert error.headers["x-fb-debug"] == "dbg"

    @pytest.mark.asyncio
    async def test_error_body_with_200_is_returned(self):
        """Callers decide what a 2xx error envelope means."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": {"message": "Media not ready", "code": 9007}})

        body = await make_client(handler).request("POST", "https://graph.facebook.com/v22.0/1/media")
        assert body == {"error": {"message": "Media not ready", "code": 9007}}

    @pytest.mark.asyncio
    async def test_error_body_with_id_is_returned(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": "1", "error": {"message": "warning"}})

        body = await make_client(handler).request("POST", "https://graph.facebook.com/v22.0/1/media")
        assert body["id"] == "1"

    @pytest.mark.asyncio
    async def test_non_json_body_returned_as_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="OK")

        body = await make_client(handler).request("GET", "https://graph.facebook.com/v22.0/1")
        assert body == "OK"

    @pytest.mark.asyncio
    async def test_http_error_without_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad gateway")

        with pytest.raises(GraphAPIError, match="HTTP 502"):
            await make_client(handler).request("GET", "https://graph.facebook.com/v22.0/1")

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GraphAPIError) as exc_info:
            await make_client(handler).request("GET", "https://graph.facebook.com/v22.0/1")
        assert exc_info.value.status_code is None
        assert exc_info.value.to_item_error().to_json()["kind"] == "TransportOrApiError"

    @pytest.mark.asyncio
    async def test_unsupported_method(self):
        with pytest.raises(ValueError, match="Unsupported HTTP method"):
            await make_client(lambda request: httpx.Response(200)).request("DELETE", "https://x")


class TestRaiseForErrorBody:
    """Tests for raise_for_error_body."""

    def test_error_envelope_raises(self):
        with pytest.raises(GraphAPIError) as exc_info:
            raise_for_error_body({"error": {"message": "Media not ready", "code": 9007}})
        assert exc_info.value.status_code == 200
        assert exc_info.value.is_media_not_ready()

    @pytest.mark.parametrize("body", [
        {"id": "1"},
        {"id": "1", "error": {"message": "warning"}},
        {"status_code": "IN_PROGRESS"},
        {"error": "plain string"},
        "OK",
    ])
    def test_other_bodies_pass(self, body):
        raise_for_error_body(body)


def graph_handler(create, status, publish, seen: list[str]):
    """Route MockTransport requests the way the Graph API endpoints are laid out."""
    responses = {"create": list(create), "status": list(status), "publish": list(publish)}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            route = "status"
        elif request.url.path.endswith("/media_publish"):
            route = "publish"
        else:
            route = "create"
        seen.append(route)
        script = responses[route]
        status_code, body = script.pop(0) if len(script) > 1 else script[0]
        return httpx.Response(status_code, json=body)

    return handler


class TestPipelineOverHttp:
    """End-to-end pipeline runs through GraphClient and MockTransport."""

    @pytest.mark.asyncio
    async def test_create_error_envelope_is_missing_creation_id(self, image_item, fake_sleep):
        seen: list[str] = []
        handler = graph_handler(
            create=[(200, {"error": {"message": "Only photo or video can be accepted", "code": 9004}})],
            status=[(200, {"status_code": "FINISHED"})],
            publish=[(200, {"id": "m1"})],
            seen=seen,
        )

        async with make_client(handler) as client:
            pipeline = PublishPipeline(client, continue_on_fail=True, sleep=fake_sleep)
            results = await pipeline.run([image_item])

        data = results[0].json
        assert data["kind"] == "MissingCreationId"
        assert data["error"] == "No creation_id in response"
        assert data["api_error"] == "Only photo or video can be accepted"
        assert data["api_error_code"] == 9004
        assert data["response"] == {"error": {"message": "Only photo or video can be accepted", "code": 9004}}
        assert seen == ["create"]

    @pytest.mark.asyncio
    async def test_publish_error_envelope_is_retried_when_not_ready(self, image_item, fake_sleep):
        seen: list[str] = []
        handler = graph_handler(
            create=[(200, {"id": "c1"})],
            status=[(200, {"status_code": "FINISHED"})],
            publish=[
                (200, {"error": {"message": "Media ID is not available", "code": 9007, "error_subcode": 2207055}}),
                (200, {"id": "m1"}),
            ],
            seen=seen,
        )

        async with make_client(handler) as client:
            results = await PublishPipeline(client, sleep=fake_sleep).run([image_item])

        assert results[0].json == {"id": "m1"}
        assert seen == ["create", "status", "publish", "publish"]
        assert fake_sleep.delays == [1.5]

    @pytest.mark.asyncio
    async def test_publish_error_envelope_fails_after_creation(self, image_item, fake_sleep):
        handler = graph_handler(
            create=[(200, {"id": "c1"})],
            status=[(200, {"status_code": "FINISHED"})],
            publish=[(200, {"error": {"message": "Application request limit reached", "code": 4}})],
            seen=[],
        )

        async with make_client(handler) as client:
            pipeline = PublishPipeline(client, continue_on_fail=True, sleep=fake_sleep)
            results = await pipeline.run([image_item])

        data = results[0].json
        assert data["kind"] == "PublishFailedAfterCreation"
        assert data["creation_id"] == "c1"
        assert data["code"] == 4

    @pytest.mark.asyncio
    async def test_status_error_envelope_for_missing_container_is_fatal(self, image_item, fake_sleep):
        seen: list[str] = []
        handler = graph_handler(
            create=[(200, {"id": "c1"})],
            status=[(200, {"error": {"message": "Object with ID 'c1' does not exist", "code": 100}})],
            publish=[(200, {"id": "m1"})],
            seen=seen,
        )

        async with make_client(handler) as client:
            with pytest.raises(GraphAPIError, match="does not exist"):
                await PublishPipeline(client, sleep=fake_sleep).run([image_item])

        assert seen == ["create", "status"]
