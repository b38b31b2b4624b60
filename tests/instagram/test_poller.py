"""Unit tests for container readiness polling."""

from __future__ import annotations

import pytest

from socials_publisher.instagram.errors import (
    ContainerError,
    GraphAPIError,
    InvalidParameterError,
    MalformedResponseError,
    PollTimeoutError,
)
from socials_publisher.instagram.poller import ReadinessPoller, extract_statuses
from socials_publisher.instagram.resources import IMAGE_RESOURCE, REELS_RESOURCE


class TestExtractStatuses:
    """Tests for extract_statuses."""

    def test_both_fields(self):
        assert extract_statuses({"status_code": "finished", "status": "Ready"}) == ["FINISHED", "READY"]

    def test_missing_and_non_string_fields(self):
        assert extract_statuses({"status": None, "id": "1"}) == []


class TestReadinessPoller:
    """Tests for ReadinessPoller.wait_until_ready."""

    @pytest.mark.asyncio
    async def test_ready_after_in_progress(self, requester, fake_sleep):
        requester.script("status", {"status_code": "IN_PROGRESS"}, {"status_code": "FINISHED"})
        poller = ReadinessPoller(requester, sleep=fake_sleep)

        await poller.wait_until_ready("123", "v22.0", IMAGE_RESOURCE)

        assert len(requester.calls) == 2
        method, url, params = requester.calls[0]
        assert method == "GET"
        assert url == "https://graph.facebook.com/v22.0/123"
        assert params == {"fields": "status_code,status"}
        assert fake_sleep.delays == [1.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["FINISHED", "PUBLISHED", "READY", "finished"])
    async def test_ready_on_first_poll(self, requester, fake_sleep, status):
        requester.script("status", {"status": status})
        await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("1", "v22.0", IMAGE_RESOURCE)
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_error_status_raises(self, requester, fake_sleep):
        requester.script(
            "status",
            {"status_code": "ERROR", "error_message": "Unsupported codec"},
        )
        with pytest.raises(ContainerError) as exc_info:
            await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("123", "v22.0", REELS_RESOURCE)

        error = exc_info.value
        assert error.creation_id == "123"
        assert "Attempt: 1/40" in error.message
        assert "Unsupported codec" in error.message
        assert len(requester.calls) == 1

    @pytest.mark.asyncio
    async def test_error_wins_over_ready_in_same_response(self, requester, fake_sleep):
        requester.script("status", {"status_code": "FINISHED", "status": "FAILED"})
        with pytest.raises(ContainerError) as exc_info:
            await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("9", "v22.0", IMAGE_RESOURCE)
        assert exc_info.value.to_item_error().last_status == "FINISHED, FAILED"

    @pytest.mark.asyncio
    async def test_timeout_issues_exactly_max_attempts(self, requester, fake_sleep):
        """Test an always-pending container is polled max_poll_attempts times, then times out."""
        requester.script("status", {"status_code": "IN_PROGRESS"})
        with pytest.raises(PollTimeoutError) as exc_info:
            await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("123", "v22.0", IMAGE_RESOURCE)

        assert len(requester.calls) == IMAGE_RESOURCE.max_poll_attempts
        assert len(fake_sleep.delays) == IMAGE_RESOURCE.max_poll_attempts - 1
        assert exc_info.value.last_status == "IN_PROGRESS"
        assert exc_info.value.attempts == 30

    @pytest.mark.asyncio
    async def test_timeout_without_status_fields(self, requester, fake_sleep):
        requester.script("status", {"id": "123"})
        with pytest.raises(PollTimeoutError) as exc_info:
            await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("123", "v22.0", IMAGE_RESOURCE)
        assert exc_info.value.last_status is None
        assert "Last known status: unknown" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transient_errors_tolerated(self, requester, fake_sleep):
        requester.script(
            "status",
            GraphAPIError("Service temporarily unavailable", status_code=503),
            GraphAPIError("Service temporarily unavailable", status_code=503),
            {"status_code": "FINISHED"},
        )
        await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("1", "v22.0", REELS_RESOURCE)

        assert len(requester.calls) == 3
        assert fake_sleep.delays == [1.0, 1.0]

    @pytest.mark.asyncio
    async def test_consecutive_errors_abort(self, requester, fake_sleep):
        requester.script("status", GraphAPIError("Service temporarily unavailable", status_code=503))
        with pytest.raises(GraphAPIError, match="3 consecutive errors"):
            await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("1", "v22.0", IMAGE_RESOURCE)
        assert len(requester.calls) == 3

    @pytest.mark.asyncio
    async def test_not_found_is_fatal(self, requester, fake_sleep):
        requester.script("status", GraphAPIError("Object does not exist", status_code=404))
        with pytest.raises(GraphAPIError) as exc_info:
            await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("1", "v22.0", IMAGE_RESOURCE)
        assert exc_info.value.status_code == 404
        assert len(requester.calls) == 1

    @pytest.mark.asyncio
    async def test_malformed_bodies_abort(self, requester, fake_sleep):
        requester.script("status", "not json")
        with pytest.raises(MalformedResponseError) as exc_info:
            await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("7", "v22.0", IMAGE_RESOURCE)
        assert exc_info.value.creation_id == "7"
        assert len(requester.calls) == 3

    @pytest.mark.asyncio
    async def test_invalid_creation_id(self, requester, fake_sleep):
        with pytest.raises(InvalidParameterError, match="creation ID"):
            await ReadinessPoller(requester, sleep=fake_sleep).wait_until_ready("", "v22.0", IMAGE_RESOURCE)
        assert requester.calls == []
