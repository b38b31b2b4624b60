"""Container readiness polling (between creation and publish)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from socials_publisher.constants import (
    GRAPH_API_HOST,
    POLL_ERROR_INTERVAL_MS,
    POLL_MAX_CONSECUTIVE_ERRORS,
    STATUS_FIELDS,
    ContainerStatus,
    classify_status,
)

from .client import GraphRequester, raise_for_error_body
from .errors import (
    ContainerError,
    GraphAPIError,
    InvalidParameterError,
    MalformedResponseError,
    PollTimeoutError,
)
from .resources import ResourceDescriptor

_logger = logging.getLogger("publish_pipeline")

Sleeper = Callable[[float], Awaitable[Any]]

_FATAL_POLL_PHRASES = ("invalid", "not found", "does not exist")


def _is_fatal_poll_error(error: GraphAPIError) -> bool:
    """A container that can't be found will never become ready."""
    if error.status_code == 404:
        return True
    message = error.message.lower()
    return any(phrase in message for phrase in _FATAL_POLL_PHRASES)


def extract_statuses(response: dict[str, Any]) -> list[str]:
    """Upper-cased values of every present status-bearing field."""
    return [
        response[name].upper()
        for name in STATUS_FIELDS
        if isinstance(response.get(name), str)
    ]


class ReadinessPoller:
    """Polls a container until it is ready, failed, or the budget runs out.

    Each wait is an ``asyncio.sleep`` so cancelling the surrounding task
    stops polling immediately.
    """

    def __init__(
        self,
        requester: GraphRequester,
        host: str = GRAPH_API_HOST,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.requester = requester
        self.host = host.rstrip("/")
        self._sleep = sleep

    async def check_status(self, creation_id: str, graph_api_version: str) -> Any:
        """Fetch ``status_code`` and ``status`` for a container."""
        url = f"{self.host}/{graph_api_version}/{creation_id}"
        body = await self.requester.request("GET", url, params={"fields": ",".join(STATUS_FIELDS)})
        raise_for_error_body(body)
        return body

    async def wait_until_ready(
        self,
        creation_id: str,
        graph_api_version: str,
        descriptor: ResourceDescriptor,
    ) -> None:
        """Block (asynchronously) until the container is ready.

        Issues at most ``descriptor.max_poll_attempts`` status requests.
        Within one response an ERROR token wins over a READY token.

        Raises:
            ContainerError: The container reported ERROR/FAILED.
            PollTimeoutError: No verdict within the poll budget.
            GraphAPIError: The container can't be found, or status requests
                kept failing.
            MalformedResponseError: Status responses kept coming back malformed.
        """
        if not creation_id or not isinstance(creation_id, str):
            raise InvalidParameterError(
                f"Invalid creation ID provided: {creation_id!r}. Creation ID must be a non-empty string."
            )
        if not graph_api_version or not isinstance(graph_api_version, str):
            raise InvalidParameterError(
                f"Invalid Graph API version provided: {graph_api_version!r}. "
                "Graph API version must be a non-empty string."
            )

        max_attempts = descriptor.max_poll_attempts
        interval = descriptor.poll_interval_seconds
        error_interval = min(descriptor.poll_interval_ms, POLL_ERROR_INTERVAL_MS) / 1000

        last_status: Optional[str] = None
        last_error: Optional[GraphAPIError] = None
        consecutive_errors = 0

        for attempt in range(1, max_attempts + 1):
            is_last = attempt == max_attempts

            try:
                response = await self.check_status(creation_id, graph_api_version)
            except GraphAPIError as e:
                last_error = e
                consecutive_errors += 1
                _logger.warning(
                    f"Status poll {attempt}/{max_attempts} for {creation_id} failed: {e.message}"
                )
                if _is_fatal_poll_error(e) or consecutive_errors >= POLL_MAX_CONSECUTIVE_ERRORS:
                    raise GraphAPIError(
                        f"Failed to poll container status after {attempt} attempts "
                        f"({consecutive_errors} consecutive errors). Last error: {e.message}. "
                        f"Container ID: {creation_id}, Last known status: {last_status or 'unknown'}.",
                        status_code=e.status_code,
                        error=e.error,
                        headers=e.headers,
                    ) from e
                if not is_last:
                    await self._sleep(error_interval)
                continue

            if not isinstance(response, dict):
                consecutive_errors += 1
                if consecutive_errors >= POLL_MAX_CONSECUTIVE_ERRORS:
                    raise MalformedResponseError(
                        "Invalid response format received while polling container status "
                        f"({consecutive_errors} consecutive errors). Expected object, "
                        f"got: {type(response).__name__}. Container ID: {creation_id}.",
                        response=response,
                        creation_id=creation_id,
                    )
                if not is_last:
                    await self._sleep(error_interval)
                continue

            consecutive_errors = 0
            statuses = extract_statuses(response)
            if statuses:
                last_status = statuses[0]

            verdicts = {classify_status(status) for status in statuses}
            if ContainerStatus.ERROR in verdicts:
                raise ContainerError(
                    creation_id,
                    statuses,
                    attempt,
                    max_attempts,
                    error_message=response.get("error_message"),
                )
            if ContainerStatus.READY in verdicts:
                _logger.info(f"Container {creation_id} ready after {attempt} poll(s)")
                return

            _logger.debug(
                f"Container {creation_id} status {last_status or 'unknown'} "
                f"(poll {attempt}/{max_attempts})"
            )
            if not is_last:
                await self._sleep(interval)

        raise PollTimeoutError(creation_id, last_status, max_attempts, last_error)
