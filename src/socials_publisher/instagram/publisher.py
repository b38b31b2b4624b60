"""Container publishing (second phase of the publish workflow).

The container status reported by polling and the platform's actual publish
readiness can disagree: a container polled as FINISHED may still be rejected
with "media not ready". Publishing therefore retries on that specific error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from socials_publisher.constants import GRAPH_API_HOST

from .client import GraphRequester, raise_for_error_body
from .errors import (
    GraphAPIError,
    MalformedResponseError,
    PublishFailedAfterCreationError,
    PublishPipelineError,
    PublishRetriesExhaustedError,
)
from .poller import Sleeper
from .resources import ResourceDescriptor

_logger = logging.getLogger("publish_pipeline")


def is_media_not_ready_error(error: BaseException) -> bool:
    """Whether a publish failure means "try again shortly"."""
    return isinstance(error, GraphAPIError) and error.is_media_not_ready()


class PublishAttempter:
    """Publishes a ready container, retrying while it is "not ready"."""

    def __init__(
        self,
        requester: GraphRequester,
        host: str = GRAPH_API_HOST,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.requester = requester
        self.host = host.rstrip("/")
        self._sleep = sleep

    async def publish_once(self, creation_id: str, node: str, graph_api_version: str) -> Any:
        """Issue a single ``media_publish`` request."""
        url = f"{self.host}/{graph_api_version}/{node}/media_publish"
        body = await self.requester.request("POST", url, params={"creation_id": creation_id})
        raise_for_error_body(body)
        return body

    async def publish(
        self,
        creation_id: str,
        node: str,
        graph_api_version: str,
        descriptor: ResourceDescriptor,
    ) -> dict[str, Any]:
        """Publish the container.

        Makes up to ``descriptor.publish_max_attempts`` attempts, waiting
        ``descriptor.publish_retry_delay_ms`` after each "not ready" rejection.

        Returns:
            The platform's publish response (contains the media ``id``).

        Raises:
            PublishRetriesExhaustedError: Every attempt was "not ready".
            PublishFailedAfterCreationError: Any other publish failure.
            MalformedResponseError: The publish body was not a JSON object.
        """

        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            _logger.warning(
                f"Publish attempt {retry_state.attempt_number}/{descriptor.publish_max_attempts} "
                f"for {creation_id} not ready yet: {error}"
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(descriptor.publish_max_attempts),
            wait=wait_fixed(descriptor.publish_retry_delay_seconds),
            retry=retry_if_exception(is_media_not_ready_error),
            sleep=self._sleep,
            before_sleep=log_retry,
            reraise=False,
        )

        try:
            response = await retrying(self.publish_once, creation_id, node, graph_api_version)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            _logger.error(
                f"Giving up on {creation_id} after {descriptor.publish_max_attempts} not-ready attempts"
            )
            raise PublishRetriesExhaustedError(
                creation_id,
                descriptor.publish_max_attempts,
                last_error if isinstance(last_error, GraphAPIError) else None,
            ) from last_error
        except PublishPipelineError as e:
            _logger.error(f"Publishing {creation_id} failed: {e.message}")
            raise PublishFailedAfterCreationError(creation_id, e) from e

        if isinstance(response, str):
            raise MalformedResponseError(
                "Media publish response body is not valid JSON. "
                f"Received string response: {response[:200]}{'...' if len(response) > 200 else ''}",
                response=response,
                creation_id=creation_id,
            )
        if not isinstance(response, dict):
            raise MalformedResponseError(
                f"Invalid publish response format. Expected object, got: {type(response).__name__}.",
                response=response,
                creation_id=creation_id,
            )

        _logger.info(f"Published {creation_id} as media {response.get('id')}")
        return response
