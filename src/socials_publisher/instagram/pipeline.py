"""Per-item publish pipeline: submit -> poll until ready -> publish.

Each input item produces exactly one ``ItemResult`` tagged with its input
index. Under continue-on-fail a failing item yields an ``ItemError`` result
and the batch carries on; under fail-fast the first failure propagates.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from socials_publisher.constants import GRAPH_API_HOST

from .client import GraphRequester
from .errors import (
    GraphAPIError,
    InvalidParameterError,
    PublishPipelineError,
    UnsupportedOperationError,
)
from .models import ItemResult, PublishItem
from .poller import ReadinessPoller, Sleeper
from .publisher import PublishAttempter
from .resources import ResourceDescriptor, ResourceRegistry, get_registry
from .submitter import MediaContainerSubmitter, build_child_queries

_logger = logging.getLogger("publish_pipeline")

RawItem = Union[PublishItem, Mapping[str, Any]]


def parse_item(raw: RawItem) -> PublishItem:
    """Validate a raw item mapping into a ``PublishItem``.

    Raises:
        InvalidParameterError: If the mapping doesn't describe a valid item.
    """
    if isinstance(raw, PublishItem):
        return raw
    try:
        return PublishItem.model_validate(dict(raw))
    except (ValidationError, TypeError, ValueError) as e:
        raise InvalidParameterError(f"Invalid item parameters: {e}") from e


def _error_hint(error: PublishPipelineError) -> str:
    """Readable explanation for known Graph error codes, if the failure has one."""
    cause = getattr(error, "cause", error)
    if not isinstance(cause, GraphAPIError) or not cause.error:
        return ""
    info = cause.info
    return f" ({info['name']}: {info['user_message']})"


class PublishPipeline:
    """Runs the publish workflow for a batch of items.

    Usage:
        async with GraphClient(settings.access_token) as client:
            pipeline = PublishPipeline(client, continue_on_fail=True)
            results = await pipeline.run(items)
    """

    def __init__(
        self,
        requester: GraphRequester,
        registry: Optional[ResourceRegistry] = None,
        host: str = GRAPH_API_HOST,
        continue_on_fail: bool = False,
        concurrency: int = 1,
        sleep: Sleeper = asyncio.sleep,
    ):
        """Initialize the pipeline.

        Args:
            requester: Authenticated Graph request capability.
            registry: Resource registry (defaults to the built-in resources).
            host: Graph API host.
            continue_on_fail: Turn per-item failures into error results
                instead of aborting the batch.
            concurrency: Items processed at once. 1 means strictly sequential.
            sleep: Awaitable used for every poll/retry wait.
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        self.registry = registry or get_registry()
        self.continue_on_fail = continue_on_fail
        self.concurrency = concurrency
        self.submitter = MediaContainerSubmitter(
            requester, host, reject_id_with_error=not continue_on_fail
        )
        self.poller = ReadinessPoller(requester, host, sleep=sleep)
        self.publisher = PublishAttempter(requester, host, sleep=sleep)

    async def process_item(self, raw: RawItem, item_index: int) -> dict[str, Any]:
        """Run one item through the full workflow.

        Returns:
            The platform's publish response.

        Raises:
            PublishPipelineError: Whatever stage failed.
        """
        item = parse_item(raw)
        descriptor = self.registry.lookup(item.resource)
        if item.operation != "publish":
            raise UnsupportedOperationError(item.operation)

        children = None
        if descriptor.build_children is not None:
            children = await self._create_children(item, descriptor, item_index)

        _logger.info(f"Item {item_index}: creating {descriptor.key} container on {item.node}")
        container = await self.submitter.submit(item, descriptor, children)

        _logger.info(f"Item {item_index}: waiting for container {container.creation_id}")
        await self.poller.wait_until_ready(container.creation_id, item.graph_api_version, descriptor)

        _logger.info(f"Item {item_index}: publishing container {container.creation_id}")
        return await self.publisher.publish(
            container.creation_id, item.node, item.graph_api_version, descriptor
        )

    async def _create_children(
        self,
        item: PublishItem,
        descriptor: ResourceDescriptor,
        item_index: int,
    ) -> list[str]:
        """Create every child container and wait for each to be ready, in order."""
        queries = build_child_queries(item, descriptor)
        child_ids = []
        for position, query in enumerate(queries, start=1):
            _logger.info(
                f"Item {item_index}: creating {descriptor.key} child {position}/{len(queries)}"
            )
            child = await self.submitter.submit_child(item, descriptor, query)
            await self.poller.wait_until_ready(child.creation_id, item.graph_api_version, descriptor)
            child_ids.append(child.creation_id)
        return child_ids

    async def _run_one(self, raw: RawItem, item_index: int) -> ItemResult:
        try:
            response = await self.process_item(raw, item_index)
        except PublishPipelineError as e:
            e.item_index = item_index
            _logger.error(f"Item {item_index}: [{e.kind}] {e.message}{_error_hint(e)}")
            if not self.continue_on_fail:
                raise
            item_error = e.to_item_error()
            return ItemResult(json=item_error.to_json(), item_index=item_index, error=item_error)

        return ItemResult(json=response, item_index=item_index)

    async def run(self, items: Iterable[RawItem]) -> list[ItemResult]:
        """Publish every item.

        Returns:
            One result per input item, in input order.

        Raises:
            PublishPipelineError: First failure, when continue_on_fail is off.
        """
        items = list(items)
        _logger.info(
            f"=== BATCH START === {len(items)} item(s), "
            f"continue_on_fail={self.continue_on_fail}, concurrency={self.concurrency}"
        )

        if self.concurrency == 1:
            results = []
            for index, raw in enumerate(items):
                results.append(await self._run_one(raw, index))
        else:
            results = await self._run_concurrently(items)

        failed = sum(1 for result in results if not result.success)
        _logger.info(f"=== BATCH COMPLETE === {len(results) - failed} published, {failed} failed")
        return results

    async def _run_concurrently(self, items: list[RawItem]) -> list[ItemResult]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def guarded(index: int, raw: RawItem) -> ItemResult:
            async with semaphore:
                return await self._run_one(raw, index)

        tasks = [asyncio.ensure_future(guarded(index, raw)) for index, raw in enumerate(items)]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
