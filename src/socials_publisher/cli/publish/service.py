"""Stateless service for loading and publishing item batches."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from socials_publisher.config import PublisherSettings, resolve_dict
from socials_publisher.instagram import (
    GraphClient,
    ItemResult,
    PublishPipeline,
    PublishPipelineError,
    build_child_queries,
    build_container_query,
    get_registry,
    parse_item,
)

from ..core.types import Failure, Result, Success


def load_batch_file(
    path: Path,
    default_node: Optional[str] = None,
    default_api_version: Optional[str] = None,
) -> Result[list[dict[str, Any]]]:
    """Load items from a YAML or JSON batch file.

    The file holds either a list of items or a mapping with an ``items``
    list. ``ENV:VAR`` values are resolved and missing ``node`` /
    ``graph_api_version`` values are filled from the defaults.

    Returns:
        Result containing the raw item mappings or Failure
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        return Failure(f"Could not read batch file: {e}", {"path": str(path)})

    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list) or not data:
        return Failure(
            "Batch file contains no items",
            {"hint": "Expected a list of items or a mapping with an 'items' list"},
        )

    items = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            return Failure(f"Item {index} is not a mapping", {"item": repr(entry)[:100]})
        item = resolve_dict(entry)
        if default_node and not (item.get("node")):
            item["node"] = default_node
        if default_api_version and not (item.get("graph_api_version") or item.get("graphApiVersion")):
            item["graph_api_version"] = default_api_version
        items.append(item)

    return Success(items)


class PublishService:
    """Stateless service for running batches through the publish pipeline.

    All state is passed via params - no instance state.
    """

    def preview(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Validate items and build their creation requests without sending anything."""
        registry = get_registry()
        previews = []
        for index, raw in enumerate(items):
            try:
                item = parse_item(raw)
                descriptor = registry.lookup(item.resource)
                query = build_container_query(item, descriptor)
                children = build_child_queries(item, descriptor)
            except PublishPipelineError as e:
                previews.append({"item_index": index, "error": e.message, "kind": e.kind})
                continue
            previews.append({
                "item_index": index,
                "resource": descriptor.key,
                "node": item.node,
                "query": query,
            })
            if children:
                previews[-1]["children"] = children
        return previews

    async def publish(
        self,
        items: list[dict[str, Any]],
        settings: PublisherSettings,
        continue_on_fail: bool,
        concurrency: int,
    ) -> Result[list[ItemResult]]:
        """Publish every item.

        Returns:
            Result containing one ItemResult per item, or Failure when a
            fail-fast batch aborted.
        """
        async with GraphClient(settings.access_token, timeout=settings.request_timeout) as client:
            pipeline = PublishPipeline(
                client,
                host=settings.graph_host,
                continue_on_fail=continue_on_fail,
                concurrency=concurrency,
            )
            try:
                results = await pipeline.run(items)
            except PublishPipelineError as e:
                details: dict[str, Any] = {"kind": e.kind, "item_index": e.item_index}
                creation_id = getattr(e, "creation_id", None)
                if creation_id:
                    details["creation_id"] = creation_id
                return Failure(e.message, details)

        return Success(results)

    def write_results(self, results: list[ItemResult], output: Path) -> None:
        """Save results as JSON."""
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump([result.to_dict() for result in results], f, indent=2, default=str)
