"""Media container creation (first phase of the publish workflow)."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, Optional

from socials_publisher.constants import (
    GRAPH_API_HOST,
    INSTAGRAM_CAPTION_MAX_LENGTH,
    TRIAL_REEL_GRADUATION_STRATEGIES,
)

from .client import GraphRequester
from .errors import (
    ContainerCreatedWithError,
    InvalidParameterError,
    MalformedResponseError,
    MissingCreationIdError,
)
from .models import AdditionalFields, MediaContainer, ProductTag, PublishItem, UserTag
from .resources import ResourceDescriptor

_logger = logging.getLogger("publish_pipeline")

_URL_PATTERN = re.compile(r"^https?://.+", re.IGNORECASE)
_MEDIA_URL_FIELDS = (("image_url", "Image"), ("video_url", "Video"))


def _preview(text: str, limit: int = 200) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _serialize_tags(tags: Iterable[UserTag | ProductTag], id_field: str) -> Optional[str]:
    entries = []
    for tag in tags:
        identifier = getattr(tag, id_field)
        if not identifier:
            continue
        entry: dict[str, Any] = {id_field: identifier}
        if tag.x is not None:
            entry["x"] = tag.x
        if tag.y is not None:
            entry["y"] = tag.y
        entries.append(entry)
    return _compact_json(entries) if entries else None


def serialize_user_tags(tags: Iterable[UserTag]) -> Optional[str]:
    """JSON-encode user tags, dropping entries without a username.

    Returns:
        The JSON string, or None when no tag survives.
    """
    return _serialize_tags(tags, "username")


def serialize_product_tags(tags: Iterable[ProductTag]) -> Optional[str]:
    """JSON-encode product tags, dropping entries without a product_id."""
    return _serialize_tags(tags, "product_id")


def validate_media_urls(payload: dict[str, Any], resource: str) -> None:
    """Reject blank or non-HTTP media URLs before anything is sent.

    Raises:
        InvalidParameterError: If a media URL in the payload is unusable.
    """
    for key, label in _MEDIA_URL_FIELDS:
        if key not in payload:
            continue
        url = str(payload[key] or "").strip()
        if not url:
            raise InvalidParameterError(
                f"{label} URL is empty for resource '{resource}'. "
                f"Please provide a valid {label.lower()} URL."
            )
        if not _URL_PATTERN.match(url):
            raise InvalidParameterError(
                f"Invalid {label.lower()} URL format for resource '{resource}'. "
                f"URL must start with http:// or https://. Provided URL: {_preview(url, 100)}"
            )
        payload[key] = url


def build_optional_fields(fields: AdditionalFields, resource: str) -> dict[str, Any]:
    """Build the optional query parameters from the additional fields.

    Raises:
        InvalidParameterError: If trial reel options are used outside reels
            or name an unknown strategy.
    """
    query: dict[str, Any] = {}

    if fields.alt_text:
        query["alt_text"] = fields.alt_text

    location_id = (fields.location_id or "").strip()
    if location_id:
        query["location_id"] = location_id

    user_tags = serialize_user_tags(fields.user_tags)
    if user_tags:
        query["user_tags"] = user_tags

    product_tags = serialize_product_tags(fields.product_tags)
    if product_tags:
        query["product_tags"] = product_tags

    strategy = fields.trial_reel_graduation_strategy
    if strategy:
        if resource != "reels":
            raise InvalidParameterError(
                "Trial Reels are only supported for the Reels resource. "
                "Remove Trial Reel options or switch the resource to Reels."
            )
        if strategy not in TRIAL_REEL_GRADUATION_STRATEGIES:
            raise InvalidParameterError(
                f"Invalid trial reel graduation strategy: {strategy}. "
                f"Expected one of: {', '.join(TRIAL_REEL_GRADUATION_STRATEGIES)}."
            )
        query["trial_params"] = _compact_json({"graduation_strategy": strategy})

    return query


def build_container_query(
    item: PublishItem,
    descriptor: ResourceDescriptor,
    children: Optional[list[str]] = None,
) -> dict[str, Any]:
    """Merge caption, descriptor payload, child ids and optional fields.

    Raises:
        InvalidParameterError: If the payload or an optional field is invalid.
    """
    payload = descriptor.build_payload(item)
    if not isinstance(payload, dict):
        raise InvalidParameterError(
            f"Invalid media payload returned for resource '{descriptor.key}'. "
            f"Expected object, got: {type(payload).__name__}."
        )
    validate_media_urls(payload, descriptor.key)

    # Sent as-is, the platform enforces the limit
    if len(item.caption) > INSTAGRAM_CAPTION_MAX_LENGTH:
        _logger.warning(
            f"Caption is {len(item.caption)} characters, "
            f"over the {INSTAGRAM_CAPTION_MAX_LENGTH} character limit"
        )

    query: dict[str, Any] = {"caption": item.caption, **payload}
    if children is not None:
        query["children"] = ",".join(children)
    query.update(build_optional_fields(item.additional_fields, descriptor.key))
    return query


def build_child_queries(item: PublishItem, descriptor: ResourceDescriptor) -> list[dict[str, Any]]:
    """Creation queries for the child containers, empty for single-media types."""
    if descriptor.build_children is None:
        return []
    queries = descriptor.build_children(item)
    for query in queries:
        validate_media_urls(query, descriptor.key)
    return queries


class MediaContainerSubmitter:
    """Creates the media container for one item.

    Issues ``POST {host}/{version}/{node}/media`` and returns the container,
    or raises the pipeline error describing why no container was created.

    With ``reject_id_with_error`` a response carrying both an ``id`` and an
    ``error`` object is a failure. Without it the container is kept and the
    error only logged.
    """

    def __init__(
        self,
        requester: GraphRequester,
        host: str = GRAPH_API_HOST,
        reject_id_with_error: bool = True,
    ):
        self.requester = requester
        self.host = host.rstrip("/")
        self.reject_id_with_error = reject_id_with_error

    async def submit(
        self,
        item: PublishItem,
        descriptor: ResourceDescriptor,
        children: Optional[list[str]] = None,
    ) -> MediaContainer:
        """Create the container.

        Args:
            item: The item to create a container for.
            descriptor: Resource descriptor for the item.
            children: Ready child container ids, required when the descriptor
                builds children.

        Returns:
            MediaContainer carrying the creation id.

        Raises:
            InvalidParameterError: Missing node/version, children or bad fields.
            GraphAPIError: Transport or API failure.
            MalformedResponseError: Body was not a JSON object.
            MissingCreationIdError: Body had no ``id``.
            ContainerCreatedWithError: Body had an ``id`` and an ``error``.
        """
        self._check_target(item)
        if descriptor.build_children is not None and not children:
            raise InvalidParameterError(
                f"Resource '{descriptor.key}' needs its child container IDs before "
                "the parent container can be created."
            )

        query = build_container_query(item, descriptor, children)
        return await self._create(item, query, descriptor, descriptor.key)

    async def submit_child(
        self,
        item: PublishItem,
        descriptor: ResourceDescriptor,
        query: dict[str, Any],
    ) -> MediaContainer:
        """Create one child container from a query built by ``build_child_queries``."""
        self._check_target(item)
        return await self._create(item, query, descriptor, f"{descriptor.key} item")

    @staticmethod
    def _check_target(item: PublishItem) -> None:
        if not item.node:
            raise InvalidParameterError(
                "Invalid or missing node (account ID) parameter. Node must be a non-empty string."
            )
        if not item.graph_api_version:
            raise InvalidParameterError(
                "Invalid or missing Graph API version parameter (e.g. 'v22.0')."
            )

    async def _create(
        self,
        item: PublishItem,
        query: dict[str, Any],
        descriptor: ResourceDescriptor,
        label: str,
    ) -> MediaContainer:
        url = f"{self.host}/{item.graph_api_version}/{item.node}/media"
        response = await self.requester.request("POST", url, params=query)

        if isinstance(response, str):
            raise MalformedResponseError(
                "Media creation response body is not valid JSON. "
                f"Received string response: {_preview(response)}",
                response=response,
            )
        if not isinstance(response, dict):
            raise MalformedResponseError(
                f"Invalid media creation response format. Expected object, got: {type(response).__name__}.",
                response=response,
            )

        creation_id = response.get("id")
        if isinstance(creation_id, int) and not isinstance(creation_id, bool):
            creation_id = str(creation_id)
        if not creation_id or not isinstance(creation_id, str):
            raise MissingCreationIdError(response)

        if isinstance(response.get("error"), dict):
            if self.reject_id_with_error:
                raise ContainerCreatedWithError(creation_id, response)
            _logger.warning(
                f"Container {creation_id} created with an error attached: "
                f"{response['error'].get('message', 'Unknown error')}"
            )

        _logger.info(f"Created {label} container {creation_id} on {item.node}")
        return MediaContainer(creation_id=creation_id, resource=descriptor.key)
