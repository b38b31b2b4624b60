"""Resource descriptor registry.

Each publishable media type is a ``ResourceDescriptor``: how to build its
creation payload plus the timing that governs polling and publish retries.
The set is closed and fixed at import time.

Usage:
    from socials_publisher.instagram.resources import get_registry

    descriptor = get_registry().lookup("reels")
    payload = descriptor.build_payload(item)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Optional

from socials_publisher.constants import (
    CAROUSEL_MAX_ITEMS,
    CAROUSEL_MAX_POLL_ATTEMPTS,
    CAROUSEL_MIN_ITEMS,
    CAROUSEL_POLL_INTERVAL_MS,
    CAROUSEL_PUBLISH_MAX_ATTEMPTS,
    CAROUSEL_PUBLISH_RETRY_DELAY_MS,
    IMAGE_MAX_POLL_ATTEMPTS,
    IMAGE_POLL_INTERVAL_MS,
    IMAGE_PUBLISH_MAX_ATTEMPTS,
    IMAGE_PUBLISH_RETRY_DELAY_MS,
    VIDEO_MAX_POLL_ATTEMPTS,
    VIDEO_POLL_INTERVAL_MS,
    VIDEO_PUBLISH_MAX_ATTEMPTS,
    VIDEO_PUBLISH_RETRY_DELAY_MS,
)

from .errors import InvalidParameterError, UnsupportedResourceError
from .models import PublishItem

PayloadBuilder = Callable[[PublishItem], dict[str, Any]]
ChildrenBuilder = Callable[[PublishItem], list[dict[str, Any]]]


@dataclass(frozen=True)
class FieldSpec:
    """UI metadata for one resource-specific input field."""

    name: str
    display_name: str
    type: str = "string"
    required: bool = False
    default: Any = ""
    description: str = ""
    resources: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResourceOption:
    """Entry in the resource picker shown to users."""

    name: str
    value: str
    description: str


@dataclass(frozen=True)
class ResourceDescriptor:
    """Payload rule and timing for one media type.

    ``build_children`` is set for media types whose container is assembled
    from child containers (carousels). Each child payload becomes its own
    container, polled with the same timing, before the parent is created.
    """

    key: str
    option: ResourceOption
    build_payload: PayloadBuilder
    poll_interval_ms: int
    max_poll_attempts: int
    publish_retry_delay_ms: int
    publish_max_attempts: int
    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)
    build_children: Optional[ChildrenBuilder] = None

    def __post_init__(self) -> None:
        for name in (
            "poll_interval_ms",
            "max_poll_attempts",
            "publish_retry_delay_ms",
            "publish_max_attempts",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{self.key}: {name} must be a positive integer, got {value!r}")

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def publish_retry_delay_seconds(self) -> float:
        return self.publish_retry_delay_ms / 1000


def _require(value: str | None, label: str, resource: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidParameterError(
            f"{label} is empty for resource '{resource}'. Please provide a valid {label.lower()}."
        )
    return value


def _build_image_payload(item: PublishItem) -> dict[str, Any]:
    return {"image_url": _require(item.image_url, "Image URL", "image")}


def _video_payload_builder(media_type: str, resource: str) -> PayloadBuilder:
    def build(item: PublishItem) -> dict[str, Any]:
        return {
            "video_url": _require(item.video_url, "Video URL", resource),
            "media_type": media_type,
        }

    return build


def _build_carousel_payload(item: PublishItem) -> dict[str, Any]:
    return {"media_type": "CAROUSEL"}


def _build_carousel_children(item: PublishItem) -> list[dict[str, Any]]:
    count = len(item.carousel_media)
    if count < CAROUSEL_MIN_ITEMS or count > CAROUSEL_MAX_ITEMS:
        raise InvalidParameterError(
            f"Carousel requires between {CAROUSEL_MIN_ITEMS} and {CAROUSEL_MAX_ITEMS} "
            f"media items, got {count}."
        )

    children = []
    for position, child in enumerate(item.carousel_media, start=1):
        media_type = child.media_type.strip().lower()
        if media_type == "image":
            url = child.image_url
            payload = {"image_url": url, "is_carousel_item": "true"}
        elif media_type == "video":
            url = child.video_url
            payload = {"media_type": "VIDEO", "video_url": url, "is_carousel_item": "true"}
        else:
            raise InvalidParameterError(
                f"Carousel item {position} has invalid media type '{child.media_type}'. "
                "Expected 'image' or 'video'."
            )
        if url is None or not url.strip():
            raise InvalidParameterError(
                f"Carousel item {position} ({media_type}) has an empty URL."
            )
        children.append(payload)
    return children


IMAGE_URL_FIELD = FieldSpec(
    name="image_url",
    display_name="Image URL",
    required=True,
    description="The URL of the image to publish on Instagram",
    resources=("image",),
)

VIDEO_URL_FIELD = FieldSpec(
    name="video_url",
    display_name="Video URL",
    required=True,
    description="The URL of the video to publish as a reel or story on Instagram",
    resources=("reels", "stories"),
)

STORY_VIDEO_URL_FIELD = FieldSpec(
    name="video_url",
    display_name="Video URL",
    required=True,
    description="The URL of the vertical video to publish as a reel or story on Instagram",
    resources=("reels", "stories"),
)

IMAGE_RESOURCE = ResourceDescriptor(
    key="image",
    option=ResourceOption(name="Image", value="image", description="Publish an image"),
    build_payload=_build_image_payload,
    poll_interval_ms=IMAGE_POLL_INTERVAL_MS,
    max_poll_attempts=IMAGE_MAX_POLL_ATTEMPTS,
    publish_retry_delay_ms=IMAGE_PUBLISH_RETRY_DELAY_MS,
    publish_max_attempts=IMAGE_PUBLISH_MAX_ATTEMPTS,
    fields=(IMAGE_URL_FIELD,),
)

REELS_RESOURCE = ResourceDescriptor(
    key="reels",
    option=ResourceOption(name="Reels", value="reels", description="Publish a reel"),
    build_payload=_video_payload_builder("REELS", "reels"),
    poll_interval_ms=VIDEO_POLL_INTERVAL_MS,
    max_poll_attempts=VIDEO_MAX_POLL_ATTEMPTS,
    publish_retry_delay_ms=VIDEO_PUBLISH_RETRY_DELAY_MS,
    publish_max_attempts=VIDEO_PUBLISH_MAX_ATTEMPTS,
    fields=(VIDEO_URL_FIELD,),
)

STORIES_RESOURCE = ResourceDescriptor(
    key="stories",
    option=ResourceOption(name="Stories", value="stories", description="Publish a story"),
    build_payload=_video_payload_builder("STORIES", "stories"),
    poll_interval_ms=VIDEO_POLL_INTERVAL_MS,
    max_poll_attempts=VIDEO_MAX_POLL_ATTEMPTS,
    publish_retry_delay_ms=VIDEO_PUBLISH_RETRY_DELAY_MS,
    publish_max_attempts=VIDEO_PUBLISH_MAX_ATTEMPTS,
    fields=(STORY_VIDEO_URL_FIELD,),
)

CAROUSEL_MEDIA_FIELD = FieldSpec(
    name="carousel_media",
    display_name="Carousel Media",
    type="fixedCollection",
    required=True,
    default=(),
    description=(
        f"Between {CAROUSEL_MIN_ITEMS} and {CAROUSEL_MAX_ITEMS} media items, each with a "
        "media_type (image or video) and the matching image_url or video_url"
    ),
    resources=("carousel",),
)

CAROUSEL_RESOURCE = ResourceDescriptor(
    key="carousel",
    option=ResourceOption(
        name="Carousel",
        value="carousel",
        description="Publish a carousel of images and videos",
    ),
    build_payload=_build_carousel_payload,
    poll_interval_ms=CAROUSEL_POLL_INTERVAL_MS,
    max_poll_attempts=CAROUSEL_MAX_POLL_ATTEMPTS,
    publish_retry_delay_ms=CAROUSEL_PUBLISH_RETRY_DELAY_MS,
    publish_max_attempts=CAROUSEL_PUBLISH_MAX_ATTEMPTS,
    fields=(CAROUSEL_MEDIA_FIELD,),
    build_children=_build_carousel_children,
)

# Listed in the resource picker but not publishable
COMMENTS_OPTION = ResourceOption(
    name="Comments",
    value="comments",
    description="Moderate comments on Instagram media",
)


class ResourceRegistry:
    """Lookup table from resource key to descriptor.

    The descriptor set is fixed when the registry is built; there is no
    runtime registration.
    """

    def __init__(
        self,
        descriptors: Iterable[ResourceDescriptor],
        extra_options: Iterable[ResourceOption] = (),
    ):
        self._descriptors = MappingProxyType({d.key: d for d in descriptors})
        self._extra_options = tuple(extra_options)

    def lookup(self, key: str) -> ResourceDescriptor:
        """Get the descriptor for a resource key.

        Raises:
            UnsupportedResourceError: If the key is not registered
                (including UI-only pseudo-resources such as ``comments``).
        """
        descriptor = self._descriptors.get(key)
        if descriptor is None:
            raise UnsupportedResourceError(key, self.available_resources())
        return descriptor

    def is_registered(self, key: str) -> bool:
        return key in self._descriptors

    def available_resources(self) -> list[str]:
        """Get all publishable resource keys."""
        return list(self._descriptors.keys())

    def options(self) -> list[ResourceOption]:
        """Resource picker entries: descriptors first, then UI-only options."""
        return [d.option for d in self._descriptors.values()] + list(self._extra_options)

    def resource_fields(self) -> list[FieldSpec]:
        """De-duplicated union of all descriptor fields, keyed by name.

        A later descriptor's field replaces an earlier one with the same name;
        order follows first appearance.
        """
        field_map: dict[str, FieldSpec] = {}
        for descriptor in self._descriptors.values():
            for spec in descriptor.fields:
                field_map[spec.name] = spec
        return list(field_map.values())


_DEFAULT_REGISTRY = ResourceRegistry(
    (IMAGE_RESOURCE, REELS_RESOURCE, STORIES_RESOURCE, CAROUSEL_RESOURCE),
    extra_options=(COMMENTS_OPTION,),
)


def get_registry() -> ResourceRegistry:
    """Get the registry of built-in resources."""
    return _DEFAULT_REGISTRY
