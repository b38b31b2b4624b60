"""Instagram container publishing for socials-publisher."""

from .client import GraphClient, GraphRequester, raise_for_error_body
from .errors import (
    ContainerCreatedWithError,
    ContainerError,
    GraphAPIError,
    InvalidParameterError,
    MalformedResponseError,
    MissingCreationIdError,
    PollTimeoutError,
    PublishFailedAfterCreationError,
    PublishPipelineError,
    PublishRetriesExhaustedError,
    UnsupportedOperationError,
    UnsupportedResourceError,
    get_error_info,
)
from .models import CarouselMediaItem, ItemError, ItemResult, MediaContainer, PublishItem
from .pipeline import PublishPipeline, parse_item
from .poller import ReadinessPoller
from .publisher import PublishAttempter
from .resources import FieldSpec, ResourceDescriptor, ResourceOption, ResourceRegistry, get_registry
from .submitter import MediaContainerSubmitter, build_child_queries, build_container_query

__all__ = [
    # Client
    "GraphClient",
    "GraphRequester",
    "raise_for_error_body",
    # Pipeline
    "PublishPipeline",
    "parse_item",
    "MediaContainerSubmitter",
    "build_child_queries",
    "build_container_query",
    "ReadinessPoller",
    "PublishAttempter",
    # Registry
    "FieldSpec",
    "ResourceDescriptor",
    "ResourceOption",
    "ResourceRegistry",
    "get_registry",
    # Models
    "CarouselMediaItem",
    "ItemError",
    "ItemResult",
    "MediaContainer",
    "PublishItem",
    # Errors
    "PublishPipelineError",
    "UnsupportedResourceError",
    "UnsupportedOperationError",
    "InvalidParameterError",
    "GraphAPIError",
    "MalformedResponseError",
    "MissingCreationIdError",
    "ContainerCreatedWithError",
    "ContainerError",
    "PollTimeoutError",
    "PublishRetriesExhaustedError",
    "PublishFailedAfterCreationError",
    "get_error_info",
]
