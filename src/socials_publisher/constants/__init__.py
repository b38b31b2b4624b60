"""Global constants package for the publisher.

PACKAGE STRUCTURE:
-----------------
- limits.py : Graph API defaults, per-resource timing, retry sentinels
- status.py : Container status enum and token vocabularies

USAGE EXAMPLES:
--------------
    from socials_publisher.constants import GRAPH_API_HOST, ContainerStatus
    from socials_publisher.constants import classify_status
"""

from .limits import (
    CAROUSEL_MAX_ITEMS,
    CAROUSEL_MAX_POLL_ATTEMPTS,
    CAROUSEL_MIN_ITEMS,
    CAROUSEL_POLL_INTERVAL_MS,
    CAROUSEL_PUBLISH_MAX_ATTEMPTS,
    CAROUSEL_PUBLISH_RETRY_DELAY_MS,
    GRAPH_ACCEPT_HEADER,
    GRAPH_API_HOST,
    GRAPH_API_VERSION_DEFAULT,
    GRAPH_REQUEST_TIMEOUT_SECONDS,
    IMAGE_MAX_POLL_ATTEMPTS,
    IMAGE_POLL_INTERVAL_MS,
    IMAGE_PUBLISH_MAX_ATTEMPTS,
    IMAGE_PUBLISH_RETRY_DELAY_MS,
    INSTAGRAM_CAPTION_MAX_LENGTH,
    LEGACY_MAX_POLL_ATTEMPTS,
    LEGACY_POLL_INTERVAL_MS,
    MEDIA_NOT_READY_CODE,
    MEDIA_NOT_READY_PHRASES,
    MEDIA_NOT_READY_SUBCODE,
    POLL_ERROR_INTERVAL_MS,
    POLL_MAX_CONSECUTIVE_ERRORS,
    TRIAL_REEL_GRADUATION_STRATEGIES,
    VIDEO_MAX_POLL_ATTEMPTS,
    VIDEO_POLL_INTERVAL_MS,
    VIDEO_PUBLISH_MAX_ATTEMPTS,
    VIDEO_PUBLISH_RETRY_DELAY_MS,
)
from .status import (
    ERROR_STATUS_TOKENS,
    READY_STATUS_TOKENS,
    STATUS_FIELDS,
    ContainerStatus,
    classify_status,
)

__all__ = [
    # Graph API
    "GRAPH_ACCEPT_HEADER",
    "GRAPH_API_HOST",
    "GRAPH_API_VERSION_DEFAULT",
    "GRAPH_REQUEST_TIMEOUT_SECONDS",
    # Timing
    "IMAGE_MAX_POLL_ATTEMPTS",
    "IMAGE_POLL_INTERVAL_MS",
    "IMAGE_PUBLISH_MAX_ATTEMPTS",
    "IMAGE_PUBLISH_RETRY_DELAY_MS",
    "VIDEO_MAX_POLL_ATTEMPTS",
    "VIDEO_POLL_INTERVAL_MS",
    "VIDEO_PUBLISH_MAX_ATTEMPTS",
    "VIDEO_PUBLISH_RETRY_DELAY_MS",
    "CAROUSEL_MAX_POLL_ATTEMPTS",
    "CAROUSEL_POLL_INTERVAL_MS",
    "CAROUSEL_PUBLISH_MAX_ATTEMPTS",
    "CAROUSEL_PUBLISH_RETRY_DELAY_MS",
    "LEGACY_MAX_POLL_ATTEMPTS",
    "LEGACY_POLL_INTERVAL_MS",
    "POLL_ERROR_INTERVAL_MS",
    "POLL_MAX_CONSECUTIVE_ERRORS",
    # Classification
    "MEDIA_NOT_READY_CODE",
    "MEDIA_NOT_READY_PHRASES",
    "MEDIA_NOT_READY_SUBCODE",
    "ERROR_STATUS_TOKENS",
    "READY_STATUS_TOKENS",
    "STATUS_FIELDS",
    "ContainerStatus",
    "classify_status",
    # Content
    "INSTAGRAM_CAPTION_MAX_LENGTH",
    "TRIAL_REEL_GRADUATION_STRATEGIES",
    "CAROUSEL_MAX_ITEMS",
    "CAROUSEL_MIN_ITEMS",
]
