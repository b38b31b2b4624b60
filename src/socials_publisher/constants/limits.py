"""Limit and timing constants for the publish pipeline.

This module contains:
- Graph API endpoint defaults
- Per-resource polling and publish-retry timing
- "Media not ready" classification sentinels
- Poll error tolerance

MODIFICATION GUIDE:
------------------
- *_POLL_* and *_PUBLISH_* values feed the resource descriptors at import time
- LEGACY_* values document the superseded single-resource policy and are not
  used by any descriptor
"""

from typing import Final

# =============================================================================
# GRAPH API
# =============================================================================

GRAPH_API_HOST: Final[str] = "https://graph.facebook.com"
"""Graph API host used for every container/publish request."""

GRAPH_API_VERSION_DEFAULT: Final[str] = "v22.0"
"""Default Graph API version when none is supplied."""

GRAPH_REQUEST_TIMEOUT_SECONDS: Final[float] = 60.0
"""Timeout for a single Graph API HTTP request."""

GRAPH_ACCEPT_HEADER: Final[str] = "application/json,text/*;q=0.99"
"""Accept header sent with every Graph API request."""


# =============================================================================
# RESOURCE TIMING
# =============================================================================

IMAGE_POLL_INTERVAL_MS: Final[int] = 1000
IMAGE_MAX_POLL_ATTEMPTS: Final[int] = 30
IMAGE_PUBLISH_RETRY_DELAY_MS: Final[int] = 1500
IMAGE_PUBLISH_MAX_ATTEMPTS: Final[int] = 5

VIDEO_POLL_INTERVAL_MS: Final[int] = 2000
"""Reels and stories: containers are usually ready within ~80 seconds."""

VIDEO_MAX_POLL_ATTEMPTS: Final[int] = 40
VIDEO_PUBLISH_RETRY_DELAY_MS: Final[int] = 2000
VIDEO_PUBLISH_MAX_ATTEMPTS: Final[int] = 6

CAROUSEL_POLL_INTERVAL_MS: Final[int] = 1500
"""Carousel parent and child containers share one poll policy."""

CAROUSEL_MAX_POLL_ATTEMPTS: Final[int] = 20
CAROUSEL_PUBLISH_RETRY_DELAY_MS: Final[int] = 1500
CAROUSEL_PUBLISH_MAX_ATTEMPTS: Final[int] = 5

LEGACY_POLL_INTERVAL_MS: Final[int] = 750
"""Superseded single-resource poll interval (no publish retry loop)."""

LEGACY_MAX_POLL_ATTEMPTS: Final[int] = 10
"""Superseded single-resource poll budget."""


# =============================================================================
# POLLING ERROR TOLERANCE
# =============================================================================

POLL_MAX_CONSECUTIVE_ERRORS: Final[int] = 3
"""Consecutive failed or malformed status polls before giving up."""

POLL_ERROR_INTERVAL_MS: Final[int] = 1000
"""Upper bound on the wait after a failed status poll."""


# =============================================================================
# MEDIA NOT READY CLASSIFICATION
# =============================================================================

MEDIA_NOT_READY_CODE: Final[int] = 900
"""Graph error code returned when publishing an unprocessed container."""

MEDIA_NOT_READY_SUBCODE: Final[int] = 2207055
"""Graph error subcode returned when publishing an unprocessed container."""

MEDIA_NOT_READY_PHRASES: Final[tuple[str, ...]] = ("not ready", "not finished", "not yet")
"""Lower-case message fragments that mark a publish error as "not ready"."""


# =============================================================================
# CONTENT
# =============================================================================

INSTAGRAM_CAPTION_MAX_LENGTH: Final[int] = 2200
"""Maximum caption length in characters for Instagram posts."""

TRIAL_REEL_GRADUATION_STRATEGIES: Final[tuple[str, ...]] = ("MANUAL", "SS_PERFORMANCE")
"""Accepted trial reel graduation strategies."""

CAROUSEL_MIN_ITEMS: Final[int] = 2
"""Fewest media items a carousel accepts."""

CAROUSEL_MAX_ITEMS: Final[int] = 10
"""Most media items a carousel accepts."""
