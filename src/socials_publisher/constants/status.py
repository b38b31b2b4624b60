"""Container status vocabularies and classification.

The Graph API reports container processing state through two string fields,
``status_code`` and ``status``. Both are classified against fixed token sets:

    FINISHED / PUBLISHED / READY  -> READY
    ERROR / FAILED                -> ERROR
    anything else                 -> PENDING

MODIFICATION GUIDE:
------------------
- Tokens are compared upper-cased
- Add new tokens to the frozensets, never to the enum
"""

from enum import Enum
from typing import Final, Optional


class ContainerStatus(str, Enum):
    """Processing state of a media container."""

    PENDING = "pending"
    """Still processing (IN_PROGRESS, unknown tokens, missing fields)."""

    READY = "ready"
    """Processing finished, the container can be published."""

    ERROR = "error"
    """Processing failed on the platform side."""


READY_STATUS_TOKENS: Final[frozenset[str]] = frozenset({"FINISHED", "PUBLISHED", "READY"})
"""Status tokens that mean the container finished processing."""

ERROR_STATUS_TOKENS: Final[frozenset[str]] = frozenset({"ERROR", "FAILED"})
"""Status tokens that mean processing failed."""

STATUS_FIELDS: Final[tuple[str, ...]] = ("status_code", "status")
"""Status-bearing fields requested on every poll, in reporting order."""


def classify_status(token: Optional[str]) -> ContainerStatus:
    """Classify a single raw status token.

    Args:
        token: Raw token from the status response (any case, may be None).

    Returns:
        ContainerStatus for the token.
    """
    if not token:
        return ContainerStatus.PENDING
    normalized = token.strip().upper()
    if normalized in READY_STATUS_TOKENS:
        return ContainerStatus.READY
    if normalized in ERROR_STATUS_TOKENS:
        return ContainerStatus.ERROR
    return ContainerStatus.PENDING
