"""Exceptions raised by the publish pipeline.

Every failure an item can hit is a ``PublishPipelineError``. The orchestrator
either re-raises it (fail-fast) or turns it into an ``ItemError`` through
``to_item_error()`` (continue-on-fail).
"""

from __future__ import annotations

from typing import Any, Optional

from socials_publisher.constants import (
    MEDIA_NOT_READY_CODE,
    MEDIA_NOT_READY_PHRASES,
    MEDIA_NOT_READY_SUBCODE,
)

from .models import ItemError

PUBLISH_FAILED_NOTE = "Media was created but publishing failed"


# Known Graph API error codes, used to label log lines and CLI output
GRAPH_ERROR_CODES: dict[int, dict[str, Any]] = {
    4: {
        "name": "RATE_LIMIT",
        "user_message": "Instagram rate limit reached. Wait before publishing again.",
    },
    9: {
        "name": "APP_RATE_LIMIT",
        "user_message": "App rate limit reached.",
    },
    10: {
        "name": "PERMISSION_DENIED",
        "user_message": "The app doesn't have permission to publish. Check the Instagram API setup.",
    },
    17: {
        "name": "USER_RATE_LIMIT",
        "user_message": "Too many requests for this user. Wait a few minutes.",
    },
    100: {
        "name": "INVALID_PARAMETER",
        "user_message": "Instagram rejected a request parameter. Check the media URL and fields.",
    },
    190: {
        "name": "ACCESS_TOKEN_EXPIRED",
        "user_message": "The Instagram access token has expired or is invalid.",
    },
    MEDIA_NOT_READY_CODE: {
        "name": "MEDIA_NOT_READY",
        "user_message": "Instagram is still processing the media.",
    },
}

# Subcodes are more specific and take precedence over the main code
GRAPH_ERROR_SUBCODES: dict[int, dict[str, Any]] = {
    MEDIA_NOT_READY_SUBCODE: {
        "name": "MEDIA_NOT_READY",
        "user_message": "Instagram is still processing the media.",
    },
    2207026: {
        "name": "MEDIA_NOT_READY",
        "user_message": "The media container is not ready yet.",
    },
    2207032: {
        "name": "MEDIA_UPLOAD_FAILED",
        "user_message": "Instagram failed to process the media upload. This is usually temporary.",
    },
    2207069: {
        "name": "DAILY_POSTING_LIMIT",
        "user_message": "Daily Content Publishing API limit reached. It resets at midnight UTC.",
    },
}


def get_error_info(error_code: Optional[int], error_subcode: Optional[int] = None) -> dict[str, Any]:
    """Get name and user message for a Graph API error code.

    Args:
        error_code: Main error code from the API response.
        error_subcode: Sub-error code (takes precedence if known).

    Returns:
        Dict with ``name`` and ``user_message``.
    """
    if error_subcode is not None and error_subcode in GRAPH_ERROR_SUBCODES:
        return GRAPH_ERROR_SUBCODES[error_subcode]

    if error_code is None:
        return {"name": "UNKNOWN", "user_message": "An unknown error occurred with Instagram."}

    return GRAPH_ERROR_CODES.get(error_code, {
        "name": f"ERROR_{error_code}",
        "user_message": f"Instagram returned error code {error_code}.",
    })


class PublishPipelineError(Exception):
    """Base exception for every per-item failure."""

    kind = "PublishPipelineError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.item_index: Optional[int] = None

    def to_item_error(self) -> ItemError:
        """Convert to the structured error emitted under continue-on-fail."""
        return ItemError(kind=self.kind, message=self.message)


class UnsupportedResourceError(PublishPipelineError):
    """The resource key has no registered descriptor."""

    kind = "UnsupportedResource"

    def __init__(self, resource: str, supported: list[str]):
        super().__init__(
            f"Unsupported resource: {resource}. "
            f"Supported resources are: {', '.join(supported)}."
        )
        self.resource = resource
        self.supported = supported


class UnsupportedOperationError(PublishPipelineError):
    """The operation is anything other than ``publish``."""

    kind = "UnsupportedOperation"

    def __init__(self, operation: str):
        super().__init__(f"Unsupported operation: {operation}")
        self.operation = operation


class InvalidParameterError(PublishPipelineError):
    """An item parameter is missing or malformed."""

    kind = "InvalidParameter"


class GraphAPIError(PublishPipelineError):
    """HTTP or Graph API failure.

    Carries the HTTP status code, the platform ``error`` object and the
    response headers when a response was received. Transport failures
    (timeouts, connection errors) have none of them.
    """

    kind = "TransportOrApiError"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = dict(error or {})
        self.headers = headers

    @property
    def error_code(self) -> Optional[int]:
        return self.error.get("code")

    @property
    def error_subcode(self) -> Optional[int]:
        return self.error.get("error_subcode")

    @property
    def info(self) -> dict[str, Any]:
        return get_error_info(self.error_code, self.error_subcode)

    def is_media_not_ready(self) -> bool:
        """Whether the platform says the container isn't publishable yet."""
        if not self.error:
            return False
        message = str(self.error.get("message") or "").lower()
        if any(phrase in message for phrase in MEDIA_NOT_READY_PHRASES):
            return True
        return (
            self.error_code == MEDIA_NOT_READY_CODE
            or self.error_subcode == MEDIA_NOT_READY_SUBCODE
        )

    def to_item_error(self) -> ItemError:
        return ItemError(
            kind=self.kind,
            message=self.message,
            status_code=self.status_code,
            platform_error_fields=dict(self.error),
            headers=self.headers,
        )


class MalformedResponseError(PublishPipelineError):
    """The response body was not a JSON object where one was expected."""

    kind = "MalformedResponse"

    def __init__(self, message: str, response: Any = None, creation_id: Optional[str] = None):
        super().__init__(message)
        self.response = response
        self.creation_id = creation_id

    def to_item_error(self) -> ItemError:
        return ItemError(
            kind=self.kind,
            message=self.message,
            response=self.response,
            creation_id=self.creation_id,
        )


class MissingCreationIdError(PublishPipelineError):
    """The creation response had no usable ``id``."""

    kind = "MissingCreationId"

    def __init__(self, response: dict[str, Any]):
        super().__init__("No creation_id in response")
        self.response = response
        error_obj = response.get("error") if isinstance(response, dict) else None
        if isinstance(error_obj, dict):
            self.api_error = error_obj.get("message")
            self.api_error_code = error_obj.get("code")
        else:
            self.api_error = None
            self.api_error_code = None

    def to_item_error(self) -> ItemError:
        extra: dict[str, Any] = {}
        if self.api_error:
            extra["api_error"] = self.api_error
        if self.api_error_code:
            extra["api_error_code"] = self.api_error_code
        return ItemError(
            kind=self.kind,
            message=self.message,
            response=self.response,
            extra=extra,
        )


class ContainerCreatedWithError(PublishPipelineError):
    """The creation response carried both an ``id`` and an ``error`` object.

    Raised only in fail-fast mode. Under continue-on-fail the container is
    kept and the error is logged as a warning.
    """

    kind = "ContainerCreatedWithError"

    def __init__(self, creation_id: str, response: dict[str, Any]):
        error_obj = response.get("error") or {}
        self.api_error = error_obj.get("message")
        self.api_error_code = error_obj.get("code")
        code = f" (Code: {self.api_error_code})" if self.api_error_code is not None else ""
        super().__init__(
            "Media container creation returned an error despite providing an ID. "
            f"Error: {self.api_error or 'Unknown error'}{code}. Container ID: {creation_id}. "
            "This may indicate the media URL is invalid or inaccessible."
        )
        self.creation_id = creation_id
        self.response = response

    def to_item_error(self) -> ItemError:
        extra: dict[str, Any] = {}
        if self.api_error:
            extra["api_error"] = self.api_error
        if self.api_error_code is not None:
            extra["api_error_code"] = self.api_error_code
        return ItemError(
            kind=self.kind,
            message=self.message,
            response=self.response,
            creation_id=self.creation_id,
            extra=extra,
        )


class ContainerError(PublishPipelineError):
    """The container reported ERROR/FAILED while polling."""

    kind = "ContainerError"

    def __init__(
        self,
        creation_id: str,
        statuses: list[str],
        attempt: int,
        max_attempts: int,
        error_message: Optional[str] = None,
    ):
        details = f" Error details: {error_message}" if error_message else ""
        super().__init__(
            f"Media container reported error status ({', '.join(statuses)}) while waiting "
            f"to publish. Container ID: {creation_id}, Attempt: {attempt}/{max_attempts}.{details}"
        )
        self.creation_id = creation_id
        self.statuses = statuses
        self.error_message = error_message

    def to_item_error(self) -> ItemError:
        return ItemError(
            kind=self.kind,
            message=self.message,
            creation_id=self.creation_id,
            last_status=", ".join(self.statuses),
        )


class PollTimeoutError(PublishPipelineError):
    """Poll budget exhausted without a READY or ERROR verdict."""

    kind = "PollTimeout"

    def __init__(
        self,
        creation_id: str,
        last_status: Optional[str],
        attempts: int,
        last_error: Optional[BaseException] = None,
    ):
        super().__init__(
            f"Timed out waiting for container to become ready after {attempts} attempts. "
            f"Last known status: {last_status or 'unknown'}. Container ID: {creation_id}. "
            f"Last error: {last_error if last_error else 'none'}."
        )
        self.creation_id = creation_id
        self.last_status = last_status
        self.attempts = attempts
        self.last_error = last_error

    def to_item_error(self) -> ItemError:
        return ItemError(
            kind=self.kind,
            message=self.message,
            creation_id=self.creation_id,
            last_status=self.last_status,
        )


class PublishRetriesExhaustedError(PublishPipelineError):
    """Every publish attempt was rejected as "media not ready"."""

    kind = "PublishRetriesExhausted"

    def __init__(self, creation_id: str, attempts: int, last_error: Optional[GraphAPIError] = None):
        super().__init__(
            f"Failed to publish media after {attempts} attempts due to container not being ready."
        )
        self.creation_id = creation_id
        self.attempts = attempts
        self.last_error = last_error

    def to_item_error(self) -> ItemError:
        return ItemError(
            kind=self.kind,
            message=self.message,
            creation_id=self.creation_id,
            note=PUBLISH_FAILED_NOTE,
            extra={"attempts": self.attempts},
        )


class PublishFailedAfterCreationError(PublishPipelineError):
    """Terminal publish failure for a container that already exists.

    Always carries the creation id so the publish can be retried manually
    without re-creating the media.
    """

    kind = "PublishFailedAfterCreation"

    def __init__(self, creation_id: str, cause: PublishPipelineError):
        super().__init__(f"{PUBLISH_FAILED_NOTE}: {cause.message}")
        self.creation_id = creation_id
        self.cause = cause

    def to_item_error(self) -> ItemError:
        item_error = self.cause.to_item_error()
        item_error.kind = self.kind
        item_error.creation_id = self.creation_id
        item_error.note = PUBLISH_FAILED_NOTE
        return item_error
