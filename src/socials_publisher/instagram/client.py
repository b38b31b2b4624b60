"""Authenticated Graph API request capability.

``GraphClient`` is the only place the access token is attached to a request.
Pipeline components depend on the ``GraphRequester`` protocol so tests can
drive them with scripted responses.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from socials_publisher.constants import GRAPH_ACCEPT_HEADER, GRAPH_REQUEST_TIMEOUT_SECONDS

from .errors import GraphAPIError

_api_logger = logging.getLogger("instagram_api")


class GraphRequester(Protocol):
    """Anything that can issue an authenticated Graph API request."""

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Issue the request and return the decoded body.

        Raises:
            GraphAPIError: On transport failure or an HTTP error status.
        """
        ...


class GraphClient:
    """Graph API client backed by ``httpx.AsyncClient``.

    Use as an async context manager to share one connection pool across a
    batch. Without it, every request opens a short-lived client.

    Example:
        async with GraphClient(settings.access_token) as client:
            body = await client.request("GET", url, {"fields": "status_code"})
    """

    def __init__(
        self,
        access_token: str,
        timeout: float = GRAPH_REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Graph client.

        Args:
            access_token: Token attached to every request.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self._access_token = access_token
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        # API call counter for logging
        self._api_call_count = 0

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            headers={"accept": GRAPH_ACCEPT_HEADER},
        )

    async def __aenter__(self) -> "GraphClient":
        self._client = self._build_client()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def api_call_count(self) -> int:
        return self._api_call_count

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Make a request to the Graph API.

        Args:
            method: HTTP method (GET, POST)
            url: Absolute endpoint URL
            params: Query parameters

        Returns:
            Decoded JSON body, or the raw text when the body isn't JSON.

        Raises:
            GraphAPIError: If the request fails or the response status is 4xx/5xx.
                A 2xx body carrying an ``error`` object is returned as-is, see
                ``raise_for_error_body``.
        """
        method = method.upper()
        if method not in ("GET", "POST"):
            raise ValueError(f"Unsupported HTTP method: {method}")

        self._api_call_count += 1
        call_no = self._api_call_count

        query = dict(params or {})
        _api_logger.info(f"API CALL #{call_no} | {method} {url} | params: {query}")
        query["access_token"] = self._access_token

        try:
            if self._client is not None:
                response = await self._client.request(method, url, params=query)
            else:
                async with self._build_client() as client:
                    response = await client.request(method, url, params=query)
        except httpx.HTTPError as e:
            _api_logger.error(f"API CALL #{call_no} | TRANSPORT ERROR: {e!r}")
            raise GraphAPIError(f"Request to {url} failed: {e}") from e

        body = self._decode(response)

        if response.status_code >= 400:
            error = body.get("error") if isinstance(body, dict) else None
            error = error if isinstance(error, dict) else {}
            api_error = GraphAPIError(
                message=error.get("message") or f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
                error=error,
                headers=dict(response.headers),
            )
            _api_logger.error(
                f"API CALL #{call_no} | ERROR {response.status_code} "
                f"[{api_error.info['name']}]: {error or body!r}"
            )
            raise api_error

        if isinstance(body, dict):
            _api_logger.info(f"API CALL #{call_no} | SUCCESS: {list(body.keys())}")
        else:
            _api_logger.warning(f"API CALL #{call_no} | NON-JSON BODY ({len(body)} chars)")

        return body

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text


def raise_for_error_body(body: Any) -> None:
    """Raise for a 2xx body that carries an ``error`` object and no ``id``.

    Container creation classifies such bodies itself (missing creation id).
    Status polls and publish calls treat them like any other API error.

    Raises:
        GraphAPIError: If the body is an error envelope.
    """
    if not isinstance(body, dict) or "id" in body:
        return
    error = body.get("error")
    if not isinstance(error, dict):
        return
    api_error = GraphAPIError(
        message=error.get("message") or "Graph API returned an error",
        status_code=200,
        error=error,
    )
    _api_logger.error(f"ERROR BODY [{api_error.info['name']}]: {error!r}")
    raise api_error
