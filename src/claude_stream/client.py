"""HTTP client for the Messages API."""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError, model_validator

from .constants import (
    API_KEY_ENV,
    AUTH_TOKEN_ENV,
    DEFAULT_ACCEPT,
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_STREAM_ACCEPT,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    MESSAGES_PATH,
)
from .errors import APIResponseValidationError, APIStatusError, from_httpx_error
from .stream import AsyncMessageStream, MessageStream
from .types import Message, MessageCreateParams

logger = logging.getLogger(__name__)


class Client(BaseModel):
    """Configured client for the Messages API.

    Builds authenticated requests, decodes plain JSON responses and opens
    event streams. Both a synchronous and an asynchronous ``httpx`` client
    are held; either may be injected, which is how tests plug in a
    ``httpx.MockTransport``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    api_key: str | None = None
    """API key, sent as ``X-API-Key``. Falls back to ``ANTHROPIC_API_KEY``."""

    auth_token: str | None = None
    """Bearer token, used when no API key is set.

    Falls back to ``ANTHROPIC_AUTH_TOKEN``.
    """

    base_url: str = DEFAULT_BASE_URL
    """Base URL of the service."""

    timeout: float | None = DEFAULT_TIMEOUT
    """Request timeout in seconds."""

    max_retries: int = DEFAULT_MAX_RETRIES
    """Connection retries handed to the HTTP transport."""

    user_agent: str = DEFAULT_USER_AGENT
    """Value of the ``User-Agent`` header."""

    stream_accept: str = DEFAULT_STREAM_ACCEPT
    """``Accept`` header used for streaming requests."""

    api_version: str = DEFAULT_API_VERSION
    """Value of the ``anthropic-version`` header."""

    beta_version: str | None = None
    """Value of the ``anthropic-beta`` header; omitted when unset."""

    http_client: httpx.Client | None = None
    """Optional pre-built synchronous HTTP client."""

    async_http_client: httpx.AsyncClient | None = None
    """Optional pre-built asynchronous HTTP client."""

    _client: httpx.Client = PrivateAttr()
    """Synchronous HTTP client."""

    _async_client: httpx.AsyncClient | None = PrivateAttr(default=None)
    """Asynchronous HTTP client, built on first use."""

    @model_validator(mode="after")
    def _resolve_credentials(self) -> Client:
        """Fill missing credentials from the environment."""
        if not self.api_key:
            self.api_key = os.getenv(API_KEY_ENV) or None
        if not self.auth_token:
            self.auth_token = os.getenv(AUTH_TOKEN_ENV) or None
        return self

    @model_validator(mode="after")
    def _init_client(self) -> Client:
        """Initialize the synchronous HTTP client."""
        self._client = self.http_client or httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=httpx.HTTPTransport(retries=self.max_retries),
        )
        return self

    @property
    def client(self) -> httpx.Client:
        """Access the synchronous HTTP client."""
        return self._client

    @property
    def async_client(self) -> httpx.AsyncClient:
        """Access the asynchronous HTTP client, building it on first use."""
        if self._async_client is None:
            self._async_client = self.async_http_client or httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=httpx.AsyncHTTPTransport(retries=self.max_retries),
            )
        return self._async_client

    def build_headers(self, *, stream: bool = False) -> dict[str, str]:
        """Build the request headers.

        Args:
            stream: Whether the request expects an event stream.

        Returns:
            dict[str, str]: Headers including authentication.
        """
        headers = {
            "Content-Type": DEFAULT_CONTENT_TYPE,
            "Accept": self.stream_accept if stream else DEFAULT_ACCEPT,
            "User-Agent": self.user_agent,
            "anthropic-version": self.api_version,
        }
        if self.beta_version:
            headers["anthropic-beta"] = self.beta_version

        if self.api_key:
            headers["X-API-Key"] = self.api_key
        elif self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def _build_request(
        self, client: httpx.Client | httpx.AsyncClient, params: MessageCreateParams, *, stream: bool
    ) -> httpx.Request:
        body = params.to_request_body()
        if stream:
            body["stream"] = True
        url = f"{self.base_url.rstrip('/')}{MESSAGES_PATH}"
        logger.debug("POST %s model=%s stream=%s", url, params.model, stream)
        return client.build_request(
            "POST", url, json=body, headers=self.build_headers(stream=stream)
        )

    def create_message(self, params: MessageCreateParams) -> Message:
        """Create a message and wait for the complete response.

        Args:
            params: The request parameters.

        Returns:
            Message: The decoded message.

        Raises:
            APIConnectionError: If the service cannot be reached.
            APIStatusError: If the service answers with a non-2xx status.
            APIResponseValidationError: If a 2xx body is not a valid message.
        """
        request = self._build_request(self._client, params, stream=False)
        try:
            response = self._client.send(request)
        except httpx.HTTPError as e:
            raise from_httpx_error(e) from e
        _raise_for_status(response, response.text)
        return _parse_message(response)

    def stream_message(
        self, params: MessageCreateParams, *, ignore_unknown_events: bool = True
    ) -> MessageStream:
        """Create a message and stream it as events.

        Args:
            params: The request parameters; ``stream`` is forced on.
            ignore_unknown_events: Whether unrecognized event kinds are
                passed through instead of raising.

        Returns:
            MessageStream: An open stream. The caller must close it.

        Raises:
            APIConnectionError: If the service cannot be reached.
            APIStatusError: If the service answers with a non-2xx status.
        """
        request = self._build_request(self._client, params, stream=True)
        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise from_httpx_error(e) from e

        if not response.is_success:
            try:
                body = response.read().decode(errors="replace")
            except httpx.HTTPError as e:
                raise from_httpx_error(e) from e
            finally:
                response.close()
            _raise_for_status(response, body)

        logger.debug("Opened message stream (%s)", response.status_code)
        return MessageStream(response, ignore_unknown_events=ignore_unknown_events)

    async def acreate_message(self, params: MessageCreateParams) -> Message:
        """Asynchronously create a message.

        Args:
            params: The request parameters.

        Returns:
            Message: The decoded message.
        """
        request = self._build_request(self.async_client, params, stream=False)
        try:
            response = await self.async_client.send(request)
        except httpx.HTTPError as e:
            raise from_httpx_error(e) from e
        _raise_for_status(response, response.text)
        return _parse_message(response)

    async def astream_message(
        self, params: MessageCreateParams, *, ignore_unknown_events: bool = True
    ) -> AsyncMessageStream:
        """Asynchronously create a message and stream it as events.

        Args:
            params: The request parameters; ``stream`` is forced on.
            ignore_unknown_events: Whether unrecognized event kinds are
                passed through instead of raising.

        Returns:
            AsyncMessageStream: An open stream. The caller must close it.
        """
        request = self._build_request(self.async_client, params, stream=True)
        try:
            response = await self.async_client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise from_httpx_error(e) from e

        if not response.is_success:
            try:
                body = (await response.aread()).decode(errors="replace")
            except httpx.HTTPError as e:
                raise from_httpx_error(e) from e
            finally:
                await response.aclose()
            _raise_for_status(response, body)

        logger.debug("Opened async message stream (%s)", response.status_code)
        return AsyncMessageStream(
            response, ignore_unknown_events=ignore_unknown_events
        )

    def close(self) -> None:
        """Close the synchronous client.

        An injected ``http_client`` belongs to the caller and is left open.
        """
        if self.http_client is None:
            self._client.close()

    async def aclose(self) -> None:
        """Close the asynchronous client, if this instance built it."""
        if self._async_client is not None and self.async_http_client is None:
            await self._async_client.aclose()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()


def _raise_for_status(response: httpx.Response, body: str) -> None:
    if response.is_success:
        return
    raise APIStatusError(response.status_code, response.reason_phrase, body)


def _parse_message(response: httpx.Response) -> Message:
    try:
        return Message.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise APIResponseValidationError(
            f"could not decode message response: {e}", response.text
        ) from e
