"""Exceptions raised by the claude_stream package."""

from __future__ import annotations

import json
from typing import Any

import httpx


class ClaudeStreamError(Exception):
    """Base class for every error raised by this package."""


class APIError(ClaudeStreamError):
    """The request could not be completed by the service."""


class APIConnectionError(APIError):
    """The service could not be reached."""


class APITimeoutError(APIConnectionError):
    """The request timed out before a response arrived."""


class APIStatusError(APIError):
    """The service answered with a non-success HTTP status.

    Raised before any response body is handed to a decoder, so a failed
    streaming request never produces a ``MessageStream``.
    """

    def __init__(self, status_code: int, reason: str, body: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        message = f"{status_code} {reason}".strip()
        if body:
            message = f"{message} - {body}"
        super().__init__(message)


class APIResponseValidationError(APIError):
    """A successful response carried a body that could not be decoded."""

    def __init__(self, message: str, body: str = "") -> None:
        self.body = body
        super().__init__(message)


class StreamError(ClaudeStreamError):
    """Fatal failure while pulling events from a stream."""


class MalformedFrameError(StreamError):
    """A line inside an SSE frame is not a ``field: value`` pair."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"invalid SSE format: {line}")


class EventDecodeError(StreamError):
    """The payload of a known event kind has the wrong shape."""

    def __init__(self, event: str, data: str) -> None:
        self.event = event
        self.data = data
        super().__init__(f"could not decode {event} event: {data}")


class StreamEventError(StreamError):
    """The service sent an ``error`` event.

    ``payload`` is always the raw data. When the payload is a JSON error
    envelope, ``error_type`` and ``error_message`` are filled from it.
    """

    def __init__(self, payload: str) -> None:
        self.payload = payload
        self.error_type: str | None = None
        self.error_message: str | None = None
        try:
            body: Any = json.loads(payload)
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            self.error_type = body["error"].get("type")
            self.error_message = body["error"].get("message")
        super().__init__(f"stream error: {payload}")


class UnknownEventError(StreamError):
    """An unrecognized event kind arrived on a strict stream."""

    def __init__(self, event: str) -> None:
        self.event = event
        super().__init__(f"unknown event type: {event}")


class StreamClosedError(StreamError):
    """The stream was pulled after it failed or was closed."""


def from_httpx_error(exc: httpx.HTTPError) -> APIError:
    """Map an ``httpx`` failure onto this package's hierarchy.

    Timeouts and network failures become connection errors; anything else,
    such as a body that fails content decoding, is a response error.
    """
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, httpx.TimeoutException):
        return APITimeoutError(message)
    if isinstance(exc, httpx.TransportError):
        return APIConnectionError(message)
    return APIResponseValidationError(message)
