"""Constants and Enums for the claude_stream package."""

from __future__ import annotations

from enum import Enum
from typing import Literal

Role = Literal["user", "assistant"]

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


class StreamEventType(str, Enum):
    PING = "ping"
    ERROR = "error"
    MESSAGE_START = "message_start"
    MESSAGE_STOP = "message_stop"
    MESSAGE_DELTA = "message_delta"
    CONTENT_BLOCK_START = "content_block_start"
    CONTENT_BLOCK_STOP = "content_block_stop"
    CONTENT_BLOCK_DELTA = "content_block_delta"


class StreamState(str, Enum):
    OPEN = "open"
    DONE = "done"
    ERRORED = "errored"
    CLOSED = "closed"


# Models
MODEL_CLAUDE_3_5_SONNET = "claude-3-5-sonnet-20240620"
MODEL_CLAUDE_3_5_SONNET_20240620 = "claude-3-5-sonnet-20240620"

MODEL_CLAUDE_3_OPUS = "claude-3-opus-20240229"
MODEL_CLAUDE_3_SONNET = "claude-3-sonnet-20240229"
MODEL_CLAUDE_3_HAIKU = "claude-3-haiku-20240307"
MODEL_CLAUDE_3_OPUS_20240229 = "claude-3-opus-20240229"
MODEL_CLAUDE_3_SONNET_20240229 = "claude-3-sonnet-20240229"
MODEL_CLAUDE_3_HAIKU_20240307 = "claude-3-haiku-20240307"

# Protocol defaults
DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_TIMEOUT = 600.0  # seconds
DEFAULT_MAX_RETRIES = 2
DEFAULT_USER_AGENT = "claude-stream/0.1.0"
DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_ACCEPT = "application/json"
DEFAULT_STREAM_ACCEPT = "text/event-stream"
DEFAULT_API_VERSION = "2023-06-01"

MESSAGES_PATH = "/v1/messages"

API_KEY_ENV = "ANTHROPIC_API_KEY"
AUTH_TOKEN_ENV = "ANTHROPIC_AUTH_TOKEN"
