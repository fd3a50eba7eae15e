from .client import Client
from .constants import (
    ROLE_ASSISTANT,
    ROLE_USER,
    MODEL_CLAUDE_3_5_SONNET,
    MODEL_CLAUDE_3_5_SONNET_20240620,
    MODEL_CLAUDE_3_HAIKU,
    MODEL_CLAUDE_3_HAIKU_20240307,
    MODEL_CLAUDE_3_OPUS,
    MODEL_CLAUDE_3_OPUS_20240229,
    MODEL_CLAUDE_3_SONNET,
    MODEL_CLAUDE_3_SONNET_20240229,
    StreamEventType,
    StreamState,
)
from .decoder import EventDecoder
from .errors import (
    APIConnectionError,
    APIError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
    ClaudeStreamError,
    EventDecodeError,
    MalformedFrameError,
    StreamClosedError,
    StreamError,
    StreamEventError,
    UnknownEventError,
)
from .events import MessageStreamEvent
from .sse import AsyncFrameReader, Frame, FrameReader
from .stream import AsyncMessageStream, MessageAccumulator, MessageStream
from .types import (
    ContentBlock,
    Message,
    MessageCreateParams,
    MessageDelta,
    MessageParam,
    Usage,
)

__all__ = [
    "Client",
    "MessageStream", "AsyncMessageStream", "MessageAccumulator",
    "FrameReader", "AsyncFrameReader", "Frame",
    "EventDecoder",
    "MessageStreamEvent",
    "StreamEventType", "StreamState",
    "Message", "ContentBlock", "Usage", "MessageDelta",
    "MessageParam", "MessageCreateParams",
    "ROLE_USER", "ROLE_ASSISTANT",
    "MODEL_CLAUDE_3_5_SONNET", "MODEL_CLAUDE_3_5_SONNET_20240620",
    "MODEL_CLAUDE_3_OPUS", "MODEL_CLAUDE_3_SONNET", "MODEL_CLAUDE_3_HAIKU",
    "MODEL_CLAUDE_3_OPUS_20240229", "MODEL_CLAUDE_3_SONNET_20240229",
    "MODEL_CLAUDE_3_HAIKU_20240307",
    "ClaudeStreamError", "APIError", "APIConnectionError", "APITimeoutError",
    "APIStatusError", "APIResponseValidationError", "StreamError", "MalformedFrameError", "EventDecodeError",
    "StreamEventError", "UnknownEventError", "StreamClosedError",
]
