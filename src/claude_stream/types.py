"""Message structures exchanged with the Messages API."""

from __future__ import annotations

from typing import Any
from pydantic import BaseModel, ConfigDict, Field

from .constants import Role


class _WireModel(BaseModel):
    """Base for payloads decoded from the service.

    Unknown fields are ignored so that new server-side fields never break
    decoding.
    """

    model_config = ConfigDict(extra="ignore")


class Usage(_WireModel):
    """Token usage counters."""

    input_tokens: int = 0
    """Number of tokens in the request."""

    output_tokens: int = 0
    """Number of tokens generated so far."""


class ContentBlock(_WireModel):
    """A single unit of model output. Only text blocks are supported."""

    type: str = "text"
    """The kind of block."""

    text: str = ""
    """The accumulated text of the block."""


class Message(_WireModel):
    """A message returned by the service.

    In a stream, the message is created by ``message_start`` and its usage
    and stop metadata are updated by every ``message_delta``.
    """

    id: str = ""
    """Unique message identifier."""

    type: str = "message"
    """Object type, always ``message``."""

    role: str = ""
    """Role of the author, ``assistant`` for generated messages."""

    content: list[ContentBlock] = Field(default_factory=list)
    """Ordered content blocks."""

    model: str = ""
    """The model that produced the message."""

    stop_reason: str | None = None
    """Why generation stopped. Empty until the stream completes."""

    stop_sequence: str | None = None
    """The custom stop sequence that was hit, if any."""

    usage: Usage = Field(default_factory=Usage)
    """Token usage for the message."""

    @property
    def text(self) -> str:
        """Concatenated text of all content blocks."""
        return "".join(block.text for block in self.content)


class MessageDelta(_WireModel):
    """Stop metadata carried by a ``message_delta`` event."""

    stop_reason: str | None = None
    """Why generation stopped, e.g. ``end_turn`` or ``max_tokens``."""

    stop_sequence: str | None = None
    """The custom stop sequence that was hit, if any."""


class TextDelta(_WireModel):
    """A text fragment carried by a ``content_block_delta`` event."""

    type: str = "text_delta"
    """The kind of delta."""

    text: str = ""
    """The fragment to append to the addressed block."""


class MessageStartEvent(_WireModel):
    """Payload of ``message_start`` and ``message_stop``."""

    type: str = ""
    message: Message | None = None


class MessageDeltaEvent(_WireModel):
    """Payload of ``message_delta``.

    ``usage`` is incremental: it must be added to the running message usage.
    """

    type: str = ""
    delta: MessageDelta
    usage: Usage | None = None


class ContentBlockEvent(_WireModel):
    """Envelope form of ``content_block_start`` and ``content_block_stop``."""

    type: str = ""
    index: int = 0
    content_block: ContentBlock


class ContentBlockDeltaEvent(_WireModel):
    """Payload of ``content_block_delta``."""

    type: str = ""
    index: int = 0
    delta: TextDelta


class MessageParam(BaseModel):
    """One input turn of a request."""

    role: Role
    """The author of the turn. Options: `user`, `assistant`."""

    content: str
    """The text of the turn."""


class MessageCreateParams(BaseModel):
    """Request body for creating a message."""

    model: str
    """The model to use."""

    max_tokens: int
    """Maximum number of tokens to generate."""

    messages: list[MessageParam]
    """Input turns, oldest first."""

    metadata: dict[str, str] | None = None
    stop_sequences: list[str] | None = None
    stream: bool | None = None
    system: str | None = None
    temperature: float | None = None
    top_k: int | None = None
    top_p: float | None = None

    def to_request_body(self) -> dict[str, Any]:
        """Serialize the parameters, omitting unset optional fields.

        Returns:
            dict[str, Any]: The JSON-ready request body.
        """
        return self.model_dump(exclude_none=True)
