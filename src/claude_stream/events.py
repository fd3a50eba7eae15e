"""Typed events produced by a message stream."""

from __future__ import annotations

from pydantic import BaseModel

from .constants import StreamEventType
from .types import ContentBlock, Message, MessageDelta, Usage

_KNOWN_TYPES = frozenset(kind.value for kind in StreamEventType)


class MessageStreamEvent(BaseModel):
    """A single decoded stream event.

    A new instance is produced for every pull, and ``message`` is a snapshot
    of the running message at that point, so events may be kept around
    freely.
    """

    type: StreamEventType | str
    """The event kind. Unrecognized kinds keep their raw name."""

    message: Message | None = None
    """The running message, for message-level events."""

    delta: MessageDelta | None = None
    """Stop metadata of a ``message_delta``."""

    usage: Usage | None = None
    """The incremental usage carried by a ``message_delta``."""

    content_block: ContentBlock | None = None
    """The block, or the text fragment of a ``content_block_delta``."""

    index: int | None = None
    """Index of the content block the event refers to."""

    @property
    def is_known(self) -> bool:
        """Whether the event kind is one of ``StreamEventType``."""
        kind = self.type.value if isinstance(self.type, StreamEventType) else self.type
        return kind in _KNOWN_TYPES

    @property
    def stop_reason(self) -> str | None:
        """The terminal stop reason, if this event carries one."""
        return self.delta.stop_reason if self.delta else None
