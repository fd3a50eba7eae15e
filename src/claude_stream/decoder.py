"""Decoding of SSE frames into typed stream events."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from .constants import StreamEventType
from .errors import EventDecodeError, StreamEventError, UnknownEventError
from .events import MessageStreamEvent
from .sse import Frame
from .types import (
    ContentBlock,
    ContentBlockDeltaEvent,
    ContentBlockEvent,
    Message,
    MessageDeltaEvent,
    MessageStartEvent,
)

logger = logging.getLogger(__name__)


class EventDecoder:
    """Turns frames into ``MessageStreamEvent`` objects.

    One decoder belongs to one stream. It holds the in-progress message
    started by ``message_start`` so that later ``message_delta`` usage can be
    added to it; it does not accumulate content block text.

    Args:
        ignore_unknown_events: When true, unrecognized event kinds are
            returned as opaque events. When false they raise
            ``UnknownEventError``.
    """

    def __init__(self, *, ignore_unknown_events: bool = True) -> None:
        self._ignore_unknown_events = ignore_unknown_events
        self._message: Message | None = None

    @property
    def ignore_unknown_events(self) -> bool:
        return self._ignore_unknown_events

    @property
    def message(self) -> Message | None:
        """The in-progress message, or ``None`` before ``message_start``."""
        return self._message

    def decode(self, frame: Frame) -> MessageStreamEvent:
        """Decode one frame.

        Args:
            frame: The frame to decode.

        Returns:
            MessageStreamEvent: A freshly built event.

        Raises:
            StreamEventError: If the frame is a service ``error`` event.
            UnknownEventError: If the kind is unknown and not tolerated.
            EventDecodeError: If the payload does not match its kind.
        """
        try:
            kind = StreamEventType(frame.event)
        except ValueError:
            return self._decode_unknown(frame)

        if kind is StreamEventType.ERROR:
            logger.warning("Service sent an error event: %s", frame.data)
            raise StreamEventError(frame.data)
        if kind is StreamEventType.PING:
            return MessageStreamEvent(type=kind)
        if kind in (StreamEventType.MESSAGE_START, StreamEventType.MESSAGE_STOP):
            return self._decode_message(kind, frame)
        if kind is StreamEventType.MESSAGE_DELTA:
            return self._decode_message_delta(frame)
        if kind is StreamEventType.CONTENT_BLOCK_DELTA:
            return self._decode_content_block_delta(frame)
        return self._decode_content_block(kind, frame)

    def _decode_message(
        self, kind: StreamEventType, frame: Frame
    ) -> MessageStreamEvent:
        payload = _parse(MessageStartEvent, frame)
        if payload.message is not None:
            self._message = payload.message
        return MessageStreamEvent(type=kind, message=self._snapshot())

    def _decode_message_delta(self, frame: Frame) -> MessageStreamEvent:
        payload = _parse(MessageDeltaEvent, frame)
        if self._message is not None:
            if payload.usage is not None:
                self._message.usage.output_tokens += payload.usage.output_tokens
            if payload.delta.stop_reason:
                self._message.stop_reason = payload.delta.stop_reason
            if payload.delta.stop_sequence is not None:
                self._message.stop_sequence = payload.delta.stop_sequence
        return MessageStreamEvent(
            type=StreamEventType.MESSAGE_DELTA,
            message=self._snapshot(),
            delta=payload.delta,
            usage=payload.usage,
        )

    def _decode_content_block(
        self, kind: StreamEventType, frame: Frame
    ) -> MessageStreamEvent:
        raw = _load(frame)
        # The service wraps the block in an envelope; bare blocks are accepted too.
        if isinstance(raw, dict) and "content_block" in raw:
            payload = _validate(ContentBlockEvent, raw, frame)
            return MessageStreamEvent(
                type=kind, content_block=payload.content_block, index=payload.index
            )
        block = _validate(ContentBlock, raw, frame)
        index = raw.get("index")
        if not isinstance(index, int):
            index = None
        return MessageStreamEvent(type=kind, content_block=block, index=index)

    def _decode_content_block_delta(self, frame: Frame) -> MessageStreamEvent:
        payload = _parse(ContentBlockDeltaEvent, frame)
        return MessageStreamEvent(
            type=StreamEventType.CONTENT_BLOCK_DELTA,
            content_block=ContentBlock(
                type=payload.delta.type, text=payload.delta.text
            ),
            index=payload.index,
        )

    def _decode_unknown(self, frame: Frame) -> MessageStreamEvent:
        if not self._ignore_unknown_events:
            raise UnknownEventError(frame.event)
        logger.debug("Passing through unknown event %r", frame.event)
        return MessageStreamEvent(type=frame.event)

    def _snapshot(self) -> Message | None:
        if self._message is None:
            return None
        return self._message.model_copy(deep=True)


def _load(frame: Frame) -> Any:
    try:
        return json.loads(frame.data)
    except ValueError as e:
        raise EventDecodeError(frame.event, frame.data) from e


def _validate(model: type[BaseModel], raw: Any, frame: Frame) -> Any:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise EventDecodeError(frame.event, frame.data) from e


def _parse(model: type[BaseModel], frame: Frame) -> Any:
    return _validate(model, _load(frame), frame)
