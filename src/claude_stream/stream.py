"""Pull-based stream handles over a streaming HTTP response."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Iterator

import httpx

from .constants import StreamEventType, StreamState
from .decoder import EventDecoder
from .errors import StreamClosedError, StreamError, from_httpx_error
from .events import MessageStreamEvent
from .sse import AsyncFrameReader, FrameReader
from .types import ContentBlock, Message

logger = logging.getLogger(__name__)


class MessageAccumulator:
    """Rebuilds the complete message from a sequence of stream events.

    Text fragments are appended to the block at their index; the message
    metadata and usage come from the latest message-level event.
    """

    def __init__(self) -> None:
        self._message: Message | None = None
        self._blocks: dict[int, ContentBlock] = {}

    def add(self, event: MessageStreamEvent) -> None:
        if event.message is not None:
            self._message = event.message

        if event.type == StreamEventType.CONTENT_BLOCK_START and event.content_block:
            index = event.index if event.index is not None else len(self._blocks)
            self._blocks[index] = event.content_block.model_copy()
        elif event.type == StreamEventType.CONTENT_BLOCK_DELTA and event.content_block:
            index = event.index or 0
            block = self._blocks.setdefault(index, ContentBlock(type="text"))
            block.text += event.content_block.text

    def result(self) -> Message:
        """Return the accumulated message.

        Raises:
            StreamError: If no ``message_start`` was seen.
        """
        if self._message is None:
            raise StreamError("stream ended before message_start")
        message = self._message.model_copy(deep=True)
        if self._blocks:
            message.content = [self._blocks[i] for i in sorted(self._blocks)]
        return message


class MessageStream:
    """Synchronous stream of ``MessageStreamEvent`` objects.

    The handle owns the response and releases it exactly once: on ``close``,
    or as soon as the stream is exhausted or fails. Use it as a context
    manager to guarantee release on every exit path.

    Not safe for concurrent pulls; callers sharing a handle must serialize
    access.

    Args:
        response: A streaming ``httpx.Response`` with a 2xx status.
        ignore_unknown_events: Whether unrecognized event kinds are returned
            as opaque events instead of raising ``UnknownEventError``.
    """

    def __init__(
        self, response: httpx.Response, *, ignore_unknown_events: bool = True
    ) -> None:
        self._response = response
        self._reader = FrameReader(response.iter_lines())
        self._decoder = EventDecoder(ignore_unknown_events=ignore_unknown_events)
        self._state = StreamState.OPEN
        self._released = False

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def current_message(self) -> Message | None:
        """The message being streamed, as known after the last pull."""
        return self._decoder.message

    def recv(self) -> MessageStreamEvent | None:
        """Pull the next event, blocking on the response body.

        Returns:
            MessageStreamEvent | None: The next event, or ``None`` once the
            stream is exhausted.

        Raises:
            StreamError: On malformed frames, decode failures, service error
                events or unknown events on a strict stream.
            APIError: If reading or content-decoding the body fails.
            StreamClosedError: If the stream already failed or was closed.
        """
        if self._state is StreamState.DONE:
            return None
        if self._state is not StreamState.OPEN:
            raise StreamClosedError(f"stream is {self._state.value}")

        try:
            frame = self._reader.read_frame()
            if frame is None:
                self._finish(StreamState.DONE)
                return None
            return self._decoder.decode(frame)
        except StreamError:
            self._finish(StreamState.ERRORED)
            raise
        except httpx.HTTPError as e:
            self._finish(StreamState.ERRORED)
            raise from_httpx_error(e) from e
        except Exception:
            self._finish(StreamState.ERRORED)
            raise

    def __iter__(self) -> Iterator[MessageStreamEvent]:
        return self

    def __next__(self) -> MessageStreamEvent:
        event = self.recv()
        if event is None:
            raise StopIteration
        return event

    @property
    def text_stream(self) -> Iterator[str]:
        """Iterate over the text fragments of the remaining events."""
        for event in self:
            if event.type == StreamEventType.CONTENT_BLOCK_DELTA and event.content_block:
                yield event.content_block.text

    def get_final_message(self) -> Message:
        """Drain the stream and return the complete message."""
        accumulator = MessageAccumulator()
        for event in self:
            accumulator.add(event)
        return accumulator.result()

    def close(self) -> None:
        """Release the response. Safe to call any number of times."""
        self._release()
        self._state = StreamState.CLOSED

    def _finish(self, state: StreamState) -> None:
        self._state = state
        logger.debug("Message stream %s", state.value)
        self._release()

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        self._response.close()

    def __enter__(self) -> MessageStream:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class AsyncMessageStream:
    """Asynchronous stream of ``MessageStreamEvent`` objects.

    Same contract as ``MessageStream`` with awaitable pulls.
    """

    def __init__(
        self, response: httpx.Response, *, ignore_unknown_events: bool = True
    ) -> None:
        self._response = response
        self._reader = AsyncFrameReader(response.aiter_lines())
        self._decoder = EventDecoder(ignore_unknown_events=ignore_unknown_events)
        self._state = StreamState.OPEN
        self._released = False

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def current_message(self) -> Message | None:
        return self._decoder.message

    async def arecv(self) -> MessageStreamEvent | None:
        """Await the next event; ``None`` once the stream is exhausted."""
        if self._state is StreamState.DONE:
            return None
        if self._state is not StreamState.OPEN:
            raise StreamClosedError(f"stream is {self._state.value}")

        try:
            frame = await self._reader.read_frame()
            if frame is None:
                await self._finish(StreamState.DONE)
                return None
            return self._decoder.decode(frame)
        except StreamError:
            await self._finish(StreamState.ERRORED)
            raise
        except httpx.HTTPError as e:
            await self._finish(StreamState.ERRORED)
            raise from_httpx_error(e) from e
        except Exception:
            await self._finish(StreamState.ERRORED)
            raise

    def __aiter__(self) -> AsyncIterator[MessageStreamEvent]:
        return self

    async def __anext__(self) -> MessageStreamEvent:
        event = await self.arecv()
        if event is None:
            raise StopAsyncIteration
        return event

    async def text_stream(self) -> AsyncIterator[str]:
        """Iterate over the text fragments of the remaining events.

        Unlike the synchronous property, this is a method returning an async
        iterator: ``async for text in stream.text_stream()``.
        """
        async for event in self:
            if event.type == StreamEventType.CONTENT_BLOCK_DELTA and event.content_block:
                yield event.content_block.text

    async def get_final_message(self) -> Message:
        """Drain the stream and return the complete message."""
        accumulator = MessageAccumulator()
        async for event in self:
            accumulator.add(event)
        return accumulator.result()

    async def aclose(self) -> None:
        """Release the response. Safe to call any number of times."""
        await self._release()
        self._state = StreamState.CLOSED

    async def _finish(self, state: StreamState) -> None:
        self._state = state
        logger.debug("Message stream %s", state.value)
        await self._release()

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        await self._response.aclose()

    async def __aenter__(self) -> AsyncMessageStream:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()
