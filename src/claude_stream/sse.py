"""Server-sent event framing.

The service streams frames of ``field: value`` lines terminated by a blank
line. Only the ``event`` and ``data`` fields carry meaning; anything else is
skipped so newer servers can add fields freely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator

from .constants import StreamEventType
from .errors import MalformedFrameError

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ": "


@dataclass(frozen=True)
class Frame:
    """One complete SSE frame."""

    event: str
    data: str


@dataclass
class FrameAssembler:
    """Accumulates lines into frames.

    Feed lines one at a time with ``feed``; it returns a ``Frame`` whenever a
    blank line closes a frame that carries data. Frames without data, and
    ``ping`` frames, are consumed silently.
    """

    event: str = ""
    data_lines: list[str] = field(default_factory=list)

    def feed(self, line: str) -> Frame | None:
        line = line.strip()
        if not line:
            return self._dispatch()

        name, sep, value = line.partition(FIELD_SEPARATOR)
        if not sep:
            raise MalformedFrameError(line)

        if name == "event":
            self.event = value
        elif name == "data":
            self.data_lines.append(value)
        return None

    def finish(self) -> Frame | None:
        """Flush a trailing frame that was not closed by a blank line."""
        return self._dispatch()

    def _dispatch(self) -> Frame | None:
        event, data_lines = self.event, self.data_lines
        self.event, self.data_lines = "", []

        if event == StreamEventType.PING.value:
            logger.debug("Dropping ping frame")
            return None
        if not data_lines:
            return None
        return Frame(event=event, data="\n".join(data_lines))


class FrameReader:
    """Reads SSE frames from an iterable of text lines.

    Args:
        lines: Decoded lines without terminators, for example
            ``httpx.Response.iter_lines()``.
    """

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines: Iterator[str] = iter(lines)
        self._assembler = FrameAssembler()
        self._exhausted = False

    def read_frame(self) -> Frame | None:
        """Block until the next frame is available.

        Returns:
            Frame | None: The next frame, or ``None`` once the stream is
            exhausted.

        Raises:
            MalformedFrameError: If a line lacks the ``": "`` separator.
        """
        if self._exhausted:
            return None
        for line in self._lines:
            frame = self._assembler.feed(line)
            if frame is not None:
                return frame
        self._exhausted = True
        return self._assembler.finish()


class AsyncFrameReader:
    """Async counterpart of ``FrameReader``.

    Args:
        lines: An async iterable of decoded lines, for example
            ``httpx.Response.aiter_lines()``.
    """

    def __init__(self, lines: AsyncIterable[str]) -> None:
        self._lines: AsyncIterator[str] = lines.__aiter__()
        self._assembler = FrameAssembler()
        self._exhausted = False

    async def read_frame(self) -> Frame | None:
        """Await the next frame; ``None`` once the stream is exhausted."""
        if self._exhausted:
            return None
        async for line in self._lines:
            frame = self._assembler.feed(line)
            if frame is not None:
                return frame
        self._exhausted = True
        return self._assembler.finish()
