import sys
import os
import unittest
from unittest import mock

import httpx

# Add the src directory to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from claude_stream import (
    APIConnectionError,
    APIResponseValidationError,
    AsyncMessageStream,
    MalformedFrameError,
    MessageStream,
    StreamClosedError,
    StreamError,
    StreamEventError,
    StreamEventType,
    StreamState,
    UnknownEventError,
)


SCENARIO = (
    "event: message_start\n"
    'data: {"type":"message_start","message":{"id":"m1","role":"assistant","content":[],"usage":{"input_tokens":10,"output_tokens":0}}}\n\n'
    "event: content_block_start\n"
    'data: {"type":"text","text":""}\n\n'
    "event: content_block_delta\n"
    'data: {"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"Ok"}}\n\n'
    "event: message_delta\n"
    'data: {"type":"message_delta","delta":{"stop_reason":"end_turn"},"usage":{"output_tokens":1}}\n\n'
    "event: message_stop\n"
    'data: {"type":"message_stop"}\n\n'
)

ABC = (
    "event: message_start\n"
    'data: {"type":"message_start","message":{"id":"m2","role":"assistant","content":[],"usage":{"input_tokens":3,"output_tokens":1}}}\n\n'
    "event: content_block_start\n"
    'data: {"type":"content_block_start","index":0,"content_block":{"type":"text","text":""}}\n\n'
    "event: ping\n"
    'data: {"type": "ping"}\n\n'
    "event: content_block_delta\n"
    'data: {"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"A"}}\n\n'
    "event: content_block_delta\n"
    'data: {"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"B"}}\n\n'
    "event: ping\n\n"
    "event: content_block_delta\n"
    'data: {"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"C"}}\n\n'
    "event: content_block_stop\n"
    'data: {"type":"content_block_stop","index":0}\n\n'
    "event: message_delta\n"
    'data: {"type":"message_delta","delta":{"stop_reason":"end_turn","stop_sequence":null},"usage":{"output_tokens":2}}\n\n'
    "event: message_delta\n"
    'data: {"type":"message_delta","delta":{"stop_reason":"end_turn","stop_sequence":null},"usage":{"output_tokens":3}}\n\n'
    "event: message_stop\n"
    'data: {"type":"message_stop"}\n\n'
)

ERROR_THEN_MORE = (
    "event: error\n"
    'data: {"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}\n\n'
    "event: message_stop\n"
    'data: {"type":"message_stop"}\n\n'
)


def make_response(body: str) -> httpx.Response:
    return httpx.Response(200, content=body.encode())


def make_corrupt_gzip_response() -> httpx.Response:
    return httpx.Response(
        200,
        headers={"content-encoding": "gzip"},
        stream=httpx.ByteStream(b"not gzip"),
    )


class FailingStream(httpx.SyncByteStream):
    def __iter__(self):
        yield b'event: message_stop\ndata: {"type":"message_stop"}\n\n'
        raise httpx.ReadError("connection reset")


class TestMessageStream(unittest.TestCase):
    """
    Unit tests for the synchronous stream handle.
    """

    def test_end_to_end_scenario(self):
        """Verify the documented five-frame scenario event by event."""
        stream = MessageStream(make_response(SCENARIO))

        start = stream.recv()
        self.assertEqual(start.type, StreamEventType.MESSAGE_START)
        self.assertEqual(start.message.usage.input_tokens, 10)
        self.assertEqual(start.message.usage.output_tokens, 0)

        block_start = stream.recv()
        self.assertEqual(block_start.type, StreamEventType.CONTENT_BLOCK_START)

        block_delta = stream.recv()
        self.assertEqual(block_delta.type, StreamEventType.CONTENT_BLOCK_DELTA)
        self.assertEqual(block_delta.content_block.text, "Ok")
        self.assertEqual(block_delta.index, 0)

        delta = stream.recv()
        self.assertEqual(delta.type, StreamEventType.MESSAGE_DELTA)
        self.assertEqual(delta.delta.stop_reason, "end_turn")
        self.assertEqual(delta.message.usage.output_tokens, 1)

        stop = stream.recv()
        self.assertEqual(stop.type, StreamEventType.MESSAGE_STOP)

        self.assertIsNone(stream.recv())
        self.assertEqual(stream.state, StreamState.DONE)
        self.assertIsNone(stream.recv())
        stream.close()

    def test_accumulates_text_and_usage(self):
        """Verify fragments concatenate per index and usage sums across deltas."""
        with MessageStream(make_response(ABC)) as stream:
            text = ""
            types = []
            for event in stream:
                types.append(event.type)
                if event.type == StreamEventType.CONTENT_BLOCK_DELTA:
                    text += event.content_block.text

        self.assertEqual(text, "ABC")
        self.assertNotIn(StreamEventType.PING, types)
        self.assertEqual(stream.current_message.usage.output_tokens, 6)
        self.assertEqual(stream.state, StreamState.CLOSED)

    def test_text_stream(self):
        with MessageStream(make_response(ABC)) as stream:
            self.assertEqual(list(stream.text_stream), ["A", "B", "C"])

    def test_get_final_message(self):
        with MessageStream(make_response(SCENARIO)) as stream:
            message = stream.get_final_message()

        self.assertEqual(message.id, "m1")
        self.assertEqual(message.text, "Ok")
        self.assertEqual(len(message.content), 1)
        self.assertEqual(message.stop_reason, "end_turn")
        self.assertEqual(message.usage.output_tokens, 1)

    def test_get_final_message_without_start(self):
        stream = MessageStream(make_response('event: message_stop\ndata: {"type":"message_stop"}\n\n'))
        with self.assertRaises(StreamError):
            stream.get_final_message()

    def test_error_event_terminates_iteration(self):
        """Verify an error frame stops the stream despite buffered frames."""
        stream = MessageStream(make_response(ERROR_THEN_MORE))

        with self.assertRaises(StreamEventError) as ctx:
            stream.recv()
        self.assertIn("overloaded_error", ctx.exception.payload)
        self.assertEqual(stream.state, StreamState.ERRORED)
        self.assertTrue(stream.response.is_closed)

        with self.assertRaises(StreamClosedError):
            stream.recv()
        stream.close()

    def test_malformed_line_is_an_error(self):
        body = SCENARIO.replace("event: content_block_start\n", "event: content_block_start\nbroken\n")
        stream = MessageStream(make_response(body))
        stream.recv()
        with self.assertRaises(MalformedFrameError):
            stream.recv()
        self.assertEqual(stream.state, StreamState.ERRORED)

    def test_unknown_event_tolerance_is_fixed_at_open(self):
        body = 'event: shiny_new_thing\ndata: {"x": 1}\n\n' + SCENARIO

        tolerant = MessageStream(make_response(body))
        event = tolerant.recv()
        self.assertEqual(event.type, "shiny_new_thing")
        self.assertFalse(event.is_known)
        self.assertEqual(tolerant.recv().type, StreamEventType.MESSAGE_START)
        tolerant.close()

        strict = MessageStream(make_response(body), ignore_unknown_events=False)
        with self.assertRaises(UnknownEventError):
            strict.recv()
        strict.close()

    def test_close_twice(self):
        """Verify closing is idempotent and releases the body once."""
        response = make_response(SCENARIO)
        with mock.patch.object(response, "close", wraps=response.close) as close:
            stream = MessageStream(response)
            stream.recv()
            stream.close()
            stream.close()
            self.assertEqual(close.call_count, 1)

        self.assertEqual(stream.state, StreamState.CLOSED)
        with self.assertRaises(StreamClosedError):
            stream.recv()

    def test_exhaustion_releases_body_once(self):
        response = make_response(SCENARIO)
        with mock.patch.object(response, "close", wraps=response.close) as close:
            stream = MessageStream(response)
            list(stream)
            self.assertEqual(close.call_count, 1)
            stream.close()
            self.assertEqual(close.call_count, 1)

    def test_transport_failure_while_reading(self):
        response = httpx.Response(200, stream=FailingStream())
        stream = MessageStream(response)

        self.assertEqual(stream.recv().type, StreamEventType.MESSAGE_STOP)
        with self.assertRaises(APIConnectionError):
            stream.recv()
        self.assertEqual(stream.state, StreamState.ERRORED)

    def test_corrupt_body_releases_response(self):
        """Verify a body that fails content decoding errors the stream and releases it."""
        response = make_corrupt_gzip_response()
        stream = MessageStream(response)

        with self.assertRaises(APIResponseValidationError) as ctx:
            stream.recv()
        self.assertIsInstance(ctx.exception.__cause__, httpx.DecodingError)
        self.assertEqual(stream.state, StreamState.ERRORED)
        self.assertTrue(response.is_closed)

        with self.assertRaises(StreamClosedError):
            stream.recv()
        stream.close()


class TestAsyncMessageStream(unittest.IsolatedAsyncioTestCase):
    """
    Unit tests for the asynchronous stream handle.
    """

    async def test_end_to_end_scenario(self):
        stream = AsyncMessageStream(make_response(SCENARIO))
        events = [event async for event in stream]

        self.assertEqual(
            [event.type for event in events],
            [
                StreamEventType.MESSAGE_START,
                StreamEventType.CONTENT_BLOCK_START,
                StreamEventType.CONTENT_BLOCK_DELTA,
                StreamEventType.MESSAGE_DELTA,
                StreamEventType.MESSAGE_STOP,
            ],
        )
        self.assertEqual(events[0].message.usage.output_tokens, 0)
        self.assertEqual(events[3].message.usage.output_tokens, 1)
        self.assertIsNone(await stream.arecv())
        self.assertEqual(stream.state, StreamState.DONE)

        await stream.aclose()
        await stream.aclose()
        self.assertEqual(stream.state, StreamState.CLOSED)

    async def test_text_stream_and_final_message(self):
        async with AsyncMessageStream(make_response(ABC)) as stream:
            chunks = [text async for text in stream.text_stream()]
        self.assertEqual("".join(chunks), "ABC")

        async with AsyncMessageStream(make_response(ABC)) as stream:
            message = await stream.get_final_message()
        self.assertEqual(message.text, "ABC")
        self.assertEqual(message.usage.output_tokens, 6)

    async def test_error_event(self):
        stream = AsyncMessageStream(make_response(ERROR_THEN_MORE))
        with self.assertRaises(StreamEventError):
            await stream.arecv()
        with self.assertRaises(StreamClosedError):
            await stream.arecv()
        await stream.aclose()

    async def test_corrupt_body_releases_response(self):
        response = make_corrupt_gzip_response()
        stream = AsyncMessageStream(response)

        with self.assertRaises(APIResponseValidationError):
            await stream.arecv()
        self.assertEqual(stream.state, StreamState.ERRORED)
        self.assertTrue(response.is_closed)
        await stream.aclose()


if __name__ == "__main__":
    unittest.main()
