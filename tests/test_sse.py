import sys
import os
import unittest

# Add the src directory to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from claude_stream import FrameReader, MalformedFrameError


def lines_of(text: str) -> list[str]:
    return text.split("\n")


class TestFrameReader(unittest.TestCase):
    """
    Unit tests for grouping SSE lines into frames.
    """

    def test_reads_frames_in_order(self):
        """Verify blank lines terminate frames and EOF exhausts the reader."""
        reader = FrameReader(
            lines_of(
                'event: message_start\ndata: {"a": 1}\n\n'
                'event: message_stop\ndata: {"b": 2}\n\n'
            )
        )

        first = reader.read_frame()
        self.assertEqual(first.event, "message_start")
        self.assertEqual(first.data, '{"a": 1}')

        second = reader.read_frame()
        self.assertEqual(second.event, "message_stop")

        self.assertIsNone(reader.read_frame())
        self.assertIsNone(reader.read_frame())

    def test_multiline_data_joined_with_newline(self):
        reader = FrameReader(lines_of("event: custom\ndata: one\ndata: two\n\n"))
        frame = reader.read_frame()
        self.assertEqual(frame.data, "one\ntwo")

    def test_ping_frames_are_skipped(self):
        """Verify pings never surface and do not end the pull."""
        reader = FrameReader(
            lines_of(
                "event: ping\n\n"
                'event: ping\ndata: {"type": "ping"}\n\n'
                'event: message_stop\ndata: {"type": "message_stop"}\n\n'
            )
        )
        frame = reader.read_frame()
        self.assertEqual(frame.event, "message_stop")
        self.assertIsNone(reader.read_frame())

    def test_ping_at_end_of_stream_is_exhaustion(self):
        reader = FrameReader(lines_of("event: ping"))
        self.assertIsNone(reader.read_frame())

    def test_frame_without_data_is_consumed(self):
        reader = FrameReader(
            lines_of("\n\nevent: message_start\n\nevent: x\ndata: 1\n\n")
        )
        frame = reader.read_frame()
        self.assertEqual((frame.event, frame.data), ("x", "1"))

    def test_trailing_frame_without_blank_line(self):
        """Verify a final frame cut off by EOF is still returned."""
        reader = FrameReader(["event: message_stop", 'data: {"type": "message_stop"}'])
        frame = reader.read_frame()
        self.assertEqual(frame.event, "message_stop")
        self.assertIsNone(reader.read_frame())

    def test_unknown_fields_and_crlf_are_tolerated(self):
        reader = FrameReader(
            ["id: 7\r", "event: x\r", "retry: 10", "data: payload\r", "\r"]
        )
        frame = reader.read_frame()
        self.assertEqual((frame.event, frame.data), ("x", "payload"))

    def test_malformed_line_raises(self):
        """Verify a line without the separator is an error, not a dropped frame."""
        reader = FrameReader(
            lines_of('event: message_start\ngarbage\ndata: {"type": "x"}\n\n')
        )
        with self.assertRaises(MalformedFrameError) as ctx:
            reader.read_frame()
        self.assertEqual(ctx.exception.line, "garbage")

    def test_empty_input_is_exhausted(self):
        self.assertIsNone(FrameReader([]).read_frame())


if __name__ == "__main__":
    unittest.main()
