from __future__ import annotations

import io
import unittest

from saf.constants import MAX_HEADER_LENGTH
from saf.errors import FormatError, TruncatedStreamError
from saf.frames import END_OF_STREAM, FrameCodec


class TrickleStream(io.RawIOBase):
    """Read-only stream that hands out at most ``step`` bytes per read and logs request sizes."""

    def __init__(self, data: bytes, step: int = 1):
        self._buf = io.BytesIO(data)
        self.step = step
        self.requests = []

    def readable(self):
        return True

    def read(self, n=-1):
        self.requests.append(n)
        if n is None or n < 0:
            n = self.step
        return self._buf.read(min(n, self.step))

    def tell(self):
        return self._buf.tell()


def _frames(*payloads: bytes) -> bytes:
    out = io.BytesIO()
    codec = FrameCodec(out)
    for p in payloads:
        codec.write_frame(p)
    return out.getvalue()


class FrameWriteTests(unittest.TestCase):
    def test_frame_layout(self):
        self.assertEqual(b"5\nhello", _frames(b"hello"))
        self.assertEqual(b"0\n3\nabc", _frames(b"", b"abc"))

    def test_write_line(self):
        out = io.BytesIO()
        codec = FrameCodec(out)
        codec.write_line("SAF1")
        self.assertEqual(b"SAF1\n", out.getvalue())
        self.assertEqual(5, codec.bytes_written)
        with self.assertRaises(ValueError):
            codec.write_line("two\nlines")

    def test_copy_from_is_bounded(self):
        out = io.BytesIO()
        codec = FrameCodec(out, buffer_size=3)
        codec.copy_from(io.BytesIO(b"abcdefghij"), 7)
        self.assertEqual(b"abcdefg", out.getvalue())

    def test_copy_from_short_source(self):
        codec = FrameCodec(io.BytesIO())
        with self.assertRaises(TruncatedStreamError):
            codec.copy_from(io.BytesIO(b"abc"), 10)


class FrameReadTests(unittest.TestCase):
    def test_roundtrip_sequence(self):
        codec = FrameCodec(io.BytesIO(_frames(b"one", b"", b"three")))
        self.assertEqual(b"one", codec.read_frame())
        self.assertEqual(b"", codec.read_frame())
        self.assertEqual(b"three", codec.read_frame())
        self.assertIs(END_OF_STREAM, codec.read_frame())
        self.assertIs(END_OF_STREAM, codec.read_frame())

    def test_length_line_never_reads_ahead(self):
        data = _frames(b"header") + b"PAYLOAD"
        stream = TrickleStream(data, step=1024)
        codec = FrameCodec(stream)
        self.assertEqual(b"header", codec.read_frame())
        # every length-line read asks for a single byte, the payload read for exactly 6
        self.assertEqual([1, 1, 6], stream.requests)
        self.assertEqual(len(b"6\nheader"), stream.tell())

    def test_short_reads_are_completed(self):
        payload = bytes(range(256)) * 4
        stream = TrickleStream(_frames(payload, b"next"), step=7)
        codec = FrameCodec(stream)
        self.assertEqual(payload, codec.read_frame())
        self.assertEqual(b"next", codec.read_frame())
        self.assertIs(END_OF_STREAM, codec.read_frame())

    def test_copy_to_stops_at_length(self):
        stream = TrickleStream(b"0123456789tail", step=4096)
        codec = FrameCodec(stream, buffer_size=4)
        sink = bytearray()
        codec.copy_to(sink.extend, 10)
        self.assertEqual(b"0123456789", bytes(sink))
        self.assertEqual(10, stream.tell())
        self.assertTrue(all(n <= 4 for n in stream.requests))
        self.assertEqual(10, codec.bytes_read)

    def test_skip(self):
        codec = FrameCodec(io.BytesIO(b"xxxxx" + _frames(b"after")))
        codec.skip(5)
        self.assertEqual(b"after", codec.read_frame())

    def test_crlf_tolerated(self):
        codec = FrameCodec(io.BytesIO(b"3\r\nabc"))
        self.assertEqual(b"abc", codec.read_frame())

    def test_bytes_read_matches_consumed(self):
        data = _frames(b"a" * 10, b"b" * 20)
        codec = FrameCodec(io.BytesIO(data))
        codec.read_frame()
        codec.read_frame()
        self.assertIs(END_OF_STREAM, codec.read_frame())
        self.assertEqual(len(data), codec.bytes_read)


class FrameErrorTests(unittest.TestCase):
    def test_non_numeric_length(self):
        for bad in (b"abc\nxyz", b"-3\nabc", b"\nabc", b"1.5\nab", b"0x10\n"):
            with self.subTest(bad=bad):
                with self.assertRaises(FormatError):
                    FrameCodec(io.BytesIO(bad)).read_frame()

    def test_overlong_length_line(self):
        with self.assertRaises(FormatError):
            FrameCodec(io.BytesIO(b"1" * 100 + b"\n")).read_frame()

    def test_frame_over_limit(self):
        data = str(MAX_HEADER_LENGTH + 1).encode("ascii") + b"\n"
        with self.assertRaises(FormatError):
            FrameCodec(io.BytesIO(data)).read_frame()

    def test_non_ascii_line(self):
        with self.assertRaises(FormatError):
            FrameCodec(io.BytesIO("²\n".encode("utf-8"))).read_frame()

    def test_truncated_payload(self):
        with self.assertRaises(TruncatedStreamError):
            FrameCodec(io.BytesIO(b"10\nshort")).read_frame()

    def test_eof_inside_length_line(self):
        with self.assertRaises(TruncatedStreamError):
            FrameCodec(io.BytesIO(b"12")).read_frame()

    def test_truncated_copy(self):
        codec = FrameCodec(io.BytesIO(b"abc"))
        with self.assertRaises(TruncatedStreamError):
            codec.copy_to(lambda _b: None, 4)


if __name__ == "__main__":
    unittest.main()
