from __future__ import annotations

"""
Length-prefixed framing over a raw binary stream.

Frame layout
- ASCII decimal length, terminated by ``\\n``
- exactly that many raw bytes, no terminator

Length lines are read one byte at a time. A buffered text reader would pull
bytes of the following payload into its own buffer and leave the underlying
stream positioned past the frame boundary, which desynchronizes every frame
after it. Payload reads are bounded the same way: the codec never asks the
stream for more bytes than the current frame still owes.
"""

from typing import BinaryIO, Callable, Optional, Union

from .constants import DEFAULT_BUFFER_SIZE, MAX_HEADER_LENGTH, MAX_LENGTH_LINE
from .errors import FormatError, TruncatedStreamError


class _EndOfStream:
    __slots__ = ()

    def __repr__(self) -> str:
        return "END_OF_STREAM"

    def __bool__(self) -> bool:
        return False


# Returned by read_line/read_frame on a clean EOF at a frame boundary
END_OF_STREAM = _EndOfStream()


class FrameCodec:
    """Reads and writes frames on one stream; sole owner of its cursor.

    Not thread-safe. Only one codec (and therefore one archive object) may use
    a given stream; interleaving other reads or writes corrupts the framing.
    """

    def __init__(self, stream: BinaryIO, buffer_size: int = DEFAULT_BUFFER_SIZE):
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.stream = stream
        self.buffer_size = buffer_size
        self.bytes_read = 0
        self.bytes_written = 0

    # writing

    def _write(self, data: bytes) -> None:
        self.stream.write(data)
        self.bytes_written += len(data)

    def write_line(self, text: str) -> None:
        if "\n" in text or "\r" in text:
            raise ValueError("line text may not contain newlines")
        self._write(text.encode("ascii") + b"\n")

    def write_frame(self, payload: bytes) -> None:
        self._write(str(len(payload)).encode("ascii") + b"\n")
        self._write(payload)

    def copy_from(self, src: BinaryIO, length: int) -> None:
        """Copy exactly ``length`` bytes from ``src`` into the stream as raw payload."""
        remaining = length
        while remaining > 0:
            buf = src.read(min(remaining, self.buffer_size))
            if not buf:
                raise TruncatedStreamError(
                    f"Source ended after {length - remaining} of {length} payload bytes"
                )
            self._write(buf)
            remaining -= len(buf)

    def flush(self) -> None:
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()

    # reading

    def read_line(self, limit: int = MAX_LENGTH_LINE) -> Union[str, _EndOfStream]:
        """Read one ``\\n``-terminated ASCII line without reading past it."""
        line = bytearray()
        while True:
            b = self.stream.read(1)
            if not b:
                if not line:
                    return END_OF_STREAM
                raise TruncatedStreamError("Stream ended inside a length line")
            self.bytes_read += 1
            if b == b"\n":
                break
            line += b
            if len(line) > limit:
                raise FormatError(f"Line exceeds {limit} bytes")
        if line.endswith(b"\r"):
            del line[-1]
        try:
            return line.decode("ascii")
        except UnicodeDecodeError:
            raise FormatError("Line is not ASCII") from None

    def read_length(self) -> Union[int, _EndOfStream]:
        line = self.read_line(MAX_LENGTH_LINE)
        if line is END_OF_STREAM:
            return END_OF_STREAM
        text = line.strip()
        # str.isdigit() accepts non-ASCII digits; the line is already ASCII-only
        if not text or not text.isdigit():
            raise FormatError(f"Invalid frame length: {line!r}")
        return int(text)

    def read_exact(self, n: int) -> bytes:
        out = bytearray()
        while len(out) < n:
            buf = self.stream.read(n - len(out))
            if not buf:
                raise TruncatedStreamError(f"Unexpected end of stream after {len(out)} of {n} bytes")
            out += buf
            self.bytes_read += len(buf)
        return bytes(out)

    def read_frame(self, max_length: Optional[int] = MAX_HEADER_LENGTH) -> Union[bytes, _EndOfStream]:
        n = self.read_length()
        if n is END_OF_STREAM:
            return END_OF_STREAM
        if max_length is not None and n > max_length:
            raise FormatError(f"Frame length {n} exceeds limit of {max_length} bytes")
        return self.read_exact(n)

    def copy_to(self, write: Callable[[bytes], object], length: int) -> None:
        """Feed exactly ``length`` payload bytes to ``write`` in bounded chunks."""
        remaining = length
        while remaining > 0:
            buf = self.stream.read(min(remaining, self.buffer_size))
            if not buf:
                raise TruncatedStreamError(
                    f"Unexpected end of stream after {length - remaining} of {length} payload bytes"
                )
            self.bytes_read += len(buf)
            write(buf)
            remaining -= len(buf)

    def skip(self, length: int) -> None:
        self.copy_to(lambda _buf: None, length)
