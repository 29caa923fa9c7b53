from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, List, Optional

from .constants import DEFAULT_BUFFER_SIZE, MAX_SIGNATURE_LINE, SIGNATURE
from .digest import digest_file, new_hasher, verify
from .errors import FormatError, IntegrityError
from .frames import END_OF_STREAM, FrameCodec
from .header import DirectoryEntry, Entry, FileEntry, decode_header
from .pathutil import to_destination_path
from .sink import FilesystemSink


def _read_signature(codec: FrameCodec, expected: Optional[str]) -> Optional[str]:
    line = codec.read_line(MAX_SIGNATURE_LINE)
    signature = None if line is END_OF_STREAM else line.strip()
    if expected is not None and signature != expected:
        if signature is None:
            raise FormatError("Missing archive signature (empty stream)")
        raise FormatError(f"Bad archive signature {signature!r}, expected {expected!r}")
    return signature


def _digest_algorithm(entry: FileEntry) -> str:
    try:
        new_hasher(entry.effective_digest_algorithm)
    except ValueError:
        raise FormatError(
            f"Unsupported digest algorithm {entry.effective_digest_algorithm!r} for {entry.name}"
        ) from None
    return entry.effective_digest_algorithm


class ArchiveReader:
    """Sequential reader that materializes entries under ``extract_root``.

    The signature line is consumed on construction. Entries are then read
    strictly in stream order; there is no seeking. The reader borrows
    ``stream`` and never closes it.
    """

    def __init__(
        self,
        stream: BinaryIO,
        extract_root: str,
        *,
        verify_on_read: bool = True,
        expected_signature: Optional[str] = SIGNATURE,
        sink: Optional[FilesystemSink] = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        self.extract_root = extract_root
        self.verify_on_read = verify_on_read
        self.sink = sink if sink is not None else FilesystemSink()
        self.buffer_size = buffer_size
        self.codec = FrameCodec(stream, buffer_size=buffer_size)
        self.signature = _read_signature(self.codec, expected_signature)
        self._exhausted = self.signature is None

    def __iter__(self) -> Iterator[Entry]:
        while True:
            entry = self.read_next()
            if entry is None:
                return
            yield entry

    def destination_for(self, entry: Entry) -> str:
        return to_destination_path(self.extract_root, entry.name)

    def read_next(self) -> Optional[Entry]:
        """Extract the next entry and return its header; None at end of archive."""
        if self._exhausted:
            return None
        blob = self.codec.read_frame()
        if blob is END_OF_STREAM:
            self._exhausted = True
            return None
        entry = decode_header(blob)
        target = self.destination_for(entry)

        if isinstance(entry, DirectoryEntry):
            self.sink.create_directory(target, entry.mod_time_ns)
            return entry

        # Bounded copy: stop at entry.length so the next header starts where expected
        with self.sink.create_file(target) as fh:
            self.codec.copy_to(fh.write, entry.length)
        self.sink.set_mod_time(target, entry.mod_time_ns)

        if self.verify_on_read and entry.digest is not None:
            actual = digest_file(target, _digest_algorithm(entry), self.buffer_size)
            if not verify(entry.digest, actual):
                raise IntegrityError(target, entry.digest, actual)
        return entry

    def read_all(self) -> List[Entry]:
        """Extract every remaining entry; the first error aborts the batch."""
        return list(self)


def list_entries(
    stream: BinaryIO,
    *,
    expected_signature: Optional[str] = SIGNATURE,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> List[Entry]:
    """Return every entry header, skipping payloads without touching the filesystem."""
    codec = FrameCodec(stream, buffer_size=buffer_size)
    if _read_signature(codec, expected_signature) is None:
        return []
    entries: List[Entry] = []
    while True:
        blob = codec.read_frame()
        if blob is END_OF_STREAM:
            return entries
        entry = decode_header(blob)
        if isinstance(entry, FileEntry):
            codec.skip(entry.length)
        entries.append(entry)


@dataclass
class VerifyReport:
    signature: Optional[str] = None
    directories: int = 0
    checked: List[str] = field(default_factory=list)
    unchecked: List[str] = field(default_factory=list)
    corrupt: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.corrupt


def verify_archive(
    stream: BinaryIO,
    *,
    expected_signature: Optional[str] = SIGNATURE,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> VerifyReport:
    """
    Digest every file payload in place and compare it with its header.

    Unlike extraction this does not stop at the first mismatch: corrupt
    payloads are collected in the report. Framing problems still raise,
    since nothing after them can be located.
    """
    codec = FrameCodec(stream, buffer_size=buffer_size)
    report = VerifyReport(signature=_read_signature(codec, expected_signature))
    if report.signature is None:
        return report
    while True:
        blob = codec.read_frame()
        if blob is END_OF_STREAM:
            return report
        entry = decode_header(blob)
        if isinstance(entry, DirectoryEntry):
            report.directories += 1
            continue
        if entry.digest is None:
            codec.skip(entry.length)
            report.unchecked.append(entry.name)
            continue
        h = new_hasher(_digest_algorithm(entry))
        codec.copy_to(h.update, entry.length)
        if verify(entry.digest, h.hexdigest()):
            report.checked.append(entry.name)
        else:
            report.corrupt.append(entry.name)
