from __future__ import annotations

import os
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional

from .constants import DEFAULT_BUFFER_SIZE, DEFAULT_DIGEST, SIGNATURE
from .digest import digest_file, new_hasher
from .errors import PathError
from .frames import FrameCodec
from .header import DirectoryEntry, Entry, FileEntry, encode_header
from .pathutil import to_stored_name
from .walker import WalkedEntry, walk_tree


class ArchiveWriter:
    """Streaming writer that appends directory and file entries to a SAF stream.

    The writer borrows ``stream`` and never closes it. Nothing is rolled back
    on failure: if a payload copy fails the stream holds a partial entry and
    the caller is expected to discard it.
    """

    def __init__(
        self,
        stream: BinaryIO,
        root_path: str,
        *,
        verify_on_write: bool = True,
        digest_algorithm: str = DEFAULT_DIGEST,
        walker: Callable[[str], Iterable[WalkedEntry]] = walk_tree,
        signature: str = SIGNATURE,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        if not signature or not signature.strip():
            raise ValueError("archive signature cannot be empty")
        if verify_on_write:
            # fail early on an unknown algorithm name
            new_hasher(digest_algorithm)
        self.root_path = root_path
        self.verify_on_write = verify_on_write
        self.digest_algorithm = digest_algorithm
        self.walker = walker
        self.signature = signature
        self.buffer_size = buffer_size
        self.codec = FrameCodec(stream, buffer_size=buffer_size)
        # a file stream knows its own path; never archive it into itself
        stream_name = getattr(stream, "name", None)
        self.archive_path = os.path.abspath(stream_name) if isinstance(stream_name, (str, os.PathLike)) else None
        self.entries_written = 0
        self._opened = False

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self._opened:
            return
        self.codec.write_line(self.signature)
        self._opened = True

    def close(self):
        if self._opened:
            self.codec.flush()

    def write_entry(self, walked: WalkedEntry) -> Entry:
        """Write one walker item: a header record, plus the file bytes for files."""
        if not self._opened:
            raise RuntimeError("Archive not open")
        name = to_stored_name(self.root_path, walked.full_path)

        if walked.is_dir:
            entry: Entry = DirectoryEntry(name=name, mod_time_ns=walked.mtime_ns)
            self.codec.write_frame(encode_header(entry))
            self.entries_written += 1
            return entry

        st = os.stat(walked.full_path)
        digest = None
        if self.verify_on_write:
            digest = digest_file(walked.full_path, self.digest_algorithm, self.buffer_size)
        entry = FileEntry(
            name=name,
            length=st.st_size,
            mod_time_ns=st.st_mtime_ns,
            digest=digest,
            digest_algorithm=self.digest_algorithm if digest is not None else None,
        )
        self.codec.write_frame(encode_header(entry))
        with open(walked.full_path, "rb") as fh:
            self.codec.copy_from(fh, entry.length)
        self.entries_written += 1
        return entry

    def iter_directory(self, path: Optional[str] = None, *, exclude: Iterable[str] = ()) -> Iterator[Entry]:
        """Write everything below ``path`` (default: the archive root) in walker order, yielding each entry.

        The archive file itself and any path in ``exclude`` are skipped.
        """
        path = self.root_path if path is None else path
        if not os.path.isdir(path):
            raise PathError(f"Path {path} is not an existing directory.")
        skipped = {os.path.abspath(p) for p in exclude}
        if self.archive_path is not None:
            skipped.add(self.archive_path)
        for walked in self.walker(path):
            if not walked.is_dir and os.path.abspath(walked.full_path) in skipped:
                continue
            yield self.write_entry(walked)

    def write_directory(self, path: Optional[str] = None, *, exclude: Iterable[str] = ()) -> List[Entry]:
        """Archive everything below ``path`` and return the entries written."""
        return list(self.iter_directory(path, exclude=exclude))
