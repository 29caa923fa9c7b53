"""
SAF — a simple sequential archive format.

A SAF archive is a flat, ordered log: one signature line followed by
length-prefixed JSON headers, each file header immediately followed by the
raw file bytes. There is no index; readers consume the stream front to back.

- Byte-exact framing (``saf.frames``) so a reader never overruns a record.
- Optional per-file content digests (MD5 by default, via PyCryptodomex).
- Directory and file mod times restored on extraction.
- CLI helpers to pack, unpack, list and verify archives.

Archive instances are single-threaded: one reader or writer owns the
underlying stream for its whole life.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "errors",
    "frames",
    "header",
    "digest",
    "pathutil",
    "walker",
    "sink",
    "writer",
    "reader",
    "config",
]

# Importable programmatic API is available via saf.writer/saf.reader and
# the convenience wrappers in saf.config (pack_directory/unpack_archive).
