from __future__ import annotations

from typing import BinaryIO

from Cryptodome.Hash import BLAKE2s, MD5, SHA256

from .constants import DEFAULT_BUFFER_SIZE, DEFAULT_DIGEST, DIGEST_BLAKE2S, DIGEST_MD5, DIGEST_SHA256


def _new_blake2s():
    return BLAKE2s.new(digest_bits=256)


_FACTORIES = {
    DIGEST_MD5: MD5.new,
    DIGEST_SHA256: SHA256.new,
    DIGEST_BLAKE2S: _new_blake2s,
}

ALGORITHMS = tuple(sorted(_FACTORIES))


def new_hasher(algorithm: str = DEFAULT_DIGEST):
    """Return a fresh PyCryptodomex hash object for ``algorithm``."""
    try:
        factory = _FACTORIES[algorithm]
    except KeyError:
        raise ValueError(f"unsupported digest algorithm: {algorithm!r}") from None
    return factory()


def digest_stream(fh: BinaryIO, algorithm: str = DEFAULT_DIGEST, buffer_size: int = DEFAULT_BUFFER_SIZE) -> str:
    h = new_hasher(algorithm)
    while True:
        buf = fh.read(buffer_size)
        if not buf:
            break
        h.update(buf)
    return h.hexdigest().lower()


def digest_file(path: str, algorithm: str = DEFAULT_DIGEST, buffer_size: int = DEFAULT_BUFFER_SIZE) -> str:
    with open(path, "rb") as fh:
        return digest_stream(fh, algorithm, buffer_size)


def verify(expected: str, actual: str) -> bool:
    # Integrity check only; no constant-time requirement.
    return expected.lower() == actual.lower()
