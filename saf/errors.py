class SafError(Exception):
    """Base class for SAF-specific errors."""


class FormatError(SafError):
    """Malformed signature, length line or header blob.

    The stream position is unreliable after this; callers must not resume.
    """


class TruncatedStreamError(SafError):
    """The stream ended before a frame delivered its declared length."""


class IntegrityError(SafError):
    """An extracted file does not match the digest stored in its header."""

    def __init__(self, path: str, expected: str, actual: str):
        super().__init__(
            f"Checksum of extracted file {path} does not match checksum in header "
            f"(expected {expected}, got {actual})"
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class PathError(SafError):
    """An entry name escapes the extraction root, or a source path lies outside the archive root."""
