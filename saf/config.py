from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .constants import DEFAULT_BUFFER_SIZE, DEFAULT_DIGEST, SIGNATURE
from .header import Entry
from .reader import ArchiveReader
from .writer import ArchiveWriter


@dataclass
class ArchiveConfig:
    """Per-session archive options.

    ``verify_on_write`` decides whether digests are computed and stored;
    ``verify_on_read`` decides whether stored digests are checked. The two
    are independent: an archive may carry digests that a reader ignores.
    """

    verify_on_write: bool = True
    verify_on_read: bool = True
    digest_algorithm: str = DEFAULT_DIGEST
    buffer_size: int = DEFAULT_BUFFER_SIZE
    strict_signature: bool = True

    @property
    def expected_signature(self) -> Optional[str]:
        return SIGNATURE if self.strict_signature else None


def pack_directory(archive_path: str, root_path: str, config: Optional[ArchiveConfig] = None) -> List[Entry]:
    """Write every entry under ``root_path`` to a new archive file."""
    cfg = config or ArchiveConfig()
    with open(archive_path, "wb") as fh:
        with ArchiveWriter(
            fh,
            root_path,
            verify_on_write=cfg.verify_on_write,
            digest_algorithm=cfg.digest_algorithm,
            buffer_size=cfg.buffer_size,
        ) as w:
            return w.write_directory()


def unpack_archive(archive_path: str, extract_root: str, config: Optional[ArchiveConfig] = None) -> List[Entry]:
    """Extract every entry of ``archive_path`` below ``extract_root``."""
    cfg = config or ArchiveConfig()
    # buffering=0: the reader's own cursor is the only one
    with open(archive_path, "rb", buffering=0) as fh:
        reader = ArchiveReader(
            fh,
            extract_root,
            verify_on_read=cfg.verify_on_read,
            expected_signature=cfg.expected_signature,
            buffer_size=cfg.buffer_size,
        )
        return reader.read_all()
