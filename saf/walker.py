from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class WalkedEntry:
    full_path: str
    is_dir: bool
    size: int
    mtime_ns: int


def walk_tree(root_path: str) -> Iterator[WalkedEntry]:
    """Yield every directory and file below ``root_path`` (the root itself excluded).

    Top-down: a directory is yielded before anything it contains. Names are
    visited in ``os.walk`` order, which is stable for one traversal but not
    sorted. Symlinked directories are pruned; symlinked files are followed,
    and dangling symlinks are skipped.
    """
    for root, dirnames, filenames in os.walk(root_path):
        # prune symlink directories to avoid walking into them
        dirnames[:] = [d for d in dirnames if not os.path.islink(os.path.join(root, d))]
        for d in dirnames:
            full = os.path.join(root, d)
            st = os.stat(full)
            yield WalkedEntry(full_path=full, is_dir=True, size=0, mtime_ns=st.st_mtime_ns)
        for f in filenames:
            full = os.path.join(root, f)
            if os.path.islink(full) and not os.path.exists(full):
                continue
            st = os.stat(full)
            yield WalkedEntry(full_path=full, is_dir=False, size=st.st_size, mtime_ns=st.st_mtime_ns)
