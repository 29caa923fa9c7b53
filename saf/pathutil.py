from __future__ import annotations

import os
import re

from .errors import PathError

_SEPARATORS = re.compile(r"[\\/]")


def _normalize_root(root_path: str) -> str:
    root = os.path.abspath(root_path)
    stripped = root.rstrip("/\\")
    # Keep a bare filesystem root ("/" or "C:\") intact
    return stripped if stripped and not stripped.endswith(":") else root


def _literal_suffix(root_path: str, full_path: str):
    root = root_path.rstrip("/\\")
    if root and full_path.startswith(root) and full_path[len(root):len(root) + 1] in ("/", "\\"):
        return full_path[len(root) + 1:]
    return None


def to_stored_name(root_path: str, full_path: str) -> str:
    """Strip ``root_path`` and one following separator from ``full_path``.

    The remainder is stored verbatim: separators are not rewritten, so
    archives written on Windows carry backslash names. ``abspath`` is used
    only to check that ``full_path`` lies under the root.
    """
    root = _normalize_root(root_path)
    full = os.path.abspath(full_path)
    if root.endswith(("/", "\\")):
        prefix_len = len(root)
    else:
        prefix_len = len(root) + 1
    if not full.startswith(root) or len(full) <= prefix_len or full[prefix_len - 1] not in "/\\":
        raise PathError(f"Path {full_path} is not under archive root {root_path}")
    literal = _literal_suffix(root_path, full_path)
    if literal:
        return literal
    return full[prefix_len:]


def to_destination_path(extract_root: str, name: str) -> str:
    """Map a stored entry name to a native path under ``extract_root``.

    Accepts both ``/`` and ``\\`` as separators. Rules:
    - Reject NUL, absolute names and names with a drive on this platform
    - Remove empty and '.' segments
    - Reject '..' segments
    """
    if "\x00" in name:
        raise PathError("Entry name contains NUL")
    # "a:b" is an ordinary name on POSIX; only Windows gives it a drive
    if name.startswith(("/", "\\")) or os.path.splitdrive(name)[0]:
        raise PathError(f"Entry name {name!r} is absolute")
    parts = [q for q in _SEPARATORS.split(name) if q not in ("", ".")]
    if not parts:
        raise PathError(f"Entry name {name!r} is empty")
    for q in parts:
        if q == "..":
            raise PathError(f"Entry name {name!r} escapes the extraction root")
    return os.path.join(extract_root, *parts)
