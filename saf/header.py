from __future__ import annotations

"""
Entry headers and their JSON encoding.

Header blob (UTF-8 JSON object, one per entry record)
- type: "File" | "Directory"
- name: relative entry path (str)
- mod_time_ns: modification time, integer nanoseconds since the epoch
- length: payload byte count (File only)
- digest: lower-case hex content digest (File only, optional)
- digest_algorithm: digest name (File only, optional; absent means md5)

Unknown keys are ignored on decode so newer writers can add fields.
"""

import json
import string
from dataclasses import dataclass
from typing import Optional, Union

from .constants import DEFAULT_DIGEST, MAX_PAYLOAD_LENGTH, TYPE_DIRECTORY, TYPE_FILE
from .errors import FormatError


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    mod_time_ns: int

    @property
    def is_dir(self) -> bool:
        return True


@dataclass(frozen=True)
class FileEntry:
    name: str
    length: int
    mod_time_ns: int
    digest: Optional[str] = None
    digest_algorithm: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return False

    @property
    def effective_digest_algorithm(self) -> str:
        return self.digest_algorithm or DEFAULT_DIGEST


Entry = Union[DirectoryEntry, FileEntry]


_HEX = frozenset(string.hexdigits)


def encode_header(entry: Entry) -> bytes:
    if isinstance(entry, DirectoryEntry):
        obj = {"type": TYPE_DIRECTORY, "name": entry.name, "mod_time_ns": entry.mod_time_ns}
    elif isinstance(entry, FileEntry):
        if not 0 <= entry.length <= MAX_PAYLOAD_LENGTH:
            raise ValueError(f"file length out of range: {entry.length}")
        obj = {
            "type": TYPE_FILE,
            "name": entry.name,
            "length": entry.length,
            "mod_time_ns": entry.mod_time_ns,
        }
        if entry.digest is not None:
            obj["digest"] = entry.digest
        if entry.digest_algorithm is not None:
            obj["digest_algorithm"] = entry.digest_algorithm
    else:
        raise TypeError(f"not an archive entry: {entry!r}")
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _require_int(obj: dict, key: str) -> int:
    val = obj.get(key)
    # bool is an int subclass; reject it explicitly
    if not isinstance(val, int) or isinstance(val, bool):
        raise FormatError(f"Header field {key!r} must be an integer")
    return val


def _optional_str(obj: dict, key: str) -> Optional[str]:
    val = obj.get(key)
    if val is None:
        return None
    if not isinstance(val, str):
        raise FormatError(f"Header field {key!r} must be a string")
    return val


def decode_header(blob: bytes) -> Entry:
    try:
        obj = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise FormatError(f"Header is not valid JSON: {exc}") from None
    if not isinstance(obj, dict):
        raise FormatError("Header must be a JSON object")
    for key in ("name", "type"):
        if key not in obj:
            raise FormatError(f"Header missing required field {key!r}")
    name = obj["name"]
    if not isinstance(name, str) or not name:
        raise FormatError("Header field 'name' must be a non-empty string")
    mod_time_ns = _require_int(obj, "mod_time_ns")
    kind = obj["type"]
    if kind == TYPE_DIRECTORY:
        return DirectoryEntry(name=name, mod_time_ns=mod_time_ns)
    if kind != TYPE_FILE:
        raise FormatError(f"Unknown entry type: {kind!r}")
    length = _require_int(obj, "length")
    if not 0 <= length <= MAX_PAYLOAD_LENGTH:
        raise FormatError(f"File length out of range: {length}")
    digest = _optional_str(obj, "digest")
    if digest is not None and (not digest or not set(digest) <= _HEX):
        raise FormatError("Header field 'digest' must be a hex string")
    return FileEntry(
        name=name,
        length=length,
        mod_time_ns=mod_time_ns,
        digest=digest,
        digest_algorithm=_optional_str(obj, "digest_algorithm"),
    )
