from __future__ import annotations

import os
from typing import BinaryIO


class FilesystemSink:
    """Materializes extracted entries on the local filesystem.

    Replaceable: ``ArchiveReader`` only calls the three methods below.
    """

    def create_directory(self, path: str, mod_time_ns: int) -> None:
        os.makedirs(path, exist_ok=True)
        self.set_mod_time(path, mod_time_ns)

    def create_file(self, path: str) -> BinaryIO:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        return open(path, "wb")

    def set_mod_time(self, path: str, mod_time_ns: int) -> None:
        os.utime(path, ns=(mod_time_ns, mod_time_ns))
