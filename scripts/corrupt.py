from __future__ import annotations

import argparse
import os
import random
import sys
from typing import List, Optional, Tuple

from saf.constants import MAX_SIGNATURE_LINE
from saf.errors import SafError
from saf.frames import END_OF_STREAM, FrameCodec
from saf.header import FileEntry, decode_header


def _flip_byte(path: str, offset: int, xor_val: int = 0xFF) -> None:
    if offset < 0:
        raise ValueError("Offset must be non-negative")
    with open(path, "r+b") as f:
        f.seek(offset)
        b = f.read(1)
        if not b:
            raise ValueError("Offset beyond end of file")
        f.seek(offset)
        f.write(bytes([b[0] ^ (xor_val & 0xFF)]))
        f.flush()
        os.fsync(f.fileno())


def file_payloads(path: str) -> List[Tuple[str, int, int]]:
    """Return (name, payload_offset, length) for every file entry in stream order."""
    out: List[Tuple[str, int, int]] = []
    with open(path, "rb", buffering=0) as fh:
        codec = FrameCodec(fh)
        codec.read_line(MAX_SIGNATURE_LINE)
        while True:
            blob = codec.read_frame()
            if blob is END_OF_STREAM:
                return out
            entry = decode_header(blob)
            if isinstance(entry, FileEntry):
                out.append((entry.name, fh.tell(), entry.length))
                codec.skip(entry.length)


def cmd_by_offset(args: argparse.Namespace) -> None:
    _flip_byte(args.archive, args.offset, xor_val=args.xor)
    print(f"Flipped 1 byte at offset {args.offset}")


def cmd_first_file(args: argparse.Namespace) -> None:
    target = next((p for p in file_payloads(args.archive) if p[2] > args.within), None)
    if target is None:
        raise ValueError(f"No file payload longer than {args.within} bytes found in archive")
    name, off, _length = target
    _flip_byte(args.archive, off + args.within, xor_val=args.xor)
    print(f"Flipped 1 byte in {name} at archive offset {off + args.within}")


def cmd_file(args: argparse.Namespace) -> None:
    match = [p for p in file_payloads(args.archive) if p[0] == args.name]
    if not match:
        raise ValueError(f"No file entry named {args.name!r}")
    name, off, length = match[-1]
    if args.within < 0 or args.within >= length:
        raise ValueError(f"--within must be within payload length (0..{length - 1})")
    _flip_byte(args.archive, off + args.within, xor_val=args.xor)
    print(f"Flipped 1 byte in {name} at archive offset {off + args.within}")


def cmd_random(args: argparse.Namespace) -> None:
    rng = random.Random(args.seed)
    flips = 0
    size = os.path.getsize(args.archive)
    with open(args.archive, "r+b") as f:
        for _ in range(args.count):
            pos = rng.randrange(0, size)
            f.seek(pos)
            b = f.read(1)
            if not b:
                continue
            f.seek(pos)
            f.write(bytes([b[0] ^ (args.xor & 0xFF)]))
            flips += 1
        f.flush()
        os.fsync(f.fileno())
    print(f"Flipped {flips} byte(s) at random offsets")


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="saf.corrupt", description="Corrupt SAF archives for testing")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_off = sub.add_parser("by-offset", help="Flip one byte at an absolute archive offset")
    p_off.add_argument("archive", help="Path to .saf archive")
    p_off.add_argument("--offset", type=int, required=True, help="Absolute byte offset in archive")
    p_off.add_argument("--xor", type=lambda x: int(x, 0), default=0xFF, help="XOR mask to apply (default 0xFF)")
    p_off.set_defaults(func=cmd_by_offset)

    p_first = sub.add_parser("first-file", help="Flip a byte in the payload of the first file entry")
    p_first.add_argument("archive", help="Path to .saf archive")
    p_first.add_argument("--within", type=int, default=1, help="Byte offset within payload (default 1)")
    p_first.add_argument("--xor", type=lambda x: int(x, 0), default=0xFF, help="XOR mask to apply (default 0xFF)")
    p_first.set_defaults(func=cmd_first_file)

    p_file = sub.add_parser("file", help="Flip a byte within the payload of a named file entry")
    p_file.add_argument("archive", help="Path to .saf archive")
    p_file.add_argument("--name", required=True, help="Stored entry name")
    p_file.add_argument("--within", type=int, default=0, help="Byte offset within payload (default 0)")
    p_file.add_argument("--xor", type=lambda x: int(x, 0), default=0xFF, help="XOR mask to apply (default 0xFF)")
    p_file.set_defaults(func=cmd_file)

    p_rand = sub.add_parser("random", help="Flip N random bytes anywhere in the archive")
    p_rand.add_argument("archive", help="Path to .saf archive")
    p_rand.add_argument("--count", type=int, default=1, help="Number of random byte flips (default 1)")
    p_rand.add_argument("--seed", type=int, default=None, help="PRNG seed for reproducibility")
    p_rand.add_argument("--xor", type=lambda x: int(x, 0), default=0xFF, help="XOR mask to apply (default 0xFF)")
    p_rand.set_defaults(func=cmd_random)

    args = ap.parse_args(argv)
    try:
        args.func(args)
    except (SafError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
