from __future__ import annotations

import os
import sys
import time
import argparse
from typing import List, Optional

from saf.constants import DEFAULT_DIGEST, SIGNATURE
from saf.digest import ALGORITHMS
from saf.errors import SafError, IntegrityError
from saf.header import FileEntry
from saf.reader import ArchiveReader, list_entries, verify_archive
from saf.writer import ArchiveWriter


def _expected_signature(any_signature: bool) -> Optional[str]:
    return None if any_signature else SIGNATURE


def cmd_pack(output: str, root: str, *, checksums: bool = True, digest: str = DEFAULT_DIGEST, quiet: bool = False) -> bool:
    """Pack (create) a new archive from a directory tree.

    Args:
        output: Path to the output .saf file to write.
        root: Directory whose contents are stored; names are relative to it.
        checksums: Store a content digest for every file.
        digest: Digest algorithm used when ``checksums`` is set.
    """
    if not os.path.isdir(root):
        raise SafError(f"Path {root} is not an existing directory.")
    t0 = time.time()
    n_files = n_dirs = total = 0
    with open(output, "wb") as fh:
        with ArchiveWriter(fh, root, verify_on_write=checksums, digest_algorithm=digest) as w:
            for entry in w.iter_directory(root, exclude=[output]):
                if isinstance(entry, FileEntry):
                    n_files += 1
                    total += entry.length
                    if not quiet:
                        print(f"   packing: {entry.name}")
                else:
                    n_dirs += 1
                    if not quiet:
                        print(f"  creating: {entry.name}/")
    dt = max(0.000001, time.time() - t0)
    mib = total / (1024.0 * 1024.0)
    print(
        f"Done: {n_files} files, {n_dirs} dirs; {mib:.2f} MiB in {dt:.1f}s; "
        f"checksums={'on (' + digest + ')' if checksums else 'off'}"
    )
    return True


def cmd_unpack(archive: str, *, outdir: str = ".", verify: bool = True, any_signature: bool = False, quiet: bool = False) -> bool:
    """Unpack every entry of ``archive`` under ``outdir``."""
    n_files = n_dirs = 0
    os.makedirs(outdir, exist_ok=True)
    with open(archive, "rb", buffering=0) as fh:
        r = ArchiveReader(fh, outdir, verify_on_read=verify, expected_signature=_expected_signature(any_signature))
        for entry in r:
            if isinstance(entry, FileEntry):
                n_files += 1
                if not quiet:
                    print(f" unpacking: {entry.name}")
            else:
                n_dirs += 1
                if not quiet:
                    print(f"  creating: {entry.name}/")
    print(f"Done: {n_files} files, {n_dirs} dirs unpacked to {outdir}")
    return True


def cmd_list(archive: str, *, any_signature: bool = False) -> bool:
    """List archive entries as ``kind<TAB>size<TAB>name``."""
    with open(archive, "rb", buffering=0) as fh:
        entries = list_entries(fh, expected_signature=_expected_signature(any_signature))
    for e in entries:
        if isinstance(e, FileEntry):
            print(f"file\t{e.length}\t{e.name}")
        else:
            print(f"dir\t-\t{e.name}")
    return True


def cmd_verify(archive: str, *, any_signature: bool = False) -> bool:
    """Check every stored digest without extracting. Prints OK or FAIL."""
    with open(archive, "rb", buffering=0) as fh:
        report = verify_archive(fh, expected_signature=_expected_signature(any_signature))
    for name in report.corrupt:
        print(f"Corrupt: {name}", file=sys.stderr)
    if report.unchecked:
        print(f"Note: {len(report.unchecked)} file(s) carry no checksum and were not checked")
    print("OK" if report.ok else "FAIL")
    return report.ok


def cmd_info(archive: str, *, any_signature: bool = False) -> bool:
    """Show the signature and entry counts."""
    with open(archive, "rb", buffering=0) as fh:
        entries = list_entries(fh, expected_signature=None)
        fh.seek(0)
        signature = fh.readline().decode("ascii", errors="replace").strip()
    if not any_signature and signature != SIGNATURE:
        print(f"Warning: unexpected signature {signature!r}", file=sys.stderr)
    files = [e for e in entries if isinstance(e, FileEntry)]
    print(f"Archive: {archive}")
    print(f"  Signature: {signature}")
    print(f"  Entries: {len(entries)}")
    print(f"    Files: {len(files)}")
    print(f"    Directories: {len(entries) - len(files)}")
    print(f"    With checksum: {len([e for e in files if e.digest is not None])}")
    print(f"  Payload bytes: {sum(e.length for e in files)}")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="saf",
        description="SAF sequential archive tool",
        epilog="Archives are read front to back; there is no index.",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_pack = sub.add_parser("pack", help="Pack a directory into an archive")
    ap_pack.add_argument("output", help="Output .saf path")
    ap_pack.add_argument("root", help="Directory to pack (its contents are stored, not the directory itself)")
    ap_pack.add_argument("--no-checksums", action="store_true", help="Do not store file checksums")
    ap_pack.add_argument("--digest", choices=list(ALGORITHMS), default=DEFAULT_DIGEST, help="Checksum algorithm (default md5)")
    ap_pack.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_unpack = sub.add_parser("unpack", help="Unpack an archive")
    ap_unpack.add_argument("archive", help="Archive path")
    ap_unpack.add_argument("--outdir", default=".", help="Output directory")
    ap_unpack.add_argument("--no-verify", action="store_true", help="Skip checksum verification")
    ap_unpack.add_argument("--any-signature", action="store_true", help="Accept archives with an unexpected signature line")
    ap_unpack.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive path")
    ap_list.add_argument("--any-signature", action="store_true", help="Accept archives with an unexpected signature line")

    ap_verify = sub.add_parser("verify", help="Verify stored checksums without extracting")
    ap_verify.add_argument("archive", help="Archive path")
    ap_verify.add_argument("--any-signature", action="store_true", help="Accept archives with an unexpected signature line")

    ap_info = sub.add_parser("info", help="Show archive information")
    ap_info.add_argument("archive", help="Archive path")
    ap_info.add_argument("--any-signature", action="store_true", help="Do not warn about an unexpected signature line")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "pack":
            cmd_pack(args.output, args.root, checksums=not args.no_checksums, digest=args.digest, quiet=args.quiet)
        elif args.cmd == "unpack":
            cmd_unpack(args.archive, outdir=args.outdir, verify=not args.no_verify, any_signature=args.any_signature, quiet=args.quiet)
        elif args.cmd == "list":
            cmd_list(args.archive, any_signature=args.any_signature)
        elif args.cmd == "verify":
            success = cmd_verify(args.archive, any_signature=args.any_signature)
            sys.exit(0 if success else 1)
        elif args.cmd == "info":
            cmd_info(args.archive, any_signature=args.any_signature)
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except IntegrityError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("       the corrupt file was left in place for inspection", file=sys.stderr)
        sys.exit(2)
    except (SafError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
