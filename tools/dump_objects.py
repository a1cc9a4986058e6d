#!/usr/bin/env python3
"""
Inspect files of back-to-back pickled objects.

Usage examples:

    python -m tools.dump_objects count data/events.pkl
    python -m tools.dump_objects show data/events.pkl --limit 5
    python -m tools.dump_objects copy data/events.pkl data/head.pkl --limit 100

Unreadable or truncated files are not errors: the tool reports whatever
prefix decodes cleanly. Use --verbose to see where decoding stopped.
"""

from __future__ import annotations

import argparse
import itertools
import logging
import sys
from typing import Optional

from objfile import __version__, objects
from objfile.stream import ObjectStream

_LOG = logging.getLogger(__name__)


def _limited(stream: ObjectStream, limit: Optional[int]) -> ObjectStream:
    if limit is None or limit < 0:
        return stream
    return stream.pipe(itertools.islice, limit)


def _cmd_count(args: argparse.Namespace) -> int:
    with objects(args.path) as stream:
        n = sum(1 for _ in stream)
    sys.stdout.write(f"{n}\n")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    with _limited(objects(args.path), args.limit) as stream:
        for i, obj in enumerate(stream):
            sys.stdout.write(f"{i}: {obj!r}\n")
    return 0


def _cmd_copy(args: argparse.Namespace) -> int:
    n = _limited(objects(args.src), args.limit).write(args.dst, append=args.append)
    _LOG.info("copied %d objects from %s to %s", n, args.src, args.dst)
    sys.stdout.write(f"{n}\n")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="dump_objects",
        description="Count, print or copy the objects stored in a pickled object file.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging (shows why reading stopped).",
    )
    sub = ap.add_subparsers(dest="cmd")

    p_count = sub.add_parser("count", help="Print the number of readable objects.")
    p_count.add_argument("path", help="Object file to read.")
    p_count.set_defaults(func=_cmd_count)

    p_show = sub.add_parser("show", help="Print the repr of each readable object.")
    p_show.add_argument("path", help="Object file to read.")
    p_show.add_argument("--limit", type=int, default=None, help="Stop after this many objects.")
    p_show.set_defaults(func=_cmd_show)

    p_copy = sub.add_parser("copy", help="Re-encode the readable objects into another file.")
    p_copy.add_argument("src", help="Object file to read.")
    p_copy.add_argument("dst", help="Object file to write.")
    p_copy.add_argument("--limit", type=int, default=None, help="Copy at most this many objects.")
    p_copy.add_argument(
        "--append",
        action="store_true",
        help="Append to DST instead of replacing it.",
    )
    p_copy.set_defaults(func=_cmd_copy)

    return ap


def main(argv: Optional[list[str]] = None) -> int:
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.cmd is None:
        ap.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
