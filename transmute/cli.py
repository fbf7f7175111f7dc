"""Command line entrypoint: identify or convert images in batches."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from . import __version__
from .filters import FilterArgs, apply_filters
from .geometry import STRATEGIES, strategy_by_name
from .registry import CodecRegistry, default_registry
from .wand import Wand

logger = logging.getLogger("transmute")

DEFAULT_IDENTIFY_FORMAT = "%wx%h, hash: %H, comment: %c"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transmute",
        description="Convert, resize and inspect images.",
    )
    parser.add_argument("paths", nargs="*", help="Input images, then the output path when converting")

    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--identify", action="store_true", help="Print information about the image")
    actions.add_argument("--convert", action="store_true", help="Convert or process image (default)")
    actions.add_argument("--list-formats", action="store_true", help="List supported image formats")
    parser.add_argument("--version", action="store_true", help="Show version information")

    parser.add_argument("-W", "--workers", type=int, default=1, help="Maximum concurrent workers")
    parser.add_argument("-N", "--no-names", action="store_true", help="Don't include file names in output messages")
    parser.add_argument("--identify-format", default=DEFAULT_IDENTIFY_FORMAT, help="Format string for --identify output")
    parser.add_argument("--strict", action="store_true", help="Fail on malformed metadata instead of dropping it")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    filters = parser.add_argument_group("Filters (applied in this order)")
    filters.add_argument("-S", "--strip", action="store_true", help="Strip metadata from image")
    filters.add_argument("-C", "--comment", action="append", default=[], help="Add comment to image metadata (repeatable)")
    filters.add_argument("--set-comment", action="append", default=None, help="Set comments for image metadata (repeatable)")
    filters.add_argument("-c", "--crop", default="", help="Crop image: WxH+X+Y")
    filters.add_argument("-r", "--resize", default="", help="Resize image: WxH, or @AREA to fit a pixel budget")
    filters.add_argument("--resample", default="bilinear", choices=sorted(STRATEGIES), help="Resize interpolation")
    filters.add_argument("--compress", type=int, default=-1, help="Compression level, if applicable (0-100)")
    return parser


def list_formats(registry: CodecRegistry) -> None:
    print("+---- Can decode?")
    print("|+--- Can encode?")
    print("||+-- Aliases")
    print("|||   === Format name ===")
    for entry in registry.codecs():
        flags = ("D" if entry.can_decode else "-") + ("E" if entry.can_encode else "-")
        aliases = f" ({', '.join(entry.aliases)})" if entry.aliases else ""
        print(f"{flags}    {entry.name}{aliases}")


def print_version(registry: CodecRegistry) -> None:
    print(f"transmute {__version__}")
    print("Supported formats: " + " ".join(entry.name for entry in registry.codecs()))
    print("For more information, use the --list-formats option.")


def output_path_for(out: str, in_file: str, batch: bool) -> str:
    if batch:
        return os.path.join(out, os.path.basename(in_file))
    return out


def process_one(
    in_file: str,
    args: argparse.Namespace,
    fa: FilterArgs,
    registry: CodecRegistry,
    out: Optional[str],
    batch: bool,
) -> bool:
    """Handle one input. Returns False if it failed."""
    prefix = "" if args.no_names else f"{in_file}: "

    wand = Wand(registry)
    wand.set_strict(args.strict)
    try:
        wand.read_image(in_file)
    except Exception as exc:
        logger.error(f"{prefix}read: {exc}")
        return False

    if args.identify:
        print(f"{prefix}{wand.format_string(args.identify_format)}")
        return True

    out_file = output_path_for(out, in_file, batch)
    try:
        apply_filters(wand, fa)
        wand.write_image(out_file)
    except Exception as exc:
        logger.error(f"{prefix}write (to {out_file}): {exc}")
        return False
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )

    registry = default_registry()

    if args.version:
        print_version(registry)
        if not args.list_formats:
            return 0

    if args.list_formats:
        list_formats(registry)
        return 0

    try:
        fa = FilterArgs(
            strip=args.strip,
            add_comments=args.comment,
            set_comments=args.set_comment,
            crop=args.crop,
            resize=args.resize,
            strategy=strategy_by_name(args.resample),
            compression_level=args.compress,
        )
        fa.validate()
    except ValueError as exc:
        parser.error(str(exc))
        return 2

    paths = list(args.paths)
    out: Optional[str] = None
    if not args.identify:
        if len(paths) < 2:
            parser.error("convert needs at least one input and an output path")
            return 2
        out = paths.pop()
    elif not paths:
        parser.error("identify needs at least one input")
        return 2

    batch = len(paths) > 1
    workers = max(1, args.workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(
            pool.map(lambda path: process_one(path, args, fa, registry, out, batch), paths)
        )

    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
