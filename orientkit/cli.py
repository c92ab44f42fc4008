"""
Command-line interface.

Usage:
    orientkit <file...> [--quality 100] [--strip-exif] [--engine auto|jpegtran|pillow]
    python -m orientkit "photos/*.jpg" "scans/img_{1,2}.jpg"

Every file is rewritten in place. One line is printed per file.
"""
import argparse
import glob
import logging
import re
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from natsort import natsorted

from .core.errors import ErrorCode
from .core.interfaces import ENGINE_CHOICES, RotateOptions
from .rotator import Rotator

logger = logging.getLogger(__name__)

_BRACE_GROUP = re.compile(r"\{([^{}]*,[^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """Shell-style brace expansion: ``a_{1,2}.jpg`` -> ``a_1.jpg``, ``a_2.jpg``."""
    match = _BRACE_GROUP.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def expand_paths(patterns: Iterable[str]) -> List[str]:
    """
    Expand braces and globs, keeping argument order.

    Patterns that match nothing are kept as-is so the failure is reported
    for that name.
    """
    paths = []
    for argument in patterns:
        for pattern in expand_braces(argument):
            matches = natsorted(glob.glob(pattern)) or [pattern]
            for path in matches:
                if path not in paths:
                    paths.append(path)
    return paths


def _quality(value: str) -> int:
    quality = int(value)
    if not 1 <= quality <= 100:
        raise argparse.ArgumentTypeError("quality must be between 1 and 100")
    return quality


def setup_argparse() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        prog="orientkit",
        description="Rotate JPEG images according to their EXIF orientation",
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="Files to process (glob and brace patterns are expanded)",
    )
    parser.add_argument(
        "--quality",
        "-q",
        type=_quality,
        default=100,
        help="JPEG quality when re-encoding (default: 100)",
    )
    parser.add_argument(
        "--strip-exif",
        action="store_true",
        help="Keep only the orientation tag in the output EXIF",
    )
    parser.add_argument(
        "--engine",
        choices=ENGINE_CHOICES,
        default="auto",
        help="Pixel transform engine (default: auto)",
    )
    parser.add_argument(
        "--jobs",
        "-j",
        type=int,
        default=1,
        help="Number of files processed in parallel (default: 1)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = setup_argparse()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    paths = expand_paths(args.files)
    options = RotateOptions(
        quality=args.quality,
        keep_exif=not args.strip_exif,
        engine=args.engine,
    )
    results = Rotator().rotate_files(paths, options, max_workers=max(1, args.jobs))

    failed = False
    for path, result in zip(paths, results):
        if result.error is not None:
            print(f"{path}: {result.error.message}")
            if result.error.code != ErrorCode.CORRECT_ORIENTATION:
                failed = True
            continue
        try:
            Path(path).write_bytes(result.buffer)
        except OSError as e:
            logger.error(f"Error writing {path}: {e}")
            print(f"{path}: Could not write file ({e})")
            failed = True
            continue
        print(f"{path}: Processed (Orientation was {result.orientation})")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
